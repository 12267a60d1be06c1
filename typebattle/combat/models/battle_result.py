"""
Battle result data models
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Winner(str, Enum):
    """Winning side"""

    PLAYER = "player"
    ENEMY = "enemy"


@dataclass(frozen=True)
class BattleEndResult:
    """Returned by check_battle_end once someone has fallen"""

    winner: Winner
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"winner": self.winner.value, "message": self.message}


@dataclass
class BattleResult:
    """
    Final battle result

    Handed to the driving layer for display and rewards
    """

    # ===== Outcome =====
    victory: bool
    turns: int

    # ===== Rewards (victory only) =====
    enemy_defeated: Optional[str] = None  # enemy name
    dropped_items: List[str] = field(default_factory=list)  # item ids

    def to_dict(self) -> Dict[str, Any]:
        return {
            "victory": self.victory,
            "turns": self.turns,
            "enemy_defeated": self.enemy_defeated,
            "dropped_items": list(self.dropped_items),
        }
