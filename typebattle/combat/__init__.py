"""Combat system package."""

from .errors import (
    BattleStateError,
    CombatError,
    InvalidCombatantError,
    RandomSourceExhausted,
    SkillNotFoundError,
)
from .dice import DefaultRandomSource, RandomSource, ScriptedRandomSource
from .data_repository import SkillCatalog
from .combo import ComboBoostStack
from .executor import ActionExecutor
from .ai_opponent import OpponentAI
from .models.battle_session import BattleSession, BattleState, TurnActor

__all__ = [
    "BattleStateError",
    "CombatError",
    "InvalidCombatantError",
    "RandomSourceExhausted",
    "SkillNotFoundError",
    "DefaultRandomSource",
    "RandomSource",
    "ScriptedRandomSource",
    "SkillCatalog",
    "ComboBoostStack",
    "ActionExecutor",
    "OpponentAI",
    "BattleSession",
    "BattleState",
    "TurnActor",
]
