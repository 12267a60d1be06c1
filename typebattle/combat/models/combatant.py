"""
Combatant data model
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..errors import InvalidCombatantError
from .skill import Skill

if TYPE_CHECKING:
    from ..data_repository import SkillCatalog


class CombatantType(str, Enum):
    """Combatant kind"""

    PLAYER = "player"
    ENEMY = "enemy"


@dataclass(frozen=True)
class Stats:
    """Immutable combat stats"""

    strength: int = 0
    willpower: int = 0
    agility: int = 0
    fortune: int = 0

    def get(self, stat: str) -> int:
        return getattr(self, stat)

    def to_dict(self) -> Dict[str, int]:
        return {
            "strength": self.strength,
            "willpower": self.willpower,
            "agility": self.agility,
            "fortune": self.fortune,
        }


@dataclass(frozen=True)
class DropEntry:
    """One line of a drop table"""

    item_id: str
    drop_rate: float

    def __post_init__(self):
        if not 0 <= self.drop_rate <= 100:
            raise InvalidCombatantError("Drop rate must be between 0 and 100")

    def to_dict(self) -> Dict[str, Any]:
        return {"item_id": self.item_id, "drop_rate": self.drop_rate}


def _check_rate(name: str, value: float):
    if not 0 <= value <= 100:
        raise InvalidCombatantError(f"{name} must be between 0 and 100, got {value}")


@dataclass
class Combatant:
    """
    Battle participant (player or enemy)

    Identity, stats and skills are fixed at construction; only hp/mp and the
    encounter status list change afterwards.
    """

    # ===== Identity =====
    id: str
    name: str
    combatant_type: CombatantType
    level: int = 1
    description: str = ""

    # ===== Stats =====
    stats: Stats = field(default_factory=Stats)

    # ===== Health / resource =====
    max_hp: int = 100
    max_mp: int = 0
    hp: Optional[int] = None  # None = start at max
    mp: Optional[int] = None

    # ===== Evasion (percent) =====
    # None = players derive it from agility, enemies use 0
    physical_evade_rate: Optional[float] = None
    magical_evade_rate: Optional[float] = None

    # ===== Skills / drops =====
    skills: List[Skill] = field(default_factory=list)
    drops: List[DropEntry] = field(default_factory=list)
    next_skill_id: Optional[str] = None

    # Statuses applied during the current encounter
    statuses: List[str] = field(default_factory=list)

    # Fallback skill provider (e.g. basic attack)
    catalog: Optional["SkillCatalog"] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if self.level <= 0:
            raise InvalidCombatantError("Level must be positive")
        if self.max_hp <= 0:
            raise InvalidCombatantError("max_hp must be positive")
        if self.max_mp < 0:
            raise InvalidCombatantError("max_mp must be non-negative")

        self.combatant_type = CombatantType(self.combatant_type)
        if self.physical_evade_rate is None:
            self.physical_evade_rate = self._default_evade_rate()
        if self.magical_evade_rate is None:
            self.magical_evade_rate = self._default_evade_rate()
        _check_rate("physical_evade_rate", self.physical_evade_rate)
        _check_rate("magical_evade_rate", self.magical_evade_rate)

        self.skills = list(self.skills)
        self.drops = [
            drop if isinstance(drop, DropEntry) else DropEntry(**drop) for drop in self.drops
        ]

        self.hp = self.max_hp if self.hp is None else max(0, min(self.hp, self.max_hp))
        self.mp = self.max_mp if self.mp is None else max(0, min(self.mp, self.max_mp))

    def _default_evade_rate(self) -> float:
        if self.combatant_type != CombatantType.PLAYER:
            return 0.0
        from ..rules import calculate_evade_rate

        return calculate_evade_rate(self.stats.agility)

    # ===== Convenience =====

    def is_player(self) -> bool:
        return self.combatant_type == CombatantType.PLAYER

    def is_enemy(self) -> bool:
        return self.combatant_type == CombatantType.ENEMY

    def is_defeated(self) -> bool:
        """True once hp has reached 0"""
        return self.hp <= 0

    @property
    def hp_percent(self) -> float:
        return self.hp / self.max_hp * 100

    def take_damage(self, amount: int) -> int:
        """
        Take damage

        Args:
            amount: damage amount

        Returns:
            int: damage actually taken (never more than the remaining hp)
        """
        if amount < 0:
            raise InvalidCombatantError("Damage must be non-negative")
        actual = min(amount, self.hp)
        self.hp -= actual
        return actual

    def heal(self, amount: int) -> int:
        """
        Restore hp

        Returns:
            int: amount actually restored
        """
        if amount < 0:
            raise InvalidCombatantError("Heal amount must be non-negative")
        actual = min(amount, self.max_hp - self.hp)
        self.hp += actual
        return actual

    def consume_mp(self, amount: int) -> bool:
        """Spend mp; returns False and changes nothing when short."""
        if self.mp < amount:
            return False
        self.mp -= amount
        return True

    def recover_mp(self, amount: int) -> int:
        actual = max(0, min(amount, self.max_mp - self.mp))
        self.mp += actual
        return actual

    def add_status(self, status_id: str) -> bool:
        if status_id in self.statuses:
            return False
        self.statuses.append(status_id)
        return True

    def remove_status(self, status_id: str) -> bool:
        if status_id not in self.statuses:
            return False
        self.statuses.remove(status_id)
        return True

    def has_status(self, status_id: str) -> bool:
        return status_id in self.statuses

    def available_skills(self) -> List[Skill]:
        """
        Skills usable in battle

        The catalog's basic attack comes first when a catalog was injected.
        """
        if self.catalog is None:
            return list(self.skills)
        basic = self.catalog.basic_attack()
        return [basic, *[skill for skill in self.skills if skill.id != basic.id]]

    def get_skill(self, skill_id: str) -> Optional[Skill]:
        for skill in self.available_skills():
            if skill.id == skill_id:
                return skill
        return None

    # ===== Snapshot =====

    def to_dict(self) -> Dict[str, Any]:
        """Plain serializable snapshot (combo state is not included)"""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.combatant_type.value,
            "level": self.level,
            "description": self.description,
            "stats": self.stats.to_dict(),
            "max_hp": self.max_hp,
            "max_mp": self.max_mp,
            "hp": self.hp,
            "mp": self.mp,
            "physical_evade_rate": self.physical_evade_rate,
            "magical_evade_rate": self.magical_evade_rate,
            "skills": [skill.to_dict() for skill in self.skills],
            "drops": [drop.to_dict() for drop in self.drops],
            "next_skill_id": self.next_skill_id,
        }

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], catalog: Optional["SkillCatalog"] = None
    ) -> "Combatant":
        """Restore a combatant from :meth:`to_dict` output"""
        return cls(
            id=data["id"],
            name=data["name"],
            combatant_type=CombatantType(data.get("type", CombatantType.ENEMY.value)),
            level=data.get("level", 1),
            description=data.get("description", ""),
            stats=Stats(**data.get("stats", {})),
            max_hp=data["max_hp"],
            max_mp=data.get("max_mp", 0),
            hp=data.get("hp"),
            mp=data.get("mp"),
            physical_evade_rate=data.get("physical_evade_rate"),
            magical_evade_rate=data.get("magical_evade_rate"),
            skills=[Skill.model_validate(skill) for skill in data.get("skills", [])],
            drops=[DropEntry(**drop) for drop in data.get("drops", [])],
            next_skill_id=data.get("next_skill_id"),
            catalog=catalog,
        )
