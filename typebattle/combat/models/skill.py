"""Skill, effect and condition models.

Skill data is declared in JSON and validated here. Every optional field
defaults to "no effect" so catalogs can leave it out.
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .action import AccuracyRating, SpeedRating

StatName = Literal["strength", "willpower", "agility", "fortune"]
Operator = Literal["eq", "ne", "gt", "gte", "lt", "lte"]
EqualityOperator = Literal["eq", "ne"]


class SkillCategory(str, Enum):
    """Decides which evasion rate the defender uses"""

    PHYSICAL = "physical"
    MAGICAL = "magical"


class TargetSelector(str, Enum):
    ENEMY = "enemy"
    SELF = "self"


class EffectType(str, Enum):
    DAMAGE = "damage"
    HEAL = "heal"
    ADD_STATUS = "add_status"
    REMOVE_STATUS = "remove_status"


class BoostType(str, Enum):
    MP_COST_REDUCTION = "mp_cost_reduction"
    TYPING_DIFFICULTY = "typing_difficulty"
    SKILL_SUCCESS = "skill_success"
    STATUS_SUCCESS = "status_success"
    DAMAGE = "damage"
    HEAL = "heal"
    POTENTIAL = "potential"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# ----------------------------------------------------------------------
# Rate specs
# ----------------------------------------------------------------------


class StatInfluence(_Frozen):
    """Adds ``stat * rate`` to an effect's base power."""

    stat: StatName
    rate: float


class SuccessRateSpec(_Frozen):
    base_rate: float = Field(default=100, ge=0, le=100)
    agility_influence: float = 0.0
    typing_influence: float = 0.0


class CriticalRateSpec(_Frozen):
    base_rate: float = Field(default=0, ge=0, le=100)
    fortune_influence: float = 0.0


# ----------------------------------------------------------------------
# Conditions (tagged on ``type``)
# ----------------------------------------------------------------------


class TypingSpeedCondition(_Frozen):
    type: Literal["typing_speed"] = "typing_speed"
    value: SpeedRating
    operator: EqualityOperator = "eq"


class TypingAccuracyCondition(_Frozen):
    type: Literal["typing_accuracy"] = "typing_accuracy"
    value: AccuracyRating
    operator: EqualityOperator = "eq"


class HpThresholdCondition(_Frozen):
    """Compares a side's health percentage (0-100) with ``value``."""

    type: Literal["hp_threshold"] = "hp_threshold"
    target: TargetSelector = TargetSelector.SELF
    value: float = Field(..., ge=0, le=100)
    operator: Operator = "eq"


class TypingPerfectCondition(_Frozen):
    type: Literal["typing_perfect"] = "typing_perfect"
    value: bool = True


class SpecialModeCondition(_Frozen):
    type: Literal["special_mode"] = "special_mode"
    value: bool = True


class SpecialModeTypeCondition(_Frozen):
    type: Literal["special_mode_type"] = "special_mode_type"
    value: str
    operator: EqualityOperator = "eq"


class SpecialModeThresholdCondition(_Frozen):
    type: Literal["special_mode_threshold"] = "special_mode_threshold"
    value: float
    operator: Operator = "eq"


Condition = Annotated[
    Union[
        TypingSpeedCondition,
        TypingAccuracyCondition,
        HpThresholdCondition,
        TypingPerfectCondition,
        SpecialModeCondition,
        SpecialModeTypeCondition,
        SpecialModeThresholdCondition,
    ],
    Field(discriminator="type"),
]


# ----------------------------------------------------------------------
# Effects
# ----------------------------------------------------------------------


class SkillEffect(_Frozen):
    type: EffectType
    target: TargetSelector = TargetSelector.ENEMY
    base_power: int = Field(default=0, ge=0)
    power_influence: Optional[StatInfluence] = None
    success_rate: float = Field(default=100, ge=0, le=100)
    status_id: Optional[str] = None
    conditions: List[Condition] = Field(default_factory=list)

    @model_validator(mode="after")
    def _status_effects_need_status_id(self) -> "SkillEffect":
        if self.is_status_effect and not self.status_id:
            raise ValueError(f"{self.type.value} effect requires status_id")
        return self

    @property
    def is_status_effect(self) -> bool:
        return self.type in (EffectType.ADD_STATUS, EffectType.REMOVE_STATUS)


class PotentialTrigger(_Frozen):
    """Every flag set here must hold for the potential effect to fire."""

    typing_perfect: bool = False
    special_mode: bool = False


class PotentialEffect(_Frozen):
    trigger: PotentialTrigger = Field(default_factory=PotentialTrigger)
    effect: SkillEffect


class ComboBoost(_Frozen):
    boost_type: BoostType
    value: float = 0.0
    duration: int = Field(default=1, ge=1)


# ----------------------------------------------------------------------
# Skill
# ----------------------------------------------------------------------


class Skill(_Frozen):
    """A usable skill as declared in skill data."""

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    category: SkillCategory = SkillCategory.PHYSICAL
    mp_cost: int = Field(default=0, ge=0)
    mp_charge: int = Field(default=0, ge=0)
    action_cost: int = Field(default=1, ge=0)
    target: TargetSelector = TargetSelector.ENEMY
    typing_difficulty: int = Field(default=1, ge=1)
    success_rate: SuccessRateSpec = Field(default_factory=SuccessRateSpec)
    critical_rate: CriticalRateSpec = Field(default_factory=CriticalRateSpec)
    effects: List[SkillEffect] = Field(..., min_length=1)
    combo_boosts: List[ComboBoost] = Field(default_factory=list)
    potential_effects: List[PotentialEffect] = Field(default_factory=list)

    def with_effects(self, effects: List[SkillEffect]) -> "Skill":
        """Return a copy carrying a different effect list."""
        return self.model_copy(update={"effects": list(effects)})

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
