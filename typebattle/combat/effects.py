"""Effect condition helpers: condition context, condition checks, potential effects."""
import logging
import operator
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .models.action import AccuracyRating, SpecialModeState, SpeedRating, TypingResult
from .models.combatant import Combatant
from .models.skill import (
    Condition,
    HpThresholdCondition,
    PotentialEffect,
    SkillEffect,
    SpecialModeCondition,
    SpecialModeThresholdCondition,
    SpecialModeTypeCondition,
    TargetSelector,
    TypingAccuracyCondition,
    TypingPerfectCondition,
    TypingSpeedCondition,
)

logger = logging.getLogger(__name__)

_OPERATORS: Dict[str, Callable[[object, object], bool]] = {
    "eq": operator.eq,
    "ne": operator.ne,
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
}


@dataclass(frozen=True)
class ConditionContext:
    """Runtime facts that effect conditions and potential triggers read."""

    attacker_hp_percent: float = 100.0
    defender_hp_percent: float = 100.0
    attacker_agility: float = 0
    speed_rating: Optional[SpeedRating] = None
    accuracy_rating: Optional[AccuracyRating] = None
    special_mode_active: bool = False
    special_mode_type: Optional[str] = None
    special_mode_gauge: float = 0.0
    # Set by a "potential" combo boost: every potential effect fires
    potential_unlocked: bool = False

    @property
    def typing_perfect(self) -> bool:
        return self.accuracy_rating == AccuracyRating.PERFECT


def _percent(hp: Tuple[float, float]) -> float:
    current, maximum = hp
    if maximum <= 0:
        return 0.0
    return current / maximum * 100


def create_condition_context(
    attacker_hp: Tuple[float, float] = (100, 100),
    defender_hp: Tuple[float, float] = (100, 100),
    attacker_agility: float = 0,
    typing: Optional[TypingResult] = None,
    special_mode: Optional[SpecialModeState] = None,
    potential_unlocked: bool = False,
) -> ConditionContext:
    """
    Build a condition context

    Args:
        attacker_hp: (current, max) of the skill user
        defender_hp: (current, max) of the opposing side
        attacker_agility: skill user's agility
        typing: typing result, if the skill was typed
        special_mode: special mode state, if any
        potential_unlocked: force every potential effect to trigger
    """
    special_mode = special_mode or SpecialModeState()
    return ConditionContext(
        attacker_hp_percent=_percent(attacker_hp),
        defender_hp_percent=_percent(defender_hp),
        attacker_agility=attacker_agility,
        speed_rating=typing.speed_rating if typing else None,
        accuracy_rating=typing.accuracy_rating if typing else None,
        special_mode_active=special_mode.active,
        special_mode_type=special_mode.mode_type,
        special_mode_gauge=special_mode.gauge,
        potential_unlocked=potential_unlocked,
    )


def context_for(
    attacker: Combatant,
    defender: Combatant,
    typing: Optional[TypingResult] = None,
    special_mode: Optional[SpecialModeState] = None,
    potential_unlocked: bool = False,
) -> ConditionContext:
    """Condition context for ``attacker`` using a skill on ``defender``."""
    return create_condition_context(
        attacker_hp=(attacker.hp, attacker.max_hp),
        defender_hp=(defender.hp, defender.max_hp),
        attacker_agility=attacker.stats.agility,
        typing=typing,
        special_mode=special_mode,
        potential_unlocked=potential_unlocked,
    )


def _compare(left, op: str, right) -> bool:
    if left is None and op not in ("eq", "ne"):
        return False
    return _OPERATORS[op](left, right)


def is_condition_met(condition: Condition, context: ConditionContext) -> bool:
    if isinstance(condition, TypingSpeedCondition):
        return _compare(context.speed_rating, condition.operator, condition.value)
    if isinstance(condition, TypingAccuracyCondition):
        return _compare(context.accuracy_rating, condition.operator, condition.value)
    if isinstance(condition, HpThresholdCondition):
        if condition.target == TargetSelector.SELF:
            percent = context.attacker_hp_percent
        else:
            percent = context.defender_hp_percent
        return _compare(percent, condition.operator, condition.value)
    if isinstance(condition, TypingPerfectCondition):
        return context.typing_perfect == condition.value
    if isinstance(condition, SpecialModeCondition):
        return context.special_mode_active == condition.value
    if isinstance(condition, SpecialModeTypeCondition):
        return _compare(context.special_mode_type, condition.operator, condition.value)
    if isinstance(condition, SpecialModeThresholdCondition):
        return _compare(context.special_mode_gauge, condition.operator, condition.value)
    raise TypeError(f"Unsupported condition: {condition!r}")


def is_effect_conditions_met(
    conditions: Sequence[Condition], context: ConditionContext
) -> bool:
    """All conditions must hold; an empty list always passes."""
    return all(is_condition_met(condition, context) for condition in conditions)


def is_potential_triggered(potential: PotentialEffect, context: ConditionContext) -> bool:
    if context.potential_unlocked:
        return True
    trigger = potential.trigger
    if not (trigger.typing_perfect or trigger.special_mode):
        return False
    if trigger.typing_perfect and not context.typing_perfect:
        return False
    if trigger.special_mode and not context.special_mode_active:
        return False
    return True


def merge_potential_effects(
    base: Sequence[SkillEffect],
    potentials: Sequence[PotentialEffect],
    context: ConditionContext,
) -> List[SkillEffect]:
    """
    Append triggered potential effects after the base effects

    Base effects are never replaced or reordered.
    """
    merged = list(base)
    for potential in potentials:
        if is_potential_triggered(potential, context):
            merged.append(potential.effect)
    if len(merged) > len(base):
        logger.debug("merged %d potential effect(s)", len(merged) - len(base))
    return merged
