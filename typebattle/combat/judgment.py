"""
Three-layer judgment

1. skill success  2. evasion  3. per-effect success / power / critical

Each layer draws independently from the injected random source; a failure
or an evasion stops the judgment before any later draw happens.
"""
import logging
import math
from typing import Optional, Union

from .dice import RandomSource, roll_percent
from .effects import ConditionContext, is_effect_conditions_met
from .models.action import AccuracyRating, EffectOutcome, JudgmentResult, SpeedRating
from .models.combatant import Combatant, Stats
from .models.skill import EffectType, Skill
from .rules import (
    EFFECT_CRITICAL_MULTIPLIER,
    calculate_effect_power,
    calculate_skill_critical_rate,
    calculate_skill_success_rate,
    is_critical,
    is_effect_success,
    is_skill_evaded,
)

logger = logging.getLogger(__name__)


def execute_three_layer_judgment(
    skill: Skill,
    target: Combatant,
    attacker_stats: Stats,
    speed_rating: Union[SpeedRating, float, None] = None,
    accuracy_rating: Optional[AccuracyRating] = None,
    *,
    rng: RandomSource,
    context: Optional[ConditionContext] = None,
) -> JudgmentResult:
    """
    Judge one skill use

    Args:
        skill: the (already combo-adjusted) skill
        target: defender; only its evasion rates are read
        attacker_stats: stats of the skill user
        speed_rating: typing speed rating or raw typing score
        accuracy_rating: typing accuracy rating
        rng: random source for every draw
        context: condition context; effects whose conditions fail are
            skipped without a draw. Without a context conditions are ignored.

    Returns:
        JudgmentResult
    """
    # Layer 1: skill success
    success_rate = calculate_skill_success_rate(
        skill.success_rate, attacker_stats.agility, speed_rating
    )
    if not roll_percent(rng, success_rate):
        logger.debug("%s failed (rate %.1f)", skill.id, success_rate)
        return JudgmentResult.failed()

    # Layer 2: evasion
    if is_skill_evaded(skill.category, target, rng):
        logger.debug("%s evaded by %s", skill.id, target.id)
        return JudgmentResult.evasion()

    # Layer 3: effects, in declaration order
    critical_rate = calculate_skill_critical_rate(
        skill.critical_rate,
        attacker_stats.fortune,
        accuracy_rating,
        attacker_stats.agility,
    )
    result = JudgmentResult(skill_success=True)
    for effect in skill.effects:
        if context is not None and not is_effect_conditions_met(effect.conditions, context):
            continue

        if not is_effect_success(effect.success_rate, rng):
            result.effect_results.append(EffectOutcome(effect=effect, success=False))
            continue

        power = calculate_effect_power(effect.base_power, attacker_stats, effect.power_influence)
        critical = is_critical(critical_rate, rng)
        if critical:
            power = math.floor(power * EFFECT_CRITICAL_MULTIPLIER)

        result.effect_results.append(
            EffectOutcome(effect=effect, success=True, power=power, is_critical=critical)
        )
        if effect.type == EffectType.DAMAGE:
            result.total_damage += power
        result.is_critical = result.is_critical or critical

    logger.debug(
        "%s judged: %d effect(s), damage=%d, critical=%s",
        skill.id,
        len(result.effect_results),
        result.total_damage,
        result.is_critical,
    )
    return result
