"""
Battle rules

Constants and the stat-driven rate formulas. Rates are percentages (0-100).
"""
import math
from typing import Optional, Union

from .dice import RandomSource, roll_percent
from .models.action import AccuracyRating, SpeedRating
from .models.combatant import Combatant, Stats
from .models.skill import CriticalRateSpec, SkillCategory, StatInfluence, SuccessRateSpec


# ============================================
# Constants
# ============================================

# Evasion: 5 + agility / 20, within [5, 30]
EVADE_BASE = 5
EVADE_AGILITY_DIVISOR = 20
EVADE_MIN = 5
EVADE_MAX = 30

# Generic critical rate: 5 + fortune / 15, within [5, 25]
CRITICAL_BASE = 5
CRITICAL_FORTUNE_DIVISOR = 15
CRITICAL_MIN = 5
CRITICAL_MAX = 25

# Drops: 30 + fortune / 10 + world_level * 5, within [30, 80]
DROP_BASE = 30
DROP_FORTUNE_DIVISOR = 10
DROP_PER_WORLD_LEVEL = 5
DROP_MIN = 30
DROP_MAX = 80

# Skill success rate band
SKILL_SUCCESS_MIN = 10
SKILL_SUCCESS_MAX = 100

# Skill critical rate caps (before / after typing accuracy scaling)
SKILL_CRITICAL_MAX = 95
TYPED_CRITICAL_MAX = 100

# Damage formula
DEFENSE_FACTOR = 0.5
DAMAGE_CRITICAL_MULTIPLIER = 1.2
# Critical multiplier applied to a judged effect's power
EFFECT_CRITICAL_MULTIPLIER = 1.5

AGILITY_BONUS_DIVISOR = 200

# Typing score used when no speed rating is available
NEUTRAL_TYPING_SCORE = 100

SPEED_RATING_SCORES = {
    SpeedRating.FAST: 150,
    SpeedRating.NORMAL: 120,
    SpeedRating.SLOW: 80,
    SpeedRating.MISS: 60,
}

ACCURACY_CRITICAL_MULTIPLIERS = {
    AccuracyRating.PERFECT: 2.0,
    AccuracyRating.GOOD: 1.5,
    AccuracyRating.POOR: 0.8,
}

MP_RECOVERY_MULTIPLIERS = {
    AccuracyRating.PERFECT: 1.5,
    AccuracyRating.GOOD: 1.2,
}

# Action points: 3 + agility // 50, at least 1
BASE_ACTION_POINTS = 3
AGILITY_TO_AP_DIVISOR = 50


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ============================================
# Single-stat rates
# ============================================


def calculate_hit_rate(skill_accuracy: float) -> float:
    """Hit rate is the skill's own accuracy; stats do not take part."""
    return clamp(skill_accuracy, 0, 100)


def calculate_evade_rate(agility: float) -> float:
    """
    Evasion rate from agility

    Args:
        agility: agility stat

    Returns:
        float: evasion rate in [5, 30]
    """
    return clamp(EVADE_BASE + agility / EVADE_AGILITY_DIVISOR, EVADE_MIN, EVADE_MAX)


def calculate_critical_rate(fortune: float) -> float:
    """Generic critical rate from fortune, in [5, 25]."""
    return clamp(
        CRITICAL_BASE + fortune / CRITICAL_FORTUNE_DIVISOR, CRITICAL_MIN, CRITICAL_MAX
    )


def calculate_drop_rate(fortune: float, world_level: int) -> float:
    """
    Aggregate drop rate

    Args:
        fortune: player's fortune
        world_level: current world level

    Returns:
        float: drop rate in [30, 80]
    """
    rate = DROP_BASE + fortune / DROP_FORTUNE_DIVISOR + world_level * DROP_PER_WORLD_LEVEL
    return clamp(rate, DROP_MIN, DROP_MAX)


def calculate_agility_bonus(agility: float) -> float:
    return 1.0 + agility / AGILITY_BONUS_DIVISOR


def calculate_damage(
    attack_power: float,
    defense_power: float,
    skill_power: float,
    is_critical: bool = False,
) -> int:
    """
    Flat damage formula

    ``attack * skill_power - defense * 0.5``, at least 1, x1.2 on critical.

    Returns:
        int: damage (floored)
    """
    damage = max(1.0, attack_power * skill_power - defense_power * DEFENSE_FACTOR)
    if is_critical:
        damage *= DAMAGE_CRITICAL_MULTIPLIER
    return math.floor(damage)


def calculate_mp_recovery(
    mp_charge: int, accuracy_rating: Optional[AccuracyRating] = None
) -> int:
    """MP restored on use, scaled by typing accuracy."""
    if mp_charge <= 0:
        return 0
    multiplier = MP_RECOVERY_MULTIPLIERS.get(accuracy_rating, 1.0)
    return math.floor(mp_charge * multiplier)


def calculate_action_points(agility: int) -> int:
    return max(1, BASE_ACTION_POINTS + agility // AGILITY_TO_AP_DIVISOR)


# ============================================
# Skill rates
# ============================================


def typing_score(speed_rating: Union[SpeedRating, float, None]) -> float:
    """Map a speed rating (or a raw numeric score) to a typing score."""
    if speed_rating is None:
        return NEUTRAL_TYPING_SCORE
    if isinstance(speed_rating, (int, float)):
        return float(speed_rating)
    return SPEED_RATING_SCORES[SpeedRating(speed_rating)]


def calculate_skill_success_rate(
    spec: SuccessRateSpec,
    agility: float,
    speed_rating: Union[SpeedRating, float, None] = None,
) -> float:
    """
    Skill success rate

    ``base + agility * agility_influence + (score - 100) * typing_influence``

    Returns:
        float: success rate in [10, 100]
    """
    score = typing_score(speed_rating)
    rate = (
        spec.base_rate
        + agility * spec.agility_influence
        + (score - NEUTRAL_TYPING_SCORE) * spec.typing_influence
    )
    return clamp(rate, SKILL_SUCCESS_MIN, SKILL_SUCCESS_MAX)


def calculate_skill_critical_rate(
    spec: CriticalRateSpec,
    fortune: float,
    accuracy_rating: Optional[AccuracyRating] = None,
    agility: float = 0,
) -> float:
    """
    Skill critical rate

    ``base + fortune * fortune_influence`` capped at 95. With a typing
    accuracy rating the rate is scaled by the accuracy multiplier and the
    agility bonus, capped at 100.
    """
    rate = clamp(spec.base_rate + fortune * spec.fortune_influence, 0, SKILL_CRITICAL_MAX)
    if accuracy_rating is None:
        return rate
    multiplier = ACCURACY_CRITICAL_MULTIPLIERS[AccuracyRating(accuracy_rating)]
    return clamp(rate * multiplier * calculate_agility_bonus(agility), 0, TYPED_CRITICAL_MAX)


def calculate_effect_power(
    base_power: float, stats: Stats, influence: Optional[StatInfluence] = None
) -> int:
    """``base_power + stat * rate`` when an influence is declared, floored, never below 0."""
    power = base_power
    if influence is not None:
        power += stats.get(influence.stat) * influence.rate
    return max(0, math.floor(power))


def evade_rate_for(category: SkillCategory, target: Combatant) -> float:
    if SkillCategory(category) == SkillCategory.MAGICAL:
        return target.magical_evade_rate
    return target.physical_evade_rate


def is_skill_evaded(category: SkillCategory, target: Combatant, rng: RandomSource) -> bool:
    """One draw against the target's physical or magical evasion rate."""
    return roll_percent(rng, evade_rate_for(category, target))


def is_effect_success(success_rate: float, rng: RandomSource) -> bool:
    return roll_percent(rng, success_rate)


def is_critical(critical_rate: float, rng: RandomSource) -> bool:
    return roll_percent(rng, critical_rate)
