"""
Combo boost stack

Boosts granted by one skill are applied to the next skill use and consumed
right after it.
"""
import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .models.skill import BoostType, ComboBoost, EffectType, Skill, SkillEffect

logger = logging.getLogger(__name__)


@dataclass
class _ActiveBoost:
    boost: ComboBoost
    remaining: int


@dataclass(frozen=True)
class BoostedSkill:
    """A skill with the active boosts folded in."""

    skill: Skill
    applied: Tuple[ComboBoost, ...] = ()

    @property
    def potential_unlocked(self) -> bool:
        return any(boost.boost_type == BoostType.POTENTIAL for boost in self.applied)


def _scale_power(effect: SkillEffect, value: float) -> SkillEffect:
    return effect.model_copy(
        update={"base_power": max(0, math.floor(effect.base_power * (1 + value)))}
    )


def _apply_boost(skill: Skill, boost: ComboBoost) -> Skill:
    boost_type = boost.boost_type

    if boost_type == BoostType.MP_COST_REDUCTION:
        return skill.model_copy(
            update={"mp_cost": max(0, math.floor(skill.mp_cost - boost.value))}
        )

    if boost_type == BoostType.TYPING_DIFFICULTY:
        return skill.model_copy(
            update={
                "typing_difficulty": max(1, skill.typing_difficulty - math.floor(boost.value))
            }
        )

    if boost_type == BoostType.SKILL_SUCCESS:
        spec = skill.success_rate.model_copy(
            update={"base_rate": skill.success_rate.base_rate + boost.value}
        )
        return skill.model_copy(update={"success_rate": spec})

    if boost_type == BoostType.STATUS_SUCCESS:
        return skill.with_effects(
            [
                effect.model_copy(update={"success_rate": effect.success_rate + boost.value})
                if effect.is_status_effect
                else effect
                for effect in skill.effects
            ]
        )

    if boost_type == BoostType.DAMAGE:
        return skill.with_effects(
            [
                _scale_power(effect, boost.value) if effect.type == EffectType.DAMAGE else effect
                for effect in skill.effects
            ]
        )

    if boost_type == BoostType.HEAL:
        return skill.with_effects(
            [
                _scale_power(effect, boost.value) if effect.type == EffectType.HEAL else effect
                for effect in skill.effects
            ]
        )

    if boost_type == BoostType.POTENTIAL:
        # Read at judgment time through BoostedSkill.potential_unlocked
        return skill

    raise ValueError(f"Unknown boost type: {boost_type}")


class ComboBoostStack:
    """
    Ordered collection of temporary boosts

    ``apply_to_skill`` never consumes; call ``consume_once`` exactly once per
    skill execution.
    """

    def __init__(self):
        self._entries: List[_ActiveBoost] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    @property
    def active_boosts(self) -> List[ComboBoost]:
        """Active boosts with their remaining uses as ``duration``"""
        return [
            entry.boost.model_copy(update={"duration": entry.remaining})
            for entry in self._entries
        ]

    def register(self, boosts: Optional[Iterable[ComboBoost]]) -> None:
        for boost in boosts or ():
            self._entries.append(_ActiveBoost(boost=boost, remaining=boost.duration))
            logger.debug(
                "combo registered: %s %+g x%d",
                boost.boost_type.value,
                boost.value,
                boost.duration,
            )

    def apply_to_skill(self, skill: Skill) -> BoostedSkill:
        """
        Fold every active boost into a copy of ``skill``

        Boosts are applied in registration order. The input skill is left
        untouched.
        """
        if not self._entries:
            return BoostedSkill(skill=skill)

        modified = skill
        applied = []
        for entry in self._entries:
            modified = _apply_boost(modified, entry.boost)
            applied.append(entry.boost)
        return BoostedSkill(skill=modified, applied=tuple(applied))

    def consume_once(self) -> None:
        """Decrement every entry once and drop the ones that reach zero."""
        if not self._entries:
            return
        for entry in self._entries:
            entry.remaining -= 1
        self._entries = [entry for entry in self._entries if entry.remaining > 0]

    def clear(self) -> None:
        self._entries = []
