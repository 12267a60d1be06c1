"""Exceptions raised by the battle engine.

Gameplay outcomes (miss, evasion, not enough MP) are never exceptions; they
come back as ordinary results with ``success=False``.
"""


class CombatError(Exception):
    """Base class for battle engine errors."""


class InvalidCombatantError(CombatError, ValueError):
    """A combatant or one of its mutations violates its invariants."""


class BattleStateError(CombatError, RuntimeError):
    """A battle session method was called in the wrong state."""


class SkillNotFoundError(CombatError, KeyError):
    """The skill catalog has no entry for the requested id."""

    def __init__(self, skill_id: str):
        super().__init__(skill_id)
        self.skill_id = skill_id

    def __str__(self) -> str:
        return f"Skill not found: {self.skill_id}"


class RandomSourceExhausted(CombatError, LookupError):
    """A scripted random source ran out of values."""
