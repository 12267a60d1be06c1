"""Data models for the combat system."""

from .skill import (
    BoostType,
    ComboBoost,
    CriticalRateSpec,
    EffectType,
    PotentialEffect,
    PotentialTrigger,
    Skill,
    SkillCategory,
    SkillEffect,
    StatInfluence,
    SuccessRateSpec,
    TargetSelector,
)
from .combatant import Combatant, CombatantType, DropEntry, Stats
from .action import (
    AccuracyRating,
    EffectOutcome,
    JudgmentResult,
    PlayerTurnResult,
    SelectedSkill,
    SkillExecutionResult,
    SpecialModeState,
    SpeedRating,
    TypingResult,
)
from .battle_result import BattleEndResult, BattleResult, Winner

__all__ = [
    "BoostType",
    "ComboBoost",
    "CriticalRateSpec",
    "EffectType",
    "PotentialEffect",
    "PotentialTrigger",
    "Skill",
    "SkillCategory",
    "SkillEffect",
    "StatInfluence",
    "SuccessRateSpec",
    "TargetSelector",
    "Combatant",
    "CombatantType",
    "DropEntry",
    "Stats",
    "AccuracyRating",
    "EffectOutcome",
    "JudgmentResult",
    "PlayerTurnResult",
    "SelectedSkill",
    "SkillExecutionResult",
    "SpecialModeState",
    "SpeedRating",
    "TypingResult",
    "BattleEndResult",
    "BattleResult",
    "Winner",
]
