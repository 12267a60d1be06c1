"""
Skill use data models

Inbound typing results plus the judgment and execution results handed back
to the driving layer.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .skill import ComboBoost, Skill, SkillEffect


class SpeedRating(str, Enum):
    """Typing speed rating from the typing minigame"""

    FAST = "Fast"
    NORMAL = "Normal"
    SLOW = "Slow"
    MISS = "Miss"


class AccuracyRating(str, Enum):
    """Typing accuracy rating from the typing minigame"""

    PERFECT = "Perfect"
    GOOD = "Good"
    POOR = "Poor"


@dataclass(frozen=True)
class TypingResult:
    """
    Outcome of one typing challenge (produced outside the engine)

    accuracy_rating is None when the challenge was not completed.
    """

    speed_rating: SpeedRating
    accuracy_rating: Optional[AccuracyRating] = None
    total_rating: float = 100.0
    accuracy: float = 0.0
    is_success: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TypingResult":
        accuracy_rating = data.get("accuracy_rating")
        return cls(
            speed_rating=SpeedRating(data["speed_rating"]),
            accuracy_rating=AccuracyRating(accuracy_rating) if accuracy_rating else None,
            total_rating=float(data.get("total_rating", 100.0)),
            accuracy=float(data.get("accuracy", 0.0)),
            is_success=bool(data.get("is_success", True)),
        )

    @property
    def is_perfect(self) -> bool:
        return self.accuracy_rating == AccuracyRating.PERFECT


@dataclass(frozen=True)
class SpecialModeState:
    """Special (EX) mode state supplied by the driving layer"""

    active: bool = False
    mode_type: Optional[str] = None
    gauge: float = 0.0


@dataclass(frozen=True)
class EffectOutcome:
    """Result of judging a single effect"""

    effect: "SkillEffect"
    success: bool
    power: int = 0
    is_critical: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.effect.type.value,
            "target": self.effect.target.value,
            "success": self.success,
            "power": self.power,
            "critical": self.is_critical,
        }


@dataclass
class JudgmentResult:
    """
    Three-layer judgment result

    skill success -> evasion -> per-effect outcomes
    """

    skill_success: bool
    evaded: bool = False
    effect_results: List[EffectOutcome] = field(default_factory=list)
    total_damage: int = 0
    is_critical: bool = False

    @classmethod
    def failed(cls) -> "JudgmentResult":
        return cls(skill_success=False)

    @classmethod
    def evasion(cls) -> "JudgmentResult":
        return cls(skill_success=True, evaded=True)

    @property
    def landed(self) -> bool:
        """Whether the skill reached the effect layer"""
        return self.skill_success and not self.evaded

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skill_success": self.skill_success,
            "evaded": self.evaded,
            "effect_results": [outcome.to_dict() for outcome in self.effect_results],
            "total_damage": self.total_damage,
            "is_critical": self.is_critical,
        }


@dataclass
class SkillExecutionResult:
    """
    Result of executing one skill
    """

    skill_id: str
    actor_id: str
    target_id: Optional[str] = None

    success: bool = False
    damage: int = 0
    self_damage: int = 0  # recoil from self-targeted damage effects
    healing: int = 0
    mp_charge: int = 0
    is_critical: bool = False
    target_defeated: bool = False

    judgment: Optional[JudgmentResult] = None
    applied_boosts: List["ComboBoost"] = field(default_factory=list)

    # Messages for the UI, in display order
    messages: List[str] = field(default_factory=list)

    def add_message(self, message: str):
        """Append a message"""
        self.messages.append(message)

    def to_display_text(self) -> str:
        """
        Join the messages into display text

        Returns:
            str: multi-line text
        """
        return "\n".join(self.messages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skill_id": self.skill_id,
            "actor": self.actor_id,
            "target": self.target_id,
            "success": self.success,
            "damage": self.damage,
            "self_damage": self.self_damage,
            "healing": self.healing,
            "mp_charge": self.mp_charge,
            "is_critical": self.is_critical,
            "target_defeated": self.target_defeated,
            "messages": list(self.messages),
            "judgment": self.judgment.to_dict() if self.judgment else None,
        }


@dataclass
class SelectedSkill:
    """One skill picked for a multi-skill turn, with its typing outcome"""

    skill: "Skill"
    typing_result: Optional[TypingResult] = None


@dataclass
class PlayerTurnResult:
    """
    Result of a player turn that ran several skills in order
    """

    skill_results: List[SkillExecutionResult] = field(default_factory=list)
    total_damage: int = 0
    total_mp_recovered: int = 0

    def add(self, result: SkillExecutionResult):
        self.skill_results.append(result)
        self.total_damage += result.damage
        self.total_mp_recovered += result.mp_charge

    @property
    def messages(self) -> List[str]:
        return [message for result in self.skill_results for message in result.messages]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skill_results": [result.to_dict() for result in self.skill_results],
            "total_damage": self.total_damage,
            "total_mp_recovered": self.total_mp_recovered,
        }
