"""Skill catalog: the data provider combatants receive at construction.

Skills come from an explicit list or from a local JSON file. Lookups either
return a validated ``Skill`` or raise ``SkillNotFoundError``.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from typebattle.config import settings

from .errors import SkillNotFoundError
from .models.skill import Skill

logger = logging.getLogger(__name__)


def _safe_slug(value: str) -> str:
    text = (value or "").strip().lower()
    if not text:
        return ""
    out = []
    for ch in text:
        if ch.isalnum() or ch in ("_", "-"):
            out.append(ch)
        elif ch.isspace() or ch in ("/", "\\", ":", "|", "."):
            out.append("_")
    slug = "".join(out).strip("_")
    while "__" in slug:
        slug = slug.replace("__", "_")
    return slug


def _flatten_entries(raw: Any) -> List[Dict[str, Any]]:
    """Recursively flatten nested list/dict payloads into skill dicts."""
    result: List[Dict[str, Any]] = []

    if isinstance(raw, dict):
        # A dict with effects is a skill entry.
        if "effects" in raw:
            result.append(raw)
            return result

        for value in raw.values():
            result.extend(_flatten_entries(value))
        return result

    if isinstance(raw, list):
        for entry in raw:
            result.extend(_flatten_entries(entry))

    return result


def _normalize_entry(entry: Dict[str, Any]) -> Dict[str, Any]:
    normalized = dict(entry)
    skill_id = str(normalized.get("id") or normalized.get("skill_id") or "").strip()
    if not skill_id:
        skill_id = _safe_slug(str(normalized.get("name", "")))
    normalized["id"] = skill_id
    normalized.setdefault("name", skill_id)
    return normalized


class SkillCatalog:
    """Validated skills keyed by id."""

    def __init__(
        self,
        skills: Optional[Iterable[Union[Skill, Dict[str, Any]]]] = None,
        basic_attack_id: Optional[str] = None,
    ) -> None:
        self.basic_attack_id = basic_attack_id or settings.basic_attack_skill_id
        self._skills: Dict[str, Skill] = {}
        for skill in skills or ():
            self.add(skill)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add(self, skill: Union[Skill, Dict[str, Any]]) -> Skill:
        if not isinstance(skill, Skill):
            skill = Skill.model_validate(_normalize_entry(skill))
        key = _safe_slug(skill.id)
        if key in self._skills:
            logger.debug("SkillCatalog replacing skill %s", skill.id)
        self._skills[key] = skill
        return skill

    def list_skills(self) -> List[Skill]:
        return list(self._skills.values())

    def has_skill(self, skill_id: str) -> bool:
        return _safe_slug(skill_id) in self._skills

    def get_skill(self, skill_id: str) -> Skill:
        """
        Look a skill up by id

        Raises:
            SkillNotFoundError: when the catalog has no such skill
        """
        skill = self._skills.get(_safe_slug(skill_id))
        if skill is None:
            raise SkillNotFoundError(skill_id)
        return skill

    def basic_attack(self) -> Skill:
        """The fallback skill every combatant can use."""
        return self.get_skill(self.basic_attack_id)

    def __len__(self) -> int:
        return len(self._skills)

    def __contains__(self, skill_id: object) -> bool:
        return isinstance(skill_id, str) and self.has_skill(skill_id)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_json_file(
        cls, path: Union[str, Path], basic_attack_id: Optional[str] = None
    ) -> "SkillCatalog":
        """
        Load a catalog from a JSON file

        Entries that fail validation are skipped with a warning; a missing or
        unreadable file raises.
        """
        path = Path(path)
        payload = json.loads(path.read_text(encoding="utf-8"))

        catalog = cls(basic_attack_id=basic_attack_id)
        for entry in _flatten_entries(payload):
            try:
                catalog.add(entry)
            except ValidationError as exc:
                logger.warning(
                    "Skipping invalid skill %r in %s: %s", entry.get("id"), path, exc
                )

        logger.info("SkillCatalog loaded %d skill(s) from %s", len(catalog), path)
        return catalog

    @classmethod
    def from_settings(cls) -> "SkillCatalog":
        return cls.from_json_file(settings.skill_data_path, settings.basic_attack_skill_id)
