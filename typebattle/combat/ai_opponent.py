"""
Enemy AI

Picks the enemy's next skill
"""
import logging
from typing import List, Optional

from typebattle.config import settings

from .data_repository import SkillCatalog
from .dice import RandomSource, choose_index, default_random_source
from .errors import SkillNotFoundError
from .models.combatant import Combatant
from .models.skill import Skill

logger = logging.getLogger(__name__)


class OpponentAI:
    """
    Enemy AI

    Design:
    - uniform random choice over the skills the enemy can afford
    - a planned ``next_skill_id`` (e.g. restored from a snapshot) wins
    - falls back to the basic attack when nothing is usable
    """

    def __init__(
        self,
        rng: Optional[RandomSource] = None,
        catalog: Optional[SkillCatalog] = None,
    ):
        """
        Args:
            rng: random source for the skill draw
            catalog: fallback skill provider when the enemy carries none
        """
        self.rng = rng or default_random_source()
        self.catalog = catalog

    def choose_skill(self, enemy: Combatant) -> Skill:
        """
        Decide the enemy's skill for this turn

        Args:
            enemy: the acting enemy

        Returns:
            Skill: the chosen skill
        """
        planned = self._take_planned_skill(enemy)
        if planned is not None:
            return planned

        candidates = self._usable_skills(enemy)
        if not candidates:
            return self._basic_attack(enemy)

        # One draw, even with a single candidate
        skill = candidates[choose_index(self.rng, len(candidates))]
        logger.debug("%s chose %s out of %d skill(s)", enemy.id, skill.id, len(candidates))
        return skill

    # ===== Internals =====

    @staticmethod
    def _usable_skills(enemy: Combatant) -> List[Skill]:
        return [skill for skill in enemy.skills if skill.mp_cost <= enemy.mp]

    @staticmethod
    def _take_planned_skill(enemy: Combatant) -> Optional[Skill]:
        skill_id = enemy.next_skill_id
        if not skill_id:
            return None
        enemy.next_skill_id = None
        skill = enemy.get_skill(skill_id)
        if skill is None:
            logger.warning("%s has no planned skill %s; choosing again", enemy.id, skill_id)
        return skill

    def _basic_attack(self, enemy: Combatant) -> Skill:
        catalog = enemy.catalog if enemy.catalog is not None else self.catalog
        if catalog is None:
            raise SkillNotFoundError(settings.basic_attack_skill_id)
        return catalog.basic_attack()
