"""
Battle session

One player against one enemy: lifecycle, turn order, end detection and drops.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from typebattle.config import settings

from ..ai_opponent import OpponentAI
from ..dice import RandomSource, default_random_source, roll_percent
from ..errors import BattleStateError
from ..executor import ActionExecutor
from ..rules import calculate_action_points, calculate_drop_rate
from .action import (
    PlayerTurnResult,
    SelectedSkill,
    SkillExecutionResult,
    SpecialModeState,
    TypingResult,
)
from .battle_result import BattleEndResult, BattleResult, Winner
from .combatant import Combatant
from .skill import Skill

logger = logging.getLogger(__name__)


class BattleState(str, Enum):
    """Battle state"""

    NOT_STARTED = "not_started"
    ACTIVE = "active"
    ENDED = "ended"  # terminal


class TurnActor(str, Enum):
    """Whose turn it is"""

    PLAYER = "player"
    ENEMY = "enemy"


@dataclass
class BattleSession:
    """
    Battle session

    Owned by a single caller; the executor is the only thing that mutates
    the combatants.
    """

    # ===== Combatants =====
    player: Combatant
    enemy: Combatant

    # ===== Collaborators =====
    rng: Optional[RandomSource] = field(default=None, repr=False, compare=False)
    executor: Optional[ActionExecutor] = field(default=None, repr=False, compare=False)
    ai: Optional[OpponentAI] = field(default=None, repr=False, compare=False)

    # ===== Turn state =====
    state: BattleState = BattleState.NOT_STARTED
    current_turn: int = 0
    _turn_actor: Optional[TurnActor] = field(default=None, init=False, repr=False)
    _drops: Optional[List[str]] = field(default=None, init=False, repr=False)

    # ===== Result (filled once ended) =====
    result: Optional[BattleResult] = None

    def __post_init__(self):
        self.rng = self.rng or default_random_source()
        if self.executor is None:
            self.executor = ActionExecutor(rng=self.rng)
        if self.ai is None:
            catalog = self.enemy.catalog if self.enemy.catalog is not None else self.player.catalog
            self.ai = OpponentAI(rng=self.rng, catalog=catalog)

    # ===== Lifecycle =====

    @property
    def is_active(self) -> bool:
        return self.state == BattleState.ACTIVE

    def start(self) -> str:
        """
        Start the battle

        Returns:
            str: opening message

        Raises:
            BattleStateError: when the battle was already started
        """
        if self.state != BattleState.NOT_STARTED:
            raise BattleStateError(f"Battle already started (state={self.state.value})")

        self.state = BattleState.ACTIVE
        self.current_turn = 1
        self.result = None
        self._turn_actor = self._decide_first_turn_actor()

        logger.info(
            "Battle started: %s vs %s, %s moves first",
            self.player.id,
            self.enemy.id,
            self._turn_actor.value,
        )
        return f"{self.enemy.name} appeared!"

    def end(self):
        """Abandon an active battle without recording a result"""
        if self.state != BattleState.ACTIVE:
            raise BattleStateError("Battle not started")
        self.state = BattleState.ENDED
        logger.info("Battle abandoned at turn %d", self.current_turn)

    def next_turn(self):
        """Advance the turn counter and hand the turn to the other side"""
        if self.state != BattleState.ACTIVE:
            raise BattleStateError("Battle is not active")
        self.current_turn += 1
        self._turn_actor = (
            TurnActor.ENEMY if self._turn_actor == TurnActor.PLAYER else TurnActor.PLAYER
        )

    @property
    def current_turn_actor(self) -> TurnActor:
        if self._turn_actor is None:
            raise BattleStateError("Battle not started")
        return self._turn_actor

    def _decide_first_turn_actor(self) -> TurnActor:
        player_agility = self.player.stats.agility
        enemy_agility = self.enemy.stats.agility
        if player_agility > enemy_agility:
            return TurnActor.PLAYER
        if player_agility < enemy_agility:
            return TurnActor.ENEMY
        # Tie: one coin flip
        return TurnActor.PLAYER if self.rng.next_fraction() < 0.5 else TurnActor.ENEMY

    # ===== End detection =====

    def check_battle_end(self) -> Optional[BattleEndResult]:
        """
        Check whether the side that was just acted upon has fallen

        Call after every action. Once the battle has ended the recorded
        outcome is returned again without further changes.

        Returns:
            Optional[BattleEndResult]: None while the battle continues

        Raises:
            BattleStateError: when the battle was never started
        """
        if self.state == BattleState.NOT_STARTED:
            raise BattleStateError("Battle not started")
        if self.state == BattleState.ENDED:
            return self._end_result()

        if self.current_turn_actor == TurnActor.PLAYER:
            defender = self.enemy
        else:
            defender = self.player
        if not defender.is_defeated():
            return None

        victory = defender is self.enemy
        self.state = BattleState.ENDED
        self.result = BattleResult(
            victory=victory,
            turns=self.current_turn,
            enemy_defeated=self.enemy.name if victory else None,
        )
        logger.info(
            "Battle ended at turn %d: %s",
            self.current_turn,
            "victory" if victory else "defeat",
        )
        return self._end_result()

    def _end_result(self) -> Optional[BattleEndResult]:
        if self.result is None:
            return None
        if self.result.victory:
            return BattleEndResult(Winner.PLAYER, f"You defeated {self.enemy.name}!")
        return BattleEndResult(Winner.ENEMY, f"You were defeated by {self.enemy.name}...")

    def get_battle_result(self) -> Optional[BattleResult]:
        return self.result

    # ===== Drops =====

    def calculate_drops(self, world_level: Optional[int] = None) -> List[str]:
        """
        Roll the enemy's drop table

        Only a recorded player victory drops anything. One aggregate roll
        gates the whole table, then every entry is rolled on its own. The
        table is rolled once; later calls return the same items.

        Args:
            world_level: world level (defaults to settings.world_level)

        Returns:
            List[str]: dropped item ids
        """
        if self.result is None or not self.result.victory:
            return []
        if self._drops is None:
            self._drops = self._roll_drops(world_level)
            self.result.dropped_items = list(self._drops)
        return list(self._drops)

    def _roll_drops(self, world_level: Optional[int]) -> List[str]:
        if world_level is None:
            world_level = settings.world_level
        drop_rate = calculate_drop_rate(self.player.stats.fortune, world_level)

        dropped: List[str] = []
        if drop_rate <= 0:
            return dropped
        if not roll_percent(self.rng, drop_rate):
            logger.debug("Base drop roll failed (rate %.1f)", drop_rate)
            return dropped

        for drop in self.enemy.drops:
            if roll_percent(self.rng, drop.drop_rate):
                dropped.append(drop.item_id)

        logger.info("Dropped items: %s", dropped)
        return dropped

    # ===== Action points =====

    def calculate_player_action_points(self) -> int:
        return calculate_action_points(self.player.stats.agility)

    @staticmethod
    def calculate_total_action_cost(skills: Sequence[Skill]) -> int:
        return sum(skill.action_cost for skill in skills)

    def validate_selected_skills(self, skills: Sequence[Skill]) -> Optional[str]:
        """
        Check a player's skill selection for this turn

        Returns:
            Optional[str]: error message, None when the selection is usable
        """
        if not skills:
            return "No skills selected"

        action_points = self.calculate_player_action_points()
        total_cost = self.calculate_total_action_cost(skills)
        if total_cost > action_points:
            return f"Action cost ({total_cost}) exceeds action points ({action_points})"

        total_mp = sum(skill.mp_cost for skill in skills)
        if self.player.mp < total_mp:
            return f"Not enough MP! Need {total_mp} MP but only have {self.player.mp} MP."

        return None

    # ===== Actions =====

    def player_use_skill(
        self,
        skill: Skill,
        typing_result: Optional[TypingResult] = None,
        special_mode: Optional[SpecialModeState] = None,
    ) -> SkillExecutionResult:
        self._require_active()
        return self.executor.execute_player_skill(
            skill, self.player, self.enemy, typing_result, special_mode
        )

    def player_use_multiple_skills(
        self,
        selected: Sequence[SelectedSkill],
        special_mode: Optional[SpecialModeState] = None,
    ) -> PlayerTurnResult:
        """
        Run the player's selected skills in order

        Each skill goes through the executor on its own, so a combo boost
        registered by one skill is consumed by the next. Skills left once
        the enemy has fallen are not used.

        Args:
            selected: skills with their typing results, in use order
            special_mode: special mode state shared by the whole turn

        Returns:
            PlayerTurnResult: per-skill results and turn totals
        """
        self._require_active()
        turn = PlayerTurnResult()
        for choice in selected:
            if self.enemy.is_defeated():
                break
            turn.add(self.player_use_skill(choice.skill, choice.typing_result, special_mode))
        logger.debug(
            "Player turn: %d skill(s), damage=%d, mp recovered=%d",
            len(turn.skill_results),
            turn.total_damage,
            turn.total_mp_recovered,
        )
        return turn

    def enemy_action(self) -> SkillExecutionResult:
        """Let the AI pick a skill and run it against the player"""
        self._require_active()
        skill = self.ai.choose_skill(self.enemy)
        return self.executor.execute_enemy_skill(skill, self.enemy, self.player)

    def _require_active(self):
        if self.state != BattleState.ACTIVE:
            raise BattleStateError("Battle is not active")
