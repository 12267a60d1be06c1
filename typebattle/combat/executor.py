"""
Action executor

Runs one skill use end to end: resource check, combo application, judgment,
state changes and messages.
"""
import logging
from typing import List, Optional

from .combo import BoostedSkill, ComboBoostStack
from .dice import RandomSource, default_random_source
from .effects import context_for, merge_potential_effects
from .judgment import execute_three_layer_judgment
from .models.action import (
    JudgmentResult,
    SkillExecutionResult,
    SpecialModeState,
    SpeedRating,
    TypingResult,
)
from .models.combatant import Combatant
from .models.skill import EffectType, Skill, TargetSelector
from .rules import calculate_mp_recovery

logger = logging.getLogger(__name__)

# Enemies do not type; they are judged as an average typist
ENEMY_TYPING = TypingResult(speed_rating=SpeedRating.NORMAL)


class ActionExecutor:
    """
    Skill executor

    Responsibilities:
    - resource check and payment (player only)
    - combo boost application and consumption (player only)
    - three-layer judgment
    - applying damage / healing / statuses / mp charge
    - building result messages
    """

    def __init__(
        self,
        rng: Optional[RandomSource] = None,
        combo_stack: Optional[ComboBoostStack] = None,
    ):
        self.rng = rng or default_random_source()
        self.combo_stack = combo_stack if combo_stack is not None else ComboBoostStack()

    # ============================================
    # Public interface
    # ============================================

    def execute_player_skill(
        self,
        skill: Skill,
        player: Combatant,
        enemy: Combatant,
        typing_result: Optional[TypingResult] = None,
        special_mode: Optional[SpecialModeState] = None,
    ) -> SkillExecutionResult:
        """
        Execute a player skill

        Args:
            skill: selected skill
            player: skill user
            enemy: opposing combatant
            typing_result: typing minigame outcome (optional)
            special_mode: special mode state (optional)

        Returns:
            SkillExecutionResult

        Flow:
        1. fold active combo boosts into the skill
        2. check and pay mp (nothing changes when short)
        3. merge potential effects and judge
        4. apply mp charge and effects
        5. consume the combo stack once, register this skill's boosts
        """
        boosted = self.combo_stack.apply_to_skill(skill)
        effective = boosted.skill

        if player.mp < effective.mp_cost:
            result = SkillExecutionResult(
                skill_id=skill.id, actor_id=player.id, target_id=enemy.id
            )
            result.add_message(
                f"Not enough MP! Need {effective.mp_cost} MP but only have {player.mp} MP."
            )
            logger.debug("%s cannot pay %d mp for %s", player.id, effective.mp_cost, skill.id)
            return result

        player.consume_mp(effective.mp_cost)

        judgment = self._judge(boosted, player, enemy, typing_result, special_mode)

        accuracy_rating = typing_result.accuracy_rating if typing_result else None
        mp_charge = player.recover_mp(calculate_mp_recovery(skill.mp_charge, accuracy_rating))

        result = self._apply_judgment(effective, judgment, player, enemy)
        result.mp_charge = mp_charge
        result.applied_boosts = list(boosted.applied)

        self.combo_stack.consume_once()
        if judgment.landed and skill.combo_boosts:
            self.combo_stack.register(skill.combo_boosts)

        result.messages = self._build_messages(player, effective, judgment, result)
        self._log_result(result)
        return result

    def execute_enemy_skill(
        self,
        skill: Skill,
        enemy: Combatant,
        player: Combatant,
        special_mode: Optional[SpecialModeState] = None,
    ) -> SkillExecutionResult:
        """
        Execute an enemy skill

        Enemies are judged with Normal typing speed, pay no mp and never touch
        the combo stack.
        """
        judgment = self._judge(
            BoostedSkill(skill=skill), enemy, player, ENEMY_TYPING, special_mode
        )
        result = self._apply_judgment(skill, judgment, enemy, player)
        result.messages = self._build_messages(enemy, skill, judgment, result)
        self._log_result(result)
        return result

    # ============================================
    # Internals
    # ============================================

    def _judge(
        self,
        boosted: BoostedSkill,
        attacker: Combatant,
        defender: Combatant,
        typing_result: Optional[TypingResult],
        special_mode: Optional[SpecialModeState],
    ) -> JudgmentResult:
        skill = boosted.skill
        context = context_for(
            attacker,
            defender,
            typing=typing_result,
            special_mode=special_mode,
            potential_unlocked=boosted.potential_unlocked,
        )
        effects = merge_potential_effects(skill.effects, skill.potential_effects, context)
        return execute_three_layer_judgment(
            skill.with_effects(effects),
            defender,
            attacker.stats,
            typing_result.speed_rating if typing_result else None,
            typing_result.accuracy_rating if typing_result else None,
            rng=self.rng,
            context=context,
        )

    @staticmethod
    def _apply_judgment(
        skill: Skill,
        judgment: JudgmentResult,
        attacker: Combatant,
        defender: Combatant,
    ) -> SkillExecutionResult:
        result = SkillExecutionResult(
            skill_id=skill.id,
            actor_id=attacker.id,
            target_id=defender.id,
            success=judgment.landed,
            judgment=judgment,
        )
        if not judgment.landed:
            return result

        for outcome in judgment.effect_results:
            if not outcome.success:
                continue
            effect = outcome.effect
            target = attacker if effect.target == TargetSelector.SELF else defender

            if effect.type == EffectType.DAMAGE:
                dealt = target.take_damage(outcome.power)
                if target is defender:
                    result.damage += outcome.power
                else:
                    result.self_damage += dealt
            elif effect.type == EffectType.HEAL:
                result.healing += target.heal(outcome.power)
            elif effect.type == EffectType.ADD_STATUS:
                target.add_status(effect.status_id)
            elif effect.type == EffectType.REMOVE_STATUS:
                target.remove_status(effect.status_id)

        result.is_critical = judgment.is_critical
        result.target_defeated = defender.is_defeated()
        return result

    @staticmethod
    def _build_messages(
        attacker: Combatant,
        skill: Skill,
        judgment: JudgmentResult,
        result: SkillExecutionResult,
    ) -> List[str]:
        messages = [f"{attacker.name} used {skill.name}!"]

        if not judgment.skill_success:
            messages.append("Skill failed.")
        elif judgment.evaded:
            messages.append("Attack was evaded.")
        else:
            if judgment.is_critical:
                messages.append("Critical hit!")
            if result.damage > 0:
                messages.append(f"{result.damage} damage!")
            if result.healing > 0:
                messages.append(f"Healed {result.healing} HP.")
            if result.self_damage > 0:
                messages.append(f"{attacker.name} took {result.self_damage} damage.")
            for outcome in judgment.effect_results:
                effect = outcome.effect
                if not (outcome.success and effect.is_status_effect):
                    continue
                if effect.type == EffectType.ADD_STATUS:
                    messages.append(f"Inflicted {effect.status_id}.")
                else:
                    messages.append(f"Cured {effect.status_id}.")
            if len(messages) == 1:
                messages.append("No effect.")

        if result.mp_charge > 0:
            messages.append(f"Charged {result.mp_charge} MP.")
        return messages

    @staticmethod
    def _log_result(result: SkillExecutionResult):
        logger.debug(
            "%s -> %s [%s]: success=%s damage=%d healing=%d critical=%s",
            result.actor_id,
            result.target_id,
            result.skill_id,
            result.success,
            result.damage,
            result.healing,
            result.is_critical,
        )
