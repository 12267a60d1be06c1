"""Action executor tests."""
from typing import Any, Dict, List, Optional

import pytest

from typebattle.combat.combo import ComboBoostStack
from typebattle.combat.dice import ScriptedRandomSource
from typebattle.combat.executor import ActionExecutor
from typebattle.combat.models.action import AccuracyRating, SpeedRating, TypingResult
from typebattle.combat.models.combatant import Combatant, CombatantType, Stats
from typebattle.combat.models.skill import BoostType, ComboBoost, Skill


def _player(mp: int = 20, hp: Optional[int] = None) -> Combatant:
    return Combatant(
        id="hero",
        name="Hero",
        combatant_type=CombatantType.PLAYER,
        stats=Stats(strength=20, willpower=10, agility=0, fortune=0),
        max_hp=100,
        hp=hp,
        max_mp=30,
        mp=mp,
    )


def _enemy(evade: float = 0) -> Combatant:
    return Combatant(
        id="goblin",
        name="Goblin",
        combatant_type=CombatantType.ENEMY,
        stats=Stats(strength=10),
        max_hp=50,
        physical_evade_rate=evade,
        magical_evade_rate=evade,
    )


def _skill(effects: List[Dict[str, Any]], **overrides) -> Skill:
    data = {
        "id": "slash",
        "name": "Slash",
        "mp_cost": 5,
        "success_rate": {"base_rate": 50},
        "effects": effects,
    }
    data.update(overrides)
    return Skill.model_validate(data)


def _boosts(*boosts: Dict[str, Any]) -> List[ComboBoost]:
    return [ComboBoost.model_validate(boost) for boost in boosts]


STRIKE = {"type": "damage", "base_power": 10, "power_influence": {"stat": "strength", "rate": 0.5}}

# success, evasion, effect success, critical
HIT = [0.0, 0.5, 0.0, 0.5]
FAIL = [0.9]
EVADE = [0.0, 0.0]


def _executor(draws, stack: Optional[ComboBoostStack] = None) -> ActionExecutor:
    return ActionExecutor(rng=ScriptedRandomSource(draws), combo_stack=stack)


class TestPlayerSkill:
    def test_successful_hit_damages_enemy(self):
        player, enemy = _player(), _enemy(evade=10)
        result = _executor(HIT).execute_player_skill(_skill([STRIKE]), player, enemy)

        assert result.success is True
        assert result.damage == 20
        assert enemy.hp == 30
        assert player.mp == 15
        assert result.target_defeated is False
        assert result.messages == ["Hero used Slash!", "20 damage!"]

    def test_not_enough_mp_changes_nothing(self):
        stack = ComboBoostStack()
        stack.register(_boosts({"boost_type": "damage", "value": 1.0}))
        player, enemy = _player(mp=3), _enemy()
        rng = ScriptedRandomSource([])
        executor = ActionExecutor(rng=rng, combo_stack=stack)

        result = executor.execute_player_skill(_skill([STRIKE]), player, enemy)

        assert result.success is False
        assert result.messages == ["Not enough MP! Need 5 MP but only have 3 MP."]
        assert player.mp == 3
        assert enemy.hp == 50
        assert len(stack) == 1
        assert rng.draws == 0

    def test_mp_cost_reduction_counts_for_the_check(self):
        stack = ComboBoostStack()
        stack.register(_boosts({"boost_type": "mp_cost_reduction", "value": 3}))
        player = _player(mp=2)

        result = _executor(HIT, stack).execute_player_skill(_skill([STRIKE]), player, _enemy())

        assert result.success is True
        assert player.mp == 0

    def test_failure_still_charges_mp(self):
        player = _player(mp=10)
        skill = _skill([STRIKE], mp_charge=10)
        typing = TypingResult(speed_rating=SpeedRating.NORMAL, accuracy_rating=AccuracyRating.PERFECT)

        result = _executor(FAIL).execute_player_skill(skill, player, _enemy(), typing)

        assert result.success is False
        assert result.mp_charge == 15
        assert player.mp == 20
        assert result.messages == ["Hero used Slash!", "Skill failed.", "Charged 15 MP."]

    def test_mp_charge_is_capped_by_max_mp(self):
        player = _player(mp=28)
        skill = _skill([STRIKE], mp_cost=0, mp_charge=10)
        result = _executor(HIT).execute_player_skill(skill, player, _enemy())
        assert result.mp_charge == 2
        assert player.mp == 30

    def test_evasion(self):
        enemy = _enemy(evade=10)
        result = _executor(EVADE).execute_player_skill(_skill([STRIKE]), _player(), enemy)

        assert result.success is False
        assert result.judgment.evaded is True
        assert enemy.hp == 50
        assert result.messages == ["Hero used Slash!", "Attack was evaded."]

    def test_critical_message(self):
        skill = _skill([STRIKE], critical_rate={"base_rate": 100})
        result = _executor([0.0, 0.5, 0.0, 0.0]).execute_player_skill(skill, _player(), _enemy())

        assert result.is_critical is True
        assert result.damage == 30
        assert result.messages == ["Hero used Slash!", "Critical hit!", "30 damage!"]

    def test_self_heal_targets_player(self):
        player = _player(hp=60)
        skill = _skill([{"type": "heal", "target": "self", "base_power": 25}], target="self")

        result = _executor(HIT).execute_player_skill(skill, player, _enemy())

        assert player.hp == 85
        assert result.healing == 25
        assert result.damage == 0
        assert result.messages == ["Hero used Slash!", "Healed 25 HP."]

    def test_status_effects(self):
        enemy = _enemy()
        enemy.add_status("wet")
        skill = _skill(
            [
                {"type": "add_status", "status_id": "burn"},
                {"type": "remove_status", "status_id": "wet"},
            ]
        )
        draws = [0.0, 0.5, 0.0, 0.5, 0.0, 0.5]

        result = _executor(draws).execute_player_skill(skill, _player(), enemy)

        assert enemy.statuses == ["burn"]
        assert result.messages == ["Hero used Slash!", "Inflicted burn.", "Cured wet."]

    def test_no_effect_message(self):
        skill = _skill([{**STRIKE, "success_rate": 50}])
        result = _executor([0.0, 0.5, 0.9]).execute_player_skill(skill, _player(), _enemy())

        assert result.success is True
        assert result.damage == 0
        assert result.messages == ["Hero used Slash!", "No effect."]

    def test_defeating_the_enemy(self):
        enemy = _enemy()
        enemy.take_damage(45)
        result = _executor(HIT).execute_player_skill(_skill([STRIKE]), _player(), enemy)

        assert enemy.hp == 0
        assert result.target_defeated is True

    def test_potential_effect_on_perfect_typing(self):
        skill = _skill(
            [STRIKE],
            potential_effects=[
                {"trigger": {"typing_perfect": True}, "effect": {"type": "damage", "base_power": 15}}
            ],
        )
        typing = TypingResult(speed_rating=SpeedRating.NORMAL, accuracy_rating=AccuracyRating.PERFECT)
        draws = [0.0, 0.5, 0.0, 0.99, 0.0, 0.99]

        result = _executor(draws).execute_player_skill(skill, _player(), _enemy(), typing)

        assert result.damage == 35


class TestComboTiming:
    def test_own_boosts_register_after_success_and_apply_next_time(self):
        stack = ComboBoostStack()
        skill = _skill([STRIKE], combo_boosts=[{"boost_type": "damage", "value": 1.0}])
        executor = ActionExecutor(rng=ScriptedRandomSource(HIT + HIT + HIT), combo_stack=stack)
        enemy = Combatant(
            id="ogre", name="Ogre", combatant_type=CombatantType.ENEMY, max_hp=500
        )

        first = executor.execute_player_skill(skill, _player(mp=30), enemy)
        assert first.damage == 20
        assert [boost.boost_type for boost in stack.active_boosts] == [BoostType.DAMAGE]

        second = executor.execute_player_skill(_skill([STRIKE]), _player(), enemy)
        # base power 10 doubled, plus strength influence
        assert second.damage == 30
        assert [boost.boost_type for boost in second.applied_boosts] == [BoostType.DAMAGE]
        assert len(stack) == 0

        third = executor.execute_player_skill(_skill([STRIKE]), _player(), enemy)
        assert third.damage == 20

    def test_failed_skill_consumes_without_registering(self):
        stack = ComboBoostStack()
        stack.register(_boosts({"boost_type": "skill_success", "value": 10}))
        skill = _skill([STRIKE], combo_boosts=[{"boost_type": "damage", "value": 1.0}])

        # 60 vs success 50 + 10
        result = _executor([0.6], stack).execute_player_skill(skill, _player(), _enemy())

        assert result.success is False
        assert len(stack) == 0

    def test_evaded_skill_does_not_register(self):
        stack = ComboBoostStack()
        skill = _skill([STRIKE], combo_boosts=[{"boost_type": "damage", "value": 1.0}])
        _executor(EVADE, stack).execute_player_skill(skill, _player(), _enemy(evade=10))
        assert len(stack) == 0

    def test_potential_boost_unlocks_potential_effects(self):
        stack = ComboBoostStack()
        stack.register(_boosts({"boost_type": "potential"}))
        skill = _skill(
            [STRIKE],
            potential_effects=[
                {"trigger": {"typing_perfect": True}, "effect": {"type": "damage", "base_power": 15}}
            ],
        )
        draws = [0.0, 0.5, 0.0, 0.99, 0.0, 0.99]

        result = _executor(draws, stack).execute_player_skill(skill, _player(), _enemy())

        assert result.damage == 35


class TestEnemySkill:
    def test_enemy_is_not_resource_gated(self):
        enemy = _enemy()
        enemy_skill = _skill([{"type": "damage", "base_power": 12}], mp_cost=99)
        player = _player()

        result = _executor(HIT).execute_enemy_skill(enemy_skill, enemy, player)

        assert result.success is True
        assert player.hp == 88
        assert enemy.mp == 0
        assert result.messages == ["Goblin used Slash!", "12 damage!"]

    def test_enemy_uses_normal_typing_speed(self):
        # success 50 + (120 - 100) * 1 = 70; a 0.65 roll passes
        skill = _skill([STRIKE], success_rate={"base_rate": 50, "typing_influence": 1.0})
        result = _executor([0.65, 0.5, 0.0, 0.5]).execute_enemy_skill(skill, _enemy(), _player())
        assert result.success is True

    def test_enemy_skill_does_not_touch_combo_stack(self):
        stack = ComboBoostStack()
        stack.register(_boosts({"boost_type": "damage", "value": 1.0}))
        skill = _skill([STRIKE], combo_boosts=[{"boost_type": "heal", "value": 1.0}])

        result = _executor(HIT, stack).execute_enemy_skill(skill, _enemy(), _player())

        assert result.damage == 15
        assert [boost.boost_type for boost in stack.active_boosts] == [BoostType.DAMAGE]

    def test_enemy_skill_uses_player_evasion(self):
        player = _player()
        player.physical_evade_rate = 10
        result = _executor(EVADE).execute_enemy_skill(_skill([STRIKE]), _enemy(), player)
        assert result.judgment.evaded is True
        assert player.hp == 100


def test_result_serializes():
    result = _executor(HIT).execute_player_skill(_skill([STRIKE]), _player(), _enemy())
    data = result.to_dict()
    assert data["damage"] == 20
    assert data["judgment"]["effect_results"][0]["power"] == 20
    assert data["messages"][-1] == "20 damage!"


@pytest.mark.parametrize("draws", [HIT, FAIL, EVADE])
def test_same_draws_same_outcome(draws):
    first = _executor(draws).execute_player_skill(_skill([STRIKE]), _player(), _enemy(evade=10))
    second = _executor(draws).execute_player_skill(_skill([STRIKE]), _player(), _enemy(evade=10))
    assert first.to_dict() == second.to_dict()


class TestNonPositivePower:
    def test_negative_stat_influence_deals_nothing(self):
        drain = {"type": "damage", "base_power": 10, "power_influence": {"stat": "strength", "rate": -5}}
        player, enemy = _player(), _enemy()

        result = _executor(HIT).execute_player_skill(_skill([drain]), player, enemy)

        assert result.success is True
        assert result.damage == 0
        assert enemy.hp == 50
        assert player.mp == 15
        assert result.messages == ["Hero used Slash!", "No effect."]

    def test_negative_damage_boost_deals_nothing(self):
        stack = ComboBoostStack()
        stack.register(_boosts({"boost_type": "damage", "value": -3}))
        player, enemy = _player(), _enemy()

        result = _executor(HIT, stack).execute_player_skill(
            _skill([{"type": "damage", "base_power": 10}]), player, enemy
        )

        assert result.damage == 0
        assert enemy.hp == 50
        assert player.mp == 15
        assert len(stack) == 0

    def test_negative_heal_boost_heals_nothing(self):
        stack = ComboBoostStack()
        stack.register(_boosts({"boost_type": "heal", "value": -2}))
        player = _player(hp=60)

        result = _executor(HIT, stack).execute_player_skill(
            _skill([{"type": "heal", "base_power": 10, "target": "self"}]), player, _enemy()
        )

        assert result.healing == 0
        assert player.hp == 60
        assert player.mp == 15
        assert len(stack) == 0


def test_agile_player_evades_enemy_attack():
    # agility 500 gives a 30% evasion rate without setting it explicitly
    player = Combatant(
        id="hero",
        name="Hero",
        combatant_type=CombatantType.PLAYER,
        stats=Stats(agility=500),
        max_hp=100,
    )
    result = _executor([0.0, 0.10]).execute_enemy_skill(_skill([STRIKE]), _enemy(), player)

    assert result.judgment.evaded is True
    assert result.messages == ["Goblin used Slash!", "Attack was evaded."]
    assert player.hp == 100


def test_self_targeted_damage_is_reported_apart():
    recoil = {"type": "damage", "base_power": 7, "target": "self"}
    player, enemy = _player(), _enemy()

    result = _executor([0.0, 0.5, 0.0, 0.99, 0.0, 0.99]).execute_player_skill(
        _skill([STRIKE, recoil]), player, enemy
    )

    assert result.damage == 20
    assert result.self_damage == 7
    assert enemy.hp == 30
    assert player.hp == 93
    assert result.messages == ["Hero used Slash!", "20 damage!", "Hero took 7 damage."]
    assert result.to_dict()["self_damage"] == 7
