"""Combatant model tests."""
import pytest

from typebattle.combat.data_repository import SkillCatalog
from typebattle.combat.errors import CombatError, InvalidCombatantError
from typebattle.combat.models.combatant import Combatant, CombatantType, DropEntry, Stats
from typebattle.combat.models.skill import Skill

BASIC = {"id": "basic_attack", "name": "Attack", "effects": [{"type": "damage", "base_power": 10}]}
BITE = {"id": "bite", "name": "Bite", "mp_cost": 3, "effects": [{"type": "damage", "base_power": 14}]}


def _wolf(**overrides) -> Combatant:
    data = dict(
        id="wolf",
        name="Wolf",
        combatant_type=CombatantType.ENEMY,
        level=3,
        stats=Stats(strength=12, willpower=4, agility=30, fortune=5),
        max_hp=40,
        max_mp=10,
        physical_evade_rate=12.5,
        magical_evade_rate=5,
        skills=[Skill.model_validate(BITE)],
        drops=[{"item_id": "wolf_pelt", "drop_rate": 60}],
    )
    data.update(overrides)
    return Combatant(**data)


def test_defaults_start_at_full_health():
    wolf = _wolf()
    assert wolf.hp == 40
    assert wolf.mp == 10
    assert wolf.is_enemy()
    assert not wolf.is_player()
    assert wolf.drops == [DropEntry("wolf_pelt", 60)]


def test_initial_values_are_clamped():
    wolf = _wolf(hp=999, mp=-4)
    assert wolf.hp == 40
    assert wolf.mp == 0


@pytest.mark.parametrize(
    "overrides",
    [
        {"level": 0},
        {"max_hp": 0},
        {"max_mp": -1},
        {"physical_evade_rate": 101},
        {"magical_evade_rate": -1},
        {"drops": [{"item_id": "fang", "drop_rate": 150}]},
    ],
)
def test_invalid_construction_raises(overrides):
    with pytest.raises(InvalidCombatantError):
        _wolf(**overrides)


def test_invalid_combatant_error_is_a_value_error():
    assert issubclass(InvalidCombatantError, ValueError)
    assert issubclass(InvalidCombatantError, CombatError)


def test_stats_are_immutable():
    wolf = _wolf()
    with pytest.raises(AttributeError):
        wolf.stats.strength = 99


class TestHealth:
    def test_damage_never_goes_below_zero(self):
        wolf = _wolf()
        assert wolf.take_damage(15) == 15
        assert wolf.hp == 25
        assert wolf.take_damage(100) == 25
        assert wolf.hp == 0
        assert wolf.is_defeated()

    def test_heal_never_exceeds_max(self):
        wolf = _wolf(hp=30)
        assert wolf.heal(25) == 10
        assert wolf.hp == 40

    @pytest.mark.parametrize("method", ["take_damage", "heal"])
    def test_negative_amounts_raise(self, method):
        with pytest.raises(InvalidCombatantError):
            getattr(_wolf(), method)(-1)

    def test_hp_percent(self):
        assert _wolf(hp=10).hp_percent == pytest.approx(25.0)


class TestResource:
    def test_consume_mp(self):
        wolf = _wolf()
        assert wolf.consume_mp(4) is True
        assert wolf.mp == 6
        assert wolf.consume_mp(7) is False
        assert wolf.mp == 6

    def test_recover_mp_is_capped(self):
        wolf = _wolf(mp=8)
        assert wolf.recover_mp(5) == 2
        assert wolf.mp == 10


def test_statuses_are_a_set_in_insertion_order():
    wolf = _wolf()
    assert wolf.add_status("poison") is True
    assert wolf.add_status("poison") is False
    assert wolf.add_status("slow") is True
    assert wolf.statuses == ["poison", "slow"]
    assert wolf.remove_status("poison") is True
    assert wolf.remove_status("poison") is False
    assert not wolf.has_status("poison")


def test_available_skills_put_basic_attack_first():
    catalog = SkillCatalog([BASIC])
    wolf = _wolf(catalog=catalog)
    assert [skill.id for skill in wolf.available_skills()] == ["basic_attack", "bite"]
    assert wolf.get_skill("basic_attack").name == "Attack"
    assert wolf.get_skill("howl") is None


def test_available_skills_without_catalog():
    assert [skill.id for skill in _wolf().available_skills()] == ["bite"]


def test_snapshot_round_trip():
    wolf = _wolf(next_skill_id="bite")
    wolf.take_damage(7)
    wolf.consume_mp(3)

    restored = Combatant.from_dict(wolf.to_dict())

    assert restored.to_dict() == wolf.to_dict()
    assert restored.hp == 33
    assert restored.mp == 7
    assert restored.stats == wolf.stats
    assert restored.skills[0].id == "bite"
    assert restored.next_skill_id == "bite"


def test_snapshot_excludes_encounter_statuses():
    wolf = _wolf()
    wolf.add_status("burn")
    assert "statuses" not in wolf.to_dict()
    assert Combatant.from_dict(wolf.to_dict()).statuses == []


class TestEvadeRates:
    def _hero(self, agility: int, **overrides) -> Combatant:
        return Combatant(
            id="hero",
            name="Hero",
            combatant_type=CombatantType.PLAYER,
            stats=Stats(agility=agility),
            **overrides,
        )

    @pytest.mark.parametrize("agility,expected", [(0, 5.0), (100, 10.0), (500, 30.0)])
    def test_player_rates_follow_agility(self, agility, expected):
        hero = self._hero(agility)
        assert hero.physical_evade_rate == pytest.approx(expected)
        assert hero.magical_evade_rate == pytest.approx(expected)

    def test_explicit_player_rates_win(self):
        hero = self._hero(500, physical_evade_rate=0, magical_evade_rate=12)
        assert hero.physical_evade_rate == 0
        assert hero.magical_evade_rate == 12

    def test_enemy_rates_default_to_zero(self):
        wolf = _wolf(physical_evade_rate=None, magical_evade_rate=None)
        assert wolf.physical_evade_rate == 0.0
        assert wolf.magical_evade_rate == 0.0
