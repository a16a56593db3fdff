"""Progression state machine and the upgrade catalog."""

import random

import pytest

from ball_breaker.avatar import create_avatar
from ball_breaker.components import AvatarControl, Health
from ball_breaker.config import GameConfig
from ball_breaker.progression import (
    Progression, SimulationClock,
    PHASE_START, PHASE_PLAYING, PHASE_UPGRADE, PHASE_GAMEOVER
)
from ball_breaker.upgrades import (
    UPGRADES, PlayerUpgrades, apply_upgrade, describe_upgrade, select_upgrades
)

pytestmark = pytest.mark.unit


def _progression(**overrides) -> Progression:
    progression = Progression(GameConfig(**overrides), random.Random(5))
    progression.start(0.0)
    return progression


# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------

class TestExperience:
    def test_threshold_crossing(self):
        """8 xp + a 5-value orb crosses the threshold of 10."""
        progression = _progression()
        progression.experience = 8

        assert progression.add_experience(5) == 1

        assert progression.player_level == 2
        assert progression.experience == 3
        assert progression.xp_to_next == 15
        assert progression.begin_upgrade()
        assert progression.phase == PHASE_UPGRADE

    def test_below_threshold(self):
        progression = _progression()
        assert progression.add_experience(9) == 0
        assert progression.pending_upgrades == 0
        assert progression.begin_upgrade() == []
        assert progression.phase == PHASE_PLAYING

    def test_multiple_levels_at_once(self):
        progression = _progression()
        assert progression.add_experience(30) == 2
        assert progression.experience == 5
        assert progression.xp_to_next == 22
        assert progression.pending_upgrades == 2

    def test_level_up_hook(self):
        progression = _progression()
        levels = []
        progression.on_level_up = levels.append
        progression.add_experience(25)
        assert levels == [2, 3]

    def test_xp_fraction(self):
        progression = _progression()
        progression.add_experience(4)
        assert progression.xp_fraction == pytest.approx(0.4)


# ---------------------------------------------------------------------------
# Waves
# ---------------------------------------------------------------------------

class TestWaves:
    def test_wave_expires_after_duration(self):
        progression = _progression()
        progression.record_kill(10)
        assert progression.check_wave(30000.0) is False
        assert progression.check_wave(30001.0) is True

        assert progression.level == 2
        assert progression.wave_kills == 0
        assert progression.kills == 1
        assert progression.wave_started_at == 30001.0
        assert progression.pending_upgrades == 1

    def test_elite_due_on_boss_interval(self):
        progression = _progression(boss_interval=5)
        due = []
        for i in range(1, 11):
            progression.check_wave(i * 30001.0)
            due.append(progression.elite_due())
        assert progression.level == 11
        assert due == [False, False, False, True, False, False, False, False, True, False]


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------

class TestPhases:
    def test_initial_phase(self):
        progression = Progression(GameConfig())
        assert progression.phase == PHASE_START
        assert not progression.playing

    def test_choose_outside_upgrade_is_ignored(self):
        progression = _progression()
        assert progression.choose(0) is None
        assert progression.phase == PHASE_PLAYING

    def test_choose_out_of_range(self):
        progression = _progression()
        progression.add_experience(10)
        progression.begin_upgrade()
        assert progression.choose(3) is None
        assert progression.choose(-1) is None
        assert progression.phase == PHASE_UPGRADE

    def test_three_distinct_choices(self):
        progression = _progression()
        progression.add_experience(10)
        choices = progression.begin_upgrade()
        assert len(choices) == 3
        assert len(set(choices)) == 3
        assert all(c in UPGRADES for c in choices)

    def test_queued_upgrades_presented_in_turn(self):
        progression = _progression()
        progression.add_experience(10)
        progression.check_wave(30001.0)
        assert progression.pending_upgrades == 2

        progression.begin_upgrade()
        first = progression.choose(0)
        assert first is not None
        assert progression.phase == PHASE_UPGRADE
        assert len(progression.upgrade_choices) == 3

        assert progression.choose(1) is not None
        assert progression.phase == PHASE_PLAYING
        assert progression.upgrade_choices == []

    def test_game_over_is_terminal(self):
        progression = _progression()
        progression.game_over()
        progression.add_experience(10)
        assert progression.begin_upgrade() == []
        assert progression.phase == PHASE_GAMEOVER


class TestClock:
    def test_advance_and_reset(self):
        clock = SimulationClock()
        clock.advance(16.0)
        assert clock.advance(4.0) == 20.0
        clock.reset()
        assert clock.now == 0.0


# ---------------------------------------------------------------------------
# Upgrade catalog
# ---------------------------------------------------------------------------

class TestUpgrades:
    def test_catalog(self):
        assert set(UPGRADES) == {
            'damage', 'speed', 'fire_rate', 'multishot', 'piercing', 'health',
            'fire_ball', 'ice_ball', 'lightning', 'explosive',
        }

    def test_select_without_replacement(self):
        rng = random.Random(0)
        for _ in range(20):
            picks = select_upgrades(3, rng)
            assert len(set(picks)) == 3

    @pytest.mark.parametrize("upgrade_id, attr, expected", [
        ('damage', 'damage_multiplier', 1.5),
        ('speed', 'speed_multiplier', 1.3),
        ('fire_rate', 'fire_rate_multiplier', 1.3),
        ('multishot', 'multishot', 1),
        ('piercing', 'pierce_count', 2),
    ])
    def test_stat_upgrades(self, world, upgrade_id, attr, expected):
        upgrades = PlayerUpgrades()
        assert apply_upgrade(world, None, upgrades, upgrade_id)
        assert getattr(upgrades, attr) == pytest.approx(expected)
        assert upgrades.history == [upgrade_id]

    def test_stacking(self, world):
        upgrades = PlayerUpgrades()
        apply_upgrade(world, None, upgrades, 'damage')
        apply_upgrade(world, None, upgrades, 'damage')
        assert upgrades.damage_multiplier == pytest.approx(2.25)

    def test_health_raises_max_and_heals(self, world, config):
        avatar = create_avatar(world, config)
        health = world.get_component(avatar, Health)
        health.current = 40
        apply_upgrade(world, avatar, PlayerUpgrades(), 'health')
        assert (health.current, health.maximum) == (125, 125)

    @pytest.mark.parametrize("upgrade_id, archetype", [
        ('fire_ball', 'fire'), ('ice_ball', 'ice'),
        ('lightning', 'lightning'), ('explosive', 'explosive'),
    ])
    def test_fusions_swap_archetype(self, world, config, upgrade_id, archetype):
        avatar = create_avatar(world, config)
        apply_upgrade(world, avatar, PlayerUpgrades(), upgrade_id)
        assert world.get_component(avatar, AvatarControl).archetype == archetype

    def test_unknown_upgrade(self, world):
        upgrades = PlayerUpgrades()
        assert apply_upgrade(world, None, upgrades, 'nope') is False
        assert upgrades.history == []

    def test_describe(self):
        assert describe_upgrade('multishot') == {
            'id': 'multishot',
            'name': 'Multi-Shot',
            'description': 'Fire an additional ball',
        }
