"""GameConfig validation and environment overrides."""

import pytest

from ball_breaker.config import GameConfig, config_from_env

pytestmark = pytest.mark.unit


class TestValidation:
    def test_defaults_are_valid(self):
        config = GameConfig()
        assert (config.width, config.height) == (800.0, 600.0)
        assert config.fire_interval_ms == 800.0

    @pytest.mark.parametrize("overrides", [
        {'width': 0},
        {'height': -1},
        {'frame_ms': 0},
        {'spawn_pattern': 'spiral'},
        {'pickup_drop_chance': 1.5},
        {'xp_growth': 1.0},
        {'xp_threshold': 0},
        {'boss_interval': 0},
        {'cluster_min': 3, 'cluster_max': 2},
        {'upgrade_choice_count': 0},
    ])
    def test_rejects(self, overrides):
        with pytest.raises(ValueError):
            GameConfig(**overrides)


class TestEnvironment:
    def test_reads_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv('BALL_BREAKER_SEED', '7')
        monkeypatch.setenv('BALL_BREAKER_SPAWN_PATTERN', 'Grid')
        monkeypatch.setenv('BALL_BREAKER_AUTO_FIRE', 'off')
        monkeypatch.setenv('BALL_BREAKER_BOSS_INTERVAL', '3')
        monkeypatch.setenv('BALL_BREAKER_WIDTH', '640')

        config = config_from_env()

        assert config.seed == 7
        assert config.spawn_pattern == 'grid'
        assert config.auto_fire is False
        assert config.boss_interval == 3
        assert config.width == 640.0

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv('BALL_BREAKER_SEED', '7')
        assert config_from_env(seed=11).seed == 11

    def test_invalid_value_raises(self, monkeypatch):
        monkeypatch.setenv('BALL_BREAKER_SPAWN_PATTERN', 'spiral')
        with pytest.raises(ValueError):
            config_from_env()
