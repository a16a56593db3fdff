"""Spawn director timing and placement patterns."""

import random

import pytest

from ball_breaker.collision import rects_overlap
from ball_breaker.components import Position, RectCollider, Hostile, EliteState
from ball_breaker.config import GameConfig
from ball_breaker.hostiles import create_block, choose_kind, kind_stats
from ball_breaker.spawner import SpawnDirector, is_obstructed, hostile_bounds

pytestmark = pytest.mark.unit


def _director(pattern='single', seed=7, **overrides):
    config = GameConfig(spawn_pattern=pattern, **overrides)
    return SpawnDirector(config, random.Random(seed)), config


class TestInterval:
    def test_decreases_with_level(self):
        director, _ = _director()
        assert director.interval(1) == 1900
        assert director.interval(5) == 1500

    def test_floor(self):
        director, config = _director()
        assert director.interval(100) == config.min_spawn_interval_ms

    def test_first_update_spawns(self, world):
        director, _ = _director()
        assert len(director.update(world, 0.0, 1)) == 1

    def test_waits_for_interval(self, world):
        director, _ = _director()
        director.update(world, 0.0, 1)
        assert director.update(world, 1900.0, 1) == []
        assert len(director.update(world, 1901.0, 1)) == 1

    def test_never_spawns_elites(self, world):
        director, _ = _director(pattern='cluster')
        for i in range(50):
            director.update(world, i * 2000.0, 10)
        assert world.count(EliteState) == 0
        assert world.count(Hostile) > 0


class TestSingle:
    def test_above_arena_inside_width(self, world):
        director, config = _director()
        (eid,) = director.spawn_single(world, 1)
        pos = world.get_component(eid, Position)
        assert pos.y < 0
        assert 0 < pos.x < config.width


class TestGrid:
    def test_spawns_block(self, world):
        director, config = _director(pattern='grid')
        (eid,) = director.update(world, 0.0, 1)
        rect = world.get_component(eid, RectCollider)
        assert (rect.width, rect.height) == (config.grid_cell_width, config.grid_cell_height)
        assert world.get_component(eid, Hostile).kind == 'block'

    def test_never_overlaps(self, world):
        director, _ = _director(pattern='grid')
        for _ in range(30):
            director.spawn_grid(world, 1)

        blocks = list(world.get_entities_with(RectCollider))
        for i, a in enumerate(blocks):
            for b in blocks[i + 1:]:
                assert not rects_overlap(*hostile_bounds(world, a), *hostile_bounds(world, b))

    def test_skips_when_every_column_blocked(self, world):
        director, config = _director(pattern='grid')
        columns = int(config.width // config.grid_cell_width)
        for column in range(columns):
            x = column * config.grid_cell_width + config.grid_cell_width / 2
            create_block(world, x, -config.grid_cell_height / 2, 1, config)
        before = world.entity_count()

        assert director.update(world, 0.0, 1) == []
        assert director.skipped == 1
        assert world.entity_count() == before

    def test_spacing_buffer(self, world):
        _, config = _director(pattern='grid')
        create_block(world, 30, 0, 1, config)
        # Neighbouring cell touches exactly; the spacing buffer rejects it
        assert not is_obstructed(world, 90, 0, 60, 30)
        assert is_obstructed(world, 90, 0, 60, 30, spacing=config.grid_spacing)


class TestCluster:
    def test_group_size_and_spread(self, world):
        director, config = _director(pattern='cluster')
        for seed in range(10):
            world.clear()
            director.rng = random.Random(seed)
            spawned = director.spawn_cluster(world, 1)
            assert config.cluster_min <= len(spawned) <= config.cluster_max

            xs = [world.get_component(eid, Position).x for eid in spawned]
            assert max(xs) - min(xs) <= config.cluster_spread * 2


class TestElite:
    def test_spawn_elite_centered(self, world):
        director, config = _director()
        eid = director.spawn_elite(world, 5)
        pos = world.get_component(eid, Position)
        assert pos.x == config.width / 2
        assert pos.y < 0
        assert world.get_component(eid, EliteState).phase == 'descend'


class TestKinds:
    def test_choose_kind_distribution(self):
        rng = random.Random(3)
        kinds = [choose_kind(rng) for _ in range(2000)]
        assert 0.5 < kinds.count('normal') / 2000 < 0.7
        assert 0.18 < kinds.count('tank') / 2000 < 0.32
        assert 0.09 < kinds.count('fast') / 2000 < 0.21

    @pytest.mark.parametrize("kind, level, hp", [
        ('normal', 1, 3), ('normal', 4, 6),
        ('tank', 1, 7), ('tank', 3, 11),
        ('fast', 1, 1), ('fast', 4, 3),
    ])
    def test_health_scaling(self, kind, level, hp):
        assert kind_stats(kind, level, GameConfig())['hp'] == hp
