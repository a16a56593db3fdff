"""
Game Configuration
===================
Every tuning constant of the simulation lives on GameConfig so game modes
and tests can override them without touching the systems.
"""

import math
import os
from dataclasses import dataclass, fields
from typing import Optional


FRAME_MS = 1000.0 / 60.0

# Spawn patterns used by the spawn director
SPAWN_SINGLE = 'single'
SPAWN_GRID = 'grid'
SPAWN_CLUSTER = 'cluster'
SPAWN_PATTERNS = (SPAWN_SINGLE, SPAWN_GRID, SPAWN_CLUSTER)


@dataclass
class GameConfig:
    """Tunable constants for one simulation instance."""

    # Arena
    width: float = 800.0
    height: float = 600.0
    frame_ms: float = FRAME_MS
    seed: Optional[int] = None

    # Avatar
    avatar_radius: float = 20.0
    avatar_speed: float = 5.0
    avatar_start_offset: float = 80.0  # distance from the bottom edge
    avatar_max_hp: float = 100.0
    arrive_distance: float = 2.0

    # Fire control
    fire_interval_ms: float = 800.0
    projectile_radius: float = 8.0
    muzzle_offset: float = 20.0
    multishot_spread: float = math.pi / 8
    auto_fire: bool = True

    # Hostiles
    hostile_radius: float = 15.0
    hostile_speed: float = 1.0
    contact_damage: float = 10.0
    breach_damage: float = 20.0

    # Spawn director
    spawn_pattern: str = SPAWN_SINGLE
    spawn_interval_ms: float = 2000.0
    spawn_interval_step_ms: float = 100.0
    min_spawn_interval_ms: float = 500.0
    grid_cell_width: float = 60.0
    grid_cell_height: float = 30.0
    grid_spacing: float = 10.0
    grid_spawn_attempts: int = 5
    cluster_min: int = 2
    cluster_max: int = 4
    cluster_spread: float = 40.0

    # Elites
    boss_interval: int = 5
    elite_patrol_y: float = 120.0

    # Combat effects
    chain_range: float = 100.0
    chain_max_targets: int = 3
    splash_radius: float = 50.0

    # Drops
    pickup_drop_chance: float = 0.15
    pickup_heal: float = 10.0
    pickup_score: int = 50
    pickup_speed: float = 2.0
    pickup_radius: float = 12.0
    orb_radius: float = 6.0
    orb_speed: float = 1.0
    orb_magnet_range: float = 80.0
    orb_magnet_speed: float = 4.0
    orb_scatter: float = 12.0

    # Progression
    wave_duration_ms: float = 30000.0
    xp_threshold: int = 10
    xp_growth: float = 1.5
    level_up_heal_fraction: float = 0.1
    upgrade_choice_count: int = 3

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f'arena must have a positive size, got {self.width}x{self.height}')
        if self.frame_ms <= 0:
            raise ValueError(f'frame_ms must be positive, got {self.frame_ms}')
        if self.spawn_pattern not in SPAWN_PATTERNS:
            raise ValueError(
                f'unknown spawn pattern {self.spawn_pattern!r}, '
                f'expected one of {", ".join(SPAWN_PATTERNS)}'
            )
        if not 0.0 <= self.pickup_drop_chance <= 1.0:
            raise ValueError(f'pickup_drop_chance must be in [0, 1], got {self.pickup_drop_chance}')
        if self.xp_growth <= 1.0:
            raise ValueError(f'xp_growth must be greater than 1, got {self.xp_growth}')
        if self.xp_threshold <= 0:
            raise ValueError(f'xp_threshold must be positive, got {self.xp_threshold}')
        if self.boss_interval <= 0:
            raise ValueError(f'boss_interval must be positive, got {self.boss_interval}')
        if self.cluster_min < 1 or self.cluster_max < self.cluster_min:
            raise ValueError(f'invalid cluster size range {self.cluster_min}..{self.cluster_max}')
        if self.upgrade_choice_count < 1:
            raise ValueError('upgrade_choice_count must be at least 1')


def config_from_env(prefix: str = 'BALL_BREAKER_', **overrides) -> GameConfig:
    """
    Build a GameConfig from environment variables.

    Any field can be set as PREFIX + FIELD_NAME in upper case, e.g.
    BALL_BREAKER_SEED=7 or BALL_BREAKER_SPAWN_PATTERN=grid. Explicit
    keyword overrides win over the environment.
    """
    values = {}
    for f in fields(GameConfig):
        raw = os.environ.get(prefix + f.name.upper())
        if raw is None:
            continue
        if f.name == 'seed':
            values[f.name] = int(raw)
        elif f.name == 'spawn_pattern':
            values[f.name] = raw.strip().lower()
        elif f.name == 'auto_fire':
            values[f.name] = raw.strip().lower() in ('1', 'true', 'yes', 'on')
        elif isinstance(f.default, int) and not isinstance(f.default, bool):
            values[f.name] = int(raw)
        else:
            values[f.name] = float(raw)
    values.update(overrides)
    return GameConfig(**values)
