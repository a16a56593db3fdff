"""
Spawn Director
===============
Timed hostile spawning with three placement patterns:

    single   - one hostile at a random unobstructed x position
    grid     - one grid-sized block in a free column
    cluster  - 2-4 hostiles scattered around a shared anchor

The interval shrinks with the wave level down to a floor. Elites are not
spawned here; the progression rules place them at wave boundaries.
"""

import random
from typing import List, Optional, Tuple

from loguru import logger

from .ecs import World
from .components import Position, CircleCollider, RectCollider, Hostile
from .collision import rects_overlap
from .config import GameConfig, SPAWN_GRID, SPAWN_CLUSTER
from .hostiles import choose_kind, create_hostile, create_block, create_elite, kind_stats


def hostile_bounds(world: World, entity_id: int) -> Optional[Tuple[float, float, float, float]]:
    """Center and size of a hostile's bounding rectangle."""
    pos = world.get_component(entity_id, Position)
    if pos is None:
        return None
    rect = world.get_component(entity_id, RectCollider)
    if rect is not None:
        return pos.x, pos.y, rect.width, rect.height
    circle = world.get_component(entity_id, CircleCollider)
    if circle is not None:
        return pos.x, pos.y, circle.radius * 2, circle.radius * 2
    return None


def is_obstructed(world: World, x: float, y: float, width: float, height: float,
                  spacing: float = 0.0) -> bool:
    """True if a box (grown by `spacing`) would overlap any active hostile."""
    for entity_id in world.get_entities_with(Position, Hostile):
        bounds = hostile_bounds(world, entity_id)
        if bounds is None:
            continue
        bx, by, bw, bh = bounds
        if rects_overlap(x, y, width + spacing * 2, height + spacing * 2, bx, by, bw, bh):
            return True
    return False


class SpawnDirector:
    """Decides when and where new hostiles enter the arena."""

    def __init__(self, config: GameConfig, rng: Optional[random.Random] = None):
        self.config = config
        self.rng = rng or random.Random()
        self.last_spawn_at: Optional[float] = None
        self.skipped = 0

    def reset(self):
        self.last_spawn_at = None
        self.skipped = 0

    def interval(self, level: int) -> float:
        """Spawn interval for a wave level, never below the floor."""
        cfg = self.config
        return max(cfg.min_spawn_interval_ms,
                   cfg.spawn_interval_ms - level * cfg.spawn_interval_step_ms)

    def update(self, world: World, now: float, level: int) -> List[int]:
        """Spawn if the interval has elapsed. Returns the new entity IDs."""
        if self.last_spawn_at is not None and now - self.last_spawn_at <= self.interval(level):
            return []
        self.last_spawn_at = now

        pattern = self.config.spawn_pattern
        if pattern == SPAWN_GRID:
            spawned = self.spawn_grid(world, level)
        elif pattern == SPAWN_CLUSTER:
            spawned = self.spawn_cluster(world, level)
        else:
            spawned = self.spawn_single(world, level)

        if not spawned:
            self.skipped += 1
            logger.debug('Spawn skipped at {:.0f}ms: no free position ({})', now, pattern)
        return spawned

    # -------------------------------------------------------------------------
    # Patterns
    # -------------------------------------------------------------------------

    def spawn_single(self, world: World, level: int) -> List[int]:
        cfg = self.config
        kind = choose_kind(self.rng)
        radius = kind_stats(kind, level, cfg)['radius']
        y = -radius

        for _ in range(cfg.grid_spawn_attempts):
            x = radius + self.rng.random() * (cfg.width - radius * 2)
            if not is_obstructed(world, x, y, radius * 2, radius * 2):
                return [create_hostile(world, x, y, kind, level, cfg)]
        return []

    def spawn_grid(self, world: World, level: int) -> List[int]:
        """Try random free columns; give up after the attempt budget."""
        cfg = self.config
        columns = max(1, int(cfg.width // cfg.grid_cell_width))
        candidates = self.rng.sample(range(columns), min(columns, cfg.grid_spawn_attempts))
        y = -cfg.grid_cell_height / 2

        for column in candidates:
            x = column * cfg.grid_cell_width + cfg.grid_cell_width / 2
            if is_obstructed(world, x, y, cfg.grid_cell_width, cfg.grid_cell_height,
                             spacing=cfg.grid_spacing):
                continue
            return [create_block(world, x, y, level, cfg)]
        return []

    def spawn_cluster(self, world: World, level: int) -> List[int]:
        cfg = self.config
        count = self.rng.randint(cfg.cluster_min, cfg.cluster_max)
        margin = cfg.cluster_spread + cfg.hostile_radius
        anchor_x = margin + self.rng.random() * max(0.0, cfg.width - margin * 2)
        anchor_y = -cfg.hostile_radius

        spawned = []
        for _ in range(count):
            kind = choose_kind(self.rng)
            x = anchor_x + self.rng.uniform(-cfg.cluster_spread, cfg.cluster_spread)
            y = anchor_y - self.rng.uniform(0.0, cfg.cluster_spread)
            spawned.append(create_hostile(world, x, y, kind, level, cfg))
        return spawned

    def spawn_elite(self, world: World, level: int) -> int:
        cfg = self.config
        entity_id = create_elite(world, cfg.width / 2, -35.0, level, cfg)
        logger.info('Elite {} spawned for level {}', entity_id, level)
        return entity_id
