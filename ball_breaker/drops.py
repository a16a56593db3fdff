"""
Drops
======
Power-up pickups and experience orbs left behind by dead hostiles.
"""

import math
import random
from typing import List, Optional

from .ecs import World
from .components import (
    Position, Velocity, CircleCollider, Renderable, Pickup, ExperienceOrb, Hostile
)
from .config import GameConfig


def create_pickup(world: World, x: float, y: float, config: GameConfig) -> int:
    entity_id = world.create_entity()

    world.add_component(entity_id, Position(x, y))
    world.add_component(entity_id, Velocity(0.0, config.pickup_speed))
    world.add_component(entity_id, CircleCollider(config.pickup_radius))
    world.add_component(entity_id, Renderable(char='*', color='#ffd700', layer=4))
    world.add_component(entity_id, Pickup(heal=config.pickup_heal, score=config.pickup_score))

    return entity_id


def create_orb(world: World, x: float, y: float, value: int, config: GameConfig) -> int:
    entity_id = world.create_entity()

    world.add_component(entity_id, Position(x, y))
    world.add_component(entity_id, Velocity(0.0, config.orb_speed))
    world.add_component(entity_id, CircleCollider(config.orb_radius))
    world.add_component(entity_id, Renderable(char='.', color='#7cff6b', layer=3))
    world.add_component(entity_id, ExperienceOrb(
        value=value,
        magnet_range=config.orb_magnet_range,
        magnet_speed=config.orb_magnet_speed,
    ))

    return entity_id


def drop_loot(world: World, x: float, y: float, hostile: Hostile,
              config: GameConfig, rng: Optional[random.Random] = None) -> List[dict]:
    """
    Roll the pickup chance and scatter the hostile's experience orbs.

    Orbs are spread evenly on a small ring so they don't stack.
    """
    rng = rng or random
    events = []

    if rng.random() < config.pickup_drop_chance:
        pickup_id = create_pickup(world, x, y, config)
        events.append({'type': 'pickup_dropped', 'entity': pickup_id, 'x': x, 'y': y})

    count = hostile.orb_count
    for i in range(count):
        if count > 1:
            angle = (math.pi * 2 * i) / count
            ox = x + math.cos(angle) * config.orb_scatter
            oy = y + math.sin(angle) * config.orb_scatter
        else:
            ox, oy = x, y
        orb_id = create_orb(world, ox, oy, hostile.orb_value, config)
        events.append({'type': 'orb_dropped', 'entity': orb_id,
                       'value': hostile.orb_value, 'x': ox, 'y': oy})

    return events
