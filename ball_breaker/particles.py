"""
Particle System
================
Visual-only particles: explosions and lightning links.

Particles carry no gameplay components, so nothing in the combat or
collision code can ever see them.
"""

import math
import random
from typing import Optional

from .ecs import World
from .components import (
    Position, Velocity, Renderable, Lifetime, ParticleTag, Gravity
)


EXPLOSION_COUNT = 15
EXPLOSION_LIFETIME = 30
LIGHTNING_SEGMENTS = 5
LIGHTNING_LIFETIME = 10
PARTICLE_GRAVITY = 0.2


def spawn_particle(
    world: World,
    x: float, y: float,
    vx: float, vy: float,
    color: str = '#ffffff',
    char: str = '.',
    lifetime: int = EXPLOSION_LIFETIME,
    gravity: float = PARTICLE_GRAVITY,
) -> int:
    """Spawn a single particle entity."""
    entity_id = world.create_entity()

    world.add_component(entity_id, Position(x, y))
    world.add_component(entity_id, Velocity(vx, vy))
    world.add_component(entity_id, Renderable(char=char, color=color, layer=1))
    world.add_component(entity_id, Lifetime(lifetime, lifetime))
    world.add_component(entity_id, ParticleTag())

    if gravity > 0:
        world.add_component(entity_id, Gravity(gravity))

    return entity_id


def spawn_explosion(
    world: World,
    x: float, y: float,
    color: str,
    rng: Optional[random.Random] = None,
    count: int = EXPLOSION_COUNT,
):
    """Ring of particles flung outward at random speeds."""
    rng = rng or random
    for i in range(count):
        angle = (math.pi * 2 * i) / count
        speed = 2 + rng.random() * 3
        spawn_particle(
            world, x, y,
            math.cos(angle) * speed, math.sin(angle) * speed,
            color=color,
            char=rng.choice(['*', '+', '.']),
        )


def spawn_lightning(world: World, x1: float, y1: float, x2: float, y2: float,
                    color: str = '#f7f740'):
    """Stationary sparks along a chain-lightning link."""
    for i in range(LIGHTNING_SEGMENTS + 1):
        t = i / LIGHTNING_SEGMENTS
        spawn_particle(
            world,
            x1 + (x2 - x1) * t, y1 + (y2 - y1) * t,
            0.0, 0.0,
            color=color,
            char='~',
            lifetime=LIGHTNING_LIFETIME,
            gravity=0.0,
        )


def particle_system(world: World):
    """Advance particles: gravity, drift, and lifetime expiry."""
    for entity_id, pos, vel, life, _ in world.query(Position, Velocity, Lifetime, ParticleTag):
        gravity = world.get_component(entity_id, Gravity)
        pos.x += vel.x
        pos.y += vel.y
        if gravity:
            vel.y += gravity.strength
        life.frames_remaining -= 1
        if life.frames_remaining <= 0:
            world.destroy_entity(entity_id)
