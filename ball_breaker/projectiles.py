"""
Projectile System
==================
Projectile spawning, volleys, and leaving the play area.
"""

import math
from typing import List

from .ecs import World
from .archetypes import get_archetype
from .components import (
    Position, Velocity, CircleCollider, Renderable, Projectile
)
from .config import GameConfig
from .upgrades import PlayerUpgrades


def spawn_projectile(
    world: World,
    x: float, y: float,
    angle: float,
    archetype_key: str,
    upgrades: PlayerUpgrades,
    config: GameConfig,
) -> int:
    """Spawn one projectile flying at `angle` (radians, screen coordinates)."""
    archetype = get_archetype(archetype_key)
    speed = archetype.speed * upgrades.speed_multiplier
    eid = world.create_entity()

    world.add_component(eid, Position(x, y))
    world.add_component(eid, Velocity(math.cos(angle) * speed, math.sin(angle) * speed))
    world.add_component(eid, CircleCollider(config.projectile_radius))
    world.add_component(eid, Renderable(char='o', color=archetype.color, layer=8))
    world.add_component(eid, Projectile(
        archetype=archetype.key,
        damage=archetype.damage,
        effect=archetype.effect,
        color=archetype.color,
    ))

    return eid


def volley_angles(base_angle: float, count: int, spread: float) -> List[float]:
    """Fan of `count` angles, `spread` apart, centered on `base_angle`."""
    if count <= 1:
        return [base_angle]
    return [base_angle + (i - (count - 1) / 2) * spread for i in range(count)]


def fire_volley(
    world: World,
    x: float, y: float,
    aim_x: float, aim_y: float,
    archetype_key: str,
    upgrades: PlayerUpgrades,
    config: GameConfig,
) -> List[int]:
    """Fire 1 + multishot projectiles from the muzzle point along the aim."""
    if aim_x == 0 and aim_y == 0:
        aim_y = -1.0
    length = math.hypot(aim_x, aim_y)
    aim_x, aim_y = aim_x / length, aim_y / length

    muzzle_x = x + aim_x * config.muzzle_offset
    muzzle_y = y + aim_y * config.muzzle_offset
    base_angle = math.atan2(aim_y, aim_x)

    return [
        spawn_projectile(world, muzzle_x, muzzle_y, angle, archetype_key, upgrades, config)
        for angle in volley_angles(base_angle, 1 + upgrades.multishot, config.multishot_spread)
    ]


def projectile_bounds_system(world: World, config: GameConfig) -> List[int]:
    """Deactivate projectiles that left the arena. Returns their IDs."""
    gone = []
    for proj_id, pos, circle, _ in world.query(Position, CircleCollider, Projectile):
        r = circle.radius
        if pos.x < -r or pos.x > config.width + r or pos.y < -r or pos.y > config.height + r:
            world.destroy_entity(proj_id)
            gone.append(proj_id)
    return gone
