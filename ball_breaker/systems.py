"""
ECS Systems
============
Per-frame movement and boundary systems. Each system queries the World
for entities with the required components and updates them.
"""

import math
from typing import List, Optional

from .ecs import World
from .combat import CombatPipeline
from .components import (
    Position, Velocity, CircleCollider, StatusEffects, Hostile, EliteState,
    Pickup, ExperienceOrb, ParticleTag
)
from .config import GameConfig
from .status_effects import speed_multiplier


# =============================================================================
# PHYSICS SYSTEMS
# =============================================================================

def movement_system(world: World, dt: float = 1.0):
    """
    Integrate positions from velocities.

    A slowed hostile moves at the slow multiplier for this frame only; its
    stored velocity is left untouched. Particles move in particle_system.
    """
    for entity_id, pos, vel in world.query(Position, Velocity):
        if world.has_component(entity_id, ParticleTag):
            continue
        scale = speed_multiplier(world.get_component(entity_id, StatusEffects))
        pos.x += vel.x * scale * dt
        pos.y += vel.y * scale * dt


def elite_system(world: World, config: GameConfig):
    """
    Steer elites: descend to the patrol line, then sweep sideways and
    reverse at the arena walls.
    """
    for entity_id, pos, vel, elite, circle in world.query(
        Position, Velocity, EliteState, CircleCollider
    ):
        if elite.phase == 'descend':
            if pos.y >= elite.patrol_y:
                pos.y = elite.patrol_y
                elite.phase = 'patrol'
            else:
                vel.x = 0.0
                vel.y = world.get_component(entity_id, Hostile).speed
                continue

        r = circle.radius
        if pos.x - r <= 0:
            elite.direction = 1.0
        elif pos.x + r >= config.width:
            elite.direction = -1.0
        vel.x = elite.patrol_speed * elite.direction
        vel.y = 0.0


def orb_magnet_system(world: World, avatar_id: Optional[int], config: GameConfig):
    """Pull orbs within magnet range toward the avatar; others fall."""
    avatar_pos = None
    if avatar_id is not None and world.is_alive(avatar_id):
        avatar_pos = world.get_component(avatar_id, Position)

    for _, pos, vel, orb in world.query(Position, Velocity, ExperienceOrb):
        if avatar_pos is not None:
            dx = avatar_pos.x - pos.x
            dy = avatar_pos.y - pos.y
            distance = math.hypot(dx, dy)
            if 0 < distance < orb.magnet_range:
                vel.x = dx / distance * orb.magnet_speed
                vel.y = dy / distance * orb.magnet_speed
                continue
        vel.x = 0.0
        vel.y = config.orb_speed


# =============================================================================
# BOUNDARY SYSTEMS
# =============================================================================

def hostile_breach_system(world: World, avatar_id: Optional[int],
                          pipeline: CombatPipeline, config: GameConfig) -> List[int]:
    """
    Hostiles that pass the bottom edge breach the defence and hurt the
    avatar. Elites never breach. Returns the breached hostile IDs.
    """
    breached = []
    for entity_id, pos, _ in world.query(Position, Hostile):
        if world.has_component(entity_id, EliteState):
            continue
        if pos.y > config.height:
            pipeline.hostile_breach(avatar_id, entity_id)
            breached.append(entity_id)
    return breached


def collectible_bounds_system(world: World, config: GameConfig):
    """Deactivate pickups and orbs that fell off the bottom edge."""
    for entity_id, pos, circle in world.query(Position, CircleCollider):
        if not (world.has_component(entity_id, Pickup)
                or world.has_component(entity_id, ExperienceOrb)):
            continue
        if pos.y - circle.radius > config.height:
            world.destroy_entity(entity_id)
