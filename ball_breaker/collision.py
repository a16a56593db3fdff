"""
Spatial Collision Resolver
===========================
Shape tests and per-frame overlap detection.

Detection never mutates the world. It returns every overlapping pair as a
Collision record and leaves the consequences to the combat pipeline, so a
projectile touching two hostiles yields two independent events.
"""

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Tuple

from .ecs import World
from .components import (
    Position, CircleCollider, RectCollider,
    Projectile, Hostile, Pickup, ExperienceOrb
)


class CollisionKind(Enum):
    PROJECTILE_HOSTILE = auto()
    AVATAR_HOSTILE = auto()
    AVATAR_PICKUP = auto()
    AVATAR_ORB = auto()


@dataclass(frozen=True)
class Collision:
    kind: CollisionKind
    first: int
    second: int


# =============================================================================
# SHAPE TESTS
# =============================================================================

def circles_collide(ax: float, ay: float, ar: float,
                    bx: float, by: float, br: float) -> bool:
    """Strict overlap: touching edges do not collide."""
    return math.hypot(ax - bx, ay - by) < ar + br


def closest_point_on_rect(px: float, py: float,
                          cx: float, cy: float,
                          width: float, height: float) -> Tuple[float, float]:
    """Clamp a point to a rectangle centered on (cx, cy)."""
    half_w = width / 2
    half_h = height / 2
    qx = max(cx - half_w, min(px, cx + half_w))
    qy = max(cy - half_h, min(py, cy + half_h))
    return qx, qy


def circle_rect_collide(px: float, py: float, radius: float,
                        cx: float, cy: float,
                        width: float, height: float) -> bool:
    qx, qy = closest_point_on_rect(px, py, cx, cy, width, height)
    return math.hypot(px - qx, py - qy) < radius


def rects_overlap(ax: float, ay: float, aw: float, ah: float,
                  bx: float, by: float, bw: float, bh: float) -> bool:
    """Overlap test for two center-anchored rectangles."""
    return (abs(ax - bx) * 2 < aw + bw) and (abs(ay - by) * 2 < ah + bh)


# =============================================================================
# ENTITY TESTS
# =============================================================================

def entities_collide(world: World, circle_id: int, other_id: int) -> bool:
    """
    Test a circular entity against another entity of either shape.

    Entities without a position or collider never collide.
    """
    pos = world.get_component(circle_id, Position)
    circle = world.get_component(circle_id, CircleCollider)
    other_pos = world.get_component(other_id, Position)
    if pos is None or circle is None or other_pos is None:
        return False

    rect = world.get_component(other_id, RectCollider)
    if rect is not None:
        return circle_rect_collide(pos.x, pos.y, circle.radius,
                                   other_pos.x, other_pos.y,
                                   rect.width, rect.height)

    other_circle = world.get_component(other_id, CircleCollider)
    if other_circle is None:
        return False
    return circles_collide(pos.x, pos.y, circle.radius,
                           other_pos.x, other_pos.y, other_circle.radius)


def detect_collisions(world: World, avatar_id: Optional[int] = None) -> List[Collision]:
    """
    Enumerate every overlapping pair for this frame.

    Order is deterministic: projectiles in creation order against hostiles
    in creation order, then the avatar against hostiles, pickups and orbs.
    Without an avatar only projectile pairs are reported.
    """
    collisions = []

    hostiles = list(world.get_entities_with(Position, Hostile))

    for proj_id in world.get_entities_with(Position, CircleCollider, Projectile):
        for hostile_id in hostiles:
            if entities_collide(world, proj_id, hostile_id):
                collisions.append(
                    Collision(CollisionKind.PROJECTILE_HOSTILE, proj_id, hostile_id))

    if avatar_id is None or not world.is_alive(avatar_id):
        return collisions

    for hostile_id in hostiles:
        if entities_collide(world, avatar_id, hostile_id):
            collisions.append(Collision(CollisionKind.AVATAR_HOSTILE, avatar_id, hostile_id))

    for pickup_id in world.get_entities_with(Position, Pickup):
        if entities_collide(world, avatar_id, pickup_id):
            collisions.append(Collision(CollisionKind.AVATAR_PICKUP, avatar_id, pickup_id))

    for orb_id in world.get_entities_with(Position, ExperienceOrb):
        if entities_collide(world, avatar_id, orb_id):
            collisions.append(Collision(CollisionKind.AVATAR_ORB, avatar_id, orb_id))

    return collisions
