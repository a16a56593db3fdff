"""
Combat Resolution
==================
Turns detected collisions into damage, elemental effects, pierce
bookkeeping, death payouts and pickups.

Every mutation checks `world.is_alive` first. Dead entities stay in the
world until the end-of-frame compaction, so later pairs in the same frame
still see them, but they can no longer be hit or pay out twice.
"""

import math
import random
from typing import List, Optional

from loguru import logger

from .ecs import World
from .archetypes import EffectKind
from .collision import Collision, CollisionKind
from .components import (
    Position, Health, Hostile, Projectile, Pickup, ExperienceOrb
)
from .config import GameConfig
from .drops import drop_loot
from .particles import spawn_explosion, spawn_lightning
from .status_effects import apply_burn, apply_slow
from .upgrades import PlayerUpgrades


AVATAR_HIT_COLOR = '#ff6b6b'
PICKUP_COLOR = '#ffd700'
SPLASH_COLOR = '#ff8800'


def splash_damage(damage: float, distance: float, radius: float) -> float:
    """Linear falloff: full damage at the center, zero at the radius."""
    if radius <= 0 or distance >= radius:
        return 0.0
    return damage * (1.0 - distance / radius)


class CombatPipeline:
    """
    Applies the consequences of collisions for one simulation.

    `progression` receives score, kill and experience updates; it only
    needs `record_kill(score)`, `add_score(points)` and
    `add_experience(amount)`.
    """

    def __init__(self, world: World, config: GameConfig, upgrades: PlayerUpgrades,
                 progression, rng: Optional[random.Random] = None):
        self.world = world
        self.config = config
        self.upgrades = upgrades
        self.progression = progression
        self.rng = rng or random.Random()
        self.events: List[dict] = []

    def drain_events(self) -> List[dict]:
        events, self.events = self.events, []
        return events

    # -------------------------------------------------------------------------
    # Collision dispatch
    # -------------------------------------------------------------------------

    def resolve(self, collisions: List[Collision], now: float) -> List[dict]:
        """Resolve this frame's collisions in detection order."""
        for collision in collisions:
            if not (self.world.is_alive(collision.first)
                    and self.world.is_alive(collision.second)):
                continue

            if collision.kind == CollisionKind.PROJECTILE_HOSTILE:
                self.projectile_hit(collision.first, collision.second, now)
            elif collision.kind == CollisionKind.AVATAR_HOSTILE:
                self.avatar_contact(collision.first, collision.second)
            elif collision.kind == CollisionKind.AVATAR_PICKUP:
                self.collect_pickup(collision.first, collision.second)
            elif collision.kind == CollisionKind.AVATAR_ORB:
                self.collect_orb(collision.second)

        return self.drain_events()

    # -------------------------------------------------------------------------
    # Projectile hits
    # -------------------------------------------------------------------------

    def projectile_hit(self, proj_id: int, hostile_id: int, now: float):
        world = self.world
        proj = world.get_component(proj_id, Projectile)
        pos = world.get_component(hostile_id, Position)
        if proj is None or pos is None:
            return
        if hostile_id in proj.hit_entities:
            return

        impact_x, impact_y = pos.x, pos.y
        damage = proj.damage * self.upgrades.damage_multiplier
        self.damage_hostile(hostile_id, damage)
        self.events.append({'type': 'projectile_hit', 'projectile': proj_id,
                            'target': hostile_id, 'damage': damage})

        effect = proj.effect
        if effect == EffectKind.NONE:
            pass
        elif effect == EffectKind.BURN:
            apply_burn(world, hostile_id, now)
        elif effect == EffectKind.SLOW:
            apply_slow(world, hostile_id, now)
        elif effect == EffectKind.CHAIN:
            self.chain_lightning(hostile_id, impact_x, impact_y)
        elif effect == EffectKind.SPLASH:
            self.explode(impact_x, impact_y, damage)

        proj.hit_entities.append(hostile_id)
        if self.upgrades.pierce_count == 0:
            world.destroy_entity(proj_id)
        else:
            proj.hit_count += 1
            if proj.hit_count > self.upgrades.pierce_count:
                world.destroy_entity(proj_id)

    def chain_lightning(self, source_id: int, x: float, y: float) -> List[int]:
        """
        Arc to the nearest other hostiles in range, nearest first, ties
        broken by entity age. Each link deals the bare damage multiplier.
        """
        candidates = []
        for entity_id, pos, _ in self.world.query(Position, Hostile):
            if entity_id == source_id:
                continue
            distance = math.hypot(pos.x - x, pos.y - y)
            if distance < self.config.chain_range:
                candidates.append((distance, entity_id, pos.x, pos.y))

        candidates.sort(key=lambda c: (c[0], c[1]))
        struck = []
        for _, entity_id, tx, ty in candidates[:self.config.chain_max_targets]:
            self.damage_hostile(entity_id, self.upgrades.damage_multiplier)
            spawn_lightning(self.world, x, y, tx, ty)
            self.events.append({'type': 'chain_link', 'source': source_id,
                                'target': entity_id, 'from': (x, y), 'to': (tx, ty)})
            struck.append(entity_id)
        return struck

    def explode(self, x: float, y: float, damage: float):
        """Damage every active hostile around the impact point with falloff."""
        radius = self.config.splash_radius
        for entity_id, pos, _ in self.world.query(Position, Hostile):
            distance = math.hypot(pos.x - x, pos.y - y)
            amount = splash_damage(damage, distance, radius)
            if amount > 0:
                self.damage_hostile(entity_id, amount)
        spawn_explosion(self.world, x, y, SPLASH_COLOR, self.rng)
        self.events.append({'type': 'explosion', 'x': x, 'y': y, 'radius': radius})

    # -------------------------------------------------------------------------
    # Damage and death
    # -------------------------------------------------------------------------

    def damage_hostile(self, entity_id: int, amount: float) -> bool:
        """Apply damage; returns True if this call killed the hostile."""
        if not self.world.is_alive(entity_id):
            return False
        health = self.world.get_component(entity_id, Health)
        if health is None:
            return False
        health.current = max(0.0, health.current - amount)
        if health.current <= 0:
            return self.kill_hostile(entity_id)
        return False

    def kill_hostile(self, entity_id: int) -> bool:
        """Deactivate a hostile and pay out exactly once."""
        hostile = self.world.get_component(entity_id, Hostile)
        pos = self.world.get_component(entity_id, Position)
        if hostile is None or pos is None:
            return False
        if not self.world.destroy_entity(entity_id):
            return False

        self.progression.record_kill(hostile.score_value)
        spawn_explosion(self.world, pos.x, pos.y, hostile.color, self.rng)
        self.events.extend(drop_loot(self.world, pos.x, pos.y, hostile, self.config, self.rng))
        self.events.append({'type': 'hostile_killed', 'entity': entity_id,
                            'kind': hostile.kind, 'score': hostile.score_value,
                            'x': pos.x, 'y': pos.y})
        logger.debug('Hostile {} ({}) killed at ({:.0f}, {:.0f})',
                     entity_id, hostile.kind, pos.x, pos.y)
        return True

    # -------------------------------------------------------------------------
    # Avatar interactions
    # -------------------------------------------------------------------------

    def damage_avatar(self, avatar_id: int, amount: float):
        health = self.world.get_component(avatar_id, Health)
        if health is None:
            return
        health.current = max(0.0, health.current - amount)
        self.events.append({'type': 'avatar_damaged', 'amount': amount,
                            'health': health.current})

    def avatar_contact(self, avatar_id: int, hostile_id: int):
        """Contact damage: the hostile is consumed, no payout."""
        pos = self.world.get_component(hostile_id, Position)
        if not self.world.destroy_entity(hostile_id):
            return
        damage = self.config.contact_damage
        self.damage_avatar(avatar_id, damage)
        if pos is not None:
            spawn_explosion(self.world, pos.x, pos.y, AVATAR_HIT_COLOR, self.rng)
        self.events.append({'type': 'contact', 'entity': hostile_id, 'damage': damage})

    def hostile_breach(self, avatar_id: Optional[int], hostile_id: int):
        """A hostile slipped past the bottom edge."""
        if not self.world.destroy_entity(hostile_id):
            return
        if avatar_id is not None and self.world.is_alive(avatar_id):
            self.damage_avatar(avatar_id, self.config.breach_damage)
        self.events.append({'type': 'breach', 'entity': hostile_id,
                            'damage': self.config.breach_damage})

    def collect_pickup(self, avatar_id: int, pickup_id: int):
        pickup = self.world.get_component(pickup_id, Pickup)
        pos = self.world.get_component(pickup_id, Position)
        if pickup is None or not self.world.destroy_entity(pickup_id):
            return
        health = self.world.get_component(avatar_id, Health)
        if health is not None:
            health.current = min(health.maximum, health.current + pickup.heal)
        self.progression.add_score(pickup.score)
        if pos is not None:
            spawn_explosion(self.world, pos.x, pos.y, PICKUP_COLOR, self.rng)
        self.events.append({'type': 'pickup_collected', 'entity': pickup_id,
                            'heal': pickup.heal, 'score': pickup.score})

    def collect_orb(self, orb_id: int):
        orb = self.world.get_component(orb_id, ExperienceOrb)
        if orb is None or not self.world.destroy_entity(orb_id):
            return
        self.progression.add_experience(orb.value)
        self.events.append({'type': 'orb_collected', 'entity': orb_id, 'value': orb.value})
