"""
Simulation Loop
================
One Simulation owns a run: the World, the logical clock, the spawn
director, progression and the upgrade record. Front-ends drive it with
`tick(controls)` once per frame and read `snapshot()` for rendering.

Frame order:
    controls -> avatar movement -> fire control -> spawn -> status effects
    -> steering and movement -> bounds -> detect -> resolve
    -> progression checks -> compact

Nothing advances outside the playing phase, including the clock.
"""

import random
from typing import List, Optional

from loguru import logger

from .ecs import World
from .avatar import (
    Controls, create_avatar, apply_controls, avatar_movement_system, fire_control
)
from .collision import detect_collisions
from .combat import CombatPipeline
from .components import (
    Position, CircleCollider, RectCollider, Renderable, Health, StatusEffects,
    AvatarControl, Hostile, Projectile, Pickup, ExperienceOrb, ParticleTag, Lifetime
)
from .config import GameConfig
from .particles import particle_system
from .progression import (
    Progression, SimulationClock, PHASE_START, PHASE_PLAYING, PHASE_UPGRADE
)
from .projectiles import projectile_bounds_system
from .spawner import SpawnDirector
from .status_effects import status_effect_system
from .systems import (
    movement_system, elite_system, orb_magnet_system,
    hostile_breach_system, collectible_bounds_system
)
from .upgrades import PlayerUpgrades, apply_upgrade, describe_upgrade


class Simulation:
    """A single run of the game, independent of any display."""

    def __init__(self, config: Optional[GameConfig] = None):
        self.config = config or GameConfig()
        self.rng = random.Random(self.config.seed)
        self.world = World()
        self.clock = SimulationClock()
        self.upgrades = PlayerUpgrades()
        self.progression = Progression(self.config, self.rng)
        self.progression.on_level_up = self._level_up_heal
        self.director = SpawnDirector(self.config, self.rng)
        self.pipeline = CombatPipeline(self.world, self.config, self.upgrades,
                                       self.progression, self.rng)
        self.avatar_id: Optional[int] = None
        self.frame = 0
        self.events: List[dict] = []
        # Toggled at runtime; the config only supplies the starting value
        self.auto_fire = self.config.auto_fire

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> str:
        return self.progression.phase

    @property
    def now(self) -> float:
        return self.clock.now

    def reset(self):
        """Drop the current run and return to the start phase."""
        self.world.clear()
        self.clock.reset()
        self.upgrades = PlayerUpgrades()
        self.pipeline.upgrades = self.upgrades
        self.pipeline.drain_events()
        self.progression.reset()
        self.director.reset()
        self.avatar_id = None
        self.frame = 0
        self.events = []

    def start(self):
        """Begin a fresh run."""
        if self.phase != PHASE_START:
            self.reset()
        self.avatar_id = create_avatar(self.world, self.config)
        self.progression.start(self.clock.now)
        self._emit({'type': 'phase', 'phase': PHASE_PLAYING})

    def toggle_auto_fire(self) -> bool:
        self.auto_fire = not self.auto_fire
        logger.debug('Auto-fire {}', 'on' if self.auto_fire else 'off')
        return self.auto_fire

    def drain_events(self) -> List[dict]:
        events, self.events = self.events, []
        return events

    def _emit(self, event: dict):
        self.events.append(event)

    # -------------------------------------------------------------------------
    # Frame
    # -------------------------------------------------------------------------

    def tick(self, controls: Optional[Controls] = None) -> List[dict]:
        """Advance one frame. Returns the events produced by this frame."""
        if self.phase != PHASE_PLAYING:
            return []

        world = self.world
        cfg = self.config
        controls = controls or Controls()
        now = self.clock.advance(cfg.frame_ms)
        self.frame += 1
        first_event = len(self.events)

        apply_controls(world, self.avatar_id, controls)
        avatar_movement_system(world, cfg)
        fire_control(world, self.avatar_id, now, cfg, self.upgrades,
                     controls.fire, self.auto_fire)
        self.director.update(world, now, self.progression.level)

        self.events.extend(status_effect_system(world, now, self.pipeline.damage_hostile))

        elite_system(world, cfg)
        orb_magnet_system(world, self.avatar_id, cfg)
        movement_system(world)
        particle_system(world)

        projectile_bounds_system(world, cfg)
        hostile_breach_system(world, self.avatar_id, self.pipeline, cfg)
        collectible_bounds_system(world, cfg)

        collisions = detect_collisions(world, self.avatar_id)
        self.events.extend(self.pipeline.resolve(collisions, now))

        self._progression_checks(now)
        world.compact()

        return self.events[first_event:]

    def _progression_checks(self, now: float):
        progression = self.progression

        health = self._avatar_health()
        if health is not None and health.current <= 0:
            progression.game_over()
            self._emit({'type': 'gameover', 'score': progression.score,
                        'wave': progression.level, 'level': progression.player_level})
            return

        if progression.check_wave(now):
            self._emit({'type': 'wave_complete', 'wave': progression.level})
            if progression.elite_due():
                elite_id = self.director.spawn_elite(self.world, progression.level)
                self._emit({'type': 'elite_spawned', 'entity': elite_id,
                            'wave': progression.level})

        choices = progression.begin_upgrade()
        if choices:
            self._emit_upgrade_choices()

    def _emit_upgrade_choices(self):
        self._emit({'type': 'upgrade',
                    'choices': [describe_upgrade(u) for u in self.progression.upgrade_choices]})

    def _avatar_health(self) -> Optional[Health]:
        if self.avatar_id is None:
            return None
        return self.world.get_component(self.avatar_id, Health)

    def _level_up_heal(self, player_level: int):
        health = self._avatar_health()
        if health is None:
            return
        heal = health.maximum * self.config.level_up_heal_fraction
        health.current = min(health.maximum, health.current + heal)

    # -------------------------------------------------------------------------
    # Upgrade selection
    # -------------------------------------------------------------------------

    def choose_upgrade(self, index: int) -> bool:
        """Pick one of the offered upgrades. Returns False if not allowed now."""
        upgrade_id = self.progression.choose(index)
        if upgrade_id is None:
            logger.debug('Ignored upgrade choice {} in phase {}', index, self.phase)
            return False

        apply_upgrade(self.world, self.avatar_id, self.upgrades, upgrade_id)
        self._emit({'type': 'upgrade_chosen', 'upgrade': upgrade_id})
        if self.phase == PHASE_UPGRADE:
            self._emit_upgrade_choices()
        else:
            self._emit({'type': 'phase', 'phase': PHASE_PLAYING})
        return True

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def snapshot(self) -> dict:
        """Renderable entity state plus HUD values for the current frame."""
        world = self.world
        entities = []

        for entity_id, pos, rend in world.query(Position, Renderable):
            entry = {
                'id': entity_id,
                'kind': self._entity_kind(entity_id),
                'x': pos.x,
                'y': pos.y,
                'char': rend.char,
                'color': rend.color,
                'layer': rend.layer,
            }
            circle = world.get_component(entity_id, CircleCollider)
            rect = world.get_component(entity_id, RectCollider)
            if rect is not None:
                entry['width'], entry['height'] = rect.width, rect.height
            elif circle is not None:
                entry['radius'] = circle.radius

            health = world.get_component(entity_id, Health)
            if health is not None:
                entry['health'] = health.fraction
            status = world.get_component(entity_id, StatusEffects)
            if status is not None:
                entry['burning'] = status.burning
                entry['slowed'] = status.slowed
            life = world.get_component(entity_id, Lifetime)
            if life is not None:
                entry['life'] = life.frames_remaining / max(1, life.frames_total)
            entities.append(entry)

        entities.sort(key=lambda e: e['layer'])

        progression = self.progression
        health = self._avatar_health()
        control = (world.get_component(self.avatar_id, AvatarControl)
                   if self.avatar_id is not None else None)

        return {
            'phase': progression.phase,
            'time': self.clock.now,
            'entities': entities,
            'hud': {
                'score': progression.score,
                'wave': progression.level,
                'level': progression.player_level,
                'kills': progression.kills,
                'health': health.current if health else 0.0,
                'max_health': health.maximum if health else 0.0,
                'experience': progression.experience,
                'xp_to_next': progression.xp_to_next,
                'xp_fraction': progression.xp_fraction,
                'wave_fraction': min(1.0, progression.wave_elapsed(self.clock.now)
                                     / self.config.wave_duration_ms),
                'archetype': control.archetype if control else None,
                'auto_fire': self.auto_fire,
            },
            'upgrade_choices': [describe_upgrade(u) for u in progression.upgrade_choices],
        }

    def _entity_kind(self, entity_id: int) -> str:
        world = self.world
        if entity_id == self.avatar_id:
            return 'avatar'
        hostile = world.get_component(entity_id, Hostile)
        if hostile is not None:
            return hostile.kind
        if world.has_component(entity_id, Projectile):
            return 'projectile'
        if world.has_component(entity_id, Pickup):
            return 'pickup'
        if world.has_component(entity_id, ExperienceOrb):
            return 'orb'
        if world.has_component(entity_id, ParticleTag):
            return 'particle'
        return 'unknown'
