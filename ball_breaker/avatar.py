"""
Avatar Module
==============
Avatar entity creation, per-tick controls, movement and fire control.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .ecs import World
from .components import (
    Position, CircleCollider, Renderable, Health, AvatarControl, AvatarTag
)
from .config import GameConfig
from .projectiles import fire_volley
from .upgrades import PlayerUpgrades


@dataclass
class Controls:
    """
    Input read once per tick.

    Movement is either a vector (normalized by the reader) or an absolute
    target point; a target wins when both are given. Aim of (0, 0) keeps
    the previous aim.
    """
    move_x: float = 0.0
    move_y: float = 0.0
    target: Optional[Tuple[float, float]] = None
    aim_x: float = 0.0
    aim_y: float = 0.0
    fire: bool = False


def create_avatar(world: World, config: GameConfig) -> int:
    """Create the avatar centered above the bottom edge."""
    entity_id = world.create_entity()

    world.add_component(entity_id, Position(config.width / 2,
                                            config.height - config.avatar_start_offset))
    world.add_component(entity_id, CircleCollider(config.avatar_radius))
    world.add_component(entity_id, Renderable(char='@', color='#4ecdc4', layer=10))
    world.add_component(entity_id, Health(config.avatar_max_hp, config.avatar_max_hp))
    world.add_component(entity_id, AvatarControl(speed=config.avatar_speed))
    world.add_component(entity_id, AvatarTag())

    return entity_id


def get_avatar_entity(world: World) -> Optional[int]:
    """Get the avatar entity ID, or None before a run starts."""
    return world.first(AvatarTag)


def apply_controls(world: World, avatar_id: Optional[int], controls: Controls):
    """Copy this tick's movement and aim intent onto the avatar."""
    if avatar_id is None:
        return
    ctrl = world.get_component(avatar_id, AvatarControl)
    if ctrl is None:
        return

    if controls.target is not None:
        ctrl.target_x, ctrl.target_y = controls.target
        ctrl.move_x = ctrl.move_y = 0.0
    else:
        dx, dy = controls.move_x, controls.move_y
        length = math.hypot(dx, dy)
        if length > 1.0:
            dx /= length
            dy /= length
        if dx != 0 or dy != 0:
            ctrl.target_x = ctrl.target_y = None
        ctrl.move_x, ctrl.move_y = dx, dy

    if controls.aim_x != 0 or controls.aim_y != 0:
        length = math.hypot(controls.aim_x, controls.aim_y)
        ctrl.aim_x = controls.aim_x / length
        ctrl.aim_y = controls.aim_y / length


def avatar_movement_system(world: World, config: GameConfig):
    """Move toward the target point or along the move vector, then clamp."""
    for _, pos, ctrl, circle, _ in world.query(Position, AvatarControl, CircleCollider, AvatarTag):
        if ctrl.target_x is not None and ctrl.target_y is not None:
            dx = ctrl.target_x - pos.x
            dy = ctrl.target_y - pos.y
            distance = math.hypot(dx, dy)
            if distance > config.arrive_distance:
                step = min(ctrl.speed, distance)
                pos.x += dx / distance * step
                pos.y += dy / distance * step
        else:
            pos.x += ctrl.move_x * ctrl.speed
            pos.y += ctrl.move_y * ctrl.speed

        r = circle.radius
        pos.x = max(r, min(config.width - r, pos.x))
        pos.y = max(r, min(config.height - r, pos.y))


def fire_interval(config: GameConfig, upgrades: PlayerUpgrades) -> float:
    return config.fire_interval_ms / upgrades.fire_rate_multiplier


def fire_control(world: World, avatar_id: Optional[int], now: float,
                 config: GameConfig, upgrades: PlayerUpgrades,
                 fire_intent: bool = False,
                 auto_fire: Optional[bool] = None) -> List[int]:
    """
    Fire a volley when auto-fire or fire intent is on and the fire
    interval has elapsed since the last volley. Returns new projectile IDs.

    `auto_fire` overrides the config default when given.
    """
    if avatar_id is None or not world.is_alive(avatar_id):
        return []
    if auto_fire is None:
        auto_fire = config.auto_fire
    if not (auto_fire or fire_intent):
        return []

    ctrl = world.get_component(avatar_id, AvatarControl)
    pos = world.get_component(avatar_id, Position)
    if ctrl is None or pos is None:
        return []
    if ctrl.last_fire_at is not None and now - ctrl.last_fire_at <= fire_interval(config, upgrades):
        return []

    ctrl.last_fire_at = now
    return fire_volley(world, pos.x, pos.y, ctrl.aim_x, ctrl.aim_y,
                       ctrl.archetype, upgrades, config)


class InputHandler:
    """
    Turns blessed keystrokes into per-tick Controls.

    Terminals report no key-up events, so held keys are simulated with a
    frame countdown refreshed by key repeat.
    """

    AIM_KEYS = {
        'i': (0.0, -1.0),
        'k': (0.0, 1.0),
        'j': (-1.0, 0.0),
        'l': (1.0, 0.0),
    }

    def __init__(self, hold_duration: int = 12):
        self.keys_held: dict = {}  # key -> frames remaining
        self.hold_duration = hold_duration

        # Actions triggered this frame (consumed on read)
        self._choice: Optional[int] = None
        self._quit_triggered = False
        self._restart_triggered = False
        self._toggle_auto_fire = False
        self._start_triggered = False

    def process_key(self, key) -> None:
        """Process a single key press from blessed's inkey()."""
        if key is None or not key:
            return

        key_str = key.lower() if not key.is_sequence else ''

        if key_str == 'q' or key.name == 'KEY_ESCAPE':
            self._quit_triggered = True
            return

        # Movement (WASD) and aim (IJKL) refresh their hold timers
        if key_str and key_str in 'wasdijkl':
            self.keys_held[key_str] = self.hold_duration

        elif key_str in ('1', '2', '3'):
            self._choice = int(key_str) - 1

        elif key_str == 'r':
            self._restart_triggered = True

        elif key.name == 'KEY_TAB':
            self._toggle_auto_fire = True

        elif key_str == ' ' or key.name == 'KEY_ENTER':
            self._start_triggered = True

    def update(self) -> None:
        """Update key hold timers (call once per frame)."""
        expired = []
        for key, frames in self.keys_held.items():
            self.keys_held[key] = frames - 1
            if self.keys_held[key] <= 0:
                expired.append(key)
        for key in expired:
            del self.keys_held[key]

    def get_movement_vector(self) -> tuple:
        dx, dy = 0.0, 0.0
        if 'w' in self.keys_held:
            dy -= 1
        if 's' in self.keys_held:
            dy += 1
        if 'a' in self.keys_held:
            dx -= 1
        if 'd' in self.keys_held:
            dx += 1

        # Normalize diagonal movement
        if dx != 0 and dy != 0:
            length = math.sqrt(dx * dx + dy * dy)
            dx /= length
            dy /= length

        return dx, dy

    def get_aim_vector(self) -> tuple:
        ax, ay = 0.0, 0.0
        for key, (kx, ky) in self.AIM_KEYS.items():
            if key in self.keys_held:
                ax += kx
                ay += ky
        return ax, ay

    def controls(self) -> Controls:
        """Snapshot the held keys as this tick's Controls."""
        mx, my = self.get_movement_vector()
        ax, ay = self.get_aim_vector()
        return Controls(move_x=mx, move_y=my, aim_x=ax, aim_y=ay,
                        fire=ax != 0 or ay != 0)

    def consume_choice(self) -> Optional[int]:
        choice = self._choice
        self._choice = None
        return choice

    def consume_quit(self) -> bool:
        triggered = self._quit_triggered
        self._quit_triggered = False
        return triggered

    def consume_restart(self) -> bool:
        triggered = self._restart_triggered
        self._restart_triggered = False
        return triggered

    def consume_toggle_auto_fire(self) -> bool:
        triggered = self._toggle_auto_fire
        self._toggle_auto_fire = False
        return triggered

    def consume_start(self) -> bool:
        triggered = self._start_triggered
        self._start_triggered = False
        return triggered
