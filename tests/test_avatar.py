"""Avatar movement, fire control, volleys and the keyboard reader."""

import math

import pytest
from blessed.keyboard import Keystroke

from ball_breaker.avatar import (
    Controls, InputHandler, create_avatar, get_avatar_entity, apply_controls,
    avatar_movement_system, fire_control
)
from ball_breaker.components import Position, Velocity, AvatarControl, Projectile
from ball_breaker.config import GameConfig
from ball_breaker.projectiles import projectile_bounds_system, spawn_projectile, volley_angles
from ball_breaker.upgrades import PlayerUpgrades

pytestmark = pytest.mark.unit


def _avatar_pos(world, avatar):
    return world.get_component(avatar, Position)


class TestMovement:
    def test_starts_bottom_center(self, world, config):
        avatar = create_avatar(world, config)
        pos = _avatar_pos(world, avatar)
        assert (pos.x, pos.y) == (400, 520)
        assert get_avatar_entity(world) == avatar

    def test_no_avatar(self, world):
        assert get_avatar_entity(world) is None
        apply_controls(world, None, Controls(move_x=1))

    def test_move_vector(self, world, config):
        avatar = create_avatar(world, config)
        apply_controls(world, avatar, Controls(move_x=1.0))
        avatar_movement_system(world, config)
        assert _avatar_pos(world, avatar).x == 405

    def test_target_arrival(self, world, config):
        avatar = create_avatar(world, config)
        apply_controls(world, avatar, Controls(target=(430.0, 520.0)))
        for _ in range(20):
            avatar_movement_system(world, config)
        assert _avatar_pos(world, avatar).x == pytest.approx(430.0, abs=config.arrive_distance)

    def test_target_step_is_speed(self, world, config):
        avatar = create_avatar(world, config)
        apply_controls(world, avatar, Controls(target=(400.0, 100.0)))
        avatar_movement_system(world, config)
        assert _avatar_pos(world, avatar).y == pytest.approx(515.0)

    def test_clamped_inside_arena(self, world, config):
        avatar = create_avatar(world, config)
        apply_controls(world, avatar, Controls(move_x=-1.0))
        for _ in range(200):
            avatar_movement_system(world, config)
        assert _avatar_pos(world, avatar).x == config.avatar_radius

    def test_zero_aim_keeps_previous(self, world, config):
        avatar = create_avatar(world, config)
        apply_controls(world, avatar, Controls(aim_x=1.0))
        apply_controls(world, avatar, Controls())
        ctrl = world.get_component(avatar, AvatarControl)
        assert (ctrl.aim_x, ctrl.aim_y) == (1.0, 0.0)


class TestFireControl:
    def test_first_volley_immediate_then_interval(self, world, config):
        avatar = create_avatar(world, config)
        upgrades = PlayerUpgrades()
        assert len(fire_control(world, avatar, 0.0, config, upgrades)) == 1
        assert fire_control(world, avatar, 800.0, config, upgrades) == []
        assert len(fire_control(world, avatar, 801.0, config, upgrades)) == 1

    def test_fire_rate_multiplier(self, world, config):
        avatar = create_avatar(world, config)
        upgrades = PlayerUpgrades(fire_rate_multiplier=2.0)
        fire_control(world, avatar, 0.0, config, upgrades)
        assert len(fire_control(world, avatar, 401.0, config, upgrades)) == 1

    def test_needs_auto_fire_or_intent(self, world):
        config = GameConfig(auto_fire=False)
        avatar = create_avatar(world, config)
        upgrades = PlayerUpgrades()
        assert fire_control(world, avatar, 0.0, config, upgrades) == []
        assert len(fire_control(world, avatar, 0.0, config, upgrades, fire_intent=True)) == 1

    def test_auto_fire_override(self, world):
        config = GameConfig(auto_fire=True)
        avatar = create_avatar(world, config)
        upgrades = PlayerUpgrades()
        assert fire_control(world, avatar, 0.0, config, upgrades, auto_fire=False) == []
        assert len(fire_control(world, avatar, 0.0, config, upgrades, auto_fire=True)) == 1

    def test_no_avatar(self, world, config):
        assert fire_control(world, None, 0.0, config, PlayerUpgrades()) == []

    def test_muzzle_above_avatar(self, world, config):
        avatar = create_avatar(world, config)
        (proj,) = fire_control(world, avatar, 0.0, config, PlayerUpgrades())
        pos = world.get_component(proj, Position)
        assert pos.x == pytest.approx(400)
        assert pos.y == pytest.approx(500)

    def test_multishot_volley(self, world, config):
        avatar = create_avatar(world, config)
        shots = fire_control(world, avatar, 0.0, config, PlayerUpgrades(multishot=2))
        assert len(shots) == 3
        xs = [world.get_component(p, Velocity).x for p in shots]
        assert xs[0] < 0 and xs[1] == pytest.approx(0) and xs[2] > 0

    def test_uses_equipped_archetype(self, world, config):
        avatar = create_avatar(world, config)
        world.get_component(avatar, AvatarControl).archetype = 'fire'
        (proj,) = fire_control(world, avatar, 0.0, config, PlayerUpgrades())
        assert world.get_component(proj, Projectile).archetype == 'fire'


class TestProjectiles:
    def test_speed_uses_multiplier(self, world, config):
        proj = spawn_projectile(world, 0, 0, -math.pi / 2, 'normal',
                                PlayerUpgrades(speed_multiplier=1.3), config)
        vel = world.get_component(proj, Velocity)
        assert math.hypot(vel.x, vel.y) == pytest.approx(6.0 * 1.3)

    def test_volley_angles_centered(self):
        angles = volley_angles(0.0, 3, 0.5)
        assert angles == pytest.approx([-0.5, 0.0, 0.5])
        assert volley_angles(1.0, 1, 0.5) == [1.0]

    @pytest.mark.parametrize("x, y, gone", [
        (400, -7, False),
        (400, -9, True),
        (-9, 300, True),
        (809, 300, True),
        (400, 609, True),
        (400, 300, False),
    ])
    def test_exit_beyond_radius(self, world, config, x, y, gone):
        proj = spawn_projectile(world, x, y, 0.0, 'normal', PlayerUpgrades(), config)
        assert (projectile_bounds_system(world, config) == [proj]) == gone
        assert world.is_alive(proj) != gone


class TestInputHandler:
    def test_movement_held_keys(self):
        handler = InputHandler(hold_duration=2)
        handler.process_key(Keystroke('w'))
        handler.process_key(Keystroke('d'))
        dx, dy = handler.get_movement_vector()
        assert dx == pytest.approx(math.sqrt(0.5))
        assert dy == pytest.approx(-math.sqrt(0.5))

        handler.update()
        handler.update()
        assert handler.get_movement_vector() == (0.0, 0.0)

    def test_aim_is_fire_intent(self):
        handler = InputHandler()
        handler.process_key(Keystroke('j'))
        controls = handler.controls()
        assert (controls.aim_x, controls.aim_y) == (-1.0, 0.0)
        assert controls.fire

    def test_no_aim_no_intent(self):
        assert not InputHandler().controls().fire

    def test_one_shot_actions(self):
        handler = InputHandler()
        handler.process_key(Keystroke('2'))
        handler.process_key(Keystroke('R'))
        handler.process_key(Keystroke('\t', code=512, name='KEY_TAB'))
        assert handler.consume_choice() == 1
        assert handler.consume_choice() is None
        assert handler.consume_restart()
        assert handler.consume_toggle_auto_fire()

    def test_quit(self):
        handler = InputHandler()
        handler.process_key(Keystroke('q'))
        assert handler.consume_quit()
        assert not handler.consume_quit()
