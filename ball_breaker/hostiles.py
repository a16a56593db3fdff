"""
Hostile Archetypes
===================
Hostile entity creation. Stats scale with the wave level.

    normal  (o)  - baseline descender
    tank    (O)  - slow, heavy, worth more
    fast    (v)  - quick and fragile
    block   [#]  - grid-sized rectangle used by the grid spawn pattern
    elite   (B)  - boss: descends, then patrols sideways
"""

import random
from typing import Optional

from .ecs import World
from .components import (
    Position, Velocity, CircleCollider, RectCollider, Renderable,
    Health, StatusEffects, Hostile, EliteState
)
from .config import GameConfig


# Relative spawn weights of the circular kinds
KIND_WEIGHTS = (
    ('normal', 0.60),
    ('tank', 0.25),
    ('fast', 0.15),
)


def choose_kind(rng: Optional[random.Random] = None) -> str:
    """Pick a circular hostile kind using KIND_WEIGHTS."""
    roll = (rng or random).random()
    cumulative = 0.0
    for kind, weight in KIND_WEIGHTS:
        cumulative += weight
        if roll < cumulative:
            return kind
    return KIND_WEIGHTS[-1][0]


def kind_stats(kind: str, level: int, config: GameConfig) -> dict:
    if kind == 'tank':
        return {
            'hp': 5 + level * 2,
            'speed': config.hostile_speed * 0.5,
            'score': 25,
            'radius': config.hostile_radius * 1.2,
            'orbs': 2,
            'color': '#845ec2',
            'char': 'O',
        }
    if kind == 'fast':
        return {
            'hp': 1 + level // 2,
            'speed': config.hostile_speed * 2,
            'score': 15,
            'radius': config.hostile_radius * 0.8,
            'orbs': 1,
            'color': '#00d9ff',
            'char': 'v',
        }
    return {
        'hp': 2 + level,
        'speed': config.hostile_speed,
        'score': 10,
        'radius': config.hostile_radius,
        'orbs': 1,
        'color': '#ff6b6b',
        'char': 'o',
    }


def create_hostile(world: World, x: float, y: float, kind: str,
                   level: int, config: GameConfig) -> int:
    """Create a circular hostile of the given kind."""
    stats = kind_stats(kind, level, config)
    entity_id = world.create_entity()

    world.add_component(entity_id, Position(x, y))
    world.add_component(entity_id, Velocity(0.0, stats['speed']))
    world.add_component(entity_id, CircleCollider(stats['radius']))
    world.add_component(entity_id, Renderable(char=stats['char'], color=stats['color'], layer=5))
    world.add_component(entity_id, Health(stats['hp'], stats['hp']))
    world.add_component(entity_id, StatusEffects())
    world.add_component(entity_id, Hostile(
        kind=kind,
        speed=stats['speed'],
        score_value=stats['score'],
        orb_count=stats['orbs'],
        orb_value=1,
        color=stats['color'],
    ))

    return entity_id


def create_block(world: World, x: float, y: float,
                 level: int, config: GameConfig) -> int:
    """Create a rectangular, grid-sized hostile."""
    hp = 3 + level
    speed = config.hostile_speed * 0.75
    entity_id = world.create_entity()

    world.add_component(entity_id, Position(x, y))
    world.add_component(entity_id, Velocity(0.0, speed))
    world.add_component(entity_id, RectCollider(config.grid_cell_width, config.grid_cell_height))
    world.add_component(entity_id, Renderable(char='#', color='#ffa94d', layer=5))
    world.add_component(entity_id, Health(hp, hp))
    world.add_component(entity_id, StatusEffects())
    world.add_component(entity_id, Hostile(
        kind='block',
        speed=speed,
        score_value=20,
        orb_count=2,
        orb_value=1,
        color='#ffa94d',
    ))

    return entity_id


def create_elite(world: World, x: float, y: float,
                 level: int, config: GameConfig) -> int:
    """
    Create an elite hostile.

    Behavior: descend to the patrol line, then sweep left and right
    between the arena walls. Elites never breach the bottom edge.
    """
    hp = 40 + level * 15
    radius = 35.0
    entity_id = world.create_entity()

    world.add_component(entity_id, Position(x, y))
    world.add_component(entity_id, Velocity(0.0, config.hostile_speed))
    world.add_component(entity_id, CircleCollider(radius))
    world.add_component(entity_id, Renderable(char='B', color='#ff3d7f', layer=6))
    world.add_component(entity_id, Health(hp, hp))
    world.add_component(entity_id, StatusEffects())
    world.add_component(entity_id, Hostile(
        kind='elite',
        speed=config.hostile_speed,
        score_value=250,
        orb_count=5,
        orb_value=5,
        color='#ff3d7f',
    ))
    world.add_component(entity_id, EliteState(
        phase='descend',
        patrol_y=config.elite_patrol_y,
        patrol_speed=1.5,
        direction=1.0,
    ))

    return entity_id
