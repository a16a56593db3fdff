"""
Upgrade System
===============
Permanent run upgrades: catalog, selection, and application.
"""

import random
from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from .ecs import World
from .components import AvatarControl, Health


@dataclass
class PlayerUpgrades:
    """Persistent multipliers read by every damage and firing calculation."""
    damage_multiplier: float = 1.0
    speed_multiplier: float = 1.0
    fire_rate_multiplier: float = 1.0
    pierce_count: int = 0
    multishot: int = 0
    history: List[str] = field(default_factory=list)


# =============================================================================
# UPGRADE DEFINITIONS
# =============================================================================

UPGRADES = {
    'damage': {
        'name': 'Power Boost',
        'description': 'Increase ball damage by 50%',
        'stat': 'damage_multiplier',
        'multiply': 1.5,
    },
    'speed': {
        'name': 'Swift Balls',
        'description': 'Increase ball speed by 30%',
        'stat': 'speed_multiplier',
        'multiply': 1.3,
    },
    'fire_rate': {
        'name': 'Rapid Fire',
        'description': 'Increase fire rate by 30%',
        'stat': 'fire_rate_multiplier',
        'multiply': 1.3,
    },
    'multishot': {
        'name': 'Multi-Shot',
        'description': 'Fire an additional ball',
        'stat': 'multishot',
        'add': 1,
    },
    'piercing': {
        'name': 'Piercing Shots',
        'description': 'Balls pierce through 2 enemies',
        'stat': 'pierce_count',
        'add': 2,
    },
    'health': {
        'name': 'Health Boost',
        'description': 'Increase max HP by 25 and heal fully',
        'max_hp': 25,
    },
    # --- Fusions: swap the equipped archetype ---
    'fire_ball': {
        'name': 'Fire Ball Fusion',
        'description': 'Unlock fire balls that deal damage over time',
        'archetype': 'fire',
    },
    'ice_ball': {
        'name': 'Ice Ball Fusion',
        'description': 'Unlock ice balls that slow enemies',
        'archetype': 'ice',
    },
    'lightning': {
        'name': 'Lightning Evolution',
        'description': 'Unlock lightning that chains to nearby enemies',
        'archetype': 'lightning',
    },
    'explosive': {
        'name': 'Explosive Evolution',
        'description': 'Unlock explosive balls with area damage',
        'archetype': 'explosive',
    },
}


def describe_upgrade(upgrade_id: str) -> dict:
    """Choice descriptor handed to the UI."""
    data = UPGRADES[upgrade_id]
    return {'id': upgrade_id, 'name': data['name'], 'description': data['description']}


# =============================================================================
# SELECTION
# =============================================================================

def select_upgrades(count: int = 3, rng: Optional[random.Random] = None) -> List[str]:
    """Draw `count` distinct upgrade ids from the catalog."""
    pool = list(UPGRADES)
    return (rng or random).sample(pool, min(count, len(pool)))


# =============================================================================
# APPLICATION
# =============================================================================

def apply_upgrade(world: World, avatar_id: Optional[int],
                  upgrades: PlayerUpgrades, upgrade_id: str) -> bool:
    """
    Apply one upgrade. Stat upgrades change `upgrades`; max HP and fusion
    upgrades change the avatar, and are skipped when there is none.
    """
    data = UPGRADES.get(upgrade_id)
    if data is None:
        return False

    if 'stat' in data:
        stat_name = data['stat']
        old_val = getattr(upgrades, stat_name)
        if 'multiply' in data:
            setattr(upgrades, stat_name, old_val * data['multiply'])
        else:
            setattr(upgrades, stat_name, old_val + data['add'])

    elif 'max_hp' in data:
        health = world.get_component(avatar_id, Health) if avatar_id is not None else None
        if health:
            health.maximum += data['max_hp']
            health.current = health.maximum

    elif 'archetype' in data:
        control = world.get_component(avatar_id, AvatarControl) if avatar_id is not None else None
        if control:
            control.archetype = data['archetype']

    upgrades.history.append(upgrade_id)
    logger.info('Applied upgrade {} ({})', upgrade_id, data['name'])
    return True
