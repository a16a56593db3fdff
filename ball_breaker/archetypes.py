"""
Projectile Archetypes
======================
Static table of ball types: damage, speed, color and elemental effect.
"""

from dataclasses import dataclass
from enum import Enum


class EffectKind(Enum):
    """Elemental effect carried by a projectile archetype."""
    NONE = 'none'
    BURN = 'burn'
    SLOW = 'slow'
    CHAIN = 'chain'
    SPLASH = 'splash'


@dataclass(frozen=True)
class Archetype:
    key: str
    name: str
    color: str
    damage: float
    speed: float
    effect: EffectKind = EffectKind.NONE


ARCHETYPES = {
    'normal': Archetype('normal', 'Normal Ball', '#ffffff', 1.0, 6.0, EffectKind.NONE),
    'fire': Archetype('fire', 'Fire Ball', '#ff6b6b', 2.0, 5.0, EffectKind.BURN),
    'ice': Archetype('ice', 'Ice Ball', '#4ecdc4', 1.0, 4.0, EffectKind.SLOW),
    'lightning': Archetype('lightning', 'Lightning Ball', '#f7f740', 1.5, 8.0, EffectKind.CHAIN),
    'explosive': Archetype('explosive', 'Explosive Ball', '#ff8800', 3.0, 5.0, EffectKind.SPLASH),
}

DEFAULT_ARCHETYPE = 'normal'


def get_archetype(key: str) -> Archetype:
    """Look up an archetype by key. Unknown keys raise KeyError."""
    return ARCHETYPES[key]
