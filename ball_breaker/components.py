"""
Component Definitions
======================
All components are plain dataclasses with no behavior.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .archetypes import EffectKind, DEFAULT_ARCHETYPE


# =============================================================================
# PHYSICS COMPONENTS
# =============================================================================

@dataclass
class Position:
    """World position in arena units (center of the entity)."""
    x: float = 0.0
    y: float = 0.0


@dataclass
class Velocity:
    """Movement per frame in arena units."""
    x: float = 0.0
    y: float = 0.0


@dataclass
class CircleCollider:
    radius: float = 10.0


@dataclass
class RectCollider:
    """Axis-aligned box centered on Position (grid-sized hostiles)."""
    width: float = 60.0
    height: float = 30.0


@dataclass
class Gravity:
    """Gravity added to velocity each frame."""
    strength: float = 0.2


@dataclass
class Lifetime:
    """Remaining lifetime in frames."""
    frames_remaining: int = 30
    frames_total: int = 30


# =============================================================================
# RENDERING COMPONENTS
# =============================================================================

@dataclass
class Renderable:
    """Visual hints for the rendering collaborator."""
    char: str = '?'
    color: str = '#ffffff'
    layer: int = 0
    visible: bool = True


# =============================================================================
# COMBAT COMPONENTS
# =============================================================================

@dataclass
class Health:
    """Health pool. Never stored below zero."""
    current: float = 100.0
    maximum: float = 100.0

    @property
    def fraction(self) -> float:
        if self.maximum <= 0:
            return 0.0
        return max(0.0, min(1.0, self.current / self.maximum))


@dataclass
class TimedEffect:
    """A status effect evaluated against the simulation clock."""
    kind: EffectKind
    applied_at: float = 0.0
    last_tick_at: float = 0.0


@dataclass
class StatusEffects:
    """Independent burn and slow slots; either, both or neither may be set."""
    burn: Optional[TimedEffect] = None
    slow: Optional[TimedEffect] = None

    @property
    def burning(self) -> bool:
        return self.burn is not None

    @property
    def slowed(self) -> bool:
        return self.slow is not None


# =============================================================================
# AVATAR COMPONENTS
# =============================================================================

@dataclass
class AvatarControl:
    """Movement and aim intent plus fire-control state for the avatar."""
    speed: float = 5.0
    target_x: Optional[float] = None
    target_y: Optional[float] = None
    move_x: float = 0.0
    move_y: float = 0.0
    aim_x: float = 0.0
    aim_y: float = -1.0
    archetype: str = DEFAULT_ARCHETYPE
    last_fire_at: Optional[float] = None


@dataclass
class AvatarTag:
    """Marks the avatar entity."""
    pass


# =============================================================================
# PROJECTILES
# =============================================================================

@dataclass
class Projectile:
    """Projectile flight data. Damage is the archetype base damage."""
    archetype: str = DEFAULT_ARCHETYPE
    damage: float = 1.0
    effect: EffectKind = EffectKind.NONE
    color: str = '#ffffff'
    hit_count: int = 0
    hit_entities: List[int] = field(default_factory=list)


# =============================================================================
# HOSTILES
# =============================================================================

@dataclass
class Hostile:
    """A descending enemy. Elites carry an EliteState as well."""
    kind: str = 'normal'
    speed: float = 1.0
    score_value: int = 10
    orb_count: int = 1
    orb_value: int = 1
    color: str = '#ff6b6b'


@dataclass
class EliteState:
    """Movement phase of an elite: descend, then patrol sideways."""
    phase: str = 'descend'  # 'descend', 'patrol'
    patrol_y: float = 120.0
    patrol_speed: float = 1.5
    direction: float = 1.0


# =============================================================================
# COLLECTIBLES
# =============================================================================

@dataclass
class Pickup:
    """Power-up that heals and grants score on contact."""
    heal: float = 10.0
    score: int = 50


@dataclass
class ExperienceOrb:
    value: int = 1
    magnet_range: float = 80.0
    magnet_speed: float = 4.0


# =============================================================================
# TAG COMPONENTS
# =============================================================================

@dataclass
class ParticleTag:
    """Marks a purely visual particle."""
    pass
