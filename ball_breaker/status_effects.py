"""
Status Effect Engine
=====================
Timed burn and slow effects on hostiles.

Effects are stamped with the simulation clock, never the wall clock, so a
paused game does not age them. Burn ticks are scheduled from the last tick
time rather than sampled from the clock, which keeps the tick count fixed
no matter how the frames fall.
"""

from typing import Callable, List, Optional

from .archetypes import EffectKind
from .components import StatusEffects, TimedEffect, Hostile, Health
from .ecs import World


BURN_DURATION_MS = 3000.0
BURN_TICK_INTERVAL_MS = 500.0
BURN_TICK_DAMAGE = 0.5

SLOW_DURATION_MS = 2000.0
SLOW_SPEED_MULTIPLIER = 0.5


def _status(world: World, entity_id: int) -> StatusEffects:
    status = world.get_component(entity_id, StatusEffects)
    if status is None:
        status = StatusEffects()
        world.add_component(entity_id, status)
    return status


def apply_burn(world: World, entity_id: int, now: float) -> None:
    """Start burning, or restart the burn timer if already burning."""
    if not world.is_alive(entity_id):
        return
    _status(world, entity_id).burn = TimedEffect(EffectKind.BURN, now, now)


def apply_slow(world: World, entity_id: int, now: float) -> None:
    """Start the slow, or restart its timer if already slowed."""
    if not world.is_alive(entity_id):
        return
    _status(world, entity_id).slow = TimedEffect(EffectKind.SLOW, now, now)


def burn_ticks_due(effect: TimedEffect, now: float) -> int:
    """
    Advance the burn's tick schedule up to `now` and return how many
    ticks fell due. Ticks past the burn duration are never scheduled.
    """
    end = effect.applied_at + BURN_DURATION_MS
    horizon = min(now, end)
    ticks = 0
    while horizon - effect.last_tick_at >= BURN_TICK_INTERVAL_MS:
        effect.last_tick_at += BURN_TICK_INTERVAL_MS
        ticks += 1
    return ticks


def speed_multiplier(status: Optional[StatusEffects]) -> float:
    """Movement multiplier for this frame only; never persisted."""
    if status is not None and status.slowed:
        return SLOW_SPEED_MULTIPLIER
    return 1.0


def status_effect_system(
    world: World,
    now: float,
    on_damage: Callable[[int, float], None],
) -> List[dict]:
    """
    Tick burns and expire burns and slows for every hostile.

    Burn damage is delivered through `on_damage(entity_id, amount)` so the
    caller's death handling applies to burn kills too.
    """
    events = []

    for entity_id, status, _, _ in world.query(StatusEffects, Hostile, Health):
        burn = status.burn
        if burn is not None:
            for _ in range(burn_ticks_due(burn, now)):
                if not world.is_alive(entity_id):
                    break
                on_damage(entity_id, BURN_TICK_DAMAGE)
                events.append({'type': 'burn_tick', 'entity': entity_id,
                               'amount': BURN_TICK_DAMAGE})
            if now - burn.applied_at > BURN_DURATION_MS:
                status.burn = None
                events.append({'type': 'burn_expired', 'entity': entity_id})

        slow = status.slow
        if slow is not None and now - slow.applied_at > SLOW_DURATION_MS:
            status.slow = None
            events.append({'type': 'slow_expired', 'entity': entity_id})

    return events
