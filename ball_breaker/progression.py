"""
Progression State Machine
==========================
Wave timer, score, experience and the phase transitions between play and
upgrade selection.

    start --start()--> playing --upgrade due--> upgrade --choose()--> playing
                          |
                          +--avatar dead--> gameover

Wave expiry and level-ups each owe the player one upgrade. Owed upgrades
are queued and presented one after another before play resumes.
"""

import math
import random
from typing import Callable, List, Optional

from loguru import logger

from .config import GameConfig
from .upgrades import select_upgrades


PHASE_START = 'start'
PHASE_PLAYING = 'playing'
PHASE_UPGRADE = 'upgrade'
PHASE_GAMEOVER = 'gameover'


class SimulationClock:
    """Logical clock in milliseconds. Only advanced while playing."""

    def __init__(self):
        self.now = 0.0

    def advance(self, dt: float) -> float:
        self.now += dt
        return self.now

    def reset(self):
        self.now = 0.0


class Progression:
    """Run-level state: phase, wave, score and experience."""

    def __init__(self, config: GameConfig, rng: Optional[random.Random] = None):
        self.config = config
        self.rng = rng or random.Random()
        # Called with the new player level on every level-up
        self.on_level_up: Optional[Callable[[int], None]] = None
        self.reset()

    def reset(self):
        self.phase = PHASE_START
        self.level = 1
        self.wave_started_at = 0.0
        self.score = 0
        self.kills = 0
        self.wave_kills = 0
        self.player_level = 1
        self.experience = 0
        self.xp_to_next = self.config.xp_threshold
        self.pending_upgrades = 0
        self.upgrade_choices: List[str] = []

    # -------------------------------------------------------------------------
    # Phase transitions
    # -------------------------------------------------------------------------

    def start(self, now: float = 0.0):
        self.phase = PHASE_PLAYING
        self.wave_started_at = now
        logger.info('Run started')

    @property
    def playing(self) -> bool:
        return self.phase == PHASE_PLAYING

    def begin_upgrade(self) -> List[str]:
        """
        Enter upgrade selection if an upgrade is owed. Returns the offered
        choices, or an empty list if nothing changed.
        """
        if self.phase != PHASE_PLAYING or self.pending_upgrades <= 0:
            return []
        self.phase = PHASE_UPGRADE
        self.upgrade_choices = select_upgrades(self.config.upgrade_choice_count, self.rng)
        logger.info('Upgrade selection: {}', ', '.join(self.upgrade_choices))
        return self.upgrade_choices

    def choose(self, index: int) -> Optional[str]:
        """
        Consume one owed upgrade. Returns the chosen upgrade id, or None if
        the choice is not valid right now. Stays in upgrade selection while
        more upgrades are owed.
        """
        if self.phase != PHASE_UPGRADE:
            return None
        if not 0 <= index < len(self.upgrade_choices):
            return None

        upgrade_id = self.upgrade_choices[index]
        self.pending_upgrades -= 1
        if self.pending_upgrades > 0:
            self.upgrade_choices = select_upgrades(self.config.upgrade_choice_count, self.rng)
        else:
            self.upgrade_choices = []
            self.phase = PHASE_PLAYING
            logger.info('Resuming play at wave {}', self.level)
        return upgrade_id

    def game_over(self):
        if self.phase == PHASE_GAMEOVER:
            return
        self.phase = PHASE_GAMEOVER
        self.upgrade_choices = []
        logger.info('Game over: score {}, wave {}, level {}',
                    self.score, self.level, self.player_level)

    # -------------------------------------------------------------------------
    # Score and experience
    # -------------------------------------------------------------------------

    def record_kill(self, score: int):
        self.score += score
        self.kills += 1
        self.wave_kills += 1

    def add_score(self, points: int):
        self.score += points

    def add_experience(self, amount: int) -> int:
        """Add experience and level up as often as it allows. Returns levels gained."""
        self.experience += amount
        gained = 0
        while self.experience >= self.xp_to_next:
            self.experience -= self.xp_to_next
            self.xp_to_next = math.floor(self.xp_to_next * self.config.xp_growth)
            self.player_level += 1
            self.pending_upgrades += 1
            gained += 1
            logger.info('Level up: player level {}, next at {} xp',
                        self.player_level, self.xp_to_next)
            if self.on_level_up is not None:
                self.on_level_up(self.player_level)
        return gained

    @property
    def xp_fraction(self) -> float:
        if self.xp_to_next <= 0:
            return 0.0
        return min(1.0, self.experience / self.xp_to_next)

    # -------------------------------------------------------------------------
    # Waves
    # -------------------------------------------------------------------------

    def wave_elapsed(self, now: float) -> float:
        return now - self.wave_started_at

    def check_wave(self, now: float) -> bool:
        """Advance the wave if its timer ran out. Returns True on wave change."""
        if self.wave_elapsed(now) <= self.config.wave_duration_ms:
            return False
        logger.info('Wave {} complete with {} kills', self.level, self.wave_kills)
        self.level += 1
        self.wave_started_at = now
        self.wave_kills = 0
        self.pending_upgrades += 1
        return True

    def elite_due(self) -> bool:
        """True when the current wave level is a boss wave."""
        return self.level % self.config.boss_interval == 0
