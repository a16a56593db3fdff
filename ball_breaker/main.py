#!/usr/bin/env python3
"""
BALL BREAKER - Terminal Arena Shooter
======================================
Hold the bottom of the arena against descending hostiles.

Controls:
    WASD    - Move
    IJKL    - Aim and fire (I=up, K=down, J=left, L=right)
    TAB     - Toggle auto-fire
    1/2/3   - Pick an upgrade
    R       - Restart after game over
    Q/ESC   - Quit

Environment:
    BALL_BREAKER_LOG_LEVEL      log level for the file sink (default INFO)
    BALL_BREAKER_LOG_FILE       log file path; no logging when unset
    BALL_BREAKER_SEED           RNG seed for a reproducible run
    BALL_BREAKER_SPAWN_PATTERN  single, grid or cluster
"""

import os
import sys
import time

from loguru import logger

try:
    from blessed import Terminal
except ImportError:
    print("ERROR: 'blessed' library required. Install with: pip install blessed")
    sys.exit(1)

from .avatar import InputHandler
from .config import config_from_env
from .engine import GameRenderer
from .progression import PHASE_START, PHASE_PLAYING, PHASE_UPGRADE, PHASE_GAMEOVER
from .simulation import Simulation


FPS = 60
FRAME_TIME = 1.0 / FPS

MIN_WIDTH = 60
MIN_HEIGHT = 20


def configure_logging():
    """
    Route loguru to a file. The default stderr sink is always removed
    because it would tear the fullscreen display.
    """
    logger.remove()
    path = os.environ.get('BALL_BREAKER_LOG_FILE')
    if path:
        level = os.environ.get('BALL_BREAKER_LOG_LEVEL', 'INFO').upper()
        logger.add(path, level=level, rotation='5 MB')


class GameState:
    """Front-end state: owns the terminal side and drives one Simulation."""

    def __init__(self, term: Terminal):
        self.term = term
        self.simulation = Simulation(config_from_env())
        self.renderer = GameRenderer(
            term,
            arena_width=self.simulation.config.width,
            arena_height=self.simulation.config.height,
        )
        self.input_handler = InputHandler()
        self.running = True

    @property
    def phase(self) -> str:
        return self.simulation.phase

    def update(self):
        """Advance one fixed frame."""
        self.input_handler.update()
        if self.phase != PHASE_PLAYING:
            return
        events = self.simulation.tick(self.input_handler.controls())
        for event in events:
            if event['type'] in ('contact', 'breach'):
                self.renderer.trigger_shake(1, 6)
            elif event['type'] == 'elite_spawned':
                self.renderer.trigger_shake(2, 10)

    def render(self):
        renderer = self.renderer
        renderer.begin_frame()

        if self.phase == PHASE_START:
            renderer.draw_title()
        else:
            snapshot = self.simulation.snapshot()
            renderer.draw_snapshot(snapshot)
            if self.phase == PHASE_UPGRADE:
                renderer.draw_upgrade_overlay(snapshot['upgrade_choices'])
            elif self.phase == PHASE_GAMEOVER:
                hud = snapshot['hud']
                renderer.draw_game_over(hud['score'], hud['wave'], hud['level'])

        output = renderer.end_frame()
        if output:
            print(output, end='', flush=True)

    def handle_input(self):
        """Read every queued keystroke without blocking."""
        handler = self.input_handler
        key = self.term.inkey(timeout=0)
        while key:
            handler.process_key(key)
            key = self.term.inkey(timeout=0)

        if handler.consume_quit():
            self.running = False
            return

        if self.phase == PHASE_START:
            if handler.consume_start():
                self.simulation.start()
        elif self.phase == PHASE_UPGRADE:
            choice = handler.consume_choice()
            if choice is not None:
                self.simulation.choose_upgrade(choice)
        elif self.phase == PHASE_GAMEOVER:
            if handler.consume_restart():
                self.simulation.start()

        if handler.consume_toggle_auto_fire():
            self.simulation.toggle_auto_fire()

        # Stale one-shot actions from other phases
        handler.consume_start()
        handler.consume_choice()
        handler.consume_restart()

    def check_resize(self):
        if (self.term.width, self.term.height) != (self.renderer.width, self.renderer.height):
            self.renderer.resize(self.term.width, self.term.height)
            print(self.term.home + self.term.clear, end='', flush=True)


# =============================================================================
# MAIN LOOP
# =============================================================================

def main():
    """Run the terminal front-end at a fixed 60 Hz simulation rate."""
    configure_logging()
    term = Terminal()

    if term.width < MIN_WIDTH or term.height < MIN_HEIGHT:
        print(
            f'Terminal too small: {term.width}x{term.height}. '
            f'Minimum: {MIN_WIDTH}x{MIN_HEIGHT}'
        )
        sys.exit(1)

    with term.fullscreen(), term.cbreak(), term.hidden_cursor():
        game = GameState(term)

        last_time = time.perf_counter()
        accumulator = 0.0

        # Full clear once; later frames are diffed
        print(term.home + term.clear, end='', flush=True)

        while game.running:
            now = time.perf_counter()
            delta = now - last_time
            last_time = now

            # Cap catch-up after a stall
            delta = min(delta, FRAME_TIME * 5)
            accumulator += delta

            game.handle_input()
            game.check_resize()

            # Fixed-timestep updates
            ticks = 0
            while accumulator >= FRAME_TIME and ticks < 4:
                game.update()
                accumulator -= FRAME_TIME
                ticks += 1

            game.render()

            elapsed = time.perf_counter() - now
            sleep_time = FRAME_TIME - elapsed
            if sleep_time > 0.001:
                time.sleep(sleep_time * 0.9)

        print(term.normal, end='', flush=True)


if __name__ == '__main__':
    main()
