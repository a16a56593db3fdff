#!/usr/bin/env python3
"""
BALL BREAKER Launcher
======================
Run this script to start the game.
"""

from ball_breaker.main import main

if __name__ == "__main__":
    main()
