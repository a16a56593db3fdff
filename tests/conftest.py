"""Shared fixtures for the simulation tests."""

import random

import pytest

from ball_breaker.config import GameConfig
from ball_breaker.ecs import World


@pytest.fixture
def world() -> World:
    return World()


@pytest.fixture
def config() -> GameConfig:
    """Default tuning, but with random pickup drops turned off."""
    return GameConfig(seed=1234, pickup_drop_chance=0.0)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)
