"""Shared fixtures for psoswarm tests."""

from typing import Callable, List

import numpy as np
import pytest

from psoswarm.config import Settings
from psoswarm.core import EventBus, Particle, reset_event_bus
from psoswarm.float64 import Float64Array, Float64Range, Float64TargetFunc


def shifted_sphere(values: Float64Array) -> float:
    """(x - 3)^2 + (y + 2)^2, minimum 0 at (3, -2)."""
    x, y = values[0], values[1]
    return (x - 3.0) ** 2 + (y + 2.0) ** 2


@pytest.fixture(autouse=True)
def fresh_event_bus():
    """Give every test its own global event bus."""
    reset_event_bus()
    yield
    reset_event_bus()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def settings() -> Settings:
    """Settings with a short poll interval so stops are observed quickly."""
    settings = Settings()
    settings.solver.poll_interval = 0.01
    return settings


@pytest.fixture
def target() -> Float64TargetFunc:
    return Float64TargetFunc(shifted_sphere)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def make_swarm() -> Callable[..., List[Particle]]:
    """Factory for seeded swarms spread over [-10, 10]^2."""

    def _make(count: int, seed: int = 0, bounds: Float64Range | None = None) -> List[Particle]:
        init_rng = np.random.default_rng(seed)
        particles = []
        for i in range(count):
            position = Float64Array(init_rng.uniform(-10.0, 10.0, 2))
            velocity = Float64Array(init_rng.uniform(-1.0, 1.0, 2))
            particles.append(Particle(
                position,
                velocity,
                bounds or Float64Range.with_inf(2),
                rng=np.random.default_rng(seed * 1000 + i),
            ))
        return particles

    return _make
