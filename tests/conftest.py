"""Pytest configuration and shared fixtures."""

import os

# Headless pygame: must be set before pygame creates any window.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame
import pytest

from context import FrameContext
from particle import ParticleSystem


@pytest.fixture(scope="session", autouse=True)
def pygame_session():
    pygame.init()
    yield
    pygame.quit()


@pytest.fixture
def sim_params() -> dict:
    """Seeded default parameters."""
    return {"seed": 1234, "particle_count": 50}


@pytest.fixture
def context() -> FrameContext:
    return FrameContext(800, 600)


@pytest.fixture
def system(sim_params, context) -> ParticleSystem:
    return ParticleSystem(sim_params, context.width, context.height)


@pytest.fixture
def single_particle():
    """Factory for a one-particle system placed at (x, y) with a given velocity."""
    def build(x: float, y: float, vx: float = 0.0, vy: float = 0.0,
              width: int = 800, height: int = 600, **params) -> ParticleSystem:
        system = ParticleSystem({"seed": 7, **params, "particle_count": 1}, width, height)
        system.positions[0] = (x, y)
        system.velocities[0] = (vx, vy)
        return system
    return build
