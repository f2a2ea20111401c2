# particle.py
"""
Manages the state of all particles in the animation.

This module defines the ParticleSystem class, which is responsible for
initializing and storing particle data (position, velocity, size, colour,
shape, wiggle) in NumPy arrays, and for driving the per-frame update and
draw over the whole population.
"""
import logging
import numpy as np
import pygame
from typing import Dict, Any, Optional

from constants import (
    PARTICLE_COUNT, PARTICLE_SIZE_MIN, PARTICLE_SIZE_MAX, INITIAL_VELOCITY_SCALE,
    BASE_LIGHTNESS, INITIAL_SATURATION, WIGGLE_MAGNITUDE, TWO_PI
)
from context import FrameContext
from oscillator import Shape, SHAPE_CYCLE
from simulation import Simulation
import visualization

# --- Data Contracts ---
#
# class ParticleSystem:
#   - __init__(self, params: Dict[str, Any], width: int, height: int):
#     - Inputs:
#       - params: Dictionary of simulation parameters from config.json.
#         - "seed": Optional[int]
#         - "particle_count": int
#         - "size_min" / "size_max": float
#       - width, height: extents of the viewport particles are spawned in.
#     - Side Effects: Initializes the state arrays with a fresh population.
#     - Invariants:
#       - positions and velocities are (N, 2) float64 arrays.
#       - every per-particle scalar lives in an (N,) array.
#       - size_min <= current_sizes <= size_max, 0 <= current_lightness <= 100.
#
#   - initialize(self, count: int) -> None
#   - reset(self) -> None: initialize() with the configured count.
#   - update_all(self, context: FrameContext) -> int
#   - draw_all(self, surface: pygame.Surface) -> None

class ParticleSystem:
    """
    A container for all particles, managing their state via NumPy arrays.
    """
    def __init__(self, params: Dict[str, Any], width: int, height: int,
                 simulation: Optional[Simulation] = None):
        """
        Initializes the particle system.

        Args:
            params (Dict[str, Any]): Simulation parameters from config.
            width (int): The width of the viewport.
            height (int): The height of the viewport.
            simulation (Simulation): Update pipeline; built from params if omitted.
        """
        self.configured_count = int(params.get('particle_count', PARTICLE_COUNT))
        self.size_min = float(params.get('size_min', PARTICLE_SIZE_MIN))
        self.size_max = float(params.get('size_max', PARTICLE_SIZE_MAX))
        self.velocity_scale = float(params.get('initial_velocity_scale', INITIAL_VELOCITY_SCALE))
        self.base_lightness_value = float(params.get('base_lightness', BASE_LIGHTNESS))
        self.initial_saturation = float(params.get('initial_saturation', INITIAL_SATURATION))
        self.wiggle_magnitude = float(params.get('wiggle_magnitude', WIGGLE_MAGNITUDE))
        self.seed = params.get('seed')
        self.width = width
        self.height = height

        if self.configured_count < 0:
            msg = f"Configuration error: particle_count must not be negative, got {self.configured_count}."
            logging.critical(msg)
            raise ValueError(msg)
        if self.size_min > self.size_max:
            msg = (
                f"Configuration error: size_min ({self.size_min}) is larger "
                f"than size_max ({self.size_max})."
            )
            logging.critical(msg)
            raise ValueError(msg)

        # All randomness comes from one generator seeded once, so a seeded
        # run replays the same sequence of populations across resets.
        self.rng = np.random.default_rng(self.seed)
        self.simulation = simulation if simulation is not None else Simulation(params)

        self.initialize(self.configured_count)

    def initialize(self, count: int) -> None:
        """Replaces the whole population with `count` freshly randomised particles."""
        self.particle_count = count
        rng = self.rng

        self.positions = rng.uniform(
            low=[0, 0],
            high=[self.width, self.height],
            size=(count, 2)
        )
        self.velocities = rng.uniform(-1.0, 1.0, size=(count, 2)) * self.velocity_scale

        self.base_sizes = rng.uniform(self.size_min, self.size_max, size=count)
        self.sizes = self.base_sizes.copy()
        self.current_sizes = self.base_sizes.copy()
        self.ambient_sizes = self.base_sizes.copy()

        self.base_lightness = np.full(count, self.base_lightness_value)
        self.lightness = self.base_lightness.copy()
        self.current_lightness = self.base_lightness.copy()
        self.ambient_lightness = self.base_lightness.copy()

        self.hues = rng.uniform(0.0, 360.0, size=count)
        self.saturations = np.full(count, self.initial_saturation)

        self.shapes = rng.integers(0, len(SHAPE_CYCLE), size=count).astype(np.int8)
        self.shape_angles = np.zeros(count)
        self.shape_counters = np.zeros(count, dtype=np.int64)

        self.wiggle_angles = rng.uniform(0.0, TWO_PI, size=count)
        self.wiggle_magnitudes = np.full(count, self.wiggle_magnitude)

        logging.info(f"ParticleSystem initialized with {count} particles.")
        logging.debug(
            f"Particle arrays created. Positions shape: {self.positions.shape}, "
            f"viewport {self.width}x{self.height}."
        )

    def reset(self) -> None:
        """Discards every particle and spawns a new population of the configured size."""
        logging.info("Resetting particle population.")
        self.initialize(self.configured_count)

    def resize(self, width: int, height: int) -> None:
        """Updates the spawn area; existing particles keep their positions."""
        self.width = width
        self.height = height

    def update_all(self, context: FrameContext) -> int:
        return self.simulation.step(self, context)

    def draw_all(self, surface: pygame.Surface) -> None:
        for i in range(self.particle_count):
            visualization.draw_particle(
                surface,
                Shape(int(self.shapes[i])),
                self.positions[i, 0], self.positions[i, 1],
                self.current_sizes[i], self.shape_angles[i],
                self.color_of(i)
            )

    def color_of(self, index: int) -> pygame.Color:
        """HSL colour of one particle, using its displayed lightness."""
        return visualization.hsl_color(
            self.hues[index], self.saturations[index], self.current_lightness[index]
        )

    def __len__(self) -> int:
        return self.particle_count
