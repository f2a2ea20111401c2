# interaction.py
"""
Pointer and audio influence on particles.

Pointers within the interaction radius pull particles toward them with a
perpendicular swirl component, so particles orbit rather than home in, and
brighten/grow them with a linear proximity falloff. An active audio source
raises the ambient brightness and size of every particle, and pointer boosts
are layered on top of that ambient level.
"""
import logging
from typing import Any, Dict, Optional, Tuple, TYPE_CHECKING

import numpy as np
from numba import jit

from constants import (
    INTERACTION_RADIUS, DIRECT_ATTRACTION_FACTOR, SWIRL_FACTOR,
    COINCIDENCE_EPSILON_SQ, POINTER_LIGHTNESS_BOOST, POINTER_SIZE_BOOST,
    AUDIO_LIGHTNESS_BOOST, AUDIO_SIZE_BOOST, AUDIO_REFERENCE_LEVEL,
    PARTICLE_SIZE_MIN, PARTICLE_SIZE_MAX
)

if TYPE_CHECKING:
    from particle import ParticleSystem

# --- Data Contracts ---
#
# apply_audio_influence(system: ParticleSystem, audio_level: Optional[float]) -> None:
#   - Side Effects: When audio_level is not None, overwrites the ambient and
#     target lightness/size arrays with base + boost * (audio_level / 128),
#     clamped. Does nothing otherwise.
#
# apply_pointer_influence(system: ParticleSystem, pointers: np.ndarray) -> int:
#   - Inputs: pointers is an (M, 2) float64 array, M may be 0.
#   - Outputs: Number of particles touched by at least one pointer.
#   - Side Effects: Adds attraction + swirl to velocities. Sets target
#     lightness/size to ambient + averaged boost for touched particles.
#     Untouched particles keep their previous targets.


@jit(nopython=True)
def _pointer_forces_numba(
    positions, velocities, pointers, radius, radius_sq, attract, swirl,
    epsilon_sq, lightness_boost, size_boost
):
    """
    Numba-jitted pointer force accumulation.

    Returns the per-particle average lightness and size boosts together with
    the number of pointers that contributed to each particle.
    """
    particle_count = positions.shape[0]
    pointer_count = pointers.shape[0]
    avg_lightness = np.zeros(particle_count)
    avg_size = np.zeros(particle_count)
    contributions = np.zeros(particle_count, dtype=np.int64)

    for i in range(particle_count):
        px = positions[i, 0]
        py = positions[i, 1]
        total_lightness = 0.0
        total_size = 0.0
        count = 0
        for k in range(pointer_count):
            force_x = pointers[k, 0] - px
            force_y = pointers[k, 1] - py
            distance_sq = force_x * force_x + force_y * force_y

            if distance_sq < radius_sq and distance_sq > epsilon_sq:
                distance = np.sqrt(distance_sq)
                proximity = 1.0 - distance / radius
                proximity = max(0.0, min(1.0, proximity))

                total_lightness += lightness_boost * proximity
                total_size += size_boost * proximity
                count += 1

                velocities[i, 0] += force_x * attract + force_y * swirl
                velocities[i, 1] += force_y * attract - force_x * swirl

        if count > 0:
            avg_lightness[i] = total_lightness / count
            avg_size[i] = total_size / count
            contributions[i] = count

    return avg_lightness, avg_size, contributions


def apply_pointer_forces(
    positions: np.ndarray, velocities: np.ndarray, pointers: np.ndarray,
    radius: float = INTERACTION_RADIUS,
    attract: float = DIRECT_ATTRACTION_FACTOR,
    swirl: float = SWIRL_FACTOR,
    epsilon_sq: float = COINCIDENCE_EPSILON_SQ,
    lightness_boost: float = POINTER_LIGHTNESS_BOOST,
    size_boost: float = POINTER_SIZE_BOOST,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Thin wrapper that normalises dtypes before entering the jitted kernel."""
    pointers = np.ascontiguousarray(pointers, dtype=np.float64).reshape(-1, 2)
    return _pointer_forces_numba(
        positions, velocities, pointers,
        float(radius), float(radius) ** 2, float(attract), float(swirl),
        float(epsilon_sq), float(lightness_boost), float(size_boost)
    )


class InteractionField:
    """Holds the interaction parameters and applies them to a particle system."""

    def __init__(self, params: Optional[Dict[str, Any]] = None):
        params = params or {}
        self.radius = float(params.get('interaction_radius', INTERACTION_RADIUS))
        self.attract = float(params.get('attraction_factor', DIRECT_ATTRACTION_FACTOR))
        self.swirl = float(params.get('swirl_factor', SWIRL_FACTOR))
        self.epsilon_sq = float(params.get('coincidence_epsilon_sq', COINCIDENCE_EPSILON_SQ))
        self.pointer_lightness_boost = float(params.get('pointer_lightness_boost', POINTER_LIGHTNESS_BOOST))
        self.pointer_size_boost = float(params.get('pointer_size_boost', POINTER_SIZE_BOOST))
        self.audio_lightness_boost = float(params.get('audio_lightness_boost', AUDIO_LIGHTNESS_BOOST))
        self.audio_size_boost = float(params.get('audio_size_boost', AUDIO_SIZE_BOOST))
        self.size_min = float(params.get('size_min', PARTICLE_SIZE_MIN))
        self.size_max = float(params.get('size_max', PARTICLE_SIZE_MAX))

        if self.radius <= 0:
            msg = f"Configuration error: interaction_radius must be positive, got {self.radius}."
            logging.critical(msg)
            raise ValueError(msg)

    def apply_audio_influence(self, system: "ParticleSystem", audio_level: Optional[float]) -> None:
        """Sets ambient and target brightness/size from the audio level."""
        if audio_level is None:
            return
        audio_factor = audio_level / AUDIO_REFERENCE_LEVEL

        system.ambient_lightness = np.clip(
            system.base_lightness + self.audio_lightness_boost * audio_factor, 0.0, 100.0
        )
        system.ambient_sizes = np.clip(
            system.base_sizes + self.audio_size_boost * audio_factor,
            self.size_min, self.size_max
        )
        system.lightness = system.ambient_lightness.copy()
        system.sizes = system.ambient_sizes.copy()

    def apply_pointer_influence(self, system: "ParticleSystem", pointers: np.ndarray) -> int:
        """Applies pointer forces and boosts; returns how many particles were touched."""
        if len(pointers) == 0 or system.particle_count == 0:
            return 0

        avg_lightness, avg_size, contributions = apply_pointer_forces(
            system.positions, system.velocities, pointers,
            radius=self.radius, attract=self.attract, swirl=self.swirl,
            epsilon_sq=self.epsilon_sq,
            lightness_boost=self.pointer_lightness_boost,
            size_boost=self.pointer_size_boost,
        )

        touched = contributions > 0
        if touched.any():
            # Boosts ride on the ambient level so audio and pointers compose.
            system.lightness[touched] = np.clip(
                system.ambient_lightness[touched] + avg_lightness[touched], 0.0, 100.0
            )
            system.sizes[touched] = np.clip(
                system.ambient_sizes[touched] + avg_size[touched],
                self.size_min, self.size_max
            )
        return int(touched.sum())
