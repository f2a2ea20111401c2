# kinematics.py
"""
Velocity/position integration, speed capping and boundary reflection.

All functions operate in place on (N, 2) float64 arrays, one row per
particle, and return nothing.
"""
import numpy as np


def cap_speed(velocities: np.ndarray, max_speed: float) -> None:
    """Rescales any velocity whose magnitude exceeds max_speed down to it."""
    speed_sq = velocities[:, 0]**2 + velocities[:, 1]**2
    over_speed_mask = speed_sq > max_speed * max_speed
    if not over_speed_mask.any():
        return
    # Only the offending rows pay for the square root.
    speed = np.sqrt(speed_sq[over_speed_mask])
    velocities[over_speed_mask] = (
        velocities[over_speed_mask] / speed[:, np.newaxis]
    ) * max_speed


def integrate(positions: np.ndarray, velocities: np.ndarray) -> None:
    """Euler step with a timestep of one frame."""
    positions += velocities


def reflect_at_bounds(positions: np.ndarray, velocities: np.ndarray,
                      width: float, height: float) -> None:
    """
    Bounces particles off the viewport edges.

    Each axis is handled independently: a particle outside [0, extent] has
    that velocity component negated and its position clamped to the edge it
    crossed, so a corner hit reflects both axes in the same frame.
    """
    for axis, extent in ((0, width), (1, height)):
        coords = positions[:, axis]
        outside = (coords < 0) | (coords > extent)
        if outside.any():
            velocities[outside, axis] *= -1
            np.clip(coords, 0, extent, out=coords)
