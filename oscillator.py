# oscillator.py
"""
Deterministic per-particle cycles: hue rotation, saturation pulse, shape
morphing, rotation angle and wiggle.

The rotation and wiggle angles grow without bound. That is harmless because
they are only ever consumed through sin/cos.
"""
from enum import IntEnum
from typing import Tuple

import numpy as np

from constants import (
    SATURATION_CENTER, SATURATION_AMPLITUDE, SATURATION_FREQUENCY,
    SHAPE_ROTATION_STEP, SHAPE_CHANGE_INTERVAL, WIGGLE_STEP
)


class Shape(IntEnum):
    CIRCLE = 0
    SQUARE = 1
    TRIANGLE = 2


# Order in which shapes morph into one another.
SHAPE_CYCLE: Tuple[Shape, ...] = (Shape.CIRCLE, Shape.SQUARE, Shape.TRIANGLE)


def next_shape(shape: Shape) -> Shape:
    """Returns the shape that follows `shape` in the morph cycle."""
    index = SHAPE_CYCLE.index(Shape(shape))
    return SHAPE_CYCLE[(index + 1) % len(SHAPE_CYCLE)]


# Lookup table so whole arrays of shape codes advance in one indexing step.
_NEXT_SHAPE_CODES = np.array(
    [next_shape(shape) for shape in sorted(SHAPE_CYCLE)], dtype=np.int8
)


def step_toward(current, target, rate: float, snap_epsilon: float):
    """
    One step of exponential smoothing from `current` toward `target`.

    Values that end up within `snap_epsilon` of the target snap onto it so
    the smoothing actually arrives. Accepts scalars or arrays.
    """
    stepped = current + (target - current) * rate
    if isinstance(stepped, np.ndarray):
        return np.where(np.abs(target - stepped) < snap_epsilon, target, stepped)
    return target if abs(target - stepped) < snap_epsilon else stepped


def advance_hues(hues: np.ndarray, step: float) -> None:
    """Rotates every hue by `step` degrees, wrapping into [0, 360)."""
    np.mod(hues + step, 360.0, out=hues)


def saturation_for_hues(hues: np.ndarray) -> np.ndarray:
    """Saturation pulse between 50 and 100, driven by the hue."""
    saturations = SATURATION_CENTER + np.sin(hues * SATURATION_FREQUENCY) * SATURATION_AMPLITUDE
    return np.clip(saturations, 0.0, 100.0)


def advance_shapes(shapes: np.ndarray, angles: np.ndarray, counters: np.ndarray,
                   interval: int = SHAPE_CHANGE_INTERVAL,
                   rotation_step: float = SHAPE_ROTATION_STEP) -> None:
    """
    Spins every shape and morphs it once its counter passes `interval`.

    A shape therefore changes every `interval + 1` calls.
    """
    angles += rotation_step
    counters += 1
    due = counters > interval
    if due.any():
        counters[due] = 0
        shapes[due] = _NEXT_SHAPE_CODES[shapes[due]]


def apply_wiggle(velocities: np.ndarray, wiggle_angles: np.ndarray,
                 magnitudes: np.ndarray, step: float = WIGGLE_STEP) -> None:
    """Adds a slowly rotating push of constant per-particle magnitude."""
    wiggle_angles += step
    velocities[:, 0] += np.cos(wiggle_angles) * magnitudes
    velocities[:, 1] += np.sin(wiggle_angles) * magnitudes
