# context.py
"""
Shared per-frame state that input collaborators mutate between ticks.

A single FrameContext is handed to every tick. Input handlers write to it
(pointer presses, resizes, audio samples) and the core only reads it.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

import numpy as np

from constants import MOUSE_ID

# --- Data Contracts ---
#
# class PointerSet:
#   - press(pointer_id: int, x: float, y: float) -> None
#     - Side Effects: Adds the pointer, replacing any entry with the same id.
#   - move(pointer_id: int, x: float, y: float) -> None
#     - Side Effects: Updates an existing pointer; unknown ids are ignored.
#   - release(pointer_id: int) -> None
#     - Side Effects: Removes exactly the entry with that id, if present.
#   - as_array() -> np.ndarray
#     - Outputs: (M, 2) float64 array of pointer positions, M may be 0.
#
# class FrameContext:
#   - Invariants: width and height are positive; audio_level is None
#     whenever no audio source is active.


@dataclass
class Pointer:
    pointer_id: int
    x: float
    y: float


class PointerSet:
    """Active mouse and touch contacts, keyed by their stable id."""

    def __init__(self):
        self._pointers: Dict[int, Pointer] = {}

    def press(self, pointer_id: int, x: float, y: float) -> None:
        self._pointers[pointer_id] = Pointer(pointer_id, float(x), float(y))
        logging.debug(f"Pointer {pointer_id} pressed at ({x:.1f}, {y:.1f}).")

    def move(self, pointer_id: int, x: float, y: float) -> None:
        pointer = self._pointers.get(pointer_id)
        if pointer is not None:
            pointer.x = float(x)
            pointer.y = float(y)

    def release(self, pointer_id: int) -> None:
        if self._pointers.pop(pointer_id, None) is not None:
            logging.debug(f"Pointer {pointer_id} released.")

    def clear(self) -> None:
        self._pointers.clear()

    def get(self, pointer_id: int) -> Optional[Pointer]:
        return self._pointers.get(pointer_id)

    @property
    def mouse(self) -> Optional[Pointer]:
        return self._pointers.get(MOUSE_ID)

    def as_array(self) -> np.ndarray:
        if not self._pointers:
            return np.empty((0, 2), dtype=np.float64)
        return np.array(
            [(p.x, p.y) for p in self._pointers.values()], dtype=np.float64
        )

    def __contains__(self, pointer_id: int) -> bool:
        return pointer_id in self._pointers

    def __iter__(self) -> Iterator[Pointer]:
        return iter(list(self._pointers.values()))

    def __len__(self) -> int:
        return len(self._pointers)


@dataclass
class FrameContext:
    """Viewport extents, active pointers and the current audio level."""
    width: int
    height: int
    pointers: PointerSet = field(default_factory=PointerSet)
    # Average byte frequency energy (0-255), None when no audio is active.
    audio_level: Optional[float] = None

    def resize(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            logging.warning(f"Ignoring degenerate viewport size {width}x{height}.")
            return
        self.width = width
        self.height = height
        logging.info(f"Viewport resized to {width}x{height}.")
