# simulation.py
"""
Handles the per-frame update of the particle population.

This module defines the Simulation class, which advances every particle by
one display frame: audio influence, colour and shape cycling, wiggle, pointer
interaction, visual smoothing, speed capping, integration and boundary
reflection, in that order.
"""
import logging
from typing import Dict, Any, Optional, TYPE_CHECKING

from constants import (
    MAX_PARTICLE_SPEED, HUE_STEP, SHAPE_CHANGE_INTERVAL, SHAPE_ROTATION_STEP,
    WIGGLE_STEP, SMOOTHING_RATE, SMOOTHING_SNAP_EPSILON
)
from context import FrameContext
from interaction import InteractionField
from kinematics import cap_speed, integrate, reflect_at_bounds
from oscillator import (
    advance_hues, saturation_for_hues, advance_shapes, apply_wiggle, step_toward
)

if TYPE_CHECKING:
    from particle import ParticleSystem

# --- Data Contracts ---
#
# class Simulation:
#   - __init__(self, params: Optional[Dict[str, Any]] = None):
#     - Inputs:
#       - params: The "simulation_parameters" section of config.json.
#         Missing keys fall back to constants.py.
#
#   - step(self, system: ParticleSystem, context: FrameContext) -> int:
#     - Outputs: Number of particles touched by a pointer this frame.
#     - Side Effects: Mutates every state array of `system`.
#     - Invariants: After the call every speed is <= max_speed and every
#       position lies inside [0, width] x [0, height] of the context.

class Simulation:
    """
    Advances a ParticleSystem by one frame.
    """
    def __init__(self, params: Optional[Dict[str, Any]] = None):
        params = params or {}
        self.max_speed = float(params.get('max_speed', MAX_PARTICLE_SPEED))
        self.hue_step = float(params.get('hue_step', HUE_STEP))
        self.pulse_saturation = bool(params.get('pulse_saturation', True))
        self.shape_change_interval = int(params.get('shape_change_interval', SHAPE_CHANGE_INTERVAL))
        self.shape_rotation_step = float(params.get('shape_rotation_step', SHAPE_ROTATION_STEP))
        self.wiggle_step = float(params.get('wiggle_step', WIGGLE_STEP))
        self.smoothing_rate = float(params.get('smoothing_rate', SMOOTHING_RATE))
        self.snap_epsilon = float(params.get('smoothing_snap_epsilon', SMOOTHING_SNAP_EPSILON))
        self.interaction = InteractionField(params)

        if self.max_speed <= 0:
            msg = f"Configuration error: max_speed must be positive, got {self.max_speed}."
            logging.critical(msg)
            raise ValueError(msg)

        logging.info(
            f"Simulation initialized: max speed {self.max_speed}, "
            f"interaction radius {self.interaction.radius}, "
            f"shape interval {self.shape_change_interval}."
        )

    def step(self, system: "ParticleSystem", context: FrameContext) -> int:
        """
        Executes one frame of the update pipeline.
        """
        if system.particle_count == 0:
            return 0

        # 1. Audio sets the ambient level before pointers layer on top.
        self.interaction.apply_audio_influence(system, context.audio_level)

        # 2. Colour cycling
        advance_hues(system.hues, self.hue_step)
        if self.pulse_saturation:
            system.saturations = saturation_for_hues(system.hues)

        # 3. Shape rotation and morphing
        advance_shapes(
            system.shapes, system.shape_angles, system.shape_counters,
            interval=self.shape_change_interval,
            rotation_step=self.shape_rotation_step
        )

        # 4. Wiggle
        apply_wiggle(system.velocities, system.wiggle_angles,
                     system.wiggle_magnitudes, step=self.wiggle_step)

        # 5. Pointer attraction, swirl and boosts
        touched = self.interaction.apply_pointer_influence(
            system, context.pointers.as_array()
        )

        # 6. Displayed values chase their targets
        system.current_lightness = step_toward(
            system.current_lightness, system.lightness,
            self.smoothing_rate, self.snap_epsilon
        )
        system.current_sizes = step_toward(
            system.current_sizes, system.sizes,
            self.smoothing_rate, self.snap_epsilon
        )

        # 7-9. Kinematics
        cap_speed(system.velocities, self.max_speed)
        integrate(system.positions, system.velocities)
        reflect_at_bounds(system.positions, system.velocities,
                          context.width, context.height)
        return touched
