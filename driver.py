# driver.py
"""
Runs the animation one display refresh at a time.

The driver starts IDLE. Acquiring the drawing surface moves it to RUNNING;
failing to acquire one moves it to FAILED, in which case no frame is ever
drawn. There is no natural end state: the loop runs until the window closes.
"""
import logging
import threading
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np
import pygame

from audio import AudioLevelMonitor
from constants import FPS
from context import FrameContext
from errors import AudioUnavailableError, SurfaceUnavailableError
from particle import ParticleSystem
from visualization import Compositor, Visualizer

# --- Data Contracts ---
#
# class FrameDriver:
#   - start(self) -> bool
#     - Outputs: True when the driver is RUNNING.
#     - Side Effects: Opens the visualizer. On SurfaceUnavailableError the
#       state becomes FAILED and the error is logged, never raised.
#   - tick(self) -> int
#     - Outputs: Number of particles touched by a pointer this frame.
#     - Side Effects: Composites, updates and draws one frame.
#   - run(self, max_frames: Optional[int] = None) -> int
#     - Outputs: Number of frames drawn.


class DriverState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    FAILED = "failed"


class FrameDriver:
    """Binds the particle store, the frame context and the window together."""

    def __init__(self, particles: ParticleSystem, context: FrameContext,
                 visualizer: Visualizer, compositor: Compositor,
                 audio: Optional[AudioLevelMonitor] = None,
                 run_params: Optional[Dict[str, Any]] = None):
        run_params = run_params or {}
        self.particles = particles
        self.context = context
        self.visualizer = visualizer
        self.compositor = compositor
        self.audio = audio
        self.fps = int(run_params.get('fps', FPS))
        self.log_throttle = max(1, int(run_params.get('log_throttle_steps', 300)))
        self.state = DriverState.IDLE
        self.surface: Optional[pygame.Surface] = None
        self.frame_count = 0
        self.clock: Optional[pygame.time.Clock] = None
        self.audio_thread: Optional[threading.Thread] = None
        self._audio_failed = False

    def start(self) -> bool:
        if self.state is not DriverState.IDLE:
            return self.state is DriverState.RUNNING
        try:
            self.surface = self.visualizer.open()
        except SurfaceUnavailableError as e:
            logging.critical(f"Animation cannot start: {e}")
            self.state = DriverState.FAILED
            return False

        width, height = self.surface.get_size()
        self.context.resize(width, height)
        if (width, height) != (self.particles.width, self.particles.height):
            # The first population was spawned for the requested window size.
            self.particles.resize(width, height)
            self.particles.reset()
        self.clock = pygame.time.Clock()
        self.state = DriverState.RUNNING
        logging.info("Frame driver running.")
        return True

    def tick(self) -> int:
        """
        Draws one frame: compositing, then update and draw of every particle.
        """
        # The visualizer swaps its surface on resize.
        if self.visualizer.surface is not None:
            self.surface = self.visualizer.surface
        surface = self.surface
        self.compositor.apply(surface)
        touched = self.particles.update_all(self.context)
        self.particles.draw_all(surface)
        self.frame_count += 1

        if self.frame_count % self.log_throttle == 0:
            logging.info(f"Frame {self.frame_count}")
            if self.particles.particle_count:
                mean_speed = np.mean(np.linalg.norm(self.particles.velocities, axis=1))
            else:
                mean_speed = 0.0
            logging.debug(
                f"Frame {self.frame_count} | Mean speed: {mean_speed:.4f} | "
                f"Pointers: {len(self.context.pointers)} | Touched: {touched} | "
                f"Audio level: {self.context.audio_level}"
            )
        return touched

    def request_reset(self) -> None:
        self.particles.reset()

    def request_audio(self) -> None:
        """
        One-shot microphone request.

        The stream is opened on a worker thread so the frame loop never waits
        on the audio backend; the level shows up in the context once the
        first block has been analysed. A failure leaves audio off for the
        session.
        """
        if self.audio is None or self.audio.active:
            return
        if self.audio_thread is not None and self.audio_thread.is_alive():
            return
        self.audio_thread = threading.Thread(
            target=self._open_audio, args=(self.audio,),
            name="microphone-open", daemon=True
        )
        self.audio_thread.start()

    def _open_audio(self, audio: AudioLevelMonitor) -> None:
        try:
            audio.start()
        except AudioUnavailableError as e:
            logging.error(f"{e}. Continuing without audio.")
            self._audio_failed = True

    def sample_audio(self) -> None:
        if self._audio_failed:
            self.audio = None
            self._audio_failed = False
        self.context.audio_level = self.audio.sample() if self.audio is not None else None

    def on_resize(self) -> None:
        self.particles.resize(self.context.width, self.context.height)

    def run(self, max_frames: Optional[int] = None) -> int:
        """Runs frames until the window is closed or `max_frames` is reached."""
        if not self.start():
            return 0

        drawn = 0
        viewport = (self.context.width, self.context.height)
        while max_frames is None or drawn < max_frames:
            if not self.visualizer.handle_events(
                self.context, self.request_reset, self.request_audio
            ):
                break
            if (self.context.width, self.context.height) != viewport:
                viewport = (self.context.width, self.context.height)
                self.on_resize()

            self.sample_audio()
            self.tick()
            self.visualizer.present()
            self.clock.tick(self.fps)
            drawn += 1

        logging.info(f"Frame loop finished after {drawn} frames.")
        return drawn

    def shutdown(self) -> None:
        if self.audio_thread is not None:
            self.audio_thread.join(timeout=2.0)
        if self.audio is not None:
            self.audio.stop()
        if self.state is DriverState.RUNNING:
            self.visualizer.close()
