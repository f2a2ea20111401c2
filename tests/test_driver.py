"""Tests for the frame driver state machine and loop."""

import threading

import numpy as np
import pygame
import pytest

from context import FrameContext
from driver import DriverState, FrameDriver
from errors import AudioUnavailableError, SurfaceUnavailableError
from particle import ParticleSystem
from visualization import Compositor


class FakeVisualizer:
    """Off-screen stand-in for the pygame window."""

    def __init__(self, size=(200, 150), fail=False, quit_after=None):
        self.size = size
        self.fail = fail
        self.quit_after = quit_after
        self.surface = None
        self.presented = 0
        self.closed = False
        self.handled = 0

    def open(self):
        if self.fail:
            raise SurfaceUnavailableError("no display")
        self.surface = pygame.Surface(self.size)
        return self.surface

    def handle_events(self, context, on_reset, on_audio_request):
        self.handled += 1
        if self.quit_after is not None and self.handled > self.quit_after:
            return False
        return True

    def present(self):
        self.presented += 1

    def close(self):
        self.closed = True


class FakeAudio:
    def __init__(self, level=None, fail=False, ready=None):
        self.level = level
        self.fail = fail
        self.ready = ready
        self.active = False
        self.stopped = False
        self.starts = 0

    def start(self):
        self.starts += 1
        if self.ready is not None:
            self.ready.wait(timeout=5)
        if self.fail:
            raise AudioUnavailableError("denied")
        self.active = True

    def sample(self):
        return self.level if self.active else None

    def stop(self):
        self.stopped = True


@pytest.fixture
def particles(sim_params):
    return ParticleSystem(sim_params, 800, 600)


def _driver(particles, visualizer, audio=None, mode="clear"):
    context = FrameContext(800, 600)
    return FrameDriver(particles, context, visualizer, Compositor(mode=mode), audio,
                       {"fps": 1000, "log_throttle_steps": 2})


class TestStart:
    def test_idle_before_start(self, particles):
        driver = _driver(particles, FakeVisualizer())
        assert driver.state is DriverState.IDLE

    def test_start_runs_and_adopts_surface_size(self, particles):
        driver = _driver(particles, FakeVisualizer(size=(320, 240)))
        assert driver.start()
        assert driver.state is DriverState.RUNNING
        assert (driver.context.width, driver.context.height) == (320, 240)
        assert (particles.width, particles.height) == (320, 240)

    def test_larger_window_respawns_over_whole_viewport(self, particles):
        # Spawned for 800x600, the window comes up at 1920x1080.
        driver = _driver(particles, FakeVisualizer(size=(1920, 1080)))
        assert driver.start()
        assert len(particles) == particles.configured_count
        assert particles.positions[:, 0].max() > 800
        assert particles.positions[:, 1].max() > 600
        assert np.all(particles.positions[:, 0] <= 1920)
        assert np.all(particles.positions[:, 1] <= 1080)

    def test_matching_window_keeps_population(self, particles):
        positions = particles.positions
        driver = _driver(particles, FakeVisualizer(size=(800, 600)))
        assert driver.start()
        assert particles.positions is positions

    def test_missing_surface_fails_without_drawing(self, particles):
        visualizer = FakeVisualizer(fail=True)
        driver = _driver(particles, visualizer)
        before = particles.positions.copy()

        assert driver.run(max_frames=5) == 0

        assert driver.state is DriverState.FAILED
        assert visualizer.presented == 0
        np.testing.assert_array_equal(particles.positions, before)

    def test_failed_driver_stays_failed(self, particles):
        driver = _driver(particles, FakeVisualizer(fail=True))
        driver.start()
        assert not driver.start()
        assert driver.state is DriverState.FAILED


class TestLoop:
    def test_run_draws_requested_frames(self, particles):
        visualizer = FakeVisualizer()
        driver = _driver(particles, visualizer)
        assert driver.run(max_frames=3) == 3
        assert driver.frame_count == 3
        assert visualizer.presented == 3

    def test_quit_stops_loop(self, particles):
        driver = _driver(particles, FakeVisualizer(quit_after=2))
        assert driver.run(max_frames=10) == 2

    def test_tick_keeps_particles_inside_new_bounds(self, particles):
        driver = _driver(particles, FakeVisualizer(size=(100, 80)))
        driver.start()
        # Particles spawned for 800x600 are respawned inside at start.
        driver.tick()
        assert np.all(particles.positions[:, 0] <= 100)
        assert np.all(particles.positions[:, 1] <= 80)

    @pytest.mark.parametrize("mode", ["feedback", "trail", "clear"])
    def test_tick_paints_surface(self, particles, mode):
        driver = _driver(particles, FakeVisualizer(), mode=mode)
        driver.start()
        driver.tick()
        pixels = pygame.surfarray.array3d(driver.surface)
        assert pixels.any()

    def test_resize_moves_spawn_area(self, particles):
        driver = _driver(particles, FakeVisualizer())
        driver.start()
        driver.context.resize(640, 480)
        driver.on_resize()
        particles.reset()
        assert np.all(particles.positions[:, 0] <= 640)

    def test_reset_request(self, particles):
        driver = _driver(particles, FakeVisualizer())
        old_positions = particles.positions
        driver.request_reset()
        assert particles.positions is not old_positions
        assert len(particles) == particles.configured_count


class TestAudio:
    def test_audio_level_sampled_into_context(self, particles):
        audio = FakeAudio(level=128.0)
        driver = _driver(particles, FakeVisualizer(), audio=audio)
        driver.sample_audio()
        assert driver.context.audio_level is None

        driver.request_audio()
        driver.audio_thread.join(timeout=5)
        driver.sample_audio()
        assert driver.context.audio_level == 128.0

    def test_slow_stream_open_does_not_block_frames(self, particles):
        opened = threading.Event()
        audio = FakeAudio(level=64.0, ready=opened)
        driver = _driver(particles, FakeVisualizer(), audio=audio)
        driver.start()

        driver.request_audio()
        assert driver.audio_thread.is_alive()
        driver.sample_audio()
        driver.tick()
        assert driver.context.audio_level is None

        # A second key press while the stream is still opening is ignored.
        first_thread = driver.audio_thread
        driver.request_audio()
        assert driver.audio_thread is first_thread

        opened.set()
        driver.audio_thread.join(timeout=5)
        driver.sample_audio()
        assert driver.context.audio_level == 64.0
        assert audio.starts == 1

    def test_denied_audio_is_absent_for_session(self, particles):
        driver = _driver(particles, FakeVisualizer(), audio=FakeAudio(level=99.0, fail=True))
        driver.request_audio()
        driver.audio_thread.join(timeout=5)
        driver.sample_audio()
        assert driver.audio is None
        assert driver.context.audio_level is None
        driver.request_audio()
        assert driver.run(max_frames=2) == 2

    def test_shutdown_stops_audio_and_window(self, particles):
        audio = FakeAudio()
        visualizer = FakeVisualizer()
        driver = _driver(particles, visualizer, audio=audio)
        driver.run(max_frames=1)
        driver.shutdown()
        assert audio.stopped
        assert visualizer.closed
