"""Tests for the particle store and the per-frame update pipeline."""

import numpy as np
import pygame
import pytest

from context import FrameContext
from oscillator import Shape
from particle import ParticleSystem
from simulation import Simulation


class TestInitialization:
    def test_population_within_ranges(self, system, context):
        assert len(system) == 50
        assert system.positions.shape == (50, 2)
        assert np.all(system.positions[:, 0] <= context.width)
        assert np.all(system.positions[:, 1] <= context.height)
        assert np.all(np.abs(system.velocities) <= 1.0)
        assert np.all((system.base_sizes >= system.size_min) & (system.base_sizes <= system.size_max))
        assert np.all((system.hues >= 0) & (system.hues < 360))
        assert set(np.unique(system.shapes)) <= {int(s) for s in Shape}
        assert np.all((system.wiggle_angles >= 0) & (system.wiggle_angles < 2 * np.pi))

    def test_seed_reproducible(self, sim_params):
        a = ParticleSystem(sim_params, 800, 600)
        b = ParticleSystem(sim_params, 800, 600)
        np.testing.assert_array_equal(a.positions, b.positions)

    def test_initialize_custom_count(self, system):
        system.initialize(7)
        assert len(system) == 7
        assert system.hues.shape == (7,)

    def test_empty_population(self, context):
        system = ParticleSystem({"particle_count": 0}, 800, 600)
        assert system.update_all(context) == 0

    @pytest.mark.parametrize("params", [
        {"particle_count": -1},
        {"size_min": 30.0, "size_max": 10.0},
        {"max_speed": 0.0},
    ])
    def test_invalid_configuration(self, params):
        with pytest.raises(ValueError):
            ParticleSystem(params, 800, 600)


class TestReset:
    def test_reset_twice_leaves_no_residual_state(self, system, context):
        context.pointers.press(0, 400, 300)
        for _ in range(5):
            system.update_all(context)
        old_arrays = [system.positions, system.velocities, system.hues, system.lightness]

        system.reset()
        system.reset()

        assert len(system) == system.configured_count
        for old in old_arrays:
            assert all(new is not old for new in
                       (system.positions, system.velocities, system.hues, system.lightness))
        np.testing.assert_array_equal(system.shape_counters, 0)
        np.testing.assert_array_equal(system.lightness, system.base_lightness)

    def test_reset_draws_new_population(self, system):
        before = system.positions.copy()
        system.reset()
        assert not np.array_equal(before, system.positions)


class TestUpdateInvariants:
    def test_ranges_hold_under_pointers_and_audio(self, sim_params):
        context = FrameContext(320, 240)
        system = ParticleSystem({**sim_params, "particle_count": 200}, 320, 240)
        context.pointers.press(0, 100, 100)
        context.pointers.press(1, 250, 200)

        for frame in range(300):
            context.audio_level = float(frame % 256) if frame > 100 else None
            if frame == 200:
                context.pointers.release(0)
            system.update_all(context)

            speeds = np.linalg.norm(system.velocities, axis=1)
            assert np.all(speeds <= system.simulation.max_speed + 1e-9)
            assert np.all((system.positions[:, 0] >= 0) & (system.positions[:, 0] <= 320))
            assert np.all((system.positions[:, 1] >= 0) & (system.positions[:, 1] <= 240))
            assert np.all((system.hues >= 0) & (system.hues < 360))
            assert np.all((system.saturations >= 0) & (system.saturations <= 100))
            assert np.all((system.current_lightness >= 0) & (system.current_lightness <= 100))
            assert np.all(system.current_sizes >= system.size_min)
            assert np.all(system.current_sizes <= system.size_max)

    def test_shapes_cycle_deterministically(self, sim_params, context):
        system = ParticleSystem({**sim_params, "shape_change_interval": 2}, 800, 600)
        start = system.shapes.copy()
        expected = (start + 1) % 3
        for _ in range(2):
            system.update_all(context)
        np.testing.assert_array_equal(system.shapes, start)
        system.update_all(context)
        np.testing.assert_array_equal(system.shapes, expected)

    def test_saturation_constant_when_pulse_disabled(self, context):
        system = ParticleSystem({"seed": 3, "pulse_saturation": False}, 800, 600)
        system.update_all(context)
        np.testing.assert_array_equal(system.saturations, 70.0)


class TestScenarios:
    def test_pointer_pulls_resting_particle(self, single_particle, context):
        system = single_particle(400, 300)
        context.pointers.press(0, 450, 300)

        system.update_all(context)

        vx, vy = system.velocities[0]
        assert (vx, vy) != (0.0, 0.0)
        assert vx > 0
        assert system.positions[0, 0] > 400

    def test_swirl_bends_velocity(self, single_particle, context):
        system = single_particle(400, 300, wiggle_magnitude=0.0, max_speed=10.0)
        context.pointers.press(0, 450, 300)
        system.update_all(context)
        assert system.velocities[0, 0] == pytest.approx(1.0)
        assert system.velocities[0, 1] == pytest.approx(-0.5)

    def test_boundary_bounce(self, single_particle, context):
        system = single_particle(799, 300, vx=2.0, wiggle_magnitude=0.0, max_speed=5.0)
        system.update_all(context)
        assert system.velocities[0, 0] == -2.0
        assert system.positions[0, 0] == 800.0

    def test_audio_level_128_targets_full_boost(self, single_particle, context):
        system = single_particle(400, 300)
        context.audio_level = 128.0
        system.update_all(context)
        assert system.lightness[0] == pytest.approx(min(100.0, system.base_lightness[0] + 20.0))
        # The displayed value moves a tenth of the way there.
        assert system.current_lightness[0] == pytest.approx(60.0 + 2.0)

    def test_audio_and_pointer_compose(self, single_particle, context):
        system = single_particle(400, 300)
        context.audio_level = 128.0
        context.pointers.press(0, 475, 300)
        system.update_all(context)
        assert system.lightness[0] == pytest.approx(60.0 + 20.0 + 15.0)

    def test_glow_sticks_without_influence(self, single_particle, context):
        system = single_particle(400, 300)
        context.audio_level = 255.0
        system.update_all(context)
        target = system.lightness[0]
        context.audio_level = None
        for _ in range(100):
            system.update_all(context)
        assert system.lightness[0] == target
        assert system.current_lightness[0] == target


class TestDrawing:
    def test_draw_all_paints_particles(self, sim_params):
        system = ParticleSystem({**sim_params, "particle_count": 20}, 200, 150)
        system.shapes[:] = Shape.CIRCLE
        system.current_sizes[:] = 5.0
        surface = pygame.Surface((200, 150))
        surface.fill((0, 0, 0))
        system.draw_all(surface)
        for x, y in system.positions:
            px, py = min(int(x), 199), min(int(y), 149)
            assert surface.get_at((px, py))[:3] != (0, 0, 0)

    def test_color_uses_displayed_lightness(self, single_particle):
        system = single_particle(10, 10)
        system.hues[0] = 0.0
        system.saturations[0] = 100.0
        system.current_lightness[0] = 100.0
        assert system.color_of(0)[:3] == (255, 255, 255)

    def test_custom_simulation(self):
        simulation = Simulation({"max_speed": 2.0})
        system = ParticleSystem({"particle_count": 3}, 100, 100, simulation=simulation)
        assert system.simulation is simulation
