# main.py
"""
Main entry point for the swirl particle animation.

This script orchestrates the whole lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Builds the particle store, the frame context and the window.
4. Runs the frame loop until the window is closed.
5. Handles clean shutdown.
"""
import cProfile
import io
import logging
import pstats
import sys

from utils import setup_logging, load_config


def main(config_path: str = 'config.json') -> int:
    """
    The main function to run the animation.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(config_path)
    except Exception as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return 1

    setup_logging(config)

    logging.info("--- Swirl Particles Starting ---")

    sim_params = config.get('simulation_parameters', {})
    vis_params = config.get('visualization', {})
    audio_params = config.get('audio', {})
    run_params = config.get('run_control', {})

    from audio import AudioLevelMonitor
    from constants import COMPOSITE_MODE, FEEDBACK_ROTATION, FEEDBACK_ZOOM, TRAIL_ALPHA
    from context import FrameContext
    from driver import FrameDriver
    from particle import ParticleSystem
    from visualization import Compositor, Visualizer

    visualizer = Visualizer(vis_params)
    width, height = visualizer.requested_size

    context = FrameContext(width, height)
    particles = ParticleSystem(sim_params, width, height)
    compositor = Compositor(
        mode=vis_params.get('composite_mode', COMPOSITE_MODE),
        rotation=vis_params.get('feedback_rotation', FEEDBACK_ROTATION),
        zoom=vis_params.get('feedback_zoom', FEEDBACK_ZOOM),
        trail_alpha=vis_params.get('trail_alpha', TRAIL_ALPHA),
    )
    audio = AudioLevelMonitor(audio_params) if audio_params.get('enabled', True) else None

    driver = FrameDriver(particles, context, visualizer, compositor, audio, run_params)

    profiler = cProfile.Profile() if run_params.get('profile', False) else None
    max_frames = run_params.get('max_frames')

    if profiler is not None:
        profiler.enable()
    try:
        driver.run(max_frames=max_frames)
    finally:
        if profiler is not None:
            profiler.disable()
        driver.shutdown()

    if profiler is not None:
        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20)
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Swirl Particles Shutting Down ---")
    return 0


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:2]))
