# main.py
"""
Main entry point for the drifting particles and waves demo.

This script orchestrates the whole lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Builds the particle field and the wave layers for the viewport.
4. Runs the render loop, ticking the motion engine once per frame.
5. Handles clean shutdown.
"""
import logging
import time
from collections import Counter
from typing import Any, Dict, List, Sequence

import numpy as np

from geometry import Rect, polygon_area
from utils import setup_logging, load_config
import cProfile
import pstats
import io


def build_waves(wave_configs: List[Dict[str, Any]]) -> list:
    """
    Creates one WaveAnimator per config entry, back to front.

    Entries flagged "background" run the same animation with a longer
    cycle so that layers drift against each other.
    """
    from wave_animation import WaveAnimator, slower

    animators = []
    for wave_config in wave_configs:
        animator = WaveAnimator.from_config(wave_config)
        if wave_config.get('background', False):
            animator.behaviour = slower(animator.behaviour, wave_config.get('slowdown', 0.5))
        animators.append(animator)
    logging.info(f"Built {len(animators)} wave layers.")
    return animators


def water_coverage(paths: Sequence[np.ndarray], viewport: Rect) -> float:
    """Fraction of the viewport under the front wave layer."""
    if not paths:
        return 0.0
    return polygon_area(paths[-1]) / (viewport.width * viewport.height)


def main():
    """
    The main function to run the demo.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config('config.json')
    except Exception as e:
        print(f"FATAL: Could not load config.json. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Motion Demo Starting ---")

    run_params = config.get('run_control', {})
    viewer_params = config.get('viewer', {})
    particle_params = config.get('particles', {})
    wave_configs = config.get('waves', [])

    from simulation import ParticleField
    from visualization import Visualizer

    # --- Component Initialization ---
    # 1. The visualizer determines the viewport.
    visualizer = Visualizer(viewer_params, wave_layers=len(wave_configs))
    viewport = visualizer.viewport

    # 2. The motion engine works inside that viewport.
    edge_hits = Counter()
    try:
        field = ParticleField(
            particle_params,
            viewport,
            on_edge_hit=lambda point, edge: edge_hits.update([edge.value]),
        )
        waves = build_waves(wave_configs)
    except ValueError as e:
        logging.critical(f"FATAL: Invalid scene configuration. Error: {e}")
        visualizer.close()
        return

    profiler = cProfile.Profile()
    profile_enabled = run_params.get('profile', True)

    log_throttle = run_params.get('log_throttle_steps', 300)
    max_steps = run_params.get('max_steps', 5000)

    running = True
    step_num = 0

    if profile_enabled:
        profiler.enable()
    while running:
        now = time.monotonic()
        positions = field.tick(now)
        paths = [wave.surface(viewport, now) for wave in waves]
        step_num += 1

        # The visualizer returns False when the user quits.
        if not visualizer.draw(positions, paths):
            running = False

        # Hot loops must throttle logs
        if step_num % log_throttle == 0:
            logging.info(f"Frame {step_num}/{max_steps}")
            logging.debug(
                f"Frame {step_num} | Visible particles: {field.visible_count} | "
                f"Edge hits: {dict(edge_hits)} | "
                f"Water coverage: {water_coverage(paths, viewport):.0%}"
            )

        if step_num >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping.")
            running = False
    if profile_enabled:
        profiler.disable()

    field.stop()
    visualizer.close()
    logging.info("Render loop finished.")

    if profile_enabled:
        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        # Sort by cumulative time spent in the function
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20)
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Motion Demo Shutting Down ---")


if __name__ == "__main__":
    main()
