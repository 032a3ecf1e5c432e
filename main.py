# main.py
"""
Main entry point for the Followers simulation.

This script orchestrates the entire run:
1. Loads configuration from `config.json` (or --config).
2. Initializes the logging system.
3. Builds the World from the versioned parameter record.
4. Runs the frame loop, interactively or headless.
5. Exports PNG/SVG output and shuts down cleanly.
"""
import argparse
import dataclasses
import io
import logging
import os
import cProfile
import pstats
import numpy as np
from typing import Optional
from utils import setup_logging, load_config, save_config


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Deterministic particle-trail art: particles that follow their partners."
    )
    parser.add_argument('--config', default='config.json', help='Path to the JSON config file (default: config.json)')
    parser.add_argument('--config-str', default=None, help='Shareable config string; overrides the parameters in the config file')
    parser.add_argument('--headless', action='store_true', help='Run without a window and write PNG/SVG output')
    parser.add_argument('--frames', type=int, default=None, help='Override the frame limit')
    parser.add_argument('--output-dir', default=None, help='Directory for exported files')
    parser.add_argument('--profile', action='store_true', help='Log a cProfile summary of the main loop')
    parser.add_argument('--log-level', default=None, help='Override the configured log level (e.g. DEBUG)')
    return parser.parse_args(argv)


def build_world(config) -> Optional["World"]:
    """Builds a World, or logs why it cannot and returns None."""
    from params import ValidationError
    from world import World
    try:
        return World(config.sim_params, config.display_params)
    except ValidationError as e:
        logging.warning(f"Failed to create world: {e}")
        return None


def export_outputs(renderer, config, output_dir: str, background) -> None:
    from visualization import export_png, export_svg
    sim = config.sim_params
    export_png(renderer.image, os.path.join(output_dir, sim.file_name('png')))
    export_svg(renderer.world, os.path.join(output_dir, sim.file_name('svg')), background)
    save_config(os.path.join(output_dir, sim.file_name('json')), config.to_dict())


def run_headless(renderer, log_throttle: int) -> None:
    while renderer.frame():
        step_num = renderer.frame_idx
        # Rule 2.4: Hot loops must throttle logs
        if step_num % log_throttle == 0:
            logging.info(f"Simulation step {step_num}/{renderer.frame_limit}")
            avg_velocity = np.mean(np.linalg.norm(renderer.world.velocities, axis=1))
            logging.debug(f"Step {step_num} | Average Velocity: {avg_velocity:.4f}")


def run_interactive(renderer, config, run_params: dict, output_dir: str, svg_background) -> None:
    from params import Seed, encode_config_str
    from visualization import Visualizer, Action, export_png, export_svg
    from constants import FPS, WINDOW_WIDTH, WINDOW_HEIGHT

    visualizer = Visualizer(
        run_params.get('window_width', WINDOW_WIDTH),
        run_params.get('window_height', WINDOW_HEIGHT),
    )
    renderer.resize(visualizer.sim_width, visualizer.sim_height)
    visualizer.set_palette(config.display_params)
    fps = run_params.get('fps', FPS)
    log_throttle = run_params.get('log_throttle_steps', 100)
    seed_rng = np.random.default_rng()

    running = True
    while running:
        for action in visualizer.poll_events():
            if action is Action.QUIT:
                running = False
            elif action is Action.PAUSE_RESUME:
                renderer.pause_resume()
            elif action is Action.RESIZE:
                renderer.resize(visualizer.sim_width, visualizer.sim_height)
            elif action in (Action.RESET, Action.RANDOM_SEED):
                if action is Action.RANDOM_SEED:
                    seed = Seed.from_hash(int(seed_rng.integers(0, 2**63)))
                    config.sim_params = dataclasses.replace(config.sim_params, seed=seed)
                world = build_world(config)
                if world is not None:
                    renderer.set_world(world)
                    logging.info(f"Config string: {encode_config_str(config)}")
            elif action is Action.SAVE_PNG:
                export_png(renderer.image, os.path.join(output_dir, config.sim_params.file_name('png')))
            elif action is Action.SAVE_SVG:
                export_svg(renderer.world, os.path.join(output_dir, config.sim_params.file_name('svg')), svg_background)

        if renderer.frame() and renderer.frame_idx % log_throttle == 0:
            logging.info(f"Simulation step {renderer.frame_idx}/{renderer.frame_limit}")

        visualizer.draw(renderer, config)
        visualizer.tick(fps)

    visualizer.close()


def main(argv=None):
    """
    The main function to run the simulation.
    """
    args = parse_args(argv)

    # Logging is not set up yet, so we use a print for this one error.
    try:
        raw_config = load_config(args.config)
    except Exception as e:
        print(f"FATAL: Could not load {args.config}. Error: {e}")
        return

    setup_logging(raw_config, args.log_level)
    logging.info("--- Followers Simulation Starting ---")

    from color import Color
    from constants import IMAGE_BACKGROUND_HEX, SVG_BACKGROUND_HEX, WINDOW_WIDTH, WINDOW_HEIGHT
    from params import Config, decode_config_str, encode_config_str
    from renderer import WorldRenderer

    try:
        config = Config.from_dict(raw_config)
    except ValueError as e:
        logging.critical(f"Invalid configuration: {e}")
        return
    if args.config_str:
        decoded = decode_config_str(args.config_str)
        if decoded is None:
            logging.critical("Could not decode --config-str.")
            return
        config = decoded
    if args.frames is not None:
        config.frame_limit = max(args.frames, 1)
    logging.info(f"Config string: {encode_config_str(config)}")

    run_params = raw_config.get('run_control', {})
    output_dir = args.output_dir or run_params.get('output_dir', 'output')
    svg_background = Color.hex(SVG_BACKGROUND_HEX)

    world = build_world(config)
    if world is None:
        return
    renderer = WorldRenderer(
        world,
        run_params.get('window_width', WINDOW_WIDTH),
        run_params.get('window_height', WINDOW_HEIGHT),
        Color.hex(IMAGE_BACKGROUND_HEX),
        config.frame_limit,
    )

    profiler = cProfile.Profile() if args.profile else None
    if profiler:
        profiler.enable()
    if args.headless:
        run_headless(renderer, run_params.get('log_throttle_steps', 100))
        export_outputs(renderer, config, output_dir, svg_background)
    else:
        run_interactive(renderer, config, run_params, output_dir, svg_background)
    if profiler:
        profiler.disable()
        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        # Sort by cumulative time spent in the function
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20)
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Followers Simulation Shutting Down ---")


if __name__ == "__main__":
    main()
