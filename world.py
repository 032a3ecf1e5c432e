# world.py
"""
The simulation world.

A World is built once per parameter set and owns the particle state, the
physics and the trajectory history. It renders frames into a
caller-owned Image and can replay its history as an SVG drawing.
Changing parameters means building a new World, never mutating one.
"""
import logging
import re
import numpy as np
import constants
from color import Color
from history import History
from image import Image, splat_many_numba
from particle import ParticleSystem
from params import SimParams, DisplayParams
from simulation import Simulation
from vector import lerp

# --- Data Contracts ---
#
# class World:
#   - __init__(self, sim_params: SimParams, display_params: DisplayParams):
#     - Side Effects: Generates particles and records the initial
#       positions as the first history snapshot.
#     - Raises: ValidationError if sim_params.particle_count < 3.
#
#   - update(self) -> None: one simulation tick, then one history snapshot.
#   - render(self, image: Image) -> None:
#     - Side Effects: Splats every particle onto `image`. The world origin
#       maps to the image center. Does not modify the World.
#   - generate_svg(self, background_color: Color) -> str:
#     - Outputs: An SVG document with one path per particle tracing its
#       recorded trajectory. Never fails.


_INTEGRAL_SUFFIX = re.compile(r'\.0\b')


def format_coords(values) -> str:
    """
    Space-separated shortest text that round-trips each value as a float32.

    Integral values drop the trailing ".0" ("3", "-0"). Very small or very
    large magnitudes keep numpy's exponent notation, which SVG accepts.
    """
    text = np.asarray(values, dtype=np.float32).ravel().astype(str)
    return _INTEGRAL_SUFFIX.sub('', " ".join(text.tolist()))


def path_data(trajectory: np.ndarray) -> str:
    """SVG path commands for one (T, 2) trajectory: "M x y L x y ..."."""
    commands = np.full((len(trajectory), 1), 'L')
    commands[0, 0] = 'M'
    tokens = np.hstack([commands, trajectory.astype(np.float32).astype(str)])
    return _INTEGRAL_SUFFIX.sub('', " ".join(tokens.ravel().tolist()))


class World:
    """
    Particles that follow their partners, plus everything needed to draw them.
    """
    def __init__(self, sim_params: SimParams, display_params: DisplayParams):
        sim_params.check()
        self.sim_params = sim_params
        self.display_params = display_params

        logging.info(
            f"World init - 0x{sim_params.seed.value:016x}:"
            f"{sim_params.particle_count}:2^{sim_params.acc_limit}"
        )

        self.particles = ParticleSystem(sim_params, display_params)
        self.simulation = Simulation(self.particles, sim_params)
        self.history = History(self.particles.positions, constants.HISTORY_MEMORY_CAP)
        self.frame_idx = 0

    @property
    def particle_count(self) -> int:
        return self.particles.particle_count

    @property
    def positions(self) -> np.ndarray:
        return self.particles.positions

    @property
    def velocities(self) -> np.ndarray:
        return self.particles.velocities

    @property
    def partners(self) -> np.ndarray:
        return self.particles.partners

    @property
    def colors(self) -> np.ndarray:
        return self.particles.colors

    def update(self):
        """Advances the simulation by one tick and records the new positions."""
        self.simulation.step()
        self.history.append(self.particles.positions)
        self.frame_idx += 1

    def render(self, image: Image):
        """Draws every particle onto `image`, centered on the world origin."""
        positions = self.particles.positions
        xs = positions[:, 0].astype(np.float64) + image.width / 2.0
        ys = positions[:, 1].astype(np.float64) + image.height / 2.0
        splat_many_numba(image.pixels, xs, ys, self.particles.colors)

    def generate_svg(self, background_color: Color) -> str:
        """
        Replays the recorded trajectories as an SVG document.

        The view box is the bounding box of every recorded position, so the
        drawing is independent of any raster size.
        """
        trajectories = self.history.as_array()
        low = trajectories.min(axis=(0, 1))
        size = trajectories.max(axis=(0, 1)) - low
        w, h = format_coords(size[0]), format_coords(size[1])
        view_box = format_coords([low[0], low[1], size[0], size[1]])

        lines = ['<?xml version="1.0" encoding="UTF-8"?>']
        lines.append(
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{h}" '
            f'viewBox="{view_box}" style="background: #{background_color.to_hex()};">'
        )
        # Coordinates are formatted one particle column at a time.
        for idx in range(self.particle_count):
            stroke = self.particles.color(idx).to_hex()
            lines.append(
                f'  <path fill="none" stroke="#{stroke}" stroke-linejoin="round" '
                f'd="{path_data(trajectories[:, idx])}" />'
            )
        lines.append('</svg>')

        logging.info(
            f"Generated SVG with {self.particle_count} paths over "
            f"{len(self.history)} recorded steps."
        )
        return "\n".join(lines) + "\n"


def render_palette(display_params: DisplayParams, width: int, height: int) -> Image:
    """
    Previews the particle color range.

    Hue runs left to right across the hue range and saturation runs from
    the top (highest) to the bottom (lowest). Alpha is full so the preview
    shows the colors, not their opacity.
    """
    hue_low, hue_high = display_params.hue_range()
    sat_low, sat_high = display_params.saturation_range()
    image = Image(width, height, Color.transparent())
    for y in range(height):
        saturation = lerp(y, max(height - 1, 1), 0, sat_low, sat_high)
        for x in range(width):
            hue = lerp(x, 0, max(width - 1, 1), hue_low, hue_high)
            image.put_pixel(
                x, y,
                Color.hsva(hue, saturation, display_params.particle_color_value, 100.0)
            )
    return image
