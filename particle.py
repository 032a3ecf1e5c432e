# particle.py
"""
Manages the state of all particles in the simulation.

This module defines the ParticleSystem class, which is responsible for
deterministically generating particle data (position, velocity,
partners, color) and storing it in columnar NumPy arrays.
"""
import logging
import numpy as np
from color import Color
from constants import SPAWN_RADIUS_MIN, SPAWN_RADIUS_MAX
from params import SimParams, DisplayParams
from vector import lerp

# --- Data Contracts ---
#
# class ParticleSystem:
#   - __init__(self, sim_params: SimParams, display_params: DisplayParams):
#     - Inputs:
#       - sim_params: seed and particle_count are used here.
#       - display_params: the hue/saturation ranges and the fixed
#         value/alpha of the particle colors.
#     - Outputs: None
#     - Side Effects: Initializes internal NumPy arrays for particle state.
#     - Invariants:
#       - self.positions is a NumPy array of shape (N, 2) of dtype float32.
#       - self.velocities is a NumPy array of shape (N, 2) of dtype float32.
#       - self.partners is a NumPy array of shape (N, 2) of dtype int64,
#         and for every i, partners[i] = (j, k) with i, j, k all distinct.
#       - self.colors is a NumPy array of shape (N, 4) of dtype uint8.
#       - The same (sim_params, display_params) always produce bit-identical
#         arrays.

# Order of the sub-seeds drawn from the master seed.
STREAMS = ('positions', 'velocities', 'partners', 'colors')


def derive_stream_seeds(seed_value: int) -> dict:
    """
    Fans a single seed out into one independent sub-seed per particle array.

    Each array is generated from its own RNG, so changing how one array is
    drawn never perturbs the others.
    """
    master = np.random.default_rng(seed_value)
    sub_seeds = master.integers(
        0, np.iinfo(np.uint64).max, size=len(STREAMS), dtype=np.uint64, endpoint=True
    )
    return {name: int(s) for name, s in zip(STREAMS, sub_seeds)}


class ParticleSystem:
    """
    A container for all particles, managing their state via NumPy arrays.
    """
    def __init__(self, sim_params: SimParams, display_params: DisplayParams):
        """
        Initializes the particle system.

        Args:
            sim_params (SimParams): Seed and particle count.
            display_params (DisplayParams): Color palette parameters.
        """
        self.particle_count = sim_params.particle_count
        self.seed = sim_params.seed

        # Rule 12: All randomness is controlled by a single master seed.
        # Each array gets a dedicated RNG derived from it.
        stream_seeds = derive_stream_seeds(self.seed.value)
        rngs = {name: np.random.default_rng(s) for name, s in stream_seeds.items()}

        self.positions = self._generate_positions(rngs['positions'])
        self.velocities = np.zeros((self.particle_count, 2), dtype=np.float32)
        self.partners = self._generate_partners(rngs['partners'])
        self.colors = self._generate_colors(rngs['colors'], display_params)

        logging.info(
            f"ParticleSystem initialized with {self.particle_count} "
            f"particles from seed {self.seed.as_str()!r} (0x{self.seed.value:016x})."
        )
        logging.debug(
            f"Particle data arrays created. "
            f"Positions shape: {self.positions.shape}, "
            f"Velocities shape: {self.velocities.shape}, "
            f"Partners shape: {self.partners.shape}, "
            f"Colors shape: {self.colors.shape}"
        )

    def _generate_positions(self, rng: np.random.Generator) -> np.ndarray:
        """An evenly spaced ring with a little radial jitter."""
        n = self.particle_count
        angles = lerp(np.arange(n, dtype=np.float64), 0.0, n, 0.0, 2.0 * np.pi)
        radii = rng.uniform(SPAWN_RADIUS_MIN, SPAWN_RADIUS_MAX, size=n)
        positions = np.stack([radii * np.cos(angles), radii * np.sin(angles)], axis=1)
        return positions.astype(np.float32)

    def _generate_partners(self, rng: np.random.Generator) -> np.ndarray:
        n = self.particle_count
        partners = np.empty((n, 2), dtype=np.int64)
        for i in range(n):
            j = rng.integers(n)
            while j == i:
                j = rng.integers(n)
            k = rng.integers(n)
            while k == i or k == j:
                k = rng.integers(n)
            partners[i] = (j, k)
        return partners

    def _generate_colors(self, rng: np.random.Generator, display_params: DisplayParams) -> np.ndarray:
        hue_low, hue_high = display_params.hue_range()
        sat_low, sat_high = display_params.saturation_range()
        # One (hue, saturation) draw per particle, in particle order.
        draws = rng.random((self.particle_count, 2))
        hues = hue_low + draws[:, 0] * (hue_high - hue_low)
        saturations = sat_low + draws[:, 1] * (sat_high - sat_low)

        colors = np.empty((self.particle_count, 4), dtype=np.uint8)
        for i in range(self.particle_count):
            colors[i] = Color.hsva(
                float(hues[i]),
                float(saturations[i]),
                display_params.particle_color_value,
                display_params.particle_color_alpha,
            )
        return colors

    def color(self, idx: int) -> Color:
        return Color(*(int(c) for c in self.colors[idx]))
