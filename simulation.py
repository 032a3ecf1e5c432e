# simulation.py
"""
Handles the core simulation logic and physics calculations.

This module defines the Simulation class, which is responsible for
advancing the state of the particle system by one time step. Every
particle steers toward a point projected along the line through its two
partners, at or beyond the second partner.
"""
import logging
import numpy as np
from numba import jit
from constants import MAX_VELOCITY
from particle import ParticleSystem
from params import SimParams
from vector import dot, distance_squared, clamp_length

# --- Data Contracts ---
#
# class Simulation:
#   - __init__(self, particles: ParticleSystem, params: SimParams):
#     - Inputs:
#       - particles: An initialized ParticleSystem object.
#       - params: acc_limit is the base-2 exponent of the acceleration cap.
#     - Side Effects: Stores references to particles and parameters.
#
#   - step(self) -> None:
#     - Side Effects: Modifies the positions and velocities of the
#       internal ParticleSystem.
#     - Invariants:
#       - Particle count remains constant.
#       - The tick is synchronous: every steering computation reads the
#         pre-tick positions only.
#       - Each velocity change is at most 2**acc_limit long and every
#         velocity is at most MAX_VELOCITY long after the step.


@jit(nopython=True)
def _steer_numba(positions, velocities, partners, acc_limit, max_velocity):
    """
    Numba-jitted steering pass. Updates velocities in place and leaves
    positions untouched, so all particles see the same pre-tick state.
    """
    particle_count = positions.shape[0]
    for i in range(particle_count):
        px = float(positions[i, 0])
        py = float(positions[i, 1])
        a = partners[i, 0]
        b = partners[i, 1]
        p1x = float(positions[a, 0])
        p1y = float(positions[a, 1])
        p2x = float(positions[b, 0])
        p2y = float(positions[b, 1])

        # Project onto the partner line. The target never lies strictly
        # between the partners: t is at least 1.
        segment_sq = distance_squared(p2x, p2y, p1x, p1y)
        if segment_sq == 0.0:
            t = 1.0
        else:
            t = dot(px - p1x, py - p1y, p2x - p1x, p2y - p1y) / segment_sq
            if t < 1.0:
                t = 1.0
        target_x = p2x * t + p1x * (1.0 - t)
        target_y = p2y * t + p1y * (1.0 - t)

        ax, ay = clamp_length(target_x - px, target_y - py, acc_limit)
        vx = float(velocities[i, 0]) + ax
        vy = float(velocities[i, 1]) + ay
        vx, vy = clamp_length(vx, vy, max_velocity)
        velocities[i, 0] = vx
        velocities[i, 1] = vy


class Simulation:
    """
    Advances the particle system one tick at a time.
    """
    def __init__(self, particles: ParticleSystem, params: SimParams):
        """
        Initializes the simulation environment.

        Args:
            particles (ParticleSystem): The particle system to simulate.
            params (SimParams): Simulation parameters.
        """
        self.particles = particles
        self.acc_limit_exponent = params.acc_limit
        self.acc_limit = 2.0 ** params.acc_limit
        self.max_velocity = MAX_VELOCITY

        logging.info(
            f"Simulation logic initialized: acceleration limit 2^{self.acc_limit_exponent} "
            f"({self.acc_limit:g}), max velocity {self.max_velocity:g}."
        )

    def step(self):
        """
        Executes one time step of the simulation.
        """
        # 1. Steer every particle toward its projected target (using Numba)
        _steer_numba(
            self.particles.positions, self.particles.velocities,
            self.particles.partners, self.acc_limit, self.max_velocity
        )

        # 2. Move, only after every velocity has been finalized
        self.particles.positions += self.particles.velocities
