import numpy as np
import pytest
from params import Seed, SimParams, DisplayParams
from particle import ParticleSystem
from simulation import Simulation


def reference_step(positions, velocities, partners, acc_limit):
    """Straightforward float64 rendition of one steering tick."""
    pos = positions.astype(np.float64)
    vel = velocities.astype(np.float64).copy()
    for i in range(len(pos)):
        p1 = pos[partners[i, 0]]
        p2 = pos[partners[i, 1]]
        seg = p2 - p1
        seg_sq = seg @ seg
        t = 1.0 if seg_sq == 0.0 else max((pos[i] - p1) @ seg / seg_sq, 1.0)
        target = p2 * t + p1 * (1.0 - t)
        acc = target - pos[i]
        norm = np.linalg.norm(acc)
        if norm > acc_limit:
            acc = acc * (acc_limit / norm)
        vel[i] += acc
        norm = np.linalg.norm(vel[i])
        if norm > 1.0:
            vel[i] = vel[i] * (1.0 / norm)
    return vel


def make(count=20, acc_limit=-1, seed="sim"):
    params = SimParams(seed=Seed.from_str(seed), particle_count=count, acc_limit=acc_limit)
    particles = ParticleSystem(params, DisplayParams())
    return particles, Simulation(particles, params)


@pytest.mark.parametrize("acc_limit", [-10, -1, 0, 3])
def test_step_matches_reference(acc_limit):
    particles, sim = make(acc_limit=acc_limit)
    for _ in range(5):
        positions = particles.positions.copy()
        expected = reference_step(positions, particles.velocities, particles.partners, 2.0 ** acc_limit)
        sim.step()
        assert np.allclose(particles.velocities, expected, atol=1e-5)
        assert np.array_equal(particles.positions, positions + particles.velocities)


def test_velocity_and_acceleration_limits():
    particles, sim = make(count=50, acc_limit=-4)
    for _ in range(30):
        before = particles.velocities.astype(np.float64)
        sim.step()
        after = particles.velocities.astype(np.float64)
        assert np.all(np.linalg.norm(after, axis=1) <= 1.0 + 1e-5)
        # clamping onto the unit disc never lengthens the change
        assert np.all(np.linalg.norm(after - before, axis=1) <= 2.0 ** -4 + 1e-5)


def test_first_step_respects_acceleration_cap():
    particles, sim = make(count=50, acc_limit=-10)
    sim.step()
    assert np.all(np.linalg.norm(particles.velocities, axis=1) <= 2.0 ** -10 + 1e-7)


def test_coincident_partners_target_the_shared_point():
    particles, sim = make(count=3, acc_limit=10)
    particles.positions[:] = [[0.0, 0.0], [5.0, 0.0], [5.0, 0.0]]
    sim.step()
    # t falls back to 1, so particle 0 heads straight for (5, 0), capped at speed 1
    assert np.allclose(particles.velocities[0], [1.0, 0.0])
    assert np.allclose(particles.positions[0], [1.0, 0.0])


def test_target_never_between_partners():
    particles, sim = make(count=3, acc_limit=10)
    particles.positions[:] = [[0.0, 0.0], [-1.0, 0.0], [1.0, 0.0]]
    # 0 sits between its partners; t clamps to 1 so it steers to the second partner
    sim.step()
    second = particles.partners[0, 1]
    expected_x = [0.0, -1.0, 1.0][second]
    assert particles.velocities[0, 0] == pytest.approx(expected_x)
    assert particles.velocities[0, 1] == pytest.approx(0.0)
