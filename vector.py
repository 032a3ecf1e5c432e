# vector.py
"""
2D vector helpers.

Vectors live in NumPy arrays of shape (N, 2), so addition, subtraction
and scaling are plain NumPy arithmetic. The functions here cover the
remaining operations on a single vector given as an (x, y) scalar pair.
They are Numba-jitted so the physics kernel can call them from inside
its hot loop without allocating arrays.
"""
import numpy as np
from numba import jit

# --- Data Contracts ---
#
# dot(ax, ay, bx, by) -> float
# length_squared(x, y) -> float
# distance_squared(ax, ay, bx, by) -> float
#   - Outputs: float, never negative for the squared forms.
#
# clamp_length(x, y, max_length) -> (float, float):
#   - Outputs: the vector unchanged if its length is at most max_length,
#     otherwise the vector rescaled to exactly max_length.
#   - Invariants: the direction is preserved.
#
# lerp(x, old_min, old_max, new_min, new_max) -> float:
#   - Linearly maps x from [old_min, old_max] onto [new_min, new_max].
#     Works on scalars and NumPy arrays alike.


@jit(nopython=True)
def dot(ax, ay, bx, by):
    return ax * bx + ay * by


@jit(nopython=True)
def length_squared(x, y):
    return x * x + y * y


@jit(nopython=True)
def distance_squared(ax, ay, bx, by):
    return length_squared(ax - bx, ay - by)


@jit(nopython=True)
def clamp_length(x, y, max_length):
    """Scales (x, y) down to max_length if it is longer than that."""
    length_sq = x * x + y * y
    if length_sq > max_length * max_length:
        scale = max_length / np.sqrt(length_sq)
        return x * scale, y * scale
    return x, y


def lerp(x, old_min, old_max, new_min, new_max):
    """Maps x from one range onto another."""
    return (x - old_min) / (old_max - old_min) * (new_max - new_min) + new_min
