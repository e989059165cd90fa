"""3D vector utilities for sphere tracing.

Python-side vectors are NumPy float64 arrays of shape (3,). Arithmetic
(addition, subtraction, scalar multiply and divide) comes from NumPy and
always produces new arrays, so vectors are immutable by convention.

Kernel-side code uses the ``vec3d`` Taichi type together with
``taichi.math`` helpers, which implement the same operations in f64.

Example:
    >>> from src.raymarcher.core.vector import vec3, normalize, length
    >>> v = normalize(vec3(3.0, 0.0, 4.0))
    >>> round(length(v), 9)
    1.0
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti

# Python-side 3D vector
Vector3 = npt.NDArray[np.float64]

# Kernel-side 3D vector (double precision to match the NumPy path)
vec3d = ti.types.vector(3, ti.f64)


def vec3(x: float, y: float, z: float) -> Vector3:
    """Create a 3D vector.

    Args:
        x: X component.
        y: Y component.
        z: Z component.

    Returns:
        A float64 array of shape (3,).
    """
    return np.array((x, y, z), dtype=np.float64)


def as_vec3(value: npt.ArrayLike) -> Vector3:
    """Convert a 3-tuple or array-like to a ``Vector3``.

    Raises:
        ValueError: If the value does not have exactly three components.
    """
    v = np.asarray(value, dtype=np.float64)
    if v.shape != (3,):
        raise ValueError(f"Expected a 3-component vector, got shape {v.shape}")
    return v


def dot(a: Vector3, b: Vector3) -> float:
    """Compute the dot product of two vectors."""
    return float(a[0] * b[0] + a[1] * b[1] + a[2] * b[2])


def length_squared(v: Vector3) -> float:
    """Compute the squared length of a vector.

    Avoids the square root when only comparing magnitudes.
    """
    return dot(v, v)


def length(v: Vector3) -> float:
    """Compute the Euclidean length of a vector."""
    return math.sqrt(length_squared(v))


def normalize(v: Vector3) -> Vector3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector. Must have nonzero length.

    Returns:
        A unit vector in the same direction as v.

    Raises:
        ValueError: If v has zero length.
    """
    norm2 = length_squared(v)
    if norm2 == 0.0:
        raise ValueError("Cannot normalize a zero-length vector")
    return v / math.sqrt(norm2)
