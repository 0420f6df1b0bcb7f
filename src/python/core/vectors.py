"""
===============================================================================
CONIC TRANSFER CORE - Vector Helpers
===============================================================================
Fixed-size vectors are plain NumPy float64 arrays.  This module adds the
operations with failure modes the orbit code must guard against:

    unit(v)             normalisation, raises on zero magnitude
    angle_between(a, b) arccos(a.b / |a||b|), range [0, pi]
    cross3(a, b)        cross product, 3-D operands only

and the inertial basis vectors I_HAT, J_HAT, K_HAT.
===============================================================================
"""

import numpy as np

from core.angles import arccos_clipped
from core.errors import NumericalDegeneracyError


I_HAT = np.array([1.0, 0.0, 0.0], dtype=np.float64)
J_HAT = np.array([0.0, 1.0, 0.0], dtype=np.float64)
K_HAT = np.array([0.0, 0.0, 1.0], dtype=np.float64)
I_HAT.flags.writeable = False
J_HAT.flags.writeable = False
K_HAT.flags.writeable = False


def vec3(values) -> np.ndarray:
    """
    Coerce *values* to a 3-element float64 array.

    Raises
    ------
    ValueError
        If *values* does not have exactly three components.
    """
    v = np.asarray(values, dtype=np.float64)
    if v.shape != (3,):
        raise ValueError(f"Expected a 3-element vector, got shape {v.shape}")
    return v


def magnitude(v: np.ndarray) -> float:
    return float(np.linalg.norm(v))


def unit(v: np.ndarray) -> np.ndarray:
    """
    Return the direction of *v* as a unit vector.

    Raises
    ------
    NumericalDegeneracyError
        If *v* has zero (or non-finite) magnitude.
    """
    v = np.asarray(v, dtype=np.float64)
    mag = np.linalg.norm(v)
    if mag == 0.0 or not np.isfinite(mag):
        raise NumericalDegeneracyError(
            f"Cannot normalise a vector of magnitude {mag}"
        )
    return v / mag


def cross3(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Cross product of two 3-element vectors."""
    return np.cross(vec3(a), vec3(b))


def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """
    Unsigned angle between two vectors, in [0, pi].

    Raises
    ------
    NumericalDegeneracyError
        If either vector has zero magnitude.
    """
    return arccos_clipped(float(np.dot(unit(a), unit(b))))
