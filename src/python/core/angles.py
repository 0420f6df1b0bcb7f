"""
===============================================================================
CONIC TRANSFER CORE - Angle Helpers
===============================================================================
Angles are carried as plain float radians.  These helpers provide the few
operations the orbit code needs on top of NumPy: range normalisation,
inverse cosine that tolerates round-off just outside [-1, 1], and the
cotangent used by the Lambert velocity coefficients.
===============================================================================
"""

import numpy as np

from core.constants import TWO_PI, DEG2RAD, RAD2DEG


def normalize_angle(angle: float) -> float:
    """
    Wrap an angle into [0, 2*pi).

    Parameters
    ----------
    angle : float
        Angle in radians, any range.

    Returns
    -------
    float
        Equivalent angle in [0, 2*pi).
    """
    wrapped = float(np.mod(angle, TWO_PI))
    # np.mod can return exactly 2*pi for tiny negative inputs
    if wrapped >= TWO_PI:
        wrapped = 0.0
    return wrapped


def arccos_clipped(value: float) -> float:
    """Inverse cosine with the argument clipped into [-1, 1]."""
    return float(np.arccos(np.clip(value, -1.0, 1.0)))


def arcsin_clipped(value: float) -> float:
    """Inverse sine with the argument clipped into [-1, 1]."""
    return float(np.arcsin(np.clip(value, -1.0, 1.0)))


def cot(angle: float) -> float:
    """
    Cotangent, cos/sin.

    Returns +/-inf when sin(angle) is exactly zero; callers that can reach
    that point handle it before calling.
    """
    s = np.sin(angle)
    c = np.cos(angle)
    if s == 0.0:
        return float(np.copysign(np.inf, c))
    return float(c / s)


def deg(angle_rad: float) -> float:
    """Radians -> degrees."""
    return angle_rad * RAD2DEG


def rad(angle_deg: float) -> float:
    """Degrees -> radians."""
    return angle_deg * DEG2RAD
