"""
===============================================================================
CONIC TRANSFER CORE - Orbit Position
===============================================================================
One instant on a trajectory: an (Orbit, true anomaly) pair.

Time is not stored.  It is always recoverable as
orbit.time_from_periapsis(true_anomaly).  Radius and velocity vectors are
recomputed from the orbit on every call, so a position never disagrees
with its orbit.

Positions are immutable.  Moving along the orbit produces a new position
(with_true_anomaly / advanced_by); the orbit itself is shared, not copied.
===============================================================================
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from core.angles import normalize_angle
from core.tolerance import Tolerance
from dynamics.celestial_body import CelestialBody
from dynamics.orbit import Orbit


@dataclass(frozen=True)
class OrbitPosition:
    """
    A point on an orbit identified by its true anomaly.

    Attributes
    ----------
    orbit : Orbit
        The trajectory this position lies on.
    true_anomaly : float
        True anomaly in radians, normalised into [0, 2*pi).
    """
    orbit: Orbit
    true_anomaly: float

    def __post_init__(self):
        # frozen: bypass __setattr__ to store the normalised anomaly
        object.__setattr__(self, 'true_anomaly', normalize_angle(float(self.true_anomaly)))

    @classmethod
    def from_state(
        cls,
        body: CelestialBody,
        radius: np.ndarray,
        velocity: np.ndarray,
        tolerance: Optional[Tolerance] = None,
    ) -> 'OrbitPosition':
        """
        Position described by a state vector pair.

        The orbit comes from Orbit.from_state and the anomaly from the
        eccentricity-vector method, with the sign of r . v choosing between
        the outbound (f) and inbound (2*pi - f) branch.
        """
        orbit = Orbit.from_state(body, radius, velocity, tolerance)
        anomaly = Orbit.true_anomaly_at(body, radius, velocity, orbit.tolerance)
        return cls(orbit=orbit, true_anomaly=anomaly)

    # -------------------------------------------------------------------------
    # Replacement (no in-place mutation)
    # -------------------------------------------------------------------------

    def with_true_anomaly(self, true_anomaly: float) -> 'OrbitPosition':
        """A new position on the same orbit at *true_anomaly*."""
        return OrbitPosition(orbit=self.orbit, true_anomaly=true_anomaly)

    def advanced_by(self, delta_anomaly: float) -> 'OrbitPosition':
        """A new position *delta_anomaly* radians further along the orbit."""
        return self.with_true_anomaly(self.true_anomaly + delta_anomaly)

    # -------------------------------------------------------------------------
    # Orbit pass-through
    # -------------------------------------------------------------------------

    @property
    def central_body(self) -> CelestialBody:
        return self.orbit.central_body

    @property
    def semi_major_axis(self) -> float:
        return self.orbit.semi_major_axis

    @property
    def eccentricity(self) -> float:
        return self.orbit.eccentricity

    @property
    def inclination(self) -> float:
        return self.orbit.inclination

    @property
    def raan(self) -> float:
        return self.orbit.raan

    @property
    def arg_periapsis(self) -> float:
        return self.orbit.arg_periapsis

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    def radius(self) -> float:
        """Distance from the central body (km)."""
        return self.orbit.radius_at(self.true_anomaly)

    def radius_vector(self) -> np.ndarray:
        return self.orbit.radius_vector_at(self.true_anomaly)

    def velocity(self) -> float:
        """Speed (km/s)."""
        return self.orbit.velocity_at(self.true_anomaly)

    def velocity_vector(self) -> np.ndarray:
        return self.orbit.velocity_vector_at(self.true_anomaly)

    def time_from_periapsis(self) -> float:
        return self.orbit.time_from_periapsis(self.true_anomaly)
