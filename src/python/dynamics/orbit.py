"""
===============================================================================
CONIC TRANSFER CORE - Keplerian Orbit
===============================================================================
A fixed Keplerian trajectory about one central body.

This module provides:

    1. **Construction** -- from the five classical elements directly, or
       from an inertial state vector pair (r, v) at an implicit epoch.

    2. **Geometry along the orbit** -- radius, speed, position vector and
       velocity vector as functions of true anomaly.

    3. **Timing** -- time since periapsis through the eccentric and mean
       anomalies (Kepler's equation), and the forward time of flight
       between two true anomalies.

    4. **Classification** -- circular / elliptic / parabolic / hyperbolic.

Orbits are immutable.  An orbit is never edited; a new one is built.

Degenerate-element conventions (applied whenever the inputs land on them):

    equatorial orbit (h along +/-z)   -> raan = 0, node line taken as +x
    circular orbit   (e ~ 0)          -> arg_periapsis = 0

Units are km, km/s, s and radians.

References
----------
    [1] Bate, Mueller & White, "Fundamentals of Astrodynamics", Dover.
    [2] Vallado, "Fundamentals of Astrodynamics and Applications", 4th ed.
    [3] Curtis, "Orbital Mechanics for Engineering Students", 4th ed.
===============================================================================
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from core.angles import arccos_clipped, normalize_angle
from core.constants import PI, TWO_PI
from core.errors import DegenerateGeometryError, UnsupportedTransferTypeError
from core.tolerance import DEFAULT_TOLERANCE, Tolerance
from core.vectors import I_HAT, J_HAT, K_HAT, magnitude, unit, vec3
from dynamics.celestial_body import CelestialBody

logger = logging.getLogger(__name__)


class OrbitType(Enum):
    """Conic section family of an orbit."""
    CIRCULAR = 'circular'
    ELLIPTIC = 'elliptic'
    PARABOLIC = 'parabolic'
    HYPERBOLIC = 'hyperbolic'


def _node_direction(h_hat: np.ndarray, tolerance: Tolerance) -> Tuple[np.ndarray, bool]:
    """
    Unit vector along the ascending node line, and whether the orbit is
    equatorial.

    For an equatorial orbit k x h vanishes and the node line is undefined;
    the inertial x axis is used instead, which is the direction
    Orbit.radius_vector_at treats as the node when raan = 0.
    """
    if tolerance.is_zero(h_hat[0]) and tolerance.is_zero(h_hat[1]):
        return I_HAT.copy(), True
    return unit(np.cross(K_HAT, h_hat)), False


@dataclass(frozen=True)
class Orbit:
    """
    Classical-element description of a Keplerian orbit.

    Attributes
    ----------
    central_body : CelestialBody
        Body at the occupied focus.
    semi_major_axis : float
        a (km).  Negative for hyperbolic orbits.
    eccentricity : float
        e >= 0.
    inclination : float
        i (rad), in [0, pi].
    raan : float
        Right ascension of the ascending node (rad).
    arg_periapsis : float
        Argument of periapsis (rad).
    tolerance : Tolerance
        Equality tolerance for classification and degenerate cases.
    """
    central_body: CelestialBody
    semi_major_axis: float
    eccentricity: float
    inclination: float
    raan: float
    arg_periapsis: float
    tolerance: Tolerance = field(default=DEFAULT_TOLERANCE, repr=False, compare=False)

    def __post_init__(self):
        values = (self.semi_major_axis, self.eccentricity, self.inclination,
                  self.raan, self.arg_periapsis)
        if not all(np.isfinite(values)):
            raise ValueError(f"Orbital elements must be finite, got {values}")
        if self.eccentricity < 0.0:
            raise ValueError(f"Eccentricity must be non-negative (got {self.eccentricity})")

    # =====================================================================
    # CONSTRUCTION
    # =====================================================================

    @classmethod
    def from_elements(
        cls,
        body: CelestialBody,
        sma: float,
        ecc: float,
        inc: float,
        raan: float,
        argp: float,
        tolerance: Optional[Tolerance] = None,
    ) -> 'Orbit':
        """Build an orbit directly from its five classical elements."""
        return cls(
            central_body=body,
            semi_major_axis=float(sma),
            eccentricity=float(ecc),
            inclination=float(inc),
            raan=float(raan),
            arg_periapsis=float(argp),
            tolerance=tolerance or DEFAULT_TOLERANCE,
        )

    @classmethod
    def from_state(
        cls,
        body: CelestialBody,
        radius: np.ndarray,
        velocity: np.ndarray,
        tolerance: Optional[Tolerance] = None,
    ) -> 'Orbit':
        """
        Derive the classical elements from an inertial state vector pair.

        The algorithm computes:
            a     = 1 / (2/|r| - |v|^2/mu)          (vis-viva inverted)
            h     = r x v                           (angular momentum)
            i     = arccos(h_hat . k_hat)
            e_vec = (v x h)/mu - r_hat              (eccentricity vector)
            n     = k_hat x h                       (node vector)
            raan  = arccos(n_hat . i_hat),  2*pi - raan if n_hat . j_hat < 0
            argp  = arccos(n_hat . e_hat),  2*pi - argp if e_vec . k_hat < 0

        Parameters
        ----------
        body : CelestialBody
            Central body.
        radius : array_like
            3-element position vector (km).
        velocity : array_like
            3-element velocity vector (km/s).
        tolerance : Tolerance, optional
            Equality tolerance for the degenerate-case tests.

        Returns
        -------
        Orbit

        Raises
        ------
        UnsupportedTransferTypeError
            If the state is parabolic or hyperbolic (no finite positive
            semi-major axis).
        DegenerateGeometryError
            If r and v are collinear (rectilinear motion, no orbital plane).
        NumericalDegeneracyError
            If r is the zero vector.
        """
        tol = tolerance or DEFAULT_TOLERANCE
        r = vec3(radius)
        v = vec3(velocity)
        mu = body.gravitational_parameter

        r_hat = unit(r)
        r_mag = magnitude(r)
        v_mag = magnitude(v)

        # --- Semi-major axis (vis-viva) ---
        two_over_r = 2.0 / r_mag
        v2_over_mu = v_mag * v_mag / mu
        if tol.nearly_equal(two_over_r, v2_over_mu):
            raise UnsupportedTransferTypeError(
                f"State is parabolic (|v| = {v_mag:.6g} km/s equals escape "
                f"speed at r = {r_mag:.6g} km); semi-major axis is unbounded"
            )
        inv_sma = two_over_r - v2_over_mu
        if inv_sma < 0.0:
            raise UnsupportedTransferTypeError(
                f"State is hyperbolic (|v| = {v_mag:.6g} km/s exceeds escape "
                f"speed at r = {r_mag:.6g} km); only closed orbits are supported"
            )
        sma = 1.0 / inv_sma

        # --- Angular momentum and inclination ---
        h = np.cross(r, v)
        h_mag = magnitude(h)
        if v_mag == 0.0 or tol.is_zero(h_mag / (r_mag * v_mag)):
            raise DegenerateGeometryError(
                "Position and velocity are collinear; rectilinear orbits "
                "have no orbital plane"
            )
        h_hat = h / h_mag
        inclination = arccos_clipped(float(np.dot(h_hat, K_HAT)))

        # --- Eccentricity vector ---
        e_vec = np.cross(v, h) / mu - r_hat
        ecc = magnitude(e_vec)

        # --- Right ascension of the ascending node ---
        n_hat, equatorial = _node_direction(h_hat, tol)
        if equatorial or tol.is_zero(inclination):
            raan = 0.0
            logger.debug("Equatorial orbit: raan set to 0 by convention")
        else:
            raan = arccos_clipped(float(np.dot(n_hat, I_HAT)))
            if np.dot(n_hat, J_HAT) < 0.0:
                raan = TWO_PI - raan

        # --- Argument of periapsis ---
        if tol.is_zero(ecc):
            argp = 0.0
            logger.debug("Circular orbit: arg_periapsis set to 0 by convention")
        else:
            e_hat = e_vec / ecc
            argp = arccos_clipped(float(np.dot(n_hat, e_hat)))
            if equatorial:
                # e_vec has no z component; use the sense of rotation about h
                sense = float(np.dot(np.cross(n_hat, e_hat), h_hat))
            else:
                sense = float(np.dot(e_vec, K_HAT))
            if sense < 0.0:
                argp = TWO_PI - argp

        return cls(
            central_body=body,
            semi_major_axis=sma,
            eccentricity=ecc,
            inclination=inclination,
            raan=raan,
            arg_periapsis=argp,
            tolerance=tol,
        )

    @staticmethod
    def true_anomaly_at(
        body: CelestialBody,
        radius: np.ndarray,
        velocity: np.ndarray,
        tolerance: Optional[Tolerance] = None,
    ) -> float:
        """
        True anomaly of a state vector pair on the orbit it defines.

        Uses the eccentricity-vector method:

            cos(f) = (r . e_vec) / (|r| |e_vec|)

        and picks f or 2*pi - f from the sign of r . v (positive while
        moving away from periapsis).  Cosines within tolerance of -1, 0 or
        1 are snapped to those values before the inverse cosine.

        For a circular orbit the eccentricity vector has no direction; the
        anomaly is then measured from the node line (or +x when equatorial),
        which is where Orbit.from_state places periapsis for such orbits.

        Returns
        -------
        float
            True anomaly in [0, 2*pi).
        """
        tol = tolerance or DEFAULT_TOLERANCE
        r = vec3(radius)
        v = vec3(velocity)
        mu = body.gravitational_parameter

        r_hat = unit(r)
        h = np.cross(r, v)
        e_vec = np.cross(v, h) / mu - r_hat
        ecc = magnitude(e_vec)

        if tol.is_zero(ecc):
            h_hat = unit(h)
            ref, _ = _node_direction(h_hat, tol)
            f = arccos_clipped(float(np.dot(ref, r_hat)))
            if np.dot(np.cross(ref, r_hat), h_hat) < 0.0:
                f = TWO_PI - f
            return normalize_angle(f)

        cos_f = float(np.dot(r_hat, e_vec)) / ecc
        for exact in (1.0, -1.0, 0.0):
            if tol.nearly_equal(cos_f, exact):
                cos_f = exact
                break

        f0 = arccos_clipped(cos_f)
        if np.dot(r, v) > 0.0:
            return normalize_angle(f0)
        return normalize_angle(TWO_PI - f0)

    # =====================================================================
    # DERIVED SCALARS
    # =====================================================================

    @property
    def mu(self) -> float:
        """Gravitational parameter of the central body (km^3/s^2)."""
        return self.central_body.gravitational_parameter

    @property
    def semi_latus_rectum(self) -> float:
        """p = a (1 - e^2) (km)."""
        return self.semi_major_axis * (1.0 - self.eccentricity ** 2)

    @property
    def specific_angular_momentum(self) -> float:
        """|h| = sqrt(mu p) (km^2/s)."""
        p = self.semi_latus_rectum
        if p <= 0.0:
            raise DegenerateGeometryError(
                f"Semi-latus rectum is {p:.6g} km; angular momentum is undefined"
            )
        return float(np.sqrt(self.mu * p))

    @property
    def specific_energy(self) -> float:
        """E = -mu / (2a) (km^2/s^2)."""
        return -self.mu / (2.0 * self.semi_major_axis)

    @property
    def mean_motion(self) -> float:
        """n = sqrt(mu / a^3) (rad/s)."""
        return float(np.sqrt(self.mu / abs(self.semi_major_axis) ** 3))

    @property
    def periapsis_radius(self) -> float:
        return self.semi_major_axis * (1.0 - self.eccentricity)

    @property
    def apoapsis_radius(self) -> float:
        self._require_closed('apoapsis radius')
        return self.semi_major_axis * (1.0 + self.eccentricity)

    def period(self) -> float:
        """
        Orbital period from Kepler's third law:

            T = 2*pi * sqrt(a^3 / mu)

        Raises
        ------
        UnsupportedTransferTypeError
            If the orbit is not circular or elliptic.
        """
        self._require_closed('period')
        return TWO_PI * float(np.sqrt(self.semi_major_axis ** 3 / self.mu))

    def classify(self) -> OrbitType:
        """
        Conic family by eccentricity, compared with this orbit's tolerance
        at 0 and 1.

        Raises
        ------
        ValueError
            If the eccentricity fits no family (e.g. NaN).
        """
        e = self.eccentricity
        if self.tolerance.is_zero(e):
            return OrbitType.CIRCULAR
        if self.tolerance.nearly_equal(e, 1.0):
            return OrbitType.PARABOLIC
        if 0.0 < e < 1.0:
            return OrbitType.ELLIPTIC
        if e > 1.0:
            return OrbitType.HYPERBOLIC
        raise ValueError(f"Eccentricity {e!r} does not correspond to a conic section")

    def _require_closed(self, quantity: str) -> None:
        kind = self.classify()
        if kind not in (OrbitType.CIRCULAR, OrbitType.ELLIPTIC) or self.semi_major_axis <= 0.0:
            raise UnsupportedTransferTypeError(
                f"The {quantity} is only defined for circular and elliptic "
                f"orbits (this orbit is {kind.value}, e = {self.eccentricity:.6g})"
            )

    # =====================================================================
    # STATE ALONG THE ORBIT
    # =====================================================================

    def radius_at(self, f: float) -> float:
        """Orbit equation r = a (1 - e^2) / (1 + e cos f) (km)."""
        return self.semi_latus_rectum / (1.0 + self.eccentricity * np.cos(f))

    def velocity_at(self, f: float) -> float:
        """Vis-viva speed v = sqrt(mu (2/r - 1/a)) (km/s)."""
        return float(np.sqrt(self.mu * (2.0 / self.radius_at(f) - 1.0 / self.semi_major_axis)))

    def orbit_normal(self) -> np.ndarray:
        """Unit angular momentum direction (perifocal z axis) in the inertial frame."""
        si = np.sin(self.inclination)
        return np.array([
            np.sin(self.raan) * si,
            -np.cos(self.raan) * si,
            np.cos(self.inclination),
        ], dtype=np.float64)

    def radius_vector_at(self, f: float) -> np.ndarray:
        """
        Inertial position vector at true anomaly *f* (km).

        With the argument of latitude theta = argp + f, the perifocal unit
        vector (cos theta, sin theta, 0) rotated through inclination and
        raan collapses to

            x = cos(raan) cos(theta) - sin(raan) sin(theta) cos(i)
            y = sin(raan) cos(theta) + cos(raan) sin(theta) cos(i)
            z = sin(theta) sin(i)

        which is scaled by radius_at(f).
        """
        theta = self.arg_periapsis + f
        cos_o, sin_o = np.cos(self.raan), np.sin(self.raan)
        cos_t, sin_t = np.cos(theta), np.sin(theta)
        cos_i, sin_i = np.cos(self.inclination), np.sin(self.inclination)

        direction = np.array([
            cos_o * cos_t - sin_o * sin_t * cos_i,
            sin_o * cos_t + cos_o * sin_t * cos_i,
            sin_t * sin_i,
        ], dtype=np.float64)
        return direction * self.radius_at(f)

    def velocity_vector_at(self, f: float) -> np.ndarray:
        """
        Inertial velocity vector at true anomaly *f* (km/s).

        Split into a radial part along r_hat and a transverse part along
        normal x r_hat:

            v_r = mu e sin(f) / h
            v_t = h / r(f)
        """
        h = self.specific_angular_momentum
        radial_speed = self.mu * self.eccentricity * np.sin(f) / h
        transverse_speed = h / self.radius_at(f)

        radial_dir = unit(self.radius_vector_at(f))
        transverse_dir = unit(np.cross(self.orbit_normal(), radial_dir))

        return radial_dir * radial_speed + transverse_dir * transverse_speed

    def state_at(self, f: float) -> Tuple[np.ndarray, np.ndarray]:
        """Position and velocity vectors at true anomaly *f*."""
        return self.radius_vector_at(f), self.velocity_vector_at(f)

    # =====================================================================
    # TIMING
    # =====================================================================

    def time_from_periapsis(self, f: float) -> float:
        """
        Time elapsed since periapsis passage at true anomaly *f* (s).

            cos(E) = (e + cos f) / (1 + e cos f)      E in [0, pi] for f < pi
            M      = E - e sin(E)                     (Kepler's equation)
            t      = M / n

        Only closed orbits are supported.
        """
        self._require_closed('time from periapsis')
        e = self.eccentricity
        f = normalize_angle(f)
        cos_f = np.cos(f)

        ecc_anom = arccos_clipped((e + cos_f) / (1.0 + e * cos_f))
        if f >= PI:
            ecc_anom = TWO_PI - ecc_anom

        mean_anom = ecc_anom - e * np.sin(ecc_anom)
        return float(mean_anom / self.mean_motion)

    def time_between(self, f_initial: float, f_final: float) -> float:
        """
        Forward time of flight from *f_initial* to *f_final* (s).

        Motion is in the direction of increasing true anomaly, so a final
        anomaly "behind" the initial one costs most of a revolution.  The
        result is always in [0, period).
        """
        elapsed = self.time_from_periapsis(f_final) - self.time_from_periapsis(f_initial)
        period = self.period()
        while elapsed < 0.0:
            elapsed += period
        return elapsed

    def __str__(self) -> str:
        return (
            f"Orbit about {self.central_body}: a={self.semi_major_axis:.3f} km, "
            f"e={self.eccentricity:.6f}, i={np.degrees(self.inclination):.4f} deg, "
            f"raan={np.degrees(self.raan):.4f} deg, "
            f"argp={np.degrees(self.arg_periapsis):.4f} deg"
        )
