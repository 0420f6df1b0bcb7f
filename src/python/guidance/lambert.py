"""
===============================================================================
CONIC TRANSFER CORE - Lambert Solver (Lagrange alpha/beta formulation)
===============================================================================
Given two positions on (possibly different) orbits about the same central
body, find the elliptic transfer orbit of a chosen semi-major axis that
connects them, the velocities required at each end, and the resulting time
of flight.

Background
----------
Lambert's Problem:
    Given two position vectors r1, r2 and a time of flight, find the orbit
    connecting them.  Here the problem is posed the other way round: the
    caller supplies a candidate semi-major axis and receives the time of
    flight it produces.  Searching for the semi-major axis that matches a
    desired time of flight is the caller's job (see transfer_targeting).

Space triangle:
    theta  = angle between r1 and r2            (arccos, in [0, pi])
    c      = sqrt(r1^2 + r2^2 - 2 r1 r2 cos theta)   chord
    s      = (r1 + r2 + c) / 2                   semi-perimeter
    a_min  = s / 2                               minimum-energy ellipse

Lagrange angles for a transfer ellipse of semi-major axis a >= a_min:
    alpha0 = 2 arcsin(sqrt(s / 2a))
    beta0  = 2 arcsin(sqrt((s - c) / 2a))
    alpha  = 2 pi - alpha0  on the branch with time of flight above the
                            minimum-energy time (is_long_way), else alpha0
    beta   = 2 pi - beta0   when theta > pi, else beta0

Endpoint velocities:
    A  = sqrt(mu / 4a) cot(alpha / 2)
    B  = sqrt(mu / 4a) cot(beta / 2)
    v1 = (B + A) u_c + (B - A) u_r1
    v2 = (B + A) u_c - (B - A) u_r2

At theta = pi the endpoints are collinear through the focus, beta0 = 0 and
cot(beta / 2) is singular.  That case is solved directly with vis-viva on
the Hohmann ellipse instead.

References
----------
    [1] Prussing & Conway, "Orbital Mechanics", 2nd ed., Ch. 2.
    [2] Battin, "An Introduction to the Mathematics and Methods of
        Astrodynamics", AIAA, 1999.
===============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from core.angles import arcsin_clipped, cot
from core.constants import PI, TWO_PI
from core.errors import (
    InconsistentCentralBodyError,
    OrbitMechanicsError,
    UnsupportedTransferTypeError,
)
from core.tolerance import DEFAULT_TOLERANCE, Tolerance
from core.vectors import angle_between, magnitude, unit
from dynamics.orbit import Orbit
from dynamics.orbit_position import OrbitPosition

module_logger = logging.getLogger(__name__)


def _read_only(v: np.ndarray) -> np.ndarray:
    out = np.array(v, dtype=np.float64, copy=True)
    out.flags.writeable = False
    return out


# =============================================================================
# VALUE TYPES
# =============================================================================

@dataclass(frozen=True, eq=False)
class TransferGeometry:
    """
    The space triangle formed by the focus and the two endpoints.

    Attributes
    ----------
    r1, r2 : np.ndarray
        Endpoint position vectors (km).
    theta : float
        Angle between r1 and r2 (rad), in [0, pi].
    chord : float
        |r2 - r1| (km).
    semi_perimeter : float
        (|r1| + |r2| + chord) / 2 (km).
    """
    r1: np.ndarray
    r2: np.ndarray
    theta: float
    chord: float
    semi_perimeter: float

    @property
    def a_min(self) -> float:
        """Semi-major axis of the minimum-energy transfer ellipse (km)."""
        return self.semi_perimeter / 2.0


@dataclass(frozen=True, eq=False)
class LambertSolution:
    """
    A fully evaluated transfer.

    Attributes
    ----------
    transfer_orbit : Orbit
        The conic through both endpoints.
    start, end : OrbitPosition
        The endpoints as supplied by the caller (on their own orbits).
    start_velocity, end_velocity : np.ndarray
        Velocity on the transfer orbit at each endpoint (km/s).
    revolutions : int
        Complete revolutions flown before arrival.
    sma : float
        Semi-major axis requested by the caller (km).
    is_long_way : bool
        Lagrange alpha branch requested by the caller.
    time_of_flight : float
        Transfer duration (s), including the complete revolutions.
    """
    transfer_orbit: Orbit
    start: OrbitPosition
    end: OrbitPosition
    start_velocity: np.ndarray
    end_velocity: np.ndarray
    revolutions: int
    sma: float
    is_long_way: bool
    time_of_flight: float

    def departure_delta_v(self) -> float:
        """|v_transfer - v_orbit| at the start point (km/s)."""
        return magnitude(self.start_velocity - self.start.velocity_vector())

    def arrival_delta_v(self) -> float:
        """|v_orbit - v_transfer| at the end point (km/s)."""
        return magnitude(self.end.velocity_vector() - self.end_velocity)

    def total_delta_v(self) -> float:
        return self.departure_delta_v() + self.arrival_delta_v()


@dataclass(frozen=True, eq=False)
class LambertResult:
    """
    Outcome of one Lambert evaluation: either a solution or the error that
    prevented one.  Lets a root-finding loop branch on the failure kind
    without wrapping every call in try/except.
    """
    sma: float
    is_long_way: bool
    solution: Optional[LambertSolution] = None
    error: Optional[OrbitMechanicsError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> LambertSolution:
        """Return the solution, or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.solution


# =============================================================================
# SOLVER
# =============================================================================

class LambertSolver:
    """
    Transfer solver between two orbit positions.

    The solver holds no results: every call recomputes the geometry from
    the endpoints, so one instance may be shared by threads evaluating
    different semi-major axes.

    Typical usage:
        solver = LambertSolver(start, end)
        a_min = solver.a_min()
        tof = solver.solution(1.2 * a_min, is_long_way=False).time_of_flight

    Parameters
    ----------
    start, end : OrbitPosition
        Departure and arrival points.
    revolutions : int
        Complete revolutions on the transfer orbit before arrival.
    tolerance : Tolerance, optional
        Equality tolerance for the degenerate-case tests.
    logger : logging.Logger, optional
        Destination for diagnostic messages.  Defaults to this module's
        logger.

    Raises
    ------
    ValueError
        If revolutions is negative.
    InconsistentCentralBodyError
        If the endpoints orbit bodies with different gravitational
        parameters.
    """

    def __init__(
        self,
        start: OrbitPosition,
        end: OrbitPosition,
        revolutions: int = 0,
        tolerance: Optional[Tolerance] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if int(revolutions) != revolutions or revolutions < 0:
            raise ValueError(f"revolutions must be a non-negative integer (got {revolutions!r})")

        self.tolerance = tolerance or DEFAULT_TOLERANCE
        self.logger = logger or module_logger

        mu1 = start.central_body.gravitational_parameter
        mu2 = end.central_body.gravitational_parameter
        if not self.tolerance.nearly_equal(mu1, mu2):
            raise InconsistentCentralBodyError(
                f"Endpoints orbit different bodies: {start.central_body} "
                f"(mu={mu1:.6g}) and {end.central_body} (mu={mu2:.6g})"
            )

        self.start = start
        self.end = end
        self.revolutions = int(revolutions)

    @property
    def central_body(self):
        return self.start.central_body

    @property
    def mu(self) -> float:
        return self.start.central_body.gravitational_parameter

    # -------------------------------------------------------------------------
    # Geometry
    # -------------------------------------------------------------------------

    def geometry(self) -> TransferGeometry:
        """Space-triangle quantities for the current endpoints."""
        r1_vec = self.start.radius_vector()
        r2_vec = self.end.radius_vector()
        r1 = magnitude(r1_vec)
        r2 = magnitude(r2_vec)

        theta = angle_between(r1_vec, r2_vec)
        chord_sq = r1 * r1 + r2 * r2 - 2.0 * r1 * r2 * np.cos(theta)
        chord = float(np.sqrt(max(chord_sq, 0.0)))
        semi_perimeter = (r1 + r2 + chord) / 2.0

        return TransferGeometry(
            r1=_read_only(r1_vec),
            r2=_read_only(r2_vec),
            theta=theta,
            chord=chord,
            semi_perimeter=semi_perimeter,
        )

    def a_min(self) -> float:
        """Minimum-energy transfer semi-major axis (km)."""
        return self.geometry().a_min

    # -------------------------------------------------------------------------
    # Solution
    # -------------------------------------------------------------------------

    def solution(self, sma: float, is_long_way: bool = False) -> LambertSolution:
        """
        Evaluate the transfer of semi-major axis *sma*.

        Parameters
        ----------
        sma : float
            Transfer semi-major axis (km).  Must be at least a_min().
        is_long_way : bool
            Select the Lagrange alpha branch whose time of flight exceeds
            the minimum-energy time.

        Returns
        -------
        LambertSolution

        Raises
        ------
        UnsupportedTransferTypeError
            If sma < a_min() (the transfer would be hyperbolic or
            parabolic).
        """
        geo = self.geometry()
        a_min = geo.a_min
        if sma < a_min and not self.tolerance.nearly_equal(sma, a_min):
            raise UnsupportedTransferTypeError(
                f"Semi-major axis {sma:.6g} km is below the minimum-energy "
                f"value {a_min:.6g} km; parabolic and hyperbolic transfers "
                "are not supported"
            )

        if self.tolerance.nearly_equal(geo.theta, PI):
            self.logger.debug("Transfer angle is pi; using the collinear vis-viva solution")
            v1, v2 = self._collinear_velocities(geo)
        else:
            v1, v2 = self._lagrange_velocities(geo, sma, is_long_way)

        transfer_orbit = Orbit.from_state(self.central_body, geo.r1, v1, self.tolerance)

        # Anomalies are taken on the transfer orbit, not the endpoints' own orbits
        f1 = Orbit.true_anomaly_at(self.central_body, geo.r1, v1, self.tolerance)
        f2 = Orbit.true_anomaly_at(self.central_body, geo.r2, v2, self.tolerance)
        tof = transfer_orbit.time_between(f1, f2) + transfer_orbit.period() * self.revolutions

        self.logger.debug(
            "Lambert a=%.6g km long_way=%s revs=%d -> tof=%.6g s",
            sma, is_long_way, self.revolutions, tof,
        )

        return LambertSolution(
            transfer_orbit=transfer_orbit,
            start=self.start,
            end=self.end,
            start_velocity=_read_only(v1),
            end_velocity=_read_only(v2),
            revolutions=self.revolutions,
            sma=float(sma),
            is_long_way=bool(is_long_way),
            time_of_flight=float(tof),
        )

    def evaluate(self, sma: float, is_long_way: bool = False) -> LambertResult:
        """
        Like solution(), but failures of this case are returned rather
        than raised.
        """
        try:
            return LambertResult(sma=sma, is_long_way=is_long_way,
                                 solution=self.solution(sma, is_long_way))
        except OrbitMechanicsError as exc:
            self.logger.debug("Lambert a=%.6g km long_way=%s failed: %s", sma, is_long_way, exc)
            return LambertResult(sma=sma, is_long_way=is_long_way, error=exc)

    # -------------------------------------------------------------------------
    # Velocity construction
    # -------------------------------------------------------------------------

    def _lagrange_velocities(self, geo: TransferGeometry, sma: float, is_long_way: bool):
        s = geo.semi_perimeter
        c = geo.chord

        alpha0 = 2.0 * arcsin_clipped(np.sqrt(s / (2.0 * sma)))
        alpha = TWO_PI - alpha0 if is_long_way else alpha0

        # theta comes from arccos, so theta > pi never holds here; the
        # branch stays so the beta selection mirrors the alpha one.
        beta0 = 2.0 * arcsin_clipped(np.sqrt(max(s - c, 0.0) / (2.0 * sma)))
        beta = TWO_PI - beta0 if geo.theta > PI else beta0

        k = np.sqrt(self.mu / (4.0 * sma))
        coeff_a = k * cot(alpha / 2.0)
        coeff_b = k * cot(beta / 2.0)

        u_c = unit(geo.r2 - geo.r1)
        u_r1 = unit(geo.r1)
        u_r2 = unit(geo.r2)

        v1 = u_c * (coeff_b + coeff_a) + u_r1 * (coeff_b - coeff_a)
        v2 = u_c * (coeff_b + coeff_a) + u_r2 * (coeff_a - coeff_b)
        return v1, v2

    def _collinear_velocities(self, geo: TransferGeometry):
        """
        Endpoints on opposite sides of the focus.  The transfer is the
        half-ellipse with apsides at r1 and r2; each speed comes from
        vis-viva on that ellipse and points along the endpoint's own
        orbital velocity.
        """
        r1 = magnitude(geo.r1)
        r2 = magnitude(geo.r2)
        a_transfer = (r1 + r2) / 2.0

        v1_mag = np.sqrt(self.mu * (2.0 / r1 - 1.0 / a_transfer))
        v2_mag = np.sqrt(self.mu * (2.0 / r2 - 1.0 / a_transfer))

        v1 = unit(self.start.velocity_vector()) * v1_mag
        v2 = unit(self.end.velocity_vector()) * v2_mag
        return v1, v2
