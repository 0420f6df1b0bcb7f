"""
===============================================================================
CONIC TRANSFER - Lambert Solver Test Suite
===============================================================================
Tests for the alpha/beta Lambert solver: space-triangle geometry, endpoint
velocities against vis-viva and angular momentum, the collinear (theta = pi)
case, branch ordering of the time of flight, revolutions, and the error
cases (sub-minimum axis, mismatched central bodies, bad arguments).
===============================================================================
"""

import sys
import os
import logging

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from numpy.testing import assert_allclose

from core.constants import PI
from core.errors import (
    InconsistentCentralBodyError,
    OrbitMechanicsError,
    UnsupportedTransferTypeError,
)
from dynamics.celestial_body import CelestialBody
from dynamics.orbit import Orbit
from dynamics.orbit_position import OrbitPosition
from guidance.lambert import LambertResult, LambertSolver


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def earth():
    return CelestialBody("Earth", 5.972e24)


@pytest.fixture
def leo(earth):
    """Circular equatorial orbit at r = 7000 km."""
    return Orbit.from_elements(earth, 7000.0, 0.0, 0.0, 0.0, 0.0)


@pytest.fixture
def quarter_solver(leo):
    """Transfer from f = 0 to f = 90 deg on the same circular orbit."""
    return LambertSolver(OrbitPosition(leo, 0.0), OrbitPosition(leo, PI / 2.0))


@pytest.fixture
def inclined_solver(earth):
    """Transfer between two eccentric, mutually inclined orbits."""
    departure = Orbit.from_elements(earth, 8000.0, 0.05, np.radians(28.5),
                                    np.radians(10.0), np.radians(30.0))
    arrival = Orbit.from_elements(earth, 11000.0, 0.1, np.radians(35.0),
                                  np.radians(20.0), np.radians(80.0))
    return LambertSolver(OrbitPosition(departure, np.radians(20.0)),
                         OrbitPosition(arrival, np.radians(100.0)))


def _vis_viva_speed(mu, r, a):
    return np.sqrt(mu * (2.0 / r - 1.0 / a))


# =============================================================================
# Test: Geometry
# =============================================================================

class TestGeometry:
    """Tests for the space triangle and the minimum-energy semi-major axis."""

    def test_quarter_circle_a_min(self, quarter_solver):
        """a_min = (r1 + r2 + c) / 4 with c = 7000 sqrt(2)."""
        expected = (14000.0 + 7000.0 * np.sqrt(2.0)) / 4.0
        assert_allclose(quarter_solver.a_min(), expected, rtol=1e-12)

    def test_quarter_circle_triangle(self, quarter_solver):
        geo = quarter_solver.geometry()
        assert_allclose(geo.theta, PI / 2.0, atol=1e-12)
        assert_allclose(geo.chord, 7000.0 * np.sqrt(2.0), rtol=1e-12)
        assert_allclose(geo.semi_perimeter, 2.0 * geo.a_min, rtol=1e-15)

    def test_geometry_vectors_read_only(self, quarter_solver):
        geo = quarter_solver.geometry()
        with pytest.raises(ValueError):
            geo.r1[0] = 0.0

    def test_mu_from_start_body(self, quarter_solver, earth):
        assert quarter_solver.mu == earth.gravitational_parameter


# =============================================================================
# Test: Solutions
# =============================================================================

class TestSolution:
    """Tests for endpoint velocities and the time of flight."""

    def test_minimum_energy_vis_viva(self, quarter_solver, earth):
        """Both endpoint speeds satisfy vis-viva for a = a_min."""
        mu = earth.gravitational_parameter
        a_min = quarter_solver.a_min()
        sol = quarter_solver.solution(a_min)

        assert_allclose(np.linalg.norm(sol.start_velocity),
                        _vis_viva_speed(mu, 7000.0, a_min), rtol=1e-9)
        assert_allclose(np.linalg.norm(sol.end_velocity),
                        _vis_viva_speed(mu, 7000.0, a_min), rtol=1e-9)
        assert_allclose(sol.transfer_orbit.semi_major_axis, a_min, rtol=1e-9)

    def test_angular_momentum_conserved(self, quarter_solver):
        """r1 x v1 equals r2 x v2 on the transfer orbit."""
        geo = quarter_solver.geometry()
        sol = quarter_solver.solution(1.4 * geo.a_min)
        h1 = np.cross(geo.r1, sol.start_velocity)
        h2 = np.cross(geo.r2, sol.end_velocity)
        assert_allclose(h1, h2, rtol=1e-9, atol=1e-6)

    @pytest.mark.parametrize("factor", [1.0, 1.1, 1.5, 3.0])
    @pytest.mark.parametrize("long_way", [False, True])
    def test_inclined_endpoints_vis_viva(self, inclined_solver, factor, long_way):
        """Speeds match vis-viva and both endpoints lie on the transfer orbit."""
        geo = inclined_solver.geometry()
        sma = factor * geo.a_min
        sol = inclined_solver.solution(sma, is_long_way=long_way)
        mu = inclined_solver.mu
        r1 = np.linalg.norm(geo.r1)
        r2 = np.linalg.norm(geo.r2)

        assert_allclose(np.linalg.norm(sol.start_velocity), _vis_viva_speed(mu, r1, sma), rtol=1e-8)
        assert_allclose(np.linalg.norm(sol.end_velocity), _vis_viva_speed(mu, r2, sma), rtol=1e-8)
        assert_allclose(sol.transfer_orbit.semi_major_axis, sma, rtol=1e-8)
        assert np.all(np.isfinite(sol.start_velocity))
        assert np.all(np.isfinite(sol.end_velocity))
        assert sol.time_of_flight > 0.0

    def test_branches_coincide_at_a_min(self, quarter_solver):
        a_min = quarter_solver.a_min()
        short = quarter_solver.solution(a_min, is_long_way=False)
        long = quarter_solver.solution(a_min, is_long_way=True)
        assert_allclose(short.time_of_flight, long.time_of_flight, rtol=1e-8)

    def test_branch_ordering(self, quarter_solver):
        """Above a_min the long branch is slower than t_m and the short branch faster."""
        a_min = quarter_solver.a_min()
        t_m = quarter_solver.solution(a_min).time_of_flight
        short = quarter_solver.solution(1.3 * a_min, is_long_way=False).time_of_flight
        long = quarter_solver.solution(1.3 * a_min, is_long_way=True).time_of_flight
        assert short < t_m < long

    def test_long_branch_time_increases(self, quarter_solver):
        a_min = quarter_solver.a_min()
        times = [quarter_solver.solution(k * a_min, is_long_way=True).time_of_flight
                 for k in (1.05, 1.2, 1.5, 2.0, 4.0)]
        assert np.all(np.diff(times) > 0.0)

    def test_minimum_energy_time_of_flight(self, quarter_solver, earth):
        """t_m = sqrt(a^3/mu) [pi - (beta - sin beta)] for the quarter-circle transfer."""
        geo = quarter_solver.geometry()
        a = geo.a_min
        beta = 2.0 * np.arcsin(np.sqrt((geo.semi_perimeter - geo.chord) / (2.0 * a)))
        expected = np.sqrt(a ** 3 / earth.gravitational_parameter) * (PI - (beta - np.sin(beta)))
        assert_allclose(quarter_solver.solution(a).time_of_flight, expected, rtol=1e-7)

    def test_revolutions_add_period(self, leo):
        start = OrbitPosition(leo, 0.0)
        end = OrbitPosition(leo, PI / 2.0)
        direct = LambertSolver(start, end)
        one_rev = LambertSolver(start, end, revolutions=1)
        sma = 1.2 * direct.a_min()

        sol0 = direct.solution(sma)
        sol1 = one_rev.solution(sma)
        assert sol1.revolutions == 1
        assert_allclose(sol1.time_of_flight,
                        sol0.time_of_flight + sol0.transfer_orbit.period(), rtol=1e-10)

    def test_delta_v_on_shared_orbit(self, quarter_solver):
        sol = quarter_solver.solution(quarter_solver.a_min())
        assert sol.departure_delta_v() > 0.0
        assert_allclose(sol.total_delta_v(),
                        sol.departure_delta_v() + sol.arrival_delta_v(), rtol=1e-15)

    def test_solution_velocities_read_only(self, quarter_solver):
        sol = quarter_solver.solution(quarter_solver.a_min())
        with pytest.raises(ValueError):
            sol.start_velocity[0] = 0.0


# =============================================================================
# Test: Collinear endpoints (theta = pi)
# =============================================================================

class TestCollinear:
    """Tests for endpoints on opposite sides of the focus."""

    def test_half_circle_no_nan(self, leo, earth):
        """A 180 deg transfer on a circular orbit takes half a period."""
        solver = LambertSolver(OrbitPosition(leo, 0.0), OrbitPosition(leo, PI))
        sol = solver.solution(solver.a_min())

        assert np.all(np.isfinite(sol.start_velocity))
        assert np.all(np.isfinite(sol.end_velocity))
        assert_allclose(np.linalg.norm(sol.start_velocity),
                        np.sqrt(earth.gravitational_parameter / 7000.0), rtol=1e-12)
        assert_allclose(sol.time_of_flight, leo.period() / 2.0, rtol=1e-6)

    def test_hohmann_transfer(self, leo, earth):
        """Between circular orbits the collinear case is the Hohmann transfer."""
        outer = Orbit.from_elements(earth, 14000.0, 0.0, 0.0, 0.0, 0.0)
        solver = LambertSolver(OrbitPosition(leo, 0.0), OrbitPosition(outer, PI))
        mu = earth.gravitational_parameter
        a_transfer = 10500.0

        assert_allclose(solver.a_min(), a_transfer, rtol=1e-12)
        sol = solver.solution(a_transfer)

        assert_allclose(np.linalg.norm(sol.start_velocity),
                        _vis_viva_speed(mu, 7000.0, a_transfer), rtol=1e-12)
        assert_allclose(np.linalg.norm(sol.end_velocity),
                        _vis_viva_speed(mu, 14000.0, a_transfer), rtol=1e-12)
        assert_allclose(sol.transfer_orbit.eccentricity, 1.0 / 3.0, rtol=1e-9)
        assert_allclose(sol.time_of_flight, PI * np.sqrt(a_transfer ** 3 / mu), rtol=1e-6)

    def test_collinear_logged(self, leo, caplog):
        """An injected logger receives the collinear-case message."""
        log = logging.getLogger('conic_transfer.test_lambert')
        solver = LambertSolver(OrbitPosition(leo, 0.0), OrbitPosition(leo, PI), logger=log)
        with caplog.at_level(logging.DEBUG, logger='conic_transfer.test_lambert'):
            solver.solution(solver.a_min())
        assert any("collinear" in rec.getMessage() for rec in caplog.records)


# =============================================================================
# Test: Errors
# =============================================================================

class TestErrors:
    """Tests for the typed failures and the result variant."""

    def test_below_a_min_rejected(self, quarter_solver):
        with pytest.raises(UnsupportedTransferTypeError):
            quarter_solver.solution(0.9 * quarter_solver.a_min())

    def test_a_min_within_tolerance_accepted(self, quarter_solver):
        a_min = quarter_solver.a_min()
        sol = quarter_solver.solution(a_min * (1.0 - 1e-9))
        assert np.all(np.isfinite(sol.start_velocity))

    def test_evaluate_returns_error(self, quarter_solver):
        result = quarter_solver.evaluate(0.5 * quarter_solver.a_min(), is_long_way=True)
        assert isinstance(result, LambertResult)
        assert not result.ok
        assert result.solution is None
        assert isinstance(result.error, UnsupportedTransferTypeError)
        with pytest.raises(UnsupportedTransferTypeError):
            result.unwrap()

    def test_evaluate_returns_solution(self, quarter_solver):
        result = quarter_solver.evaluate(1.2 * quarter_solver.a_min())
        assert result.ok
        assert result.unwrap() is result.solution

    def test_inconsistent_central_bodies(self, leo):
        mars = CelestialBody("Mars", 6.417e23)
        mars_orbit = Orbit.from_elements(mars, 7000.0, 0.0, 0.0, 0.0, 0.0)
        with pytest.raises(InconsistentCentralBodyError):
            LambertSolver(OrbitPosition(leo, 0.0), OrbitPosition(mars_orbit, 1.0))

    def test_same_mu_different_instances_accepted(self, leo):
        twin = CelestialBody("Earth", 5.972e24)
        other = Orbit.from_elements(twin, 9000.0, 0.0, 0.0, 0.0, 0.0)
        solver = LambertSolver(OrbitPosition(leo, 0.0), OrbitPosition(other, 1.0))
        assert solver.a_min() > 0.0

    @pytest.mark.parametrize("revolutions", [-1, 1.5])
    def test_invalid_revolutions(self, leo, revolutions):
        with pytest.raises(ValueError):
            LambertSolver(OrbitPosition(leo, 0.0), OrbitPosition(leo, 1.0),
                          revolutions=revolutions)

    def test_error_hierarchy(self):
        assert issubclass(UnsupportedTransferTypeError, OrbitMechanicsError)
        assert issubclass(InconsistentCentralBodyError, OrbitMechanicsError)
        assert issubclass(OrbitMechanicsError, ValueError)
