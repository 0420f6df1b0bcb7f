"""
===============================================================================
CONIC TRANSFER - Time-of-Flight Targeting Test Suite
===============================================================================
Tests for TransferTargeter: matching requested times of flight above and
below the minimum-energy time, multi-revolution targets, and rejection of
times no elliptic transfer can reach.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest
from numpy.testing import assert_allclose

from core.config import TargetingConfig
from core.constants import PI
from core.errors import UnsupportedTransferTypeError
from dynamics.celestial_body import CelestialBody
from dynamics.orbit import Orbit
from dynamics.orbit_position import OrbitPosition
from guidance.lambert import LambertSolver
from guidance.transfer_targeting import TransferTargeter


@pytest.fixture
def earth():
    return CelestialBody("Earth", 5.972e24)


@pytest.fixture
def solver(earth):
    """Quarter-turn transfer between circular orbits at 7000 km and 10000 km."""
    inner = Orbit.from_elements(earth, 7000.0, 0.0, 0.0, 0.0, 0.0)
    outer = Orbit.from_elements(earth, 10000.0, 0.0, 0.0, 0.0, 0.0)
    return LambertSolver(OrbitPosition(inner, 0.0), OrbitPosition(outer, PI / 2.0))


@pytest.fixture
def targeter(solver):
    return TransferTargeter(solver, tof_tolerance=0.5)


class TestTransferTargeter:

    def test_minimum_energy_solution(self, targeter, solver):
        sol = targeter.minimum_energy_solution()
        assert_allclose(sol.sma, solver.a_min(), rtol=1e-15)
        assert targeter.minimum_energy_time() == sol.time_of_flight

    def test_target_minimum_energy_time(self, targeter, solver):
        t_m = targeter.minimum_energy_time()
        sol = targeter.target(t_m)
        assert_allclose(sol.sma, solver.a_min(), rtol=1e-15)

    @pytest.mark.parametrize("ratio", [1.05, 1.3, 2.0])
    def test_target_above_minimum_energy(self, targeter, ratio):
        """Longer times than t_m are found on the long branch."""
        target = ratio * targeter.minimum_energy_time()
        sol = targeter.target(target)
        assert sol.is_long_way
        assert abs(sol.time_of_flight - target) <= targeter.tof_tolerance

    @pytest.mark.parametrize("ratio", [0.7, 0.9, 0.98])
    def test_target_below_minimum_energy(self, targeter, ratio):
        """Shorter times than t_m (but above the parabolic time) use the short branch."""
        target = ratio * targeter.minimum_energy_time()
        sol = targeter.target(target)
        assert not sol.is_long_way
        assert sol.sma > targeter.solver.a_min()
        assert abs(sol.time_of_flight - target) <= targeter.tof_tolerance

    def test_target_with_revolution(self, earth):
        inner = Orbit.from_elements(earth, 7000.0, 0.0, 0.0, 0.0, 0.0)
        outer = Orbit.from_elements(earth, 10000.0, 0.0, 0.0, 0.0, 0.0)
        solver = LambertSolver(OrbitPosition(inner, 0.0), OrbitPosition(outer, PI / 2.0),
                               revolutions=1)
        targeter = TransferTargeter(solver, tof_tolerance=0.5)
        target = 1.2 * targeter.minimum_energy_time()
        sol = targeter.target(target)
        assert sol.revolutions == 1
        assert abs(sol.time_of_flight - target) <= targeter.tof_tolerance

    def test_unreachable_time_rejected(self, targeter):
        """Below the parabolic time no elliptic transfer exists."""
        with pytest.raises(UnsupportedTransferTypeError):
            targeter.target(0.2 * targeter.minimum_energy_time())

    def test_non_positive_time_rejected(self, targeter):
        with pytest.raises(ValueError):
            targeter.target(0.0)

    @pytest.mark.parametrize("kwargs", [
        {'tof_tolerance': 0.0},
        {'expansion_factor': 1.0},
    ])
    def test_invalid_settings(self, solver, kwargs):
        with pytest.raises(ValueError):
            TransferTargeter(solver, **kwargs)

    def test_from_config(self, solver):
        config = TargetingConfig(tof_tolerance=2.0, max_expansions=10, expansion_factor=2.0)
        targeter = TransferTargeter.from_config(solver, config)
        assert targeter.tof_tolerance == 2.0
        assert targeter.max_expansions == 10
        assert targeter.expansion_factor == 2.0
