"""
===============================================================================
CONIC TRANSFER CORE - Time-of-Flight Targeting
===============================================================================
Outer root finder around LambertSolver: find the transfer semi-major axis
whose time of flight matches a desired value.

The Lambert solver maps (a, branch) -> time of flight.  For a fixed pair
of endpoints:

    * at a = a_min both branches coincide at the minimum-energy time t_m
    * on the long branch (alpha = 2 pi - alpha0) the time grows without
      bound as a increases
    * on the short branch (alpha = alpha0) the time falls from t_m toward
      the parabolic limit; with complete revolutions added it turns and
      grows again

So the branch is chosen from the sign of (t_target - t_m), a bracket is
found by scanning a geometric grid of semi-major axes upward from a_min,
and scipy's Brent method closes it.
===============================================================================
"""

import logging
from typing import Optional

from scipy.optimize import brentq

from core.config import TargetingConfig
from core.errors import UnsupportedTransferTypeError
from guidance.lambert import LambertSolution, LambertSolver

logger = logging.getLogger(__name__)


class TransferTargeter:
    """
    Solve for the Lambert transfer with a prescribed time of flight.

    Attributes:
        solver:            The LambertSolver for the two endpoints.
        tof_tolerance:     Acceptable time-of-flight error (s).
        max_expansions:    Number of grid steps tried while bracketing.
        expansion_factor:  Ratio between successive semi-major axes.
    """

    def __init__(
        self,
        solver: LambertSolver,
        tof_tolerance: float = TargetingConfig.tof_tolerance,
        max_expansions: int = TargetingConfig.max_expansions,
        expansion_factor: float = TargetingConfig.expansion_factor,
    ) -> None:
        if tof_tolerance <= 0.0:
            raise ValueError(f"tof_tolerance must be positive (got {tof_tolerance})")
        if expansion_factor <= 1.0:
            raise ValueError(f"expansion_factor must exceed 1 (got {expansion_factor})")
        self.solver = solver
        self.tof_tolerance = tof_tolerance
        self.max_expansions = max_expansions
        self.expansion_factor = expansion_factor

    @classmethod
    def from_config(cls, solver: LambertSolver, config: TargetingConfig) -> 'TransferTargeter':
        return cls(
            solver,
            tof_tolerance=config.tof_tolerance,
            max_expansions=config.max_expansions,
            expansion_factor=config.expansion_factor,
        )

    def minimum_energy_solution(self) -> LambertSolution:
        return self.solver.solution(self.solver.a_min(), is_long_way=False)

    def minimum_energy_time(self) -> float:
        """Time of flight of the minimum-energy transfer (s)."""
        return self.minimum_energy_solution().time_of_flight

    def target(self, time_of_flight: float) -> LambertSolution:
        """
        Find the transfer whose time of flight equals *time_of_flight*.

        Parameters
        ----------
        time_of_flight : float
            Desired duration (s), including any complete revolutions.

        Returns
        -------
        LambertSolution

        Raises
        ------
        ValueError
            If time_of_flight is not positive.
        UnsupportedTransferTypeError
            If no elliptic transfer reaches the desired time within the
            bracketing grid (e.g. shorter than the parabolic time).
        """
        if time_of_flight <= 0.0:
            raise ValueError(f"time_of_flight must be positive (got {time_of_flight})")

        baseline = self.minimum_energy_solution()
        t_m = baseline.time_of_flight
        if abs(t_m - time_of_flight) <= self.tof_tolerance:
            return baseline

        long_way = time_of_flight > t_m
        a_lo, a_hi = self._bracket(baseline.sma, time_of_flight, long_way, t_m)

        def _residual(sma: float) -> float:
            return self.solver.evaluate(sma, long_way).unwrap().time_of_flight - time_of_flight

        sma = brentq(_residual, a_lo, a_hi, xtol=1e-9 * a_hi, maxiter=200)
        solution = self.solver.solution(sma, long_way)

        logger.debug(
            "Targeted tof=%.6g s: a=%.6g km long_way=%s (error %.3g s)",
            time_of_flight, sma, long_way, solution.time_of_flight - time_of_flight,
        )
        return solution

    def _bracket(self, a_min: float, target: float, long_way: bool, t_min: float):
        """Walk a geometric grid upward from a_min until the residual changes sign."""
        a_prev = a_min
        residual_prev = t_min - target
        for _ in range(self.max_expansions):
            a_next = a_prev * self.expansion_factor
            result = self.solver.evaluate(a_next, long_way)
            if not result.ok:
                logger.debug("Bracketing stopped at a=%.6g km: %s", a_next, result.error)
                break
            residual = result.solution.time_of_flight - target
            if residual == 0.0 or (residual > 0.0) != (residual_prev > 0.0):
                return a_prev, a_next
            a_prev, residual_prev = a_next, residual

        raise UnsupportedTransferTypeError(
            f"No elliptic transfer with time of flight {target:.6g} s found "
            f"(minimum-energy time {t_min:.6g} s, searched up to a={a_prev:.6g} km)"
        )
