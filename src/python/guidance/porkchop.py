"""
===============================================================================
CONIC TRANSFER CORE - Porkchop Sweep
===============================================================================
Evaluate a grid of Lambert problems between two orbits: every departure
true anomaly on the first orbit against every arrival true anomaly on the
second.

Each cell is an independent, pure computation, so the grid is
embarrassingly parallel and is distributed over a multiprocessing.Pool
when more than one worker is requested.  A cell whose Lambert case fails
(collinear endpoints, unreachable time of flight, ...) is recorded as NaN
and the sweep carries on.

Per cell the sweep records:
    a_min            minimum-energy semi-major axis (km)
    sma              semi-major axis of the evaluated transfer (km)
    time_of_flight   transfer duration (s)
    departure_dv     |v1 - v_departure_orbit| (km/s)
    arrival_dv       |v_arrival_orbit - v2| (km/s)
    total_dv         departure_dv + arrival_dv (km/s)

Without a target time of flight the minimum-energy transfer is evaluated;
with one, TransferTargeter finds the matching semi-major axis.
===============================================================================
"""

import logging
import os
from dataclasses import dataclass
from multiprocessing import Pool
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from core.config import PorkchopConfig, TargetingConfig
from core.errors import OrbitMechanicsError
from dynamics.orbit import Orbit
from dynamics.orbit_position import OrbitPosition
from guidance.lambert import LambertSolver
from guidance.transfer_targeting import TransferTargeter

logger = logging.getLogger(__name__)

_FIELDS = ('a_min', 'sma', 'time_of_flight', 'departure_dv', 'arrival_dv', 'total_dv')


def _evaluate_cell(args: Tuple) -> Dict[str, float]:
    """
    Top-level function for pickling by multiprocessing.Pool.
    Solves one (departure anomaly, arrival anomaly) pair.
    """
    departure_orbit, arrival_orbit, f1, f2, revolutions, time_of_flight, targeting = args
    cell = {name: np.nan for name in _FIELDS}
    cell['error'] = None

    try:
        solver = LambertSolver(
            OrbitPosition(departure_orbit, f1),
            OrbitPosition(arrival_orbit, f2),
            revolutions=revolutions,
            tolerance=departure_orbit.tolerance,
        )
        cell['a_min'] = solver.a_min()
        if time_of_flight is None:
            solution = solver.solution(cell['a_min'], is_long_way=False)
        else:
            solution = TransferTargeter.from_config(solver, targeting).target(time_of_flight)
    except OrbitMechanicsError as exc:
        cell['error'] = f"{type(exc).__name__}: {exc}"
        return cell

    cell['sma'] = solution.sma
    cell['time_of_flight'] = solution.time_of_flight
    cell['departure_dv'] = solution.departure_delta_v()
    cell['arrival_dv'] = solution.arrival_delta_v()
    cell['total_dv'] = cell['departure_dv'] + cell['arrival_dv']
    return cell


@dataclass
class PorkchopResult:
    """
    Grids produced by a sweep, indexed [departure, arrival].

    Attributes
    ----------
    departure_anomalies, arrival_anomalies : np.ndarray
        Sweep axes (rad).
    grids : dict
        Field name -> 2-D array (see module docstring for the fields).
    errors : dict
        (i, j) -> error message for the cells that failed.
    """
    departure_anomalies: np.ndarray
    arrival_anomalies: np.ndarray
    grids: Dict[str, np.ndarray]
    errors: Dict[Tuple[int, int], str]

    def __getitem__(self, name: str) -> np.ndarray:
        return self.grids[name]

    @property
    def failure_count(self) -> int:
        return len(self.errors)

    def best(self) -> Optional[Tuple[int, int]]:
        """Indices of the cell with the lowest total delta-V, or None if every cell failed."""
        total = self.grids['total_dv']
        if np.all(np.isnan(total)):
            return None
        i, j = np.unravel_index(np.nanargmin(total), total.shape)
        return int(i), int(j)

    def to_dataframe(self) -> pd.DataFrame:
        """Long-format table, one row per cell."""
        dep, arr = np.meshgrid(self.departure_anomalies, self.arrival_anomalies, indexing='ij')
        data = {
            'departure_anomaly': dep.ravel(),
            'arrival_anomaly': arr.ravel(),
        }
        for name in _FIELDS:
            data[name] = self.grids[name].ravel()
        return pd.DataFrame(data)


class PorkchopSweep:
    """
    Departure/arrival anomaly sweep between two orbits.

    Typical usage:
        sweep = PorkchopSweep(earth_orbit, mars_orbit, num_workers=4)
        result = sweep.run(np.linspace(0, 2*np.pi, 36, endpoint=False),
                           np.linspace(0, 2*np.pi, 36, endpoint=False))
        i, j = result.best()
    """

    def __init__(
        self,
        departure_orbit: Orbit,
        arrival_orbit: Orbit,
        revolutions: int = 0,
        num_workers: Optional[int] = 1,
        targeting: Optional[TargetingConfig] = None,
    ) -> None:
        """
        Parameters
        ----------
        departure_orbit, arrival_orbit : Orbit
            Orbits of the departure and arrival points.
        revolutions : int
            Complete revolutions on each transfer.
        num_workers : int or None
            Worker processes.  1 runs in-process; None uses os.cpu_count().
        targeting : TargetingConfig, optional
            Root-finder settings used when a time of flight is targeted.
        """
        self.departure_orbit = departure_orbit
        self.arrival_orbit = arrival_orbit
        self.revolutions = revolutions
        self.num_workers = num_workers or os.cpu_count() or 1
        self.targeting = targeting or TargetingConfig()

    @classmethod
    def from_config(
        cls,
        departure_orbit: Orbit,
        arrival_orbit: Orbit,
        porkchop: PorkchopConfig,
        targeting: TargetingConfig,
        revolutions: int = 0,
    ) -> 'PorkchopSweep':
        return cls(
            departure_orbit,
            arrival_orbit,
            revolutions=revolutions,
            num_workers=porkchop.num_workers,
            targeting=targeting,
        )

    def run(
        self,
        departure_anomalies: Sequence[float],
        arrival_anomalies: Sequence[float],
        time_of_flight: Optional[float] = None,
    ) -> PorkchopResult:
        """
        Evaluate every (departure, arrival) pair.

        Parameters
        ----------
        departure_anomalies, arrival_anomalies : sequence of float
            True anomalies (rad) on the departure and arrival orbits.
        time_of_flight : float, optional
            Target duration (s).  When omitted each cell is the
            minimum-energy transfer.

        Returns
        -------
        PorkchopResult
        """
        dep = np.asarray(departure_anomalies, dtype=np.float64)
        arr = np.asarray(arrival_anomalies, dtype=np.float64)

        tasks = [
            (self.departure_orbit, self.arrival_orbit, float(f1), float(f2),
             self.revolutions, time_of_flight, self.targeting)
            for f1 in dep
            for f2 in arr
        ]

        logger.info(
            "Porkchop sweep: %d x %d cells on %d worker(s)",
            len(dep), len(arr), self.num_workers,
        )

        if self.num_workers > 1:
            with Pool(processes=self.num_workers) as pool:
                cells: List[dict] = pool.map(_evaluate_cell, tasks)
        else:
            cells = [_evaluate_cell(task) for task in tasks]

        shape = (len(dep), len(arr))
        grids = {name: np.full(shape, np.nan) for name in _FIELDS}
        errors: Dict[Tuple[int, int], str] = {}
        for k, cell in enumerate(cells):
            i, j = divmod(k, len(arr))
            for name in _FIELDS:
                grids[name][i, j] = cell[name]
            if cell['error'] is not None:
                errors[(i, j)] = cell['error']

        if errors:
            logger.warning("Porkchop sweep: %d of %d cells failed", len(errors), len(cells))

        return PorkchopResult(
            departure_anomalies=dep,
            arrival_anomalies=arr,
            grids=grids,
            errors=errors,
        )
