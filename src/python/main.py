#!/usr/bin/env python3
"""
===============================================================================
CONIC TRANSFER - MAIN ENTRY POINT
===============================================================================
Runs the demo transfer described in the configuration file: two orbits
about one central body, a Lambert transfer between a departure point and
an arrival point, optionally targeted to a time of flight, and optionally
a porkchop sweep over both orbits.

USAGE:
    python main.py                         # Minimum-energy demo transfer
    python main.py --tof 250               # Target 250-day time of flight
    python main.py --porkchop              # Add a porkchop sweep
    python main.py --porkchop --plot out/porkchop.png --workers 4

DEPENDENCIES:
    numpy, scipy, pandas, matplotlib, pyyaml
===============================================================================
"""

import sys
import argparse
import logging
from pathlib import Path

import numpy as np

# ---------------------------------------------------------------------------
# Path setup: ensure all project modules are importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import MechanicsConfig, load_config
from core.constants import DEG2RAD, TWO_PI
from core.errors import OrbitMechanicsError
from dynamics.celestial_body import CelestialBody
from dynamics.orbit import Orbit
from dynamics.orbit_position import OrbitPosition
from guidance.lambert import LambertSolution, LambertSolver
from guidance.porkchop import PorkchopSweep
from guidance.transfer_targeting import TransferTargeter

logger = logging.getLogger('CONIC_TRANSFER')

SECONDS_PER_DAY = 86400.0


def build_orbit(body: CelestialBody, elements: dict, config: MechanicsConfig) -> Orbit:
    """Orbit from a scenario block with angles in degrees."""
    return Orbit.from_elements(
        body,
        elements['semi_major_axis'],
        elements.get('eccentricity', 0.0),
        elements.get('inclination_deg', 0.0) * DEG2RAD,
        elements.get('raan_deg', 0.0) * DEG2RAD,
        elements.get('arg_periapsis_deg', 0.0) * DEG2RAD,
        tolerance=config.tolerance,
    )


def report(solution: LambertSolution) -> None:
    """Log a summary of a transfer."""
    orbit = solution.transfer_orbit
    logger.info("Transfer orbit: %s", orbit)
    logger.info("  Time of flight: %.2f days", solution.time_of_flight / SECONDS_PER_DAY)
    logger.info("  Departure dV:   %.4f km/s", solution.departure_delta_v())
    logger.info("  Arrival dV:     %.4f km/s", solution.arrival_delta_v())
    logger.info("  Total dV:       %.4f km/s", solution.total_delta_v())


def run_transfer(config: MechanicsConfig, tof_days=None) -> LambertSolution:
    scenario = config.scenario
    body = CelestialBody.from_catalog(scenario.get('central_body', 'sun'), config)
    departure_orbit = build_orbit(body, scenario['departure'], config)
    arrival_orbit = build_orbit(body, scenario['arrival'], config)

    start = OrbitPosition(departure_orbit, scenario['departure'].get('true_anomaly_deg', 0.0) * DEG2RAD)
    end = OrbitPosition(arrival_orbit, scenario['arrival'].get('true_anomaly_deg', 0.0) * DEG2RAD)

    solver = LambertSolver(start, end, revolutions=scenario.get('revolutions', 0),
                           tolerance=config.tolerance)
    targeter = TransferTargeter.from_config(solver, config.targeting)

    logger.info("Minimum-energy semi-major axis: %.1f km", solver.a_min())
    logger.info("Minimum-energy time of flight:  %.2f days",
                targeter.minimum_energy_time() / SECONDS_PER_DAY)

    if tof_days is None:
        tof_days = scenario.get('time_of_flight_days')
    if tof_days is None:
        solution = targeter.minimum_energy_solution()
    else:
        logger.info("Targeting time of flight: %.2f days", tof_days)
        solution = targeter.target(tof_days * SECONDS_PER_DAY)
    report(solution)
    return solution


def run_porkchop(config: MechanicsConfig, workers=None, plot_path=None, tof_days=None):
    scenario = config.scenario
    body = CelestialBody.from_catalog(scenario.get('central_body', 'sun'), config)
    departure_orbit = build_orbit(body, scenario['departure'], config)
    arrival_orbit = build_orbit(body, scenario['arrival'], config)

    porkchop = config.porkchop
    sweep = PorkchopSweep.from_config(departure_orbit, arrival_orbit, porkchop,
                                      config.targeting,
                                      revolutions=scenario.get('revolutions', 0))
    if workers is not None:
        sweep.num_workers = workers

    dep = np.linspace(0.0, TWO_PI, porkchop.departure_points, endpoint=False)
    arr = np.linspace(0.0, TWO_PI, porkchop.arrival_points, endpoint=False)
    tof = None if tof_days is None else tof_days * SECONDS_PER_DAY
    result = sweep.run(dep, arr, time_of_flight=tof)

    best = result.best()
    if best is None:
        logger.warning("Every porkchop cell failed")
    else:
        i, j = best
        logger.info(
            "Best cell: depart f=%.1f deg, arrive f=%.1f deg, total dV %.4f km/s, tof %.2f days",
            np.degrees(dep[i]), np.degrees(arr[j]), result['total_dv'][i, j],
            result['time_of_flight'][i, j] / SECONDS_PER_DAY,
        )

    if plot_path:
        from visualization.porkchop_plots import plot_porkchop
        plot_porkchop(result, plot_path)
        result.to_dataframe().to_csv(str(Path(plot_path).with_suffix('.csv')), index=False)
        logger.info("Porkchop plot saved to %s", plot_path)
    return result


def main(argv=None):
    """
    Main entry point. Parses command line arguments and runs the demo.
    """
    parser = argparse.ArgumentParser(
        description='Lambert transfer between two Keplerian orbits',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--config', type=str, default=None,
                        help='Path to transfer config YAML')
    parser.add_argument('--tof', type=float, default=None,
                        help='Target time of flight in days (overrides config)')
    parser.add_argument('--porkchop', action='store_true',
                        help='Run a porkchop sweep over both orbits')
    parser.add_argument('--workers', type=int, default=None,
                        help='Worker processes for the porkchop sweep')
    parser.add_argument('--plot', type=str, default=None,
                        help='Save the porkchop plot (and CSV) to this path')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable debug logging')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    config = load_config(args.config)

    try:
        run_transfer(config, tof_days=args.tof)
        if args.porkchop:
            run_porkchop(config, workers=args.workers, plot_path=args.plot, tof_days=args.tof)
    except OrbitMechanicsError as exc:
        logger.error("Transfer failed: %s", exc)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
