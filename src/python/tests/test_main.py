"""
===============================================================================
CONIC TRANSFER - Entry Point Test Suite
===============================================================================
Smoke tests for main.py: the demo transfer, the porkchop run with plot and
CSV output, and the non-zero exit status on an unreachable target.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

import main


SCENARIO = """\
scenario:
  central_body: earth
  departure:
    semi_major_axis: 7000.0
  arrival:
    semi_major_axis: 10000.0
    true_anomaly_deg: 150.0
porkchop:
  departure_points: 3
  arrival_points: 3
"""


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / 'scenario.yaml'
    path.write_text(SCENARIO)
    return str(path)


def test_minimum_energy_transfer(config_path):
    assert main.main(['--config', config_path]) == 0


def test_run_transfer_targets_time(config_path):
    config = main.load_config(config_path)
    t_m = main.run_transfer(config).time_of_flight
    days = 1.2 * t_m / main.SECONDS_PER_DAY
    solution = main.run_transfer(config, tof_days=days)
    assert abs(solution.time_of_flight - days * main.SECONDS_PER_DAY) <= config.targeting.tof_tolerance


def test_porkchop_outputs(config_path, tmp_path):
    plot = tmp_path / 'out' / 'porkchop.png'
    assert main.main(['--config', config_path, '--porkchop', '--plot', str(plot)]) == 0
    assert plot.exists()
    assert plot.with_suffix('.csv').exists()


def test_unreachable_target_exit_status(config_path):
    """Ten seconds is below the parabolic time for this geometry."""
    assert main.main(['--config', config_path, '--tof', str(10.0 / 86400.0)]) == 1
