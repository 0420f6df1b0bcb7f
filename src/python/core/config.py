"""
===============================================================================
CONIC TRANSFER CORE - Configuration
===============================================================================
Loads the YAML configuration file that parameterises a run:

    gravitational_constant   km^3 / (kg s^2), default core.constants value
    tolerance                relative margin and absolute floor for
                             nearly-equal comparisons
    bodies                   extra or overriding body masses (kg)
    targeting                time-of-flight tolerance and bracket limits
                             for the outer root finder
    porkchop                 sweep resolution and worker count
    scenario                 the demo transfer run by main.py

Every key is optional; missing values fall back to core.constants.
===============================================================================
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import yaml

from core.constants import (
    BODY_MASSES,
    GRAVITATIONAL_CONSTANT,
    EQUALITY_MARGIN,
    EQUALITY_FLOOR,
)
from core.tolerance import Tolerance

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[3] / 'config' / 'transfer_config.yaml'


@dataclass(frozen=True)
class TargetingConfig:
    """Settings for the time-of-flight root finder."""
    tof_tolerance: float = 1.0        # s
    max_expansions: int = 60
    expansion_factor: float = 1.5


@dataclass(frozen=True)
class PorkchopConfig:
    """Settings for a departure/arrival anomaly sweep."""
    departure_points: int = 24
    arrival_points: int = 24
    num_workers: int = 1


@dataclass(frozen=True)
class MechanicsConfig:
    """
    Run configuration for the orbit and Lambert modules.

    Attributes
    ----------
    gravitational_constant : float
        Universal gravitational constant in km^3 / (kg s^2).
    tolerance : Tolerance
        Equality tolerance used for degenerate-case detection.
    bodies : dict
        Body name (lower case) -> mass in kg.
    targeting : TargetingConfig
    porkchop : PorkchopConfig
    scenario : dict
        Free-form demo scenario consumed by main.py.
    """
    gravitational_constant: float = GRAVITATIONAL_CONSTANT
    tolerance: Tolerance = field(default_factory=Tolerance)
    bodies: Dict[str, float] = field(default_factory=lambda: dict(BODY_MASSES))
    targeting: TargetingConfig = field(default_factory=TargetingConfig)
    porkchop: PorkchopConfig = field(default_factory=PorkchopConfig)
    scenario: dict = field(default_factory=dict)

    def body_mass(self, name: str) -> float:
        key = name.lower()
        if key not in self.bodies:
            raise ValueError(f"Unknown body: {name}. Valid: {sorted(self.bodies)}")
        return self.bodies[key]

    @classmethod
    def from_dict(cls, raw: Optional[dict]) -> 'MechanicsConfig':
        """Build a config from a parsed YAML mapping."""
        raw = raw or {}

        tol_raw = raw.get('tolerance') or {}
        tolerance = Tolerance(
            margin=float(tol_raw.get('margin', EQUALITY_MARGIN)),
            floor=float(tol_raw.get('floor', EQUALITY_FLOOR)),
        )

        bodies = dict(BODY_MASSES)
        for name, mass in (raw.get('bodies') or {}).items():
            bodies[str(name).lower()] = float(mass)

        tgt_raw = raw.get('targeting') or {}
        targeting = TargetingConfig(
            tof_tolerance=float(tgt_raw.get('tof_tolerance', TargetingConfig.tof_tolerance)),
            max_expansions=int(tgt_raw.get('max_expansions', TargetingConfig.max_expansions)),
            expansion_factor=float(tgt_raw.get('expansion_factor', TargetingConfig.expansion_factor)),
        )
        if targeting.expansion_factor <= 1.0:
            raise ValueError(
                f"targeting.expansion_factor must exceed 1 (got {targeting.expansion_factor})"
            )

        pc_raw = raw.get('porkchop') or {}
        porkchop = PorkchopConfig(
            departure_points=int(pc_raw.get('departure_points', PorkchopConfig.departure_points)),
            arrival_points=int(pc_raw.get('arrival_points', PorkchopConfig.arrival_points)),
            num_workers=int(pc_raw.get('num_workers', PorkchopConfig.num_workers)),
        )

        return cls(
            gravitational_constant=float(
                raw.get('gravitational_constant', GRAVITATIONAL_CONSTANT)
            ),
            tolerance=tolerance,
            bodies=bodies,
            targeting=targeting,
            porkchop=porkchop,
            scenario=dict(raw.get('scenario') or {}),
        )


def load_config(config_path: Optional[str] = None) -> MechanicsConfig:
    """
    Load a MechanicsConfig from a YAML file.

    Args:
        config_path: Path to YAML config. Defaults to config/transfer_config.yaml

    Returns:
        The parsed configuration
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    logger.info("Loading configuration from: %s", path)
    with open(path, 'r') as f:
        raw = yaml.safe_load(f)
    if raw is not None and not isinstance(raw, dict):
        raise ValueError(f"Configuration root must be a mapping, got {type(raw).__name__}")
    return MechanicsConfig.from_dict(raw)
