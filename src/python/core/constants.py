"""
===============================================================================
CONIC TRANSFER CORE - Physical and Numerical Constants
===============================================================================
Central repository for the constants used by the orbit and Lambert modules.
Units throughout are kilometres, seconds, kilograms and radians, so the
gravitational constant below is expressed in km^3 / (kg * s^2).

Nothing in this module is mutated at run time.  Callers that need a
different gravitational constant or equality tolerance pass one in
explicitly (see core.config and core.tolerance).
===============================================================================
"""

import numpy as np


# =============================================================================
# MATHEMATICAL CONSTANTS
# =============================================================================
PI = np.pi
TWO_PI = 2.0 * np.pi
HALF_PI = 0.5 * np.pi
DEG2RAD = PI / 180.0
RAD2DEG = 180.0 / PI

# =============================================================================
# FUNDAMENTAL PHYSICAL CONSTANTS
# =============================================================================
GRAVITATIONAL_CONSTANT = 6.67384e-20   # km^3 / (kg * s^2)
AU_KM = 1.495978707e8                  # Astronomical Unit in kilometres

# =============================================================================
# NUMERICAL EQUALITY
# =============================================================================
# Relative margin applied to min(|a|, |b|).  Written as 10E-6 (== 1e-5);
# the value is kept as-is, see DESIGN.md.
EQUALITY_MARGIN = 10E-6
# Absolute margin used when the relative margin collapses to zero.
EQUALITY_FLOOR = 1e-10

# =============================================================================
# BODY MASSES (kg)
# =============================================================================
SUN_MASS = 1.98855e30
MERCURY_MASS = 3.3011e23
VENUS_MASS = 4.8675e24
EARTH_MASS = 5.972e24
MOON_MASS = 7.342e22
MARS_MASS = 6.4171e23
JUPITER_MASS = 1.89819e27
SATURN_MASS = 5.6834e26

BODY_MASSES = {
    'sun': SUN_MASS,
    'mercury': MERCURY_MASS,
    'venus': VENUS_MASS,
    'earth': EARTH_MASS,
    'moon': MOON_MASS,
    'mars': MARS_MASS,
    'jupiter': JUPITER_MASS,
    'saturn': SATURN_MASS,
}

# =============================================================================
# USEFUL DERIVED QUANTITIES
# =============================================================================
EARTH_MU = GRAVITATIONAL_CONSTANT * EARTH_MASS   # ~398562 km^3/s^2
SUN_MU = GRAVITATIONAL_CONSTANT * SUN_MASS


def get_body_mass(body_name: str) -> float:
    """
    Look up a catalogued body mass by name.

    Args:
        body_name: Case-insensitive body name, e.g. 'earth' or 'Sun'

    Returns:
        Mass in kilograms

    Raises:
        ValueError: If body_name is not recognized
    """
    key = body_name.lower()
    if key not in BODY_MASSES:
        raise ValueError(f"Unknown body: {body_name}. Valid: {list(BODY_MASSES.keys())}")
    return BODY_MASSES[key]
