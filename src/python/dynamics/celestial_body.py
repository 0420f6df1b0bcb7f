"""
===============================================================================
CONIC TRANSFER CORE - Celestial Body
===============================================================================
Immutable source of a gravitational parameter.  An Orbit holds a reference
to its central body for its whole life; two orbits are about the "same"
body when their gravitational parameters agree.
===============================================================================
"""

from dataclasses import dataclass

from core.constants import GRAVITATIONAL_CONSTANT, get_body_mass


@dataclass(frozen=True)
class CelestialBody:
    """
    A named point mass.

    Attributes
    ----------
    name : str
        Display name.
    mass : float
        Mass in kg.
    gravitational_constant : float
        G in km^3 / (kg s^2).  Defaults to core.constants.GRAVITATIONAL_CONSTANT.
    """
    name: str
    mass: float
    gravitational_constant: float = GRAVITATIONAL_CONSTANT

    @property
    def gravitational_parameter(self) -> float:
        """mu = G * M in km^3/s^2."""
        return self.gravitational_constant * self.mass

    @classmethod
    def from_catalog(cls, name: str, config=None) -> 'CelestialBody':
        """
        Build a body from a catalogued mass.

        Parameters
        ----------
        name : str
            Body name, case-insensitive.
        config : MechanicsConfig, optional
            Supplies the body catalogue and G.  When omitted the built-in
            catalogue in core.constants is used.
        """
        if config is None:
            return cls(name=name.capitalize(), mass=get_body_mass(name))
        return cls(
            name=name.capitalize(),
            mass=config.body_mass(name),
            gravitational_constant=config.gravitational_constant,
        )

    def __str__(self) -> str:
        return self.name
