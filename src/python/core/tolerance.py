"""
===============================================================================
CONIC TRANSFER CORE - Tolerance Comparisons
===============================================================================
Relative floating-point equality used by every degenerate-case test in the
orbit and Lambert modules (equatorial, circular, 180-degree transfer ...).

The margin scales with the smaller magnitude of the two operands:

    margin = |min(|a|, |b|)| * relative_margin

When one operand is exactly zero that margin collapses to zero, so an
absolute floor is used instead.
===============================================================================
"""

from dataclasses import dataclass

from core.constants import EQUALITY_MARGIN, EQUALITY_FLOOR


@dataclass(frozen=True)
class Tolerance:
    """
    Equality tolerance passed to the orbit and Lambert computations.

    Attributes
    ----------
    margin : float
        Relative margin applied to min(|a|, |b|).
    floor : float
        Absolute margin used when the relative margin is zero.
    """
    margin: float = EQUALITY_MARGIN
    floor: float = EQUALITY_FLOOR

    def __post_init__(self):
        if self.margin < 0.0 or self.floor < 0.0:
            raise ValueError(
                f"Tolerance margins must be non-negative "
                f"(got margin={self.margin}, floor={self.floor})"
            )

    def nearly_equal(self, a: float, b: float) -> bool:
        """Return True when *a* and *b* agree within this tolerance."""
        if a == b:
            return True
        margin = abs(min(abs(a), abs(b))) * self.margin
        if margin == 0.0:
            margin = self.floor
        return abs(a - b) <= margin

    def is_zero(self, value: float) -> bool:
        return self.nearly_equal(value, 0.0)


DEFAULT_TOLERANCE = Tolerance()


def nearly_equal(a: float, b: float) -> bool:
    """Compare two floats with the default tolerance."""
    return DEFAULT_TOLERANCE.nearly_equal(a, b)
