"""
===============================================================================
CONIC TRANSFER CORE - Error Taxonomy
===============================================================================
Exception types raised by the orbit and Lambert modules.

All of them derive from ValueError: every failure here is caused by the
inputs (a geometry the formulation cannot represent, a transfer outside the
supported conic family, a zero-length vector) and is recoverable by the
caller.  A porkchop sweep can catch a single failed case and continue.

    OrbitMechanicsError
        DegenerateGeometryError        rectilinear / undefined orbit plane
        NumericalDegeneracyError       zero-magnitude normalisation
        TransferError
            UnsupportedTransferTypeError   sub-minimum-energy, parabolic,
                                           hyperbolic
            InconsistentCentralBodyError   endpoints about different bodies
===============================================================================
"""


class OrbitMechanicsError(ValueError):
    """Base class for all orbit and transfer computation errors."""


class DegenerateGeometryError(OrbitMechanicsError):
    """The state vectors do not define an orbital plane (zero angular momentum)."""


class NumericalDegeneracyError(OrbitMechanicsError):
    """A vector of zero magnitude was normalised."""


class TransferError(OrbitMechanicsError):
    """Base class for failures of a single Lambert evaluation."""


class UnsupportedTransferTypeError(TransferError):
    """
    The requested transfer or orbit is not an ellipse.

    Raised for Lambert requests below the minimum-energy semi-major axis,
    for state vectors on parabolic or escape trajectories, and for
    period / time-of-flight queries on open orbits.
    """


class InconsistentCentralBodyError(TransferError):
    """The two transfer endpoints orbit bodies with different gravitational parameters."""
