"""
===============================================================================
CONIC TRANSFER - Guidance Package
===============================================================================
Transfer design between orbit positions.

Modules:
    lambert             : Lambert solver for a given transfer semi-major axis
    transfer_targeting  : Root finder matching a desired time of flight
    porkchop            : Departure/arrival sweeps over two orbits
===============================================================================
"""
