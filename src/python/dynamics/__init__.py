"""
===============================================================================
CONIC TRANSFER - Dynamics Package
===============================================================================
Two-body orbit models.

Submodules:
    celestial_body  -- Named point mass and its gravitational parameter
    orbit           -- Keplerian orbit: element/state conversion, propagation
                       in true anomaly, time of flight
    orbit_position  -- Immutable (orbit, true anomaly) pair
===============================================================================
"""
