"""
===============================================================================
CONIC TRANSFER - Core Package
===============================================================================
Constants, configuration and the numerical collaborators shared by the
orbit and transfer modules.

Modules:
    constants   : Physical constants, tolerance literals, body masses
    config      : YAML run configuration
    errors      : Exception taxonomy
    tolerance   : Relative floating-point equality
    vectors     : NumPy vector helpers with zero-magnitude guards
    angles      : Angle normalisation and clipped inverse trig
===============================================================================
"""
