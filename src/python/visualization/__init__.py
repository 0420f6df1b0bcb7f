"""
===============================================================================
CONIC TRANSFER - Visualization Package
===============================================================================
Modules:
    porkchop_plots : Contour plots of porkchop sweeps
===============================================================================
"""
