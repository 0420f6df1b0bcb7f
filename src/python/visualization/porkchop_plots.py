"""
Porkchop plot output.
Contours of total delta-V and time of flight over the departure/arrival
true-anomaly grid of a PorkchopResult.
"""

import os

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for saving
import matplotlib.pyplot as plt

from guidance.porkchop import PorkchopResult


def plot_porkchop(result: PorkchopResult, output_path: str, title: str = 'Porkchop Plot') -> str:
    """
    Save a contour plot of a porkchop sweep.

    Filled contours show total delta-V (km/s); line contours show time of
    flight (days).  The lowest delta-V cell is marked.

    Args:
        result: Sweep output
        output_path: Destination image file
        title: Figure title

    Returns:
        The path written
    """
    dep_deg = np.degrees(result.departure_anomalies)
    arr_deg = np.degrees(result.arrival_anomalies)
    total_dv = np.ma.masked_invalid(result['total_dv'])
    tof_days = np.ma.masked_invalid(result['time_of_flight'] / 86400.0)

    fig, ax = plt.subplots(figsize=(10, 8))

    # Grids are [departure, arrival]; contour wants [y, x]
    if total_dv.count() > 0:
        filled = ax.contourf(dep_deg, arr_deg, total_dv.T, levels=20, cmap='viridis')
        fig.colorbar(filled, ax=ax, label='Total $\\Delta V$ (km/s)')
    if tof_days.count() > 0:
        lines = ax.contour(dep_deg, arr_deg, tof_days.T, levels=10, colors='white',
                           linewidths=0.8)
        ax.clabel(lines, fmt='%.0f d', fontsize=8)

    best = result.best()
    if best is not None:
        i, j = best
        ax.plot(dep_deg[i], arr_deg[j], marker='*', color='#C73E1D', markersize=14,
                label=f'Min $\\Delta V$ = {result["total_dv"][i, j]:.3f} km/s')
        ax.legend(loc='upper right')

    ax.set_xlabel('Departure true anomaly (deg)')
    ax.set_ylabel('Arrival true anomaly (deg)')
    ax.set_title(title)

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    plt.savefig(output_path, dpi=300, bbox_inches='tight')
    plt.close(fig)
    return output_path
