"""
Plots of local fields sampled over the phase angle.
"""

import numpy as np
import matplotlib.pyplot as plt

from ..physics.local_fields import LocalFields


def plot_field_vs_angle(fields: LocalFields, component: str = 'total', ax=None):
    """
    Plot the Cartesian components and the magnitude of a field versus angle.

    Parameters
    ----------
    fields : LocalFields
        Result of a lattice sum
    component : str
        'total', 'dipolar', 'lorentz' or 'contact'
    ax : matplotlib.axes.Axes, optional
        Axes to draw on; a new figure is created if None

    Returns
    -------
    ax : matplotlib.axes.Axes
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 4))

    values = fields.get_component(component)
    degrees = np.degrees(fields.angles)

    for i, axis in enumerate('xyz'):
        ax.plot(degrees, values[:, i], label=f"$B_{axis}$")
    ax.plot(degrees, fields.norms(component), 'k--', label="$|B|$")

    ax.set_xlabel("Phase angle (deg)")
    ax.set_ylabel(f"{component.capitalize()} field (T)")
    ax.legend()
    return ax


def plot_field_distribution(fields: LocalFields, component: str = 'total',
                            bins: int = 50, ax=None):
    """
    Histogram of the field magnitude over the sampled angles.

    For an incommensurate structure every phase angle is realized somewhere
    in the crystal, so this is the field distribution seen by the probe.

    Returns
    -------
    ax : matplotlib.axes.Axes
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 4))

    norms = fields.norms(component)

    # constant |B| (planar helix at a symmetric site) differs only by rounding
    hist_range = None
    if np.ptp(norms) < 1e-9 * max(1.0, float(np.abs(norms).max())):
        center = float(norms.mean())
        width = max(1.0, abs(center)) * 1e-3
        hist_range = (center - 0.5 * width, center + 0.5 * width)

    ax.hist(norms, bins=bins, range=hist_range, density=True, color='steelblue')
    ax.set_xlabel(f"|B| {component} (T)")
    ax.set_ylabel("Probability density")
    return ax
