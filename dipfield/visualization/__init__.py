"""
Plotting helpers for local-field results.
"""

from .field_plotter import plot_field_vs_angle, plot_field_distribution

__all__ = ['plot_field_vs_angle', 'plot_field_distribution']
