"""Utility functions for visualization."""

from .visualization import plot_trajectory, plot_time_series

__all__ = [
    "plot_trajectory",
    "plot_time_series",
]
