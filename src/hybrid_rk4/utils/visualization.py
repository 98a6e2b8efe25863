"""Visualization utilities for simulated trajectories."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import matplotlib.pyplot as plt

if TYPE_CHECKING:
    from ..dynamics.trajectory import Trajectory


def plot_trajectory(
    trajectory: Trajectory,
    ax: plt.Axes | None = None,
    dims: tuple[int, int] = (0, 1),
    **kwargs
) -> plt.Axes:
    """Plot a trajectory in the phase plane.

    Args:
        trajectory: Trajectory to plot.
        ax: Matplotlib axes (creates new if None).
        dims: Which dimensions to plot (for n_dims > 2).
        **kwargs: Additional arguments to plt.plot.

    Returns:
        The matplotlib axes.
    """
    if ax is None:
        fig, ax = plt.subplots()

    if trajectory.n_dims == 1:
        ax.plot(trajectory.times, trajectory.states[:, 0], **kwargs)
        ax.set_xlabel('Time')
        ax.set_ylabel('State')
    else:
        d0, d1 = dims
        ax.plot(trajectory.states[:, d0], trajectory.states[:, d1], **kwargs)
        ax.set_xlabel(f'd_{d0}')
        ax.set_ylabel(f'd_{d1}')

        # Mark start and end
        ax.plot(trajectory.states[0, d0], trajectory.states[0, d1],
                'go', markersize=8, label='Start')
        ax.plot(trajectory.states[-1, d0], trajectory.states[-1, d1],
                'rs', markersize=8, label='End')

    return ax


def plot_time_series(
    trajectory: Trajectory,
    threshold: float | None = None,
    labels: list[str] | None = None,
    save_path: str | Path | None = None
) -> plt.Figure:
    """Plot every state component against time, one panel each.

    Args:
        trajectory: Trajectory to plot.
        threshold: If given, drawn as a dashed line on the first panel.
        labels: Axis label per component (defaults to d_0, d_1, ...).
        save_path: If given, save the figure there.

    Returns:
        The matplotlib figure.
    """
    n = trajectory.n_dims
    labels = labels or [f'd_{i}' for i in range(n)]

    fig, axes = plt.subplots(n, 1, sharex=True, figsize=(8, 2.5 * n), squeeze=False)
    for i, ax in enumerate(axes[:, 0]):
        ax.plot(trajectory.times, trajectory.states[:, i], 'b-', linewidth=0.8)
        ax.set_ylabel(labels[i])
        ax.grid(True, alpha=0.3)

    if threshold is not None:
        axes[0, 0].axhline(threshold, color='r', linestyle='--', linewidth=0.8,
                           label=f'threshold = {threshold:g}')
        axes[0, 0].legend(loc='upper right')

    axes[-1, 0].set_xlabel('Time')
    fig.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, dpi=150)

    return fig
