"""CSV export and import of simulation trajectories.

The table has one header row and one row per sample:

    t, d_0, ..., d_{n-1}, I, a, b, c, d, STEPSIZE, TIMESTEPS, DIMENSION

The model and integration constants are repeated on every row so each row
is self-describing.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np

from .config import ModelParameters, IntegrationParameters
from .dynamics.trajectory import Trajectory


DELIMITER = ', '
CONSTANT_COLUMNS = ['I', 'a', 'b', 'c', 'd', 'STEPSIZE', 'TIMESTEPS', 'DIMENSION']


def csv_header(n_dims: int) -> list[str]:
    return ['t'] + [f'd_{i}' for i in range(n_dims)] + CONSTANT_COLUMNS


def save_trajectory_csv(
    path: str | Path,
    trajectory: Trajectory,
    model: ModelParameters,
    integration: IntegrationParameters
) -> Path:
    """Write a trajectory and its configuration to a CSV file.

    Args:
        path: Output file, overwritten if it exists.
        trajectory: Completed trajectory.
        model: Model constants written on each row.
        integration: Integration settings written on each row.

    Returns:
        The path written.
    """
    path = Path(path)
    n = trajectory.n_points
    n_dims = trajectory.n_dims

    constants = np.array([
        model.I, model.a, model.b, model.c, model.d,
        integration.step_size, integration.n_steps, n_dims,
    ], dtype=float)

    table = np.column_stack([
        trajectory.times,
        trajectory.states,
        np.tile(constants, (n, 1)),
    ])

    fmt = ['%.17g'] * (1 + n_dims + 6) + ['%d', '%d']

    np.savetxt(
        path, table,
        fmt=fmt,
        delimiter=DELIMITER,
        header=DELIMITER.join(csv_header(n_dims)),
        comments='',
    )
    return path


def load_trajectory_csv(path: str | Path) -> Trajectory:
    """Read the time and state columns of a file written by save_trajectory_csv."""
    path = Path(path)
    with open(path) as f:
        header = [name.strip() for name in f.readline().split(',')]

    state_columns = [i for i, name in enumerate(header) if name.startswith('d_')]
    if header[:1] != ['t'] or not state_columns:
        raise ValueError(f"{path} does not look like a trajectory file: header {header}")

    table = np.atleast_2d(np.genfromtxt(path, delimiter=',', skip_header=1, autostrip=True))
    return Trajectory(times=table[:, 0], states=table[:, state_columns])
