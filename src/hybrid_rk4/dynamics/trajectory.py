"""Trajectory data structure for storing fixed-length simulation output."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass
class Trajectory:
    """A trajectory storing time points and state values.

    The number of points is fixed when the trajectory is created; the
    simulator fills a preallocated trajectory slot by slot.

    Attributes:
        times: 1D array of time points, shape (n_points,)
        states: 2D array of states, shape (n_points, n_dims)
    """
    times: np.ndarray
    states: np.ndarray

    def __post_init__(self) -> None:
        self.times = np.asarray(self.times, dtype=float)
        self.states = np.asarray(self.states, dtype=float)

        if self.states.ndim == 1:
            self.states = self.states.reshape(-1, 1)

        if len(self.times) != len(self.states):
            raise ValueError(
                f"Length mismatch: times has {len(self.times)} points, "
                f"states has {len(self.states)} points"
            )

    @classmethod
    def allocate(cls, n_points: int, n_dims: int) -> Trajectory:
        """Create a zero-filled trajectory with room for n_points samples."""
        return cls(
            times=np.zeros(n_points),
            states=np.zeros((n_points, n_dims))
        )

    @property
    def n_points(self) -> int:
        """Number of time points in the trajectory."""
        return len(self.times)

    @property
    def n_dims(self) -> int:
        """Dimension of the state space."""
        return self.states.shape[1]

    @property
    def t_start(self) -> float:
        """Start time of the trajectory."""
        return float(self.times[0])

    @property
    def t_end(self) -> float:
        """End time of the trajectory."""
        return float(self.times[-1])

    @property
    def final_state(self) -> np.ndarray:
        """Final state of the trajectory."""
        return self.states[-1].copy()

    def sample(self, i: int) -> tuple[float, np.ndarray]:
        """Return sample i as a (time, state) pair."""
        return float(self.times[i]), self.states[i].copy()

    def step_sizes(self) -> np.ndarray:
        """Elapsed time between consecutive samples."""
        return np.diff(self.times)

    def is_time_monotonic(self) -> bool:
        """True if times are strictly increasing."""
        return bool(np.all(np.diff(self.times) > 0))

    def __len__(self) -> int:
        return self.n_points

    def __repr__(self) -> str:
        return (
            f"Trajectory(n_points={self.n_points}, n_dims={self.n_dims}, "
            f"t=[{self.t_start:.4f}, {self.t_end:.4f}])"
        )
