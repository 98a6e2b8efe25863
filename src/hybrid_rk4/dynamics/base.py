"""Base protocols, types and contract checks for vector fields."""

from __future__ import annotations

import math
from typing import Protocol, Callable, runtime_checkable

import numpy as np

from ..exceptions import ContractViolation


# Type alias for dynamics function: f(t, x) -> dx/dt
DynamicsFunction = Callable[[float, np.ndarray], np.ndarray]


@runtime_checkable
class VectorField(Protocol):
    """Protocol for the continuous part of a hybrid system.

    A vector field maps (time, state) to the instantaneous rate of change.
    Implementations must be pure: no hidden state, no mutation of ``x``.
    The stepper and simulator only depend on this interface, so any model
    can be swapped in.
    """

    @property
    def n_dims(self) -> int:
        """Dimension of the state space."""
        ...

    def __call__(self, t: float, x: np.ndarray) -> np.ndarray:
        """Evaluate dx/dt at (t, x).

        Args:
            t: Time, must not be NaN.
            x: State, shape (n_dims,).

        Returns:
            Derivative, shape (n_dims,).
        """
        ...


def check_time(t: float) -> None:
    """Raise ContractViolation if t is NaN."""
    if math.isnan(t):
        raise ContractViolation("Vector field evaluated at NaN time")


def check_state(x: np.ndarray, n_dims: int) -> None:
    """Raise ContractViolation if x is not a state of dimension n_dims."""
    shape = np.shape(x)
    if shape != (n_dims,):
        raise ContractViolation(
            f"State has wrong shape: expected ({n_dims},), got {shape}"
        )


def as_state(x0, n_dims: int) -> np.ndarray:
    """Convert an initial condition to a float state array and validate it."""
    x = np.array(x0, dtype=float)
    check_state(x, n_dims)
    return x
