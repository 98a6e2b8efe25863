"""Fixed-step numerical integrators.

``rk4_step`` is the kernel used by the hybrid simulator. It knows nothing
about thresholds or resets: it advances a state by one step of size ``h``,
which may be smaller than the nominal step when an event is being located.
"""

from __future__ import annotations

from enum import Enum, auto

import numpy as np

from .base import VectorField, as_state
from .trajectory import Trajectory


class IntegrationMethod(Enum):
    """Available fixed-step integration methods."""
    EULER = auto()       # Forward Euler (first order, for testing)
    RK4 = auto()         # Classic Runge-Kutta 4th order


def rk4_step(
    f: VectorField,
    t: float,
    x: np.ndarray,
    h: float
) -> np.ndarray:
    """Advance x by one classical Runge-Kutta step.

        k1 = h f(t, x)
        k2 = h f(t + h/2, x + k1/2)
        k3 = h f(t + h/2, x + k2/2)
        k4 = h f(t + h, x + k3)
        x' = x + (k1 + 2 k2 + 2 k3 + k4) / 6

    Args:
        f: Vector field.
        t: Time at the start of the step.
        x: State at the start of the step. Not modified.
        h: Step size.

    Returns:
        New state array.
    """
    k1 = h * f(t, x)
    k2 = h * f(t + h/2, x + k1/2)
    k3 = h * f(t + h/2, x + k2/2)
    k4 = h * f(t + h, x + k3)
    return x + (k1 + 2*k2 + 2*k3 + k4) / 6


def euler_step(
    f: VectorField,
    t: float,
    x: np.ndarray,
    h: float
) -> np.ndarray:
    """Forward Euler step (first order, for testing)."""
    return x + h * f(t, x)


_STEPPERS = {
    IntegrationMethod.EULER: euler_step,
    IntegrationMethod.RK4: rk4_step,
}


def integrate(
    f: VectorField,
    x0: np.ndarray,
    step_size: float,
    n_steps: int,
    method: IntegrationMethod = IntegrationMethod.RK4,
) -> Trajectory:
    """Integrate a vector field with a fixed step and no events.

    Args:
        f: Vector field.
        x0: Initial state, shape (n_dims,).
        step_size: Step size h.
        n_steps: Number of samples in the result, including x0.
        method: Integration method to use.

    Returns:
        Trajectory with n_steps samples at times 0, h, 2h, ...
    """
    try:
        step = _STEPPERS[method]
    except KeyError:
        raise ValueError(f"Unknown integration method: {method}") from None

    x0 = as_state(x0, f.n_dims)
    traj = Trajectory.allocate(n_steps, f.n_dims)
    traj.states[0] = x0

    for i in range(n_steps - 1):
        t = traj.times[i]
        traj.states[i + 1] = step(f, t, traj.states[i], step_size)
        traj.times[i + 1] = t + step_size

    return traj


def integrate_rk4(
    f: VectorField,
    x0: np.ndarray,
    step_size: float,
    n_steps: int
) -> Trajectory:
    """Plain nominal-step RK4 integration."""
    return integrate(f, x0, step_size, n_steps, IntegrationMethod.RK4)
