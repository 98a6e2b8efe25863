"""Vector field implementations."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from ..config import ModelParameters
from .base import DynamicsFunction, check_time, check_state


@dataclass(frozen=True)
class IzhikevichField:
    """Izhikevich spiking neuron, continuous part.

        dv/dt = 0.04 v^2 + 5 v + 140 - u + I
        du/dt = a (b v - u)

    State: [v, u] (membrane potential, recovery variable). The system is
    autonomous; ``t`` is only checked, never used. The reset map lives in
    ``ThresholdReset``.

    Attributes:
        params: Model constants. Only I, a and b are used here.
    """
    params: ModelParameters = field(default_factory=ModelParameters)

    @property
    def n_dims(self) -> int:
        return 2

    def __call__(self, t: float, x: np.ndarray) -> np.ndarray:
        check_time(t)
        check_state(x, 2)
        p = self.params
        v, u = x[0], x[1]
        return np.array([
            0.04 * v * v + 5 * v + 140 - u + p.I,
            p.a * (p.b * v - u),
        ])

    def __repr__(self) -> str:
        p = self.params
        return f"IzhikevichField(I={p.I}, a={p.a}, b={p.b})"


@dataclass(frozen=True, eq=False)
class LinearField:
    """Linear vector field dx/dt = A x.

    Attributes:
        A: System matrix, shape (n, n).
    """
    A: np.ndarray

    def __post_init__(self) -> None:
        A = np.asarray(self.A, dtype=float)
        if A.ndim != 2 or A.shape[0] != A.shape[1]:
            raise ValueError(f"A must be a square matrix, got shape {A.shape}")
        object.__setattr__(self, 'A', A)

    @property
    def n_dims(self) -> int:
        return self.A.shape[0]

    def __call__(self, t: float, x: np.ndarray) -> np.ndarray:
        check_time(t)
        check_state(x, self.n_dims)
        return self.A @ x

    @classmethod
    def test_system(cls) -> LinearField:
        """dv/dt = 2v - 3u, du/dt = 2v - 2u.

        Trace 0 and positive determinant, so the origin is a neutrally
        stable centre. Useful for checking the integrator without events.
        """
        return cls(np.array([
            [2.0, -3.0],
            [2.0, -2.0],
        ]))

    @classmethod
    def harmonic_oscillator(cls, omega: float = 1.0) -> LinearField:
        """dx/dt = y, dy/dt = -omega^2 x."""
        return cls(np.array([
            [0.0, 1.0],
            [-omega**2, 0.0],
        ]))

    def __repr__(self) -> str:
        return f"LinearField(n_dims={self.n_dims})"


@dataclass(frozen=True)
class FunctionField:
    """Adapter turning a plain function f(t, x) into a VectorField.

    The contract checks are applied before ``f`` is called, so ``f`` itself
    can be a bare lambda.

    Attributes:
        f: The dynamics function f(t, x) -> dx/dt.
        _n_dims: Dimension of the state space.
    """
    f: DynamicsFunction
    _n_dims: int

    @property
    def n_dims(self) -> int:
        return self._n_dims

    def __call__(self, t: float, x: np.ndarray) -> np.ndarray:
        check_time(t)
        check_state(x, self._n_dims)
        return np.asarray(self.f(t, x), dtype=float)

    def __repr__(self) -> str:
        return f"FunctionField(n_dims={self.n_dims})"
