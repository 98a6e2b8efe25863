"""Exception hierarchy for hybrid RK4 simulations.

Two kinds of failure are kept apart:

- ContractViolation: something that should never happen (NaN time, a state
  of the wrong dimension). Nothing inside the package catches it.
- EventNonConvergence: the event locator ran out of halvings while the
  candidate was still above the threshold band. Only raised when the
  simulator runs in strict mode; otherwise the condition is recorded on the
  result and the run continues.
"""

from __future__ import annotations

import numpy as np


class HybridRK4Error(Exception):
    """Base class for all errors raised by hybrid_rk4."""


class ContractViolation(HybridRK4Error):
    """An invariant of the integrator was broken by the caller."""


class ConfigError(HybridRK4Error, ValueError):
    """Invalid or unreadable configuration."""


class EventNonConvergence(HybridRK4Error):
    """Bisection cap reached with the candidate still outside the band.

    Attributes:
        index: Index of the step being refined.
        time: Time at the start of that step.
        state: Last candidate produced by the locator.
        step_size: Step size of the last halving.
    """

    def __init__(
        self,
        index: int,
        time: float,
        state: np.ndarray,
        step_size: float,
    ):
        self.index = index
        self.time = time
        self.state = np.array(state, copy=True)
        self.step_size = step_size
        super().__init__(
            f"Event location did not converge at step {index} (t={time:.6f}): "
            f"x[0]={self.state[0]:.6f} after halving to h={step_size:.3e}"
        )
