"""Threshold events for hybrid systems: reset map and event location.

The discrete part of the hybrid system is applied around each RK4 step:

- Before the step, the stored state is checked against the threshold. If
  the monitored component is above it, the reset map is applied to the
  state that the step starts from. The check is re-evaluated from the
  stored sample every iteration; it is not edge-triggered.
- After the step, a candidate that lands above ``threshold + precision``
  is refined by repeatedly halving the step and re-integrating from the
  same starting state, until the candidate falls inside the band or the
  halving budget is spent.

The locator only shrinks the step. It does not interpolate to the exact
crossing time, and when the budget runs out the last candidate is accepted
even if it is still above the band. That outcome is reported through
``EventRecord.converged``.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..config import ModelParameters, IntegrationParameters
from ..exceptions import ContractViolation
from .base import VectorField
from .integrators import rk4_step


@dataclass(frozen=True, eq=False)
class ThresholdReset:
    """Reset map triggered when one state component exceeds a threshold.

    When ``x[component] > threshold``:
        x[component]  := reset_value
        x[j]          := x[j] + increments[j]   for every other j

    Attributes:
        threshold: Value the monitored component must strictly exceed.
        reset_value: New value of the monitored component.
        increments: Additive jump for each component (the entry for the
            monitored component is ignored).
        component: Index of the monitored component.
    """
    threshold: float
    reset_value: float
    increments: np.ndarray
    component: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, 'increments', np.asarray(self.increments, dtype=float))

    @classmethod
    def from_parameters(
        cls,
        model: ModelParameters,
        integration: IntegrationParameters
    ) -> ThresholdReset:
        """Izhikevich reset: v := c, u := u + d once v > threshold."""
        return cls(
            threshold=integration.threshold,
            reset_value=model.c,
            increments=np.array([0.0, model.d]),
        )

    @classmethod
    def never(cls, n_dims: int, component: int = 0) -> ThresholdReset:
        """A reset that can never fire (threshold at +inf)."""
        return cls(
            threshold=np.inf,
            reset_value=0.0,
            increments=np.zeros(n_dims),
            component=component,
        )

    def check_dimension(self, n_dims: int) -> None:
        """Raise ContractViolation unless the map acts on states of n_dims."""
        if self.increments.shape != (n_dims,):
            raise ContractViolation(
                f"Reset increments have wrong shape: expected ({n_dims},), "
                f"got {self.increments.shape}"
            )
        if not 0 <= self.component < n_dims:
            raise ContractViolation(
                f"Reset component {self.component} out of range for {n_dims} dimensions"
            )

    def exceeded(self, x: np.ndarray) -> bool:
        """Whether x is strictly above the threshold."""
        return bool(x[self.component] > self.threshold)

    def apply(self, x: np.ndarray) -> np.ndarray:
        """Return the reset image of x (x is not modified)."""
        reset = x + self.increments
        reset[self.component] = self.reset_value
        return reset

    def pre_step(self, x: np.ndarray) -> tuple[np.ndarray, bool]:
        """State the next step starts from.

        Returns:
            Tuple of (effective_state, was_reset). The effective state is
            always a new array.
        """
        if self.exceeded(x):
            return self.apply(x), True
        return x.copy(), False


@dataclass
class EventRecord:
    """Outcome of locating one threshold crossing.

    Attributes:
        index: Index of the sample the refined step starts from.
        time: Time at the start of the step.
        state: Accepted state after refinement.
        step_size: Step size actually used.
        n_bisections: Number of halvings performed.
        converged: False if the halving budget ran out with the state
            still above the band.
    """
    index: int
    time: float
    state: np.ndarray
    step_size: float
    n_bisections: int
    converged: bool


@dataclass(frozen=True)
class EventLocator:
    """Step-halving event locator.

    Attributes:
        reset: Reset map providing the threshold and monitored component.
        event_precision: Tolerance above the threshold that is accepted.
        max_bisections: Maximum number of halvings per event.
    """
    reset: ThresholdReset
    event_precision: float = 1e-5
    max_bisections: int = 100

    @classmethod
    def from_parameters(
        cls,
        reset: ThresholdReset,
        integration: IntegrationParameters
    ) -> EventLocator:
        return cls(
            reset=reset,
            event_precision=integration.event_precision,
            max_bisections=integration.max_bisections,
        )

    @property
    def upper_bound(self) -> float:
        """Largest accepted value of the monitored component."""
        return self.reset.threshold + self.event_precision

    def overshoots(self, x: np.ndarray) -> bool:
        """Whether x lies above the threshold band."""
        return bool(x[self.reset.component] > self.upper_bound)

    def refine(
        self,
        f: VectorField,
        t: float,
        x: np.ndarray,
        step_size: float,
        index: int = 0,
    ) -> EventRecord:
        """Shrink the step from (t, x) until the result is inside the band.

        Args:
            f: Vector field.
            t: Time at the start of the step.
            x: Effective starting state (after any pre-step reset).
            step_size: Nominal step size that overshot.
            index: Sample index, recorded for reporting.

        Returns:
            EventRecord with the accepted state and the step size used.
        """
        h = step_size
        candidate = None
        n_bisections = 0

        for _ in range(self.max_bisections):
            h = h / 2.0
            candidate = rk4_step(f, t, x, h)
            n_bisections += 1
            if not self.overshoots(candidate):
                break

        if candidate is None:
            # No halvings allowed: keep the nominal step.
            candidate = rk4_step(f, t, x, h)

        return EventRecord(
            index=index,
            time=t,
            state=candidate,
            step_size=h,
            n_bisections=n_bisections,
            converged=not self.overshoots(candidate),
        )
