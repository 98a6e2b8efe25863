"""Fixed-horizon hybrid simulation driver."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from ..config import ModelParameters, IntegrationParameters
from ..exceptions import EventNonConvergence
from .base import VectorField, as_state
from .events import ThresholdReset, EventLocator, EventRecord
from .integrators import rk4_step
from .ode import IzhikevichField
from .trajectory import Trajectory


@dataclass
class SimulationResult:
    """Output of one hybrid simulation run.

    Attributes:
        trajectory: The completed trajectory, exactly n_steps samples.
        events: One record per step that had to be refined.
        n_resets: Number of iterations that started from a reset state.
    """
    trajectory: Trajectory
    events: list[EventRecord] = field(default_factory=list)
    n_resets: int = 0

    @property
    def n_events(self) -> int:
        return len(self.events)

    @property
    def n_unconverged(self) -> int:
        """Refined steps that hit the halving cap outside the band."""
        return sum(1 for e in self.events if not e.converged)

    def summary(self) -> str:
        traj = self.trajectory
        return (
            f"{traj.n_points} samples over t=[{traj.t_start:.6f}, {traj.t_end:.6f}], "
            f"{self.n_resets} resets, {self.n_events} located events "
            f"({self.n_unconverged} unconverged)"
        )


class HybridSimulator:
    """Fixed-step RK4 integration of a hybrid system.

    Each iteration t = 0 .. n_steps-2:

    1. read sample t
    2. apply the reset map if the stored state is above threshold
    3. take a nominal RK4 step
    4. if the candidate overshoots the band, refine by halving the step
    5. store sample t+1 with the step size actually used

    The trajectory is allocated in full before the loop and returned to the
    caller once every slot is written.
    """

    def __init__(
        self,
        field: VectorField,
        integration: IntegrationParameters,
        reset: ThresholdReset,
        strict: bool = False
    ):
        """Initialize the simulator.

        Args:
            field: Continuous dynamics.
            integration: Step size, step count and event settings.
            reset: Reset map. Its threshold is used for both the pre-step
                check and the overshoot band.
            strict: If True, raise EventNonConvergence instead of accepting
                a candidate that is still above the band after the last
                halving.

        Raises:
            ContractViolation: The reset map does not act on states of the
                field's dimension.
        """
        reset.check_dimension(field.n_dims)
        self.field = field
        self.integration = integration
        self.reset = reset
        self.locator = EventLocator.from_parameters(reset, integration)
        self.strict = strict

    @classmethod
    def izhikevich(
        cls,
        model: ModelParameters | None = None,
        integration: IntegrationParameters | None = None,
        strict: bool = False
    ) -> HybridSimulator:
        """Simulator for the Izhikevich neuron with its spike reset."""
        model = model or ModelParameters()
        integration = integration or IntegrationParameters()
        return cls(
            IzhikevichField(model),
            integration,
            ThresholdReset.from_parameters(model, integration),
            strict=strict,
        )

    def run(self, x0: np.ndarray) -> SimulationResult:
        """Simulate from x0 at t=0.

        Args:
            x0: Initial state, shape (n_dims,).

        Returns:
            SimulationResult holding the trajectory and event records.

        Raises:
            ContractViolation: x0 has the wrong dimension, or the vector
                field was evaluated at NaN time.
            EventNonConvergence: strict mode only.
        """
        f = self.field
        h = self.integration.step_size
        n_steps = int(self.integration.n_steps)

        x0 = as_state(x0, f.n_dims)
        traj = Trajectory.allocate(n_steps, f.n_dims)
        traj.states[0] = x0

        events = []
        n_resets = 0

        for i in range(n_steps - 1):
            t = float(traj.times[i])
            x, was_reset = self.reset.pre_step(traj.states[i])
            if was_reset:
                n_resets += 1

            x_next = rk4_step(f, t, x, h)
            h_used = h

            if self.locator.overshoots(x_next):
                record = self.locator.refine(f, t, x, h, index=i)
                if not record.converged and self.strict:
                    raise EventNonConvergence(i, t, record.state, record.step_size)
                events.append(record)
                x_next = record.state
                h_used = record.step_size

            traj.times[i + 1] = t + h_used
            traj.states[i + 1] = x_next

        return SimulationResult(trajectory=traj, events=events, n_resets=n_resets)


def simulate(
    x0: np.ndarray,
    model: ModelParameters | None = None,
    integration: IntegrationParameters | None = None,
    field: VectorField | None = None,
    reset: ThresholdReset | None = None,
    strict: bool = False
) -> SimulationResult:
    """Run a hybrid simulation.

    Defaults to the Izhikevich neuron. Pass ``field`` and/or ``reset`` to
    simulate a different hybrid system with the same driver.
    """
    model = model or ModelParameters()
    integration = integration or IntegrationParameters()
    if field is None:
        field = IzhikevichField(model)
    if reset is None:
        reset = ThresholdReset.from_parameters(model, integration)
    return HybridSimulator(field, integration, reset, strict=strict).run(x0)
