"""Tests for the hybrid simulation driver."""

import numpy as np
import pytest

from hybrid_rk4.config import ModelParameters, IntegrationParameters
from hybrid_rk4.dynamics.events import ThresholdReset
from hybrid_rk4.dynamics.integrators import integrate_rk4
from hybrid_rk4.dynamics.ode import FunctionField, IzhikevichField
from hybrid_rk4.dynamics.simulation import HybridSimulator, SimulationResult, simulate
from hybrid_rk4.exceptions import ContractViolation, EventNonConvergence


H = 0.001


@pytest.fixture(scope="module")
def result():
    """A 5000-sample spiking run from the origin."""
    integration = IntegrationParameters(step_size=H, n_steps=5000)
    return simulate(np.array([0.0, 0.0]), ModelParameters(), integration)


class TestTrajectoryInvariants:
    """Time, length and band properties on a spiking run."""

    def test_returns_result(self, result):
        assert isinstance(result, SimulationResult)

    def test_fixed_length(self, result):
        assert len(result.trajectory) == 5000
        assert result.trajectory.n_dims == 2

    def test_initial_sample(self, result):
        assert result.trajectory.times[0] == 0.0
        np.testing.assert_array_equal(result.trajectory.states[0], [0.0, 0.0])

    def test_monotonic_time(self, result):
        assert result.trajectory.is_time_monotonic()

    def test_neuron_spikes(self, result):
        assert result.n_resets > 0
        assert result.n_events > 0
        assert result.n_unconverged == 0

    def test_stored_states_within_band(self, result):
        assert np.max(result.trajectory.states[:, 0]) <= 30.0 + 1e-5

    def test_refined_steps_record_actual_step(self, result):
        dt = result.trajectory.step_sizes()
        for event in result.events:
            assert event.step_size < H
            assert dt[event.index] == pytest.approx(event.step_size, rel=1e-6)

        refined = {e.index for e in result.events}
        nominal = [i for i in range(len(dt)) if i not in refined]
        np.testing.assert_allclose(dt[nominal], H, rtol=1e-6)

    def test_reset_follows_spike(self, result):
        """A sample above threshold is followed by one started from (c, u + d)."""
        states = result.trajectory.states
        f = IzhikevichField()
        spike = int(np.argmax(states[:, 0] > 30.0))
        assert states[spike, 0] > 30.0

        t = result.trajectory.times[spike]
        start = np.array([-30.0, states[spike, 1] + 4.0])
        np.testing.assert_allclose(states[spike + 1], _rk4(f, t, start, H), rtol=1e-12)

    def test_summary(self, result):
        summary = result.summary()
        assert "5000 samples" in summary
        assert "resets" in summary


def _rk4(f, t, x, h):
    k1 = h * f(t, x)
    k2 = h * f(t + h / 2, x + k1 / 2)
    k3 = h * f(t + h / 2, x + k2 / 2)
    k4 = h * f(t + h, x + k3)
    return x + (k1 + 2 * k2 + 2 * k3 + k4) / 6


class TestNoEventReduction:
    """With an unreachable threshold the driver is plain RK4."""

    def test_izhikevich_infinite_threshold(self):
        integration = IntegrationParameters(step_size=H, n_steps=300, threshold=np.inf)
        x0 = np.array([-65.0, -8.0])

        result = simulate(x0, ModelParameters(), integration)
        plain = integrate_rk4(IzhikevichField(), x0, H, 300)

        np.testing.assert_array_equal(result.trajectory.states, plain.states)
        np.testing.assert_array_equal(result.trajectory.times, plain.times)
        assert result.n_events == 0
        assert result.n_resets == 0

    def test_generic_field(self):
        """The driver works for any vector field and dimension."""
        f = FunctionField(lambda t, x: np.array([x[1], -x[0], -0.1 * x[2]]), 3)
        integration = IntegrationParameters(step_size=0.01, n_steps=200)
        x0 = np.array([1.0, 0.0, 2.0])

        result = HybridSimulator(f, integration, ThresholdReset.never(3)).run(x0)
        plain = integrate_rk4(f, x0, 0.01, 200)

        np.testing.assert_array_equal(result.trajectory.states, plain.states)


class TestEvents:
    """Event handling inside the driver loop."""

    def test_initial_state_above_threshold_is_reset(self):
        """The pre-step check reads the stored sample, including sample 0."""
        seen = []

        def recording(t, x):
            seen.append(x.copy())
            return np.zeros(2)

        f = FunctionField(recording, 2)
        integration = IntegrationParameters(step_size=H, n_steps=2)
        reset = ThresholdReset.from_parameters(ModelParameters(), integration)

        result = HybridSimulator(f, integration, reset).run(np.array([31.0, 2.0]))

        np.testing.assert_array_equal(seen[0], [-30.0, 6.0])
        np.testing.assert_array_equal(result.trajectory.states[0], [31.0, 2.0])
        np.testing.assert_array_equal(result.trajectory.states[1], [-30.0, 6.0])
        assert result.n_resets == 1

    def test_forced_overshoot(self):
        """A field that reaches 50 in one nominal step is cut back into the band."""
        f = FunctionField(lambda t, x: np.array([50.0 / H, 0.0]), 2)
        integration = IntegrationParameters(step_size=H, n_steps=2, max_bisections=100)
        reset = ThresholdReset.from_parameters(ModelParameters(), integration)

        result = HybridSimulator(f, integration, reset).run(np.array([0.0, 0.0]))

        traj = result.trajectory
        event = result.events[0]
        assert traj.states[1, 0] <= 30.0 + 1e-5 or event.n_bisections == 100
        assert traj.times[1] == event.step_size
        assert traj.times[1] == H / 2
        assert traj.states[1, 0] == pytest.approx(25.0)

    def test_unconverged_event_is_accepted(self):
        """Reset value above threshold: every step overshoots and hits the cap."""
        model = ModelParameters(c=35.0, d=0.0)
        integration = IntegrationParameters(step_size=H, n_steps=4, max_bisections=5)
        f = FunctionField(lambda t, x: np.array([1000.0, 0.0]), 2)
        reset = ThresholdReset.from_parameters(model, integration)

        result = HybridSimulator(f, integration, reset).run(np.array([40.0, 0.0]))

        assert result.n_events == 3
        assert result.n_unconverged == 3
        for event in result.events:
            assert event.n_bisections == 5
            assert event.step_size == H / 32
        assert result.trajectory.times[-1] == pytest.approx(3 * H / 32)
        assert np.all(result.trajectory.states[1:, 0] > 30.0 + 1e-5)

    def test_strict_mode_raises(self):
        model = ModelParameters(c=35.0, d=0.0)
        integration = IntegrationParameters(step_size=H, n_steps=4, max_bisections=5)
        f = FunctionField(lambda t, x: np.array([1000.0, 0.0]), 2)
        reset = ThresholdReset.from_parameters(model, integration)

        simulator = HybridSimulator(f, integration, reset, strict=True)
        with pytest.raises(EventNonConvergence) as excinfo:
            simulator.run(np.array([40.0, 0.0]))

        assert excinfo.value.index == 0
        assert excinfo.value.step_size == H / 32


class TestContracts:
    """Contract violations abort the run."""

    def test_wrong_dimension(self):
        simulator = HybridSimulator.izhikevich(
            integration=IntegrationParameters(n_steps=10)
        )
        with pytest.raises(ContractViolation, match="wrong shape"):
            simulator.run(np.array([0.0, 0.0, 0.0]))

    def test_reset_increments_shorter_than_state(self):
        """A one-element increment is not broadcast over a 2-D state."""
        f = FunctionField(lambda t, x: np.zeros(2), 2)
        reset = ThresholdReset(threshold=30.0, reset_value=-30.0, increments=np.array([4.0]))

        with pytest.raises(ContractViolation, match="increments"):
            HybridSimulator(f, IntegrationParameters(step_size=H, n_steps=3), reset)

    def test_reset_narrower_than_field(self):
        """The mismatch is reported up front, before any reset fires."""
        f = FunctionField(lambda t, x: np.zeros(3), 3)
        reset = ThresholdReset.from_parameters(ModelParameters(), IntegrationParameters())

        with pytest.raises(ContractViolation, match="increments"):
            simulate(np.array([0.0, 0.0, 0.0]), field=f, reset=reset)

    def test_reset_component_out_of_range(self):
        f = FunctionField(lambda t, x: np.zeros(2), 2)
        reset = ThresholdReset(
            threshold=30.0, reset_value=0.0, increments=np.zeros(2), component=2
        )

        with pytest.raises(ContractViolation, match="component"):
            HybridSimulator(f, IntegrationParameters(n_steps=3), reset)

    def test_nan_state_propagates(self):
        """A NaN state is not a contract violation; it is stored as is."""
        f = FunctionField(lambda t, x: np.array([np.nan, 0.0]), 2)
        integration = IntegrationParameters(step_size=H, n_steps=3)
        simulator = HybridSimulator(f, integration, ThresholdReset.never(2))

        result = simulator.run(np.array([1.0, 0.0]))

        assert np.isnan(result.trajectory.states[1, 0])
        assert result.trajectory.is_time_monotonic()

    def test_single_sample(self):
        result = simulate(np.array([-65.0, -8.0]), integration=IntegrationParameters(n_steps=1))

        assert len(result.trajectory) == 1
        assert result.n_events == 0

    def test_izhikevich_factory(self):
        model = ModelParameters(I=10.0)
        simulator = HybridSimulator.izhikevich(model, IntegrationParameters(n_steps=10))

        assert isinstance(simulator.field, IzhikevichField)
        assert simulator.field.params is model
        assert simulator.reset.reset_value == -30.0
        assert simulator.locator.max_bisections == 100
