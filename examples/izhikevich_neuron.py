"""Izhikevich neuron example: spikes, resets and event location.

The neuron is integrated with fixed-step RK4. Whenever a step would carry
the membrane potential v above the threshold band, the step is halved until
it lands inside the band; on the following step v is reset to c and the
recovery variable u is bumped by d.

Usage:
    python izhikevich_neuron.py                        # Run without visualization
    python izhikevich_neuron.py --save                 # Save plots to current directory
    python izhikevich_neuron.py --save --outdir ./figs # Save plots to specific directory
"""

import argparse
from pathlib import Path

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from hybrid_rk4.config import ModelParameters, IntegrationParameters
from hybrid_rk4.dynamics import HybridSimulator, LinearField, ThresholdReset, integrate_rk4
from hybrid_rk4.utils.visualization import plot_trajectory, plot_time_series


def simulate_neuron(n_steps: int = 50_000):
    """Simulate the default neuron from rest at the origin."""
    print("=" * 60)
    print("Izhikevich Neuron Simulation")
    print("=" * 60)

    model = ModelParameters()
    integration = IntegrationParameters(n_steps=n_steps)
    simulator = HybridSimulator.izhikevich(model, integration)

    x0 = np.array([0.0, 0.0])
    result = simulator.run(x0)
    traj = result.trajectory

    print(f"Parameters: I={model.I}, a={model.a}, b={model.b}, c={model.c}, d={model.d}")
    print(f"Step size {integration.step_size}, {integration.n_steps} samples")
    print(result.summary())

    if result.events:
        halvings = [e.n_bisections for e in result.events]
        print(f"Halvings per located event: min={min(halvings)}, max={max(halvings)}")

    spike_times = traj.times[np.flatnonzero(traj.states[:, 0] > integration.threshold)]
    if len(spike_times) > 1:
        print(f"First spikes at t = {np.round(spike_times[:5], 4)}")
        print(f"Mean inter-spike interval: {np.mean(np.diff(spike_times)):.4f}")

    return result, integration


def compare_without_events(n_steps: int = 5000):
    """On a system without events the driver equals plain RK4."""
    print("\n" + "=" * 60)
    print("Linear Test System (no events)")
    print("=" * 60)

    f = LinearField.test_system()
    integration = IntegrationParameters(step_size=0.001, n_steps=n_steps)
    x0 = np.array([1.0, 0.0])

    hybrid = HybridSimulator(f, integration, ThresholdReset.never(2)).run(x0)
    plain = integrate_rk4(f, x0, integration.step_size, n_steps)

    diff = np.max(np.abs(hybrid.trajectory.states - plain.states))
    print(f"Max difference hybrid vs plain RK4: {diff:.3e}")

    return hybrid.trajectory


def main():
    parser = argparse.ArgumentParser(
        description="Izhikevich neuron example",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--save', action='store_true',
                       help='Save figures')
    parser.add_argument('--outdir', type=str, default='.',
                       help='Output directory')
    parser.add_argument('--steps', type=int, default=50_000,
                       help='Number of samples')
    args = parser.parse_args()

    result, integration = simulate_neuron(args.steps)
    centre = compare_without_events()

    if args.save:
        outdir = Path(args.outdir)
        outdir.mkdir(parents=True, exist_ok=True)

        fig = plot_time_series(
            result.trajectory,
            threshold=integration.threshold,
            labels=['v', 'u'],
            save_path=outdir / 'izhikevich_time_series.png',
        )
        plt.close(fig)

        fig, axes = plt.subplots(1, 2, figsize=(12, 5))
        plot_trajectory(result.trajectory, ax=axes[0], linewidth=0.5)
        axes[0].set_title('Izhikevich phase plane')
        plot_trajectory(centre, ax=axes[1])
        axes[1].set_title('Linear test system (centre)')
        axes[1].set_aspect('equal')
        for ax in axes:
            ax.legend()
        fig.tight_layout()
        fig.savefig(outdir / 'phase_planes.png', dpi=150)
        plt.close(fig)

        print(f"\nSaved figures to {outdir}")


if __name__ == '__main__':
    main()
