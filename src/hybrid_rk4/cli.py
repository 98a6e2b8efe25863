"""Command-line interface for running an Izhikevich neuron simulation.

Usage:
    hybrid-rk4 -65 -8                              # default settings
    hybrid-rk4 -65 -8 --steps 20000 --output out.csv
    hybrid-rk4 -65 -8 --config run.json --plot spikes.png
    python -m hybrid_rk4 -65 -8 --strict           # fail on unconverged events
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import replace

from . import __version__
from .config import SimulationConfig, load_config
from .dynamics.simulation import HybridSimulator
from .exceptions import HybridRK4Error
from .io import save_trajectory_csv
from .logging_config import LOGGER_NAME, setup_logging

logger = logging.getLogger(LOGGER_NAME)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='hybrid-rk4',
        description="Integrate the Izhikevich neuron with fixed-step RK4 and spike resets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('initial_state', type=float, nargs='+', metavar='X0',
                        help='Initial state components (v u)')
    parser.add_argument('--config', type=str, default=None,
                        help='JSON configuration file')
    parser.add_argument('--steps', dest='n_steps', type=int, default=None,
                        help='Number of samples in the trajectory')
    parser.add_argument('--step-size', type=float, default=None,
                        help='Nominal RK4 step size')
    parser.add_argument('--threshold', type=float, default=None,
                        help='Spike threshold on the first component')
    parser.add_argument('--event-precision', type=float, default=None,
                        help='Tolerance above the threshold after an overshoot')
    parser.add_argument('--max-bisections', type=int, default=None,
                        help='Maximum step halvings per event')
    parser.add_argument('--output', type=str, default=None,
                        help='CSV output file (default: rk_out.csv)')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Log file, appended to (default: rk_log.txt)')
    parser.add_argument('--no-log-file', action='store_true',
                        help='Log to the console only')
    parser.add_argument('--plot', type=str, default=None,
                        help='Save a time-series plot to this path')
    parser.add_argument('--strict', action='store_true',
                        help='Fail if event location hits the bisection cap')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Debug logging')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def resolve_config(args: argparse.Namespace) -> SimulationConfig:
    """Merge the optional config file with command-line overrides."""
    config = load_config(args.config) if args.config else SimulationConfig()
    config = config.with_overrides(
        n_steps=args.n_steps,
        step_size=args.step_size,
        threshold=args.threshold,
        event_precision=args.event_precision,
        max_bisections=args.max_bisections,
        output=args.output,
        log_file=args.log_file,
    )
    if args.no_log_file:
        config = replace(config, log_file=None)
    return config


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    start = time.perf_counter()
    try:
        config = resolve_config(args)
    except HybridRK4Error as e:
        setup_logging(logging.INFO)
        logger.error("%s", e)
        return 1

    level = logging.DEBUG if args.verbose else logging.INFO
    try:
        setup_logging(level, config.log_file)
    except OSError as e:
        setup_logging(level)
        logger.error("Cannot open log file %s: %s", config.log_file, e)
        return 1
    logger.info("Starting up.")
    logger.info("argv = %s", sys.argv if argv is None else argv)

    model, integration = config.model, config.integration
    for name, value in vars(model).items():
        logger.info("%s = %g", name, value)
    for name, value in vars(integration).items():
        logger.info("%s = %g", name.upper(), value)
    for i, value in enumerate(args.initial_state):
        logger.info("t_0[%d] = %g", i, value)
    logger.info("Done in %.6f seconds.", time.perf_counter() - start)

    logger.info("Running Runge-Kutta fourth order method.")
    start = time.perf_counter()
    simulator = HybridSimulator.izhikevich(model, integration, strict=args.strict)
    try:
        result = simulator.run(args.initial_state)
    except HybridRK4Error as e:
        logger.error("Simulation failed: %s", e)
        return 1
    logger.info("Done in %.6f seconds.", time.perf_counter() - start)
    logger.info("%s", result.summary())
    if result.n_unconverged:
        logger.warning(
            "%d events reached the bisection cap (%d) above threshold + %g",
            result.n_unconverged, integration.max_bisections, integration.event_precision
        )

    logger.info("Saving to file %s.", config.output)
    start = time.perf_counter()
    try:
        save_trajectory_csv(config.output, result.trajectory, model, integration)
    except OSError as e:
        logger.error("Cannot write %s: %s", config.output, e)
        return 1
    logger.info("Done in %.6f seconds.", time.perf_counter() - start)

    if args.plot:
        import matplotlib
        matplotlib.use('Agg')
        import matplotlib.pyplot as plt
        from .utils.visualization import plot_time_series

        fig = plot_time_series(
            result.trajectory,
            threshold=integration.threshold,
            labels=['v', 'u'],
            save_path=args.plot,
        )
        plt.close(fig)
        logger.info("Saved plot to %s", args.plot)

    logger.info("End.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
