"""Dynamics module: vector fields, RK4 stepping, events and the simulator."""

from .trajectory import Trajectory
from .base import VectorField, DynamicsFunction, check_time, check_state, as_state
from .integrators import (
    rk4_step,
    euler_step,
    integrate,
    integrate_rk4,
    IntegrationMethod,
)
from .ode import IzhikevichField, LinearField, FunctionField
from .events import ThresholdReset, EventLocator, EventRecord
from .simulation import HybridSimulator, SimulationResult, simulate

__all__ = [
    "Trajectory",
    "VectorField",
    "DynamicsFunction",
    "check_time",
    "check_state",
    "as_state",
    "rk4_step",
    "euler_step",
    "integrate",
    "integrate_rk4",
    "IntegrationMethod",
    "IzhikevichField",
    "LinearField",
    "FunctionField",
    "ThresholdReset",
    "EventLocator",
    "EventRecord",
    "HybridSimulator",
    "SimulationResult",
    "simulate",
]
