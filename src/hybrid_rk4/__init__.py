"""Fixed-step RK4 integration of hybrid (threshold/reset) ODE systems."""

__version__ = "0.1.0"

from .config import ModelParameters, IntegrationParameters, SimulationConfig, load_config
from .exceptions import (
    HybridRK4Error,
    ContractViolation,
    ConfigError,
    EventNonConvergence,
)
from .dynamics import (
    Trajectory,
    IzhikevichField,
    ThresholdReset,
    HybridSimulator,
    SimulationResult,
    simulate,
)

__all__ = [
    "__version__",
    "ModelParameters",
    "IntegrationParameters",
    "SimulationConfig",
    "load_config",
    "HybridRK4Error",
    "ContractViolation",
    "ConfigError",
    "EventNonConvergence",
    "Trajectory",
    "IzhikevichField",
    "ThresholdReset",
    "HybridSimulator",
    "SimulationResult",
    "simulate",
]
