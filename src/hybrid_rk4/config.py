"""Configuration records for hybrid RK4 simulations.

ModelParameters holds the constants of the vector field and reset map,
IntegrationParameters the numerical settings. Both are frozen; use
``dataclasses.replace`` (or ``SimulationConfig.with_overrides``) to derive
a modified copy.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, fields, asdict, replace
from pathlib import Path
from typing import Any

from .exceptions import ConfigError


@dataclass(frozen=True)
class ModelParameters:
    """Izhikevich neuron constants.

    Attributes:
        I: Input current.
        a: Time scale of the recovery variable.
        b: Sensitivity of recovery to the membrane potential.
        c: After-spike reset value of the membrane potential.
        d: After-spike increment of the recovery variable.
    """
    I: float = 0.0
    a: float = 0.02
    b: float = 2.0
    c: float = -30.0
    d: float = 4.0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not math.isfinite(value):
                raise ConfigError(f"Model parameter {f.name} must be finite, got {value}")


@dataclass(frozen=True)
class IntegrationParameters:
    """Numerical settings for the fixed-step integrator.

    Attributes:
        step_size: Nominal RK4 step size h.
        n_steps: Number of samples in the trajectory (including t=0).
        threshold: Spike threshold on the first state component.
        event_precision: Tolerance above the threshold accepted after an
            overshoot.
        max_bisections: Maximum number of step halvings per event.
    """
    step_size: float = 0.001
    n_steps: int = 1_000_000
    threshold: float = 30.0
    event_precision: float = 1e-5
    max_bisections: int = 100

    def __post_init__(self) -> None:
        if not (self.step_size > 0 and math.isfinite(self.step_size)):
            raise ConfigError(f"step_size must be positive and finite, got {self.step_size}")
        if int(self.n_steps) != self.n_steps or self.n_steps < 1:
            raise ConfigError(f"n_steps must be a positive integer, got {self.n_steps}")
        if math.isnan(self.threshold):
            raise ConfigError("threshold must not be NaN")
        if not self.event_precision >= 0:
            raise ConfigError(
                f"event_precision must be non-negative, got {self.event_precision}"
            )
        if int(self.max_bisections) != self.max_bisections or self.max_bisections < 0:
            raise ConfigError(
                f"max_bisections must be a non-negative integer, got {self.max_bisections}"
            )

    @property
    def duration(self) -> float:
        """Nominal simulated time if no step is refined."""
        return self.step_size * (self.n_steps - 1)


@dataclass(frozen=True)
class SimulationConfig:
    """Everything a command-line run needs besides the initial state."""
    model: ModelParameters = field(default_factory=ModelParameters)
    integration: IntegrationParameters = field(default_factory=IntegrationParameters)
    output: str = "rk_out.csv"
    log_file: str | None = "rk_log.txt"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SimulationConfig:
        """Build a config from a nested dict (as read from JSON).

        Unknown keys are rejected so that typos do not silently fall back
        to defaults.
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}")

        allowed = {"model", "integration", "output", "log_file"}
        unknown = set(data) - allowed
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {sorted(unknown)}")

        model = _build(ModelParameters, data.get("model", {}), "model")
        integration = _build(IntegrationParameters, data.get("integration", {}), "integration")

        kwargs: dict[str, Any] = {"model": model, "integration": integration}
        if "output" in data:
            kwargs["output"] = str(data["output"])
        if "log_file" in data:
            kwargs["log_file"] = None if data["log_file"] is None else str(data["log_file"])
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def with_overrides(self, **overrides: Any) -> SimulationConfig:
        """Return a copy with integration/model fields replaced.

        Keyword names are matched against IntegrationParameters first, then
        ModelParameters, then the top-level fields. ``None`` values are
        ignored so argparse defaults can be passed straight through.
        """
        integration_names = {f.name for f in fields(IntegrationParameters)}
        model_names = {f.name for f in fields(ModelParameters)}
        top_names = {"output", "log_file"}

        integration_kw, model_kw, top_kw = {}, {}, {}
        for name, value in overrides.items():
            if value is None:
                continue
            if name in integration_names:
                integration_kw[name] = value
            elif name in model_names:
                model_kw[name] = value
            elif name in top_names:
                top_kw[name] = value
            else:
                raise ConfigError(f"Unknown configuration override: {name}")

        return replace(
            self,
            model=replace(self.model, **model_kw),
            integration=replace(self.integration, **integration_kw),
            **top_kw,
        )


def _build(cls, values: Any, section: str):
    if not isinstance(values, dict):
        raise ConfigError(f"Section '{section}' must be a mapping")
    names = {f.name for f in fields(cls)}
    unknown = set(values) - names
    if unknown:
        raise ConfigError(f"Unknown keys in section '{section}': {sorted(unknown)}")
    try:
        return cls(**values)
    except TypeError as e:
        raise ConfigError(f"Invalid section '{section}': {e}") from e


def load_config(path: str | Path) -> SimulationConfig:
    """Load a SimulationConfig from a JSON file."""
    path = Path(path)
    try:
        with open(path) as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    return SimulationConfig.from_dict(data)


def save_config(config: SimulationConfig, path: str | Path) -> None:
    """Write a SimulationConfig as JSON."""
    with open(path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)
