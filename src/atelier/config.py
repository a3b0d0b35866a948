"""Run configuration for an atelier simulation."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

DEFAULT_DATA_DIR = Path(os.environ.get("ATELIER_HOME", str(Path.home() / ".atelier")))

# Environment variable -> config field
ENV_VARS = {
    "ATELIER_WORKERS": "workers",
    "ATELIER_SKILLS": "skills",
    "ATELIER_PRODUCTS": "products",
    "ATELIER_ARRIVAL_MS": "arrival_interval_ms",
    "ATELIER_WINDOW_MS": "production_window_ms",
    "ATELIER_PROCESSING_MS": "processing_delay_ms",
    "ATELIER_SEED": "seed",
}


@dataclass
class SimulationConfig:
    """
    Parameters for one simulation run.

    The timing values are pacing knobs for the runtime only, in milliseconds:
    - arrival_interval_ms: gap between successive worker start-ups
    - production_window_ms: longest the run waits for message traffic to stop
    - processing_delay_ms: pause each agent takes before handling a message
    """

    workers: int = 5
    skills: int = 3
    products: int = 5
    arrival_interval_ms: int = 0
    production_window_ms: int = 5000
    processing_delay_ms: int = 0
    seed: int | None = None

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "seed" and value is None:
                continue
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{f.name} must be an integer, got {value!r}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.skills < 1:
            raise ValueError(f"skills must be >= 1, got {self.skills}")
        if self.products < 0:
            raise ValueError(f"products must be >= 0, got {self.products}")
        for name in ("arrival_interval_ms", "processing_delay_ms"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")
        if self.production_window_ms <= 0:
            raise ValueError(
                f"production_window_ms must be > 0, got {self.production_window_ms}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> SimulationConfig:
        """Build a config from ATELIER_* variables, then apply non-None overrides."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for var, name in ENV_VARS.items():
            raw = env.get(var)
            if raw is None or raw == "":
                continue
            try:
                values[name] = int(raw)
            except ValueError as e:
                raise ValueError(f"{var} must be an integer, got {raw!r}") from e
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SimulationConfig:
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
