"""Global settings for the swarm solver."""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Union
import logging

import yaml

from .constants import (
    DEFAULT_COGNITIVE,
    DEFAULT_INERTIA,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REPORT_QUEUE_SIZE,
    DEFAULT_SOCIAL,
)

Coefficient = Union[float, List[float]]


@dataclass
class SolverSettings:
    """Coordination loop parameters."""
    poll_interval: float = DEFAULT_POLL_INTERVAL
    report_queue_size: int = DEFAULT_REPORT_QUEUE_SIZE


@dataclass
class ParamSettings:
    """PSO coefficients, scalar or one value per dimension."""
    w: Coefficient = DEFAULT_INERTIA
    c1: Coefficient = DEFAULT_COGNITIVE
    c2: Coefficient = DEFAULT_SOCIAL

    def to_param(self, dimension: int):
        """Build a float64 Param for the given dimension."""
        from ..float64 import make_param

        return make_param(self.w, self.c1, self.c2, dimension)


@dataclass
class LoggingSettings:
    """Logging setup used by configure_logging()."""
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    datefmt: str = "%H:%M:%S"


@dataclass
class Settings:
    """Main settings container."""
    solver: SolverSettings = field(default_factory=SolverSettings)
    param: ParamSettings = field(default_factory=ParamSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Settings":
        """Load settings from YAML file, falling back to defaults."""
        settings = cls()

        if config_path and config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}

            for section_name in ("solver", "param", "logging"):
                section = getattr(settings, section_name)
                for key, value in (data.get(section_name) or {}).items():
                    if hasattr(section, key):
                        setattr(section, key, value)

        return settings

    def save(self, config_path: Path) -> None:
        """Save current settings to YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            yaml.dump(asdict(self), f, default_flow_style=False, sort_keys=False)

    def configure_logging(self) -> None:
        """Configure root logging from the logging section."""
        logging.basicConfig(
            level=getattr(logging, self.logging.level.upper(), logging.INFO),
            format=self.logging.format,
            datefmt=self.logging.datefmt,
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get global settings instance."""
    global _settings
    if _settings is None:
        config_path = Path(__file__).parent / "solver.yaml"
        _settings = Settings.load(config_path)
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
