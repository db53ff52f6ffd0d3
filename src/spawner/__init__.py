from .dsl import component, sh, tee
from .errors import (
    CancelledError,
    ConfigError,
    ConfigurationError,
    ExecutionError,
    PopulationError,
    SpawnerError,
    TemplateExpansionError,
)
from .loader import load_config
from .model import Component, State
from .runner import execute, kill, plan, populate, release
from .tee import Tee

__all__ = [
    "component", "sh", "tee",
    "Component", "State", "Tee",
    "populate", "execute", "kill", "release", "plan",
    "load_config",
    "SpawnerError", "ConfigurationError", "ConfigError", "TemplateExpansionError",
    "PopulationError", "ExecutionError", "CancelledError",
]
