# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


class SpawnerError(Exception):
    """Base class for every error raised by spawner."""


class ConfigurationError(SpawnerError):
    """The component definition cannot be run as written."""


@dataclass(eq=False)
class ConfigError(ConfigurationError):
    """
    A config file could not be loaded.

    Carries enough context for the CLI to print a readable report without a
    traceback.
    """
    path: str
    message: str
    details: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        lines = [f"{self.path}: {self.message}"]
        lines.extend(f"  {d}" for d in self.details)
        return "\n".join(lines)


@dataclass(eq=False)
class TemplateExpansionError(SpawnerError):
    component: str
    argument: str
    reason: str

    def __str__(self) -> str:
        return f"unable to expand argument {self.argument!r} of {self.component}: {self.reason}"


@dataclass(eq=False)
class PopulationError(SpawnerError):
    component: str
    reason: str

    def __str__(self) -> str:
        return f"error during populating component {self.component}: {self.reason}"


@dataclass(eq=False)
class ExecutionError(SpawnerError):
    component: str
    reason: str
    returncode: Optional[int] = None

    def __str__(self) -> str:
        return f"execution of {self.component} failed, reason: {self.reason}"


class CancelledError(ExecutionError):
    """Execution stopped because cancellation was requested."""

    def __init__(self, component: str):
        super().__init__(component=component, reason="cancelled")
