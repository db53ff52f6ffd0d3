"""Console output formatting utilities for spawner."""

from __future__ import annotations

import sys
from typing import Iterable, Optional

from spawner.model import Component


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_run_started(
        self,
        config: str,
        prefix: str,
        component_count: int,
    ) -> None:
        """Print run start information."""
        print("\nRUN STARTED")
        print(f"Config: {config}")
        print(f"Prefix: {prefix}")
        print(f"Components: {component_count}")
        print()

    def print_plan(self, order: Iterable[str]) -> None:
        """Print execution order, one component per line."""
        self.print_header("PLAN")
        for i, name in enumerate(order, start=1):
            print(f"  {i}. {name}")

    def print_results(self, roots: Iterable[Component]) -> None:
        """Print final results summary for every node of every tree."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for root in roots:
            for node in root.walk():
                print(f"  {node}: {self._status(node)}")

    @staticmethod
    def _status(node: Component) -> str:
        if node.returncode is None:
            return "NOT RUN" if node.process is None else "KILLED"
        if node.returncode == 0:
            return "SUCCESS"
        return f"FAILED (exit={node.returncode})"

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
