# cli.py
from __future__ import annotations

import logging
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console as RichConsole
from rich.logging import RichHandler

from spawner.errors import CancelledError, ConfigError, ExecutionError, SpawnerError
from spawner.loader import default_prefix, load_config
from spawner.model import Component
from spawner.runner import execute, kill, plan, populate, release
from spawner.ui.console import Console, get_console, set_console

logger = logging.getLogger(__name__)

log_console = RichConsole(stderr=True)

# seconds to wait for output drains after the run finishes
RELEASE_TIMEOUT = 5.0


def setup_logging(*, verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Set up logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO

    # Clean up existing handlers first to prevent resource leaks
    cleanup_logging()

    show_path = level == logging.DEBUG
    handlers: list[logging.Handler] = [
        RichHandler(console=log_console, rich_tracebacks=True, show_path=show_path),
    ]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            ),
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )


def cleanup_logging() -> None:
    """Clean up logging handlers to prevent ResourceWarnings."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        if isinstance(handler, logging.FileHandler):
            handler.close()
            root_logger.removeHandler(handler)


def load_trees(config: Path, prefix: Optional[str]) -> tuple[List[Component], str]:
    """Load the config and prefix every tree. Exits on configuration errors."""
    console = get_console()
    try:
        roots = load_config(config)
    except ConfigError as e:
        console.print_error(
            "Invalid configuration",
            f"{e.path}: {e.message}",
            details=e.details or None,
            suggestion="Fix the config file or pass a different one:\n  spawner --config other.yaml run",
        )
        sys.exit(1)

    resolved = default_prefix(config, prefix)
    for root in roots:
        root.add_prefix(resolved)
    return roots, resolved


@click.group()
@click.option(
    "--config",
    "-c",
    default="spawner.yaml",
    show_default=True,
    envvar="SPAWNER_CONFIG",
    type=click.Path(path_type=Path),
    help="Component tree definition (YAML)",
)
@click.option(
    "--prefix",
    "-p",
    default=None,
    envvar="SPAWNER_PREFIX",
    help="Directory prepended to every workdir and used for log files (defaults to the config's directory)",
)
@click.option("--log-file", default=None, envvar="SPAWNER_LOG_FILE", type=click.Path(path_type=Path), help="Also write logs to this file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, config, prefix, log_file, verbose, debug):
    """spawner: run a tree of processes in before/after order."""
    set_console(Console(debug=debug))
    setup_logging(verbose=verbose, log_file=log_file)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["prefix"] = prefix
    ctx.obj["debug"] = debug
    ctx.call_on_close(cleanup_logging)


@cli.command()
@click.pass_context
def run(ctx):
    """Populate and execute every component tree in the config."""
    console = get_console()
    roots, prefix = load_trees(ctx.obj["config"], ctx.obj["prefix"])
    console.print_run_started(
        config=str(ctx.obj["config"]),
        prefix=prefix,
        component_count=sum(1 for root in roots for _ in root.walk()),
    )

    cancel = threading.Event()

    def _signal_handler(signum, frame):
        logger.warning("received signal %s, stopping", signum)
        cancel.set()
        for root in roots:
            kill(root)

    previous = {
        sig: signal.signal(sig, _signal_handler)
        for sig in (signal.SIGINT, signal.SIGTERM)
    }

    exit_code = 0
    try:
        for root in roots:
            populate(root)
        for root in roots:
            execute(root, cancel)
    except CancelledError:
        console.print_info("\nInterrupted")
        exit_code = 130
    except ExecutionError as e:
        console.print_error("Component failed", str(e))
        exit_code = 1
    except (SpawnerError, OSError) as e:
        console.print_error("Unable to prepare components", str(e))
        if e.__cause__ is not None:
            console.print_debug(f"caused by {type(e.__cause__).__name__}: {e.__cause__}")
        if ctx.obj.get("debug", False):
            console.print_exception(e)
        exit_code = 1
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
        for root in roots:
            kill(root)
            release(root, RELEASE_TIMEOUT)

    console.print_results(roots)
    if exit_code:
        sys.exit(exit_code)


@cli.command("plan")
@click.pass_context
def plan_cmd(ctx):
    """Print the execution order without running anything."""
    console = get_console()
    roots, _prefix = load_trees(ctx.obj["config"], ctx.obj["prefix"])
    console.print_plan(name for root in roots for name in plan(root))


if __name__ == "__main__":
    cli()
