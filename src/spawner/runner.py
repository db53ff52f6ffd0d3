# runner.py
from __future__ import annotations

import logging
import os
import subprocess
import sys
import threading
from typing import List, Optional

from .errors import (
    CancelledError,
    ConfigurationError,
    ExecutionError,
    PopulationError,
    SpawnerError,
)
from .model import Component, State
from .tee import start_drain
from .templating import expand_args

logger = logging.getLogger(__name__)

# how often a waiting component checks the cancel event
CANCEL_POLL_SECONDS = 0.1


# ----------------------------------------------------------------------
# Population
# ----------------------------------------------------------------------

def populate(component: Component) -> None:
    """
    Prepare a tree for execution: before children, after children, then the
    node itself.

    For each node: resolve and create its workdir, open its tee files, and
    expand its invocation into `argv`. Any failure aborts immediately; nodes
    already populated keep their state.

    Raises:
        PopulationError: naming the node whose own setup failed; the
            original error is kept as `__cause__`
    """
    for child in component.before:
        populate(child)
    for child in component.after:
        populate(child)

    try:
        _populate_node(component)
    except (SpawnerError, OSError) as e:
        component.tee.close()
        raise PopulationError(component=component.display_name, reason=str(e)) from e

    component.state = State.POPULATED


def _populate_node(component: Component) -> None:
    # unrouted streams stay on our own stdout/stderr
    component.stdout = sys.stdout
    component.stderr = sys.stderr

    component.workdir = os.path.abspath(component.workdir or ".")
    os.makedirs(component.workdir, mode=0o777, exist_ok=True)

    invocation = component.invocation
    if not invocation:
        raise ConfigurationError("neither entrypoint nor cmd provided")

    component.tee.open(os.path.join(component.prefix, component.log_name))

    component.argv = expand_args(component, invocation)


# ----------------------------------------------------------------------
# Execution
# ----------------------------------------------------------------------

def _start(component: Component) -> subprocess.Popen:
    tee = component.tee
    try:
        proc = subprocess.Popen(
            component.argv,
            cwd=component.workdir,
            stdout=subprocess.PIPE if tee.routes_stdout else None,
            stderr=subprocess.PIPE if tee.routes_stderr else None,
        )
    except (OSError, ValueError, subprocess.SubprocessError) as e:
        raise ExecutionError(component=component.display_name, reason=str(e)) from e

    component.process = proc
    if tee.routes_stdout:
        component.stdout = proc.stdout
        component.drains.append(start_drain(f"stdout {component}", proc.stdout, tee.stdout_file))
    if tee.routes_stderr:
        component.stderr = proc.stderr
        component.drains.append(start_drain(f"stderr {component}", proc.stderr, tee.stderr_file))
    return proc


def _wait(component: Component, proc: subprocess.Popen, cancel: Optional[threading.Event]) -> int:
    if cancel is None:
        return proc.wait()

    while True:
        try:
            return proc.wait(timeout=CANCEL_POLL_SECONDS)
        except subprocess.TimeoutExpired:
            if cancel.is_set():
                kill(component)
                proc.wait()
                raise CancelledError(component.display_name)


def _check_cancel(component: Component, cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise CancelledError(component.display_name)


def execute(component: Component, cancel: Optional[threading.Event] = None) -> None:
    """
    Run a tree: every before child in order, then the component's own
    process, then every after child in order.

    The first failure stops the traversal and is raised; nothing after it
    runs. Output drains are not awaited here, call `release()` to flush and
    close log files.

    Args:
        component: root of the tree to run
        cancel: optional event; once set, the running process is killed and
            no further component is started

    Raises:
        PopulationError: the tree was not populated and population failed
        ExecutionError: a process failed to start or exited non-zero
    """
    if not component.populated:
        populate(component)

    for child in component.before:
        execute(child, cancel)

    _check_cancel(component, cancel)

    logger.info("starting %s", component)
    proc = _start(component)

    try:
        returncode = _wait(component, proc, cancel)
    except CancelledError:
        component.returncode = proc.returncode
        raise
    except (OSError, subprocess.SubprocessError) as e:
        raise ExecutionError(component=component.display_name, reason=str(e)) from e

    component.returncode = returncode
    if returncode != 0:
        _check_cancel(component, cancel)
        raise ExecutionError(
            component=component.display_name,
            reason=f"exit status {returncode}",
            returncode=returncode,
        )
    logger.info("finished %s", component)

    for child in component.after:
        execute(child, cancel)


# ----------------------------------------------------------------------
# Teardown
# ----------------------------------------------------------------------

def kill(component: Component) -> None:
    """
    Best-effort kill of every started process in the tree.

    Never raises. Safe on trees that never ran, on exited processes, while
    `execute()` is in flight on another thread, and when called repeatedly.
    """
    for child in component.before:
        kill(child)

    proc = component.process
    if proc is not None:
        try:
            proc.kill()
        except OSError as e:
            logger.warning("unable to kill %s: %s", component, e)

    for child in component.after:
        kill(child)


def release(component: Component, timeout: Optional[float] = None) -> None:
    """
    Join output drains and close tee files for every node in the tree.

    Args:
        timeout: per-drain join timeout in seconds; None waits until the
            pipes reach EOF
    """
    for child in component.before:
        release(child, timeout)

    for t in component.drains:
        t.join(timeout)
        if t.is_alive():
            logger.warning("output of %s still draining after %ss", component, timeout)
    component.drains.clear()
    component.tee.close()

    for child in component.after:
        release(child, timeout)


def plan(component: Component) -> List[str]:
    """Display names in the order `execute()` would start them."""
    return [node.display_name for node in component.walk()]
