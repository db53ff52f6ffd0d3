# src/spawner/dsl.py
from __future__ import annotations

import shlex
from typing import List, Optional, Sequence, Union

from .model import Component
from .tee import Tee


# ---------------------------------------------------------------------
# Tee helper
# ---------------------------------------------------------------------

def tee(*, stdout: bool = False, stderr: bool = False, combined: bool = False) -> Tee:
    """Create output routing. `tee(combined=True)` sends both streams to one .log file."""
    return Tee(stdout=stdout, stderr=stderr, combined=combined)


# ---------------------------------------------------------------------
# Functional Component helper
# ---------------------------------------------------------------------

def _argv(value: Union[str, Sequence[str], None]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return shlex.split(value)
    return list(value)


def component(
    *cmd: str,  # allow: component("echo", "A")
    entrypoint: Union[str, Sequence[str], None] = None,
    depends: str = "",
    workdir: str = "",
    before: Optional[List[Component]] = None,
    after: Optional[List[Component]] = None,
    tee: Optional[Tee] = None,
) -> Component:
    """
    Build a component.

    Example:
        component(
            "pytest", "-q",
            entrypoint="python -m",
            before=[component("pip", "install", "-e", ".")],
            after=[component("echo", "done")],
            tee=tee(combined=True),
        )
    """
    return Component(
        entrypoint=_argv(entrypoint),
        cmd=list(cmd),
        depends=depends,
        workdir=workdir,
        before=list(before or []),
        after=list(after or []),
        tee=tee if tee is not None else Tee(),
    )


def sh(script: str, **kwargs) -> Component:
    """Run `script` through `sh -c`. Keyword arguments are passed to `component()`."""
    return component("-c", script, entrypoint=["sh"], **kwargs)
