# model.py
from __future__ import annotations

import enum
import os
import subprocess
import threading
from dataclasses import dataclass, field
from typing import IO, List, Optional

from .tee import Tee


class State(enum.Enum):
    """Population gate for a component."""
    UNPOPULATED = "unpopulated"
    POPULATED = "populated"


@dataclass
class Component:
    """
    A node in the process tree: one invocation plus the subtrees that must
    run strictly before and after it.

    Declared fields mirror the config schema. Everything below the
    "runtime" marker is owned by the node while it is populated/executed.
    """
    entrypoint: list[str] = field(default_factory=list)
    cmd: list[str] = field(default_factory=list)
    depends: str = ""
    workdir: str = ""
    before: list[Component] = field(default_factory=list)
    after: list[Component] = field(default_factory=list)
    tee: Tee = field(default_factory=Tee)

    # ---- runtime ----
    state: State = field(default=State.UNPOPULATED, repr=False, compare=False)
    prefix: str = field(default="", repr=False, compare=False)
    argv: list[str] = field(default_factory=list, repr=False, compare=False)
    process: Optional[subprocess.Popen] = field(default=None, repr=False, compare=False)
    stdout: Optional[IO] = field(default=None, repr=False, compare=False)
    stderr: Optional[IO] = field(default=None, repr=False, compare=False)
    returncode: Optional[int] = field(default=None, repr=False, compare=False)
    drains: List[threading.Thread] = field(default_factory=list, repr=False, compare=False)

    def __str__(self) -> str:
        return self.display_name

    @property
    def invocation(self) -> list[str]:
        """Full, unexpanded invocation: entrypoint followed by cmd."""
        return [*self.entrypoint, *self.cmd]

    @property
    def display_name(self) -> str:
        return " ".join(self.invocation) or "<empty>"

    @property
    def log_name(self) -> str:
        # file name only: separators would point the log into other directories
        name = self.display_name.replace(" ", "_").replace("/", "_")
        if os.sep != "/":
            name = name.replace(os.sep, "_")
        return name

    @property
    def populated(self) -> bool:
        return self.state is State.POPULATED

    def add_prefix(self, prefix: str) -> None:
        """
        Join `prefix` in front of the workdir of every node in the tree.

        Not idempotent: call once per tree, before populating it.
        """
        for child in self.before:
            child.add_prefix(prefix)
        for child in self.after:
            child.add_prefix(prefix)

        self.workdir = os.path.join(prefix, self.workdir)
        self.prefix = prefix

    def walk(self):
        """Yield every node of the tree, before-subtrees first, then self, then after-subtrees."""
        for child in self.before:
            yield from child.walk()
        yield self
        for child in self.after:
            yield from child.walk()

    def template_context(self) -> dict:
        """Fields exposed to argument templates."""
        return {
            "entrypoint": list(self.entrypoint),
            "cmd": list(self.cmd),
            "depends": self.depends,
            "workdir": self.workdir,
            "prefix": self.prefix,
            "tee": self.tee,
            "before": self.before,
            "after": self.after,
        }
