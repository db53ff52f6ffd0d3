# tee.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import IO, Optional

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class Tee:
    """
    Output routing for one component.

    combined: stdout and stderr share `<name>.log`
    stdout:   stdout goes to `<name>.log`
    stderr:   stderr goes to `<name>.err`

    File handles are opened by `open()` during population and owned by this
    object until `close()`.
    """
    stdout: bool = False
    stderr: bool = False
    combined: bool = False

    stdout_file: Optional[IO[bytes]] = field(default=None, repr=False, compare=False)
    stderr_file: Optional[IO[bytes]] = field(default=None, repr=False, compare=False)

    @property
    def routes_stdout(self) -> bool:
        return self.combined or self.stdout

    @property
    def routes_stderr(self) -> bool:
        return self.combined or self.stderr

    def open(self, name: str) -> None:
        """
        Open destination files for `name` (a path without extension).

        Raises:
            OSError: if a destination cannot be created
        """
        if self.combined:
            f = open(name + ".log", "wb")
            self.stdout_file = f
            self.stderr_file = f
            return

        if self.stdout:
            self.stdout_file = open(name + ".log", "wb")

        if self.stderr:
            try:
                self.stderr_file = open(name + ".err", "wb")
            except OSError:
                self.close()
                raise

    def close(self) -> None:
        """Close whatever `open()` acquired. Safe to call more than once."""
        for f in {id(f): f for f in (self.stdout_file, self.stderr_file) if f is not None}.values():
            f.close()
        self.stdout_file = None
        self.stderr_file = None


def drain(label: str, source: IO[bytes], dest: IO[bytes]) -> None:
    """
    Copy `source` into `dest` until EOF.

    Chunks are written and flushed as they arrive so that two drains sharing
    one destination (combined routing) interleave in arrival order. Errors are
    logged, never raised: output capture does not decide the exit status.
    """
    try:
        while True:
            chunk = source.read1(CHUNK_SIZE)
            if not chunk:
                break
            dest.write(chunk)
            dest.flush()
    except (OSError, ValueError) as e:
        logger.error("%s error: %s", label, e)
    finally:
        source.close()


def start_drain(label: str, source: IO[bytes], dest: IO[bytes]) -> threading.Thread:
    """Run `drain` on a daemon thread and return the thread handle."""
    t = threading.Thread(target=drain, args=(label, source, dest), name=f"drain:{label}", daemon=True)
    t.start()
    return t
