"""Shared test configuration and fixtures."""

import logging
import sys
from pathlib import Path

import pytest

from spawner.cli import cleanup_logging
from spawner.model import Component
from spawner.tee import Tee

# Appends "start <label>" / "end <label>" to a trace file, then exits with the given code.
TRACE_SCRIPT = (
    "import sys, time\n"
    "path, label, code = sys.argv[1], sys.argv[2], int(sys.argv[3])\n"
    "with open(path, 'a') as f:\n"
    "    f.write('start ' + label + chr(10))\n"
    "time.sleep(0.05)\n"
    "with open(path, 'a') as f:\n"
    "    f.write('end ' + label + chr(10))\n"
    "sys.exit(code)\n"
)

# Writes to stdout and stderr alternately, flushing between writes.
EMIT_SCRIPT = """\
import sys, time
sys.stdout.write("out1\\n"); sys.stdout.flush()
time.sleep(0.2)
sys.stderr.write("err1\\n"); sys.stderr.flush()
time.sleep(0.2)
sys.stdout.write("out2\\n"); sys.stdout.flush()
"""


@pytest.fixture(scope="function", autouse=True)
def cleanup_logging_handlers():
    """Automatically cleanup logging handlers after each test to prevent ResourceWarnings."""
    yield
    cleanup_logging()


@pytest.fixture(scope="function", autouse=True)
def reset_logging():
    """Reset logging configuration after each test."""
    yield
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.WARNING)


class Tracer:
    """Builds components that record their start/end into one trace file."""

    def __init__(self, root: Path):
        self.root = root
        self.path = root / "trace.txt"

    def node(self, label, *, exit_code=0, before=(), after=(), tee=None, workdir=""):
        return Component(
            entrypoint=[sys.executable, "-c", TRACE_SCRIPT],
            cmd=[str(self.path), label, str(exit_code)],
            workdir=workdir,
            before=list(before),
            after=list(after),
            tee=tee or Tee(),
        )

    def lines(self):
        if not self.path.exists():
            return []
        return self.path.read_text().splitlines()

    def starts(self):
        return [line.split(" ", 1)[1] for line in self.lines() if line.startswith("start ")]


@pytest.fixture
def tracer(tmp_path):
    return Tracer(tmp_path)


@pytest.fixture
def emit_script(tmp_path):
    path = tmp_path / "emit.py"
    path.write_text(EMIT_SCRIPT)
    return path
