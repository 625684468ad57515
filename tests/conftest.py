"""Configuration for pytest."""

import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

from pipeshell.launcher import Streams

SRC_DIR = Path(__file__).resolve().parent.parent / "src"


@dataclass
class CapturedStreams:
    """Pipeline streams with stdin from /dev/null and output sent to files."""

    streams: Streams
    stdout_path: Path
    stderr_path: Path

    def stdout(self) -> str:
        return self.stdout_path.read_text()

    def stderr(self) -> str:
        return self.stderr_path.read_text()


@pytest.fixture
def captured(tmp_path):
    """Streams for running real pipelines without touching the test's own stdio."""
    stdout_path = tmp_path / "captured.out"
    stderr_path = tmp_path / "captured.err"
    flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
    stdin_fd = os.open(os.devnull, os.O_RDONLY)
    stdout_fd = os.open(stdout_path, flags, 0o600)
    stderr_fd = os.open(stderr_path, flags, 0o600)

    yield CapturedStreams(Streams(stdin_fd, stdout_fd, stderr_fd), stdout_path, stderr_path)

    for fd in (stdin_fd, stdout_fd, stderr_fd):
        os.close(fd)


@pytest.fixture
def interpreter_env(monkeypatch):
    """Environment in which `python -m pipeshell` works from the source tree."""
    pythonpath = os.environ.get("PYTHONPATH")
    monkeypatch.setenv("PYTHONPATH", str(SRC_DIR) + (os.pathsep + pythonpath if pythonpath else ""))
    return os.environ.copy()


@pytest.fixture
def run_shell(tmp_path, interpreter_env):
    """Run one line through `python -m pipeshell -c` in a scratch directory."""

    def run(line: str, timeout: float = 10) -> subprocess.CompletedProcess:
        return subprocess.run(
            [sys.executable, "-m", "pipeshell", "-c", line],
            cwd=tmp_path,
            env=interpreter_env,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=timeout,
        )

    return run
