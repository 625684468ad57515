"""Process launching for pipeline segments.

Each segment runs in its own forked child. The child wires standard input
and output to redirected files or pipe ends, closes every pipe descriptor
of the pipeline, and replaces itself with the target program. A child
never returns into shared code: any failure before exec is reported on the
child's stderr and ends the child with exit status 1.
"""

import logging
import os
import signal
import sys
from dataclasses import dataclass

from pipeshell.config import FILE_CREATE_MODE
from pipeshell.errors import (
    ExecutionFailure,
    InputFileUnavailable,
    OutputFileUnavailable,
    PipeshellError,
    ProgramNotFound,
    SpawnFailure,
)
from pipeshell.pipeline import Pipeline, Segment

logger = logging.getLogger(__name__)

CHILD_FAILURE_STATUS = 1

STDIN_FILENO = 0
STDOUT_FILENO = 1
STDERR_FILENO = 2


@dataclass(frozen=True)
class Streams:
    """Descriptors inherited by the outer ends of a pipeline."""

    stdin: int = STDIN_FILENO
    stdout: int = STDOUT_FILENO
    stderr: int = STDERR_FILENO


@dataclass
class ChildProcess:
    pid: int
    segment: Segment


def _bind(fd: int, target: int) -> None:
    if fd != target:
        os.dup2(fd, target)


def _bind_and_close(fd: int, target: int) -> None:
    os.dup2(fd, target)
    os.close(fd)


def _open_input(path: str) -> int:
    try:
        return os.open(path, os.O_RDONLY)
    except OSError as e:
        raise InputFileUnavailable(path, e.strerror or str(e)) from e


def _open_output(path: str, append: bool) -> int:
    flags = os.O_WRONLY | os.O_CREAT | (os.O_APPEND if append else os.O_TRUNC)
    try:
        return os.open(path, flags, FILE_CREATE_MODE)
    except OSError as e:
        raise OutputFileUnavailable(path, e.strerror or str(e)) from e


def _exec_segment(pipeline: Pipeline, segment: Segment, streams: Streams) -> None:
    """Set up descriptors in the child and exec the segment's program.

    Only returns by raising.
    """
    # Python ignores SIGPIPE; programs expect the default disposition
    signal.signal(signal.SIGPIPE, signal.SIG_DFL)

    _bind(streams.stdin, STDIN_FILENO)
    _bind(streams.stdout, STDOUT_FILENO)
    _bind(streams.stderr, STDERR_FILENO)

    redirection = segment.redirection
    if redirection.input_file is not None:
        _bind_and_close(_open_input(redirection.input_file), STDIN_FILENO)
    if redirection.output_file is not None:
        _bind_and_close(_open_output(redirection.output_file, redirection.append), STDOUT_FILENO)

    if not pipeline.is_last(segment):
        os.dup2(pipeline.pipes[segment.index].write.fileno(), STDOUT_FILENO)
    if segment.index > 0:
        os.dup2(pipeline.pipes[segment.index - 1].read.fileno(), STDIN_FILENO)

    pipeline.close()

    try:
        os.execvp(segment.program, segment.argv)
    except FileNotFoundError as e:
        raise ProgramNotFound(segment.program) from e
    except OSError as e:
        raise ExecutionFailure(e.strerror or str(e)) from e


def _run_child(pipeline: Pipeline, segment: Segment, streams: Streams) -> None:
    try:
        _exec_segment(pipeline, segment, streams)
    except PipeshellError as e:
        os.write(STDERR_FILENO, f"pipeshell: {segment.program}: {e}\n".encode(errors="replace"))
    except Exception as e:
        os.write(STDERR_FILENO, f"pipeshell: {segment.program}: unexpected error: {e}\n".encode(errors="replace"))
    finally:
        os._exit(CHILD_FAILURE_STATUS)


def spawn(pipeline: Pipeline, streams: Streams | None = None) -> list[ChildProcess]:
    """Fork one child per segment, in segment order.

    A segment whose fork fails is reported and left out; the remaining
    segments are still spawned.

    Args:
        pipeline: The pipeline to launch
        streams: Descriptors for the pipeline's outer stdin/stdout/stderr

    Returns:
        The children that were started
    """
    streams = streams or Streams()
    children: list[ChildProcess] = []

    for segment in pipeline.segments:
        # buffered output must not be interleaved with the child's
        sys.stdout.flush()
        sys.stderr.flush()

        try:
            pid = os.fork()
        except OSError as e:
            error = SpawnFailure(f"{segment.program}: cannot fork: {e.strerror or e}")
            logger.error(str(error))
            continue

        if pid == 0:
            _run_child(pipeline, segment, streams)

        logger.debug(f"Spawned {segment.argv} as pid {pid} (segment {segment.index})")
        children.append(ChildProcess(pid=pid, segment=segment))

    return children
