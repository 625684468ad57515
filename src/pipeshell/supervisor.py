"""Pipeline supervision in the parent process."""

import logging
import os
from dataclasses import dataclass

from pipeshell.launcher import ChildProcess, Streams, spawn
from pipeshell.pipeline import Pipeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExitOutcome:
    """Terminal status of one pipeline segment.

    Exactly one of exit_code and signal is set for a reaped child. Both are
    None when the wait itself failed.
    """

    segment_index: int
    pid: int
    exit_code: int | None = None
    signal: int | None = None

    @property
    def status(self) -> int:
        """Status used for sequencing.

        A child killed by a signal has no exit code and counts as 0.
        """
        return self.exit_code if self.exit_code is not None else 0

    @classmethod
    def from_wait_status(cls, child: ChildProcess, wait_status: int) -> "ExitOutcome":
        if os.WIFSIGNALED(wait_status):
            return cls(child.segment.index, child.pid, signal=os.WTERMSIG(wait_status))
        return cls(child.segment.index, child.pid, exit_code=os.WEXITSTATUS(wait_status))


def reap(children: list[ChildProcess]) -> list[ExitOutcome]:
    """Wait for every child exactly once.

    Children may exit in any order. A failed wait is logged and the
    remaining children are still reaped.
    """
    outcomes: list[ExitOutcome] = []
    for child in children:
        try:
            _, wait_status = os.waitpid(child.pid, 0)
        except OSError as e:
            logger.error(f"Could not wait for pid {child.pid} ({child.segment.program}): {e}")
            outcomes.append(ExitOutcome(child.segment.index, child.pid))
            continue

        outcome = ExitOutcome.from_wait_status(child, wait_status)
        logger.debug(f"Reaped pid {child.pid} ({child.segment.program}): {outcome}")
        outcomes.append(outcome)
    return outcomes


def run(pipeline: Pipeline, streams: Streams | None = None) -> list[ExitOutcome]:
    """Launch a pipeline and wait for all of its segments.

    The parent's copies of every pipe descriptor are closed as soon as the
    children are spawned; otherwise readers would never see end of file.

    Args:
        pipeline: The pipeline to run
        streams: Descriptors for the pipeline's outer stdin/stdout/stderr

    Returns:
        One ExitOutcome per spawned segment, in segment order
    """
    try:
        children = spawn(pipeline, streams)
    finally:
        pipeline.close()
    return reap(children)
