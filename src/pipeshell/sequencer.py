"""Sequencing of sub-commands within one command line.

The Sequencer drives tokenizing, directive extraction, pipeline building and
supervision for each sub-command in turn, and applies the short-circuit
rule: after a sub-command followed by '&' exits non-zero, the rest of the
line is skipped.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from pipeshell.directives import extract
from pipeshell.errors import EmptyInput, MalformedDirective, ResourceExhausted
from pipeshell.launcher import CHILD_FAILURE_STATUS, Streams
from pipeshell.pipeline import Pipeline, build
from pipeshell.supervisor import ExitOutcome, run
from pipeshell.tokenizer import SubCommand, split_arguments, split_subcommands

logger = logging.getLogger(__name__)


class SequencerState(Enum):
    IDLE = "idle"
    PARSING = "parsing"
    RUNNING = "running"
    SKIPPED = "skipped"


@dataclass
class SubCommandReport:
    """What happened to one sub-command.

    status is None when nothing was executed (parse error or no segments).
    """

    subcommand: SubCommand
    outcomes: list[ExitOutcome] = field(default_factory=list)
    status: int | None = None
    error: str | None = None

    @property
    def executed(self) -> bool:
        return self.status is not None


def pipeline_status(pipeline: Pipeline, outcomes: list[ExitOutcome]) -> int:
    """Return the status of the last segment, the pipeline's status.

    If the last segment never started it counts as a failure.
    """
    last_index = len(pipeline) - 1
    for outcome in outcomes:
        if outcome.segment_index == last_index:
            return outcome.status
    return CHILD_FAILURE_STATUS


class Sequencer:
    """Runs command lines one at a time."""

    def __init__(self, streams: Streams | None = None):
        self.streams = streams or Streams()
        self.state = SequencerState.IDLE

    def parse(self, subcommand: SubCommand) -> Pipeline:
        """Turn one sub-command into a ready pipeline.

        Raises:
            MalformedDirective: If a redirection has no target
            ResourceExhausted: If the pipes cannot be allocated
        """
        self.state = SequencerState.PARSING
        arguments = split_arguments(subcommand.text)
        clean, redirection, split_points = extract(arguments)
        return build(clean, split_points, redirection)

    def run_subcommand(self, subcommand: SubCommand) -> SubCommandReport:
        report = SubCommandReport(subcommand=subcommand)
        try:
            pipeline = self.parse(subcommand)
        except (MalformedDirective, ResourceExhausted) as e:
            logger.error(f"{subcommand.text}: {e}")
            self.state = SequencerState.SKIPPED
            report.error = str(e)
            return report

        if not pipeline.segments:
            logger.debug(f"Nothing to run in: {subcommand.text}")
            self.state = SequencerState.SKIPPED
            return report

        self.state = SequencerState.RUNNING
        with pipeline:
            report.outcomes = run(pipeline, self.streams)
        report.status = pipeline_status(pipeline, report.outcomes)
        logger.debug(f"'{subcommand.text}' finished with status {report.status}")
        return report

    def run_line(self, line: str) -> list[SubCommandReport]:
        """Execute every sub-command of a line in order.

        Never raises for command failures; errors are logged and recorded in
        the returned reports.

        Args:
            line: The raw command line

        Returns:
            One report per sub-command that was reached
        """
        reports: list[SubCommandReport] = []
        try:
            subcommands = split_subcommands(line)
        except EmptyInput:
            return reports

        try:
            for subcommand in subcommands:
                report = self.run_subcommand(subcommand)
                reports.append(report)
                if subcommand.short_circuit and report.executed and report.status != 0:
                    logger.debug(f"'{subcommand.text}' failed before '&', skipping the rest of the line")
                    break
        finally:
            self.state = SequencerState.IDLE

        return reports


def last_status(reports: list[SubCommandReport]) -> int:
    """Status of the last sub-command that ran or failed to parse.

    A parse error counts as status 1. A line that ran nothing has status 0.
    """
    for report in reversed(reports):
        if report.executed:
            return report.status
        if report.error is not None:
            return CHILD_FAILURE_STATUS
    return 0
