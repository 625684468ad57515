"""Redirection and pipe operator extraction.

Scans an argument list for '<', '>', '>>' and '|', strips them out and
records what they asked for.
"""

import logging
from dataclasses import dataclass

from pipeshell.errors import MissingRedirectTarget

logger = logging.getLogger(__name__)

INPUT_REDIRECT = "<"
OUTPUT_REDIRECT = ">"
APPEND_REDIRECT = ">>"
PIPE = "|"

REDIRECT_OPERATORS = (INPUT_REDIRECT, OUTPUT_REDIRECT, APPEND_REDIRECT)
OPERATORS = (*REDIRECT_OPERATORS, PIPE)


@dataclass
class RedirectionSpec:
    """Redirection targets for one sub-command.

    Only one output target exists. When both '>' and '>>' appear the one
    seen last decides the file and the write mode.
    """

    input_file: str | None = None
    output_file: str | None = None
    append: bool = False

    @property
    def has_output(self) -> bool:
        return self.output_file is not None


def extract(arguments: list[str]) -> tuple[list[str], RedirectionSpec, list[int]]:
    """Strip redirection and pipe operators from an argument list.

    Args:
        arguments: Argument tokens of one sub-command

    Returns:
        Tuple of (clean arguments, redirection spec, pipe split points). Each
        split point is the index into the clean arguments where a new pipeline
        segment starts.

    Raises:
        MissingRedirectTarget: If a redirection operator has no file name
    """
    clean: list[str] = []
    redirection = RedirectionSpec()
    split_points: list[int] = []

    tokens = iter(arguments)
    for token in tokens:
        if token == PIPE:
            split_points.append(len(clean))
            continue

        if token not in REDIRECT_OPERATORS:
            clean.append(token)
            continue

        target = next(tokens, None)
        if target is None or target in OPERATORS:
            raise MissingRedirectTarget(token)

        if token == INPUT_REDIRECT:
            redirection.input_file = target
        else:
            redirection.output_file = target
            redirection.append = token == APPEND_REDIRECT

    logger.debug(f"Extracted {clean} with {redirection} and split points {split_points}")
    return clean, redirection, split_points
