"""Command line tokenizing.

This module provides utilities for splitting a raw command line:
- Sequencing split into sub-commands on ';' and '&'
- Whitespace split of a sub-command into argument tokens

Splitting is purely syntactic. There is no quoting and no escaping.
"""

import re
from dataclasses import dataclass

from pipeshell.errors import EmptyInput

SEQUENCE_DELIMITERS = (";", "&")
SHORT_CIRCUIT_DELIMITER = "&"

_ARGUMENT_RE = re.compile(r"[^ \t\n\r\f\v]+")


@dataclass
class SubCommand:
    """One sequencing unit of a command line.

    Attributes:
        text: The sub-command text with surrounding whitespace removed
        short_circuit: True when a '&' delimiter follows this sub-command,
            meaning the rest of the line is skipped if it fails
    """

    text: str
    short_circuit: bool = False


def split_subcommands(line: str) -> list[SubCommand]:
    """Split a command line into sub-commands.

    Empty pieces between consecutive delimiters are dropped. A '&' anywhere
    in the run of delimiters after a sub-command marks it as short-circuiting.

    Args:
        line: The raw command line without its trailing newline

    Returns:
        Ordered list of sub-commands

    Raises:
        EmptyInput: If the line holds no sub-commands
    """
    subcommands: list[SubCommand] = []
    current = ""

    for char in line:
        if char not in SEQUENCE_DELIMITERS:
            current += char
            continue

        if current.strip():
            subcommands.append(SubCommand(text=current.strip()))
        current = ""

        if char == SHORT_CIRCUIT_DELIMITER and subcommands:
            subcommands[-1].short_circuit = True

    if current.strip():
        subcommands.append(SubCommand(text=current.strip()))

    if not subcommands:
        raise EmptyInput("no commands in line")

    return subcommands


def split_arguments(text: str) -> list[str]:
    """Split sub-command text into argument tokens on runs of ASCII whitespace."""
    return _ARGUMENT_RE.findall(text)
