"""Interactive read loop.

Reads one line at a time, answers the ``history`` built-in itself and hands
everything else to the Sequencer.
"""

import logging
import sys
from typing import TextIO

from pipeshell.config import PROMPT
from pipeshell.history import CommandHistory
from pipeshell.sequencer import Sequencer

logger = logging.getLogger(__name__)

HISTORY_BUILTIN = "history"


def handle_line(line: str, sequencer: Sequencer, history: CommandHistory, output: TextIO) -> None:
    """Process one line read from the user.

    Empty lines are ignored. The history built-in is answered without being
    recorded; any other line is recorded and then executed.
    """
    if not line:
        return

    if line == HISTORY_BUILTIN:
        output.write(history.format())
        output.flush()
        return

    history.add(line)
    sequencer.run_line(line)


def run_interactive(
    sequencer: Sequencer | None = None,
    history: CommandHistory | None = None,
    input_stream: TextIO | None = None,
    output: TextIO | None = None,
    prompt: str = PROMPT,
) -> int:
    """Prompt, read and execute lines until end of input.

    Returns:
        Exit status for the interpreter process
    """
    if sequencer is None:
        sequencer = Sequencer()
    if history is None:
        history = CommandHistory()
    if input_stream is None:
        input_stream = sys.stdin
    if output is None:
        output = sys.stdout

    while True:
        output.write(prompt)
        output.flush()

        line = input_stream.readline()
        if not line:
            logger.debug("End of input, leaving interactive loop")
            break

        handle_line(line.rstrip("\n"), sequencer, history, output)

    return 0
