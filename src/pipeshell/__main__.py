"""Main entry point for pipeshell.

Without arguments an interactive prompt is started. ``-c LINE`` runs a
single line and ``--serve`` starts the MCP server.
"""

import argparse
import logging
import os
import signal
import sys

from pipeshell.config import LOG_FORMAT, LOG_LEVEL
from pipeshell.launcher import STDOUT_FILENO
from pipeshell.repl import run_interactive
from pipeshell.sequencer import Sequencer, last_status

logger = logging.getLogger("pipeshell")

DEFAULT_LOG_LEVEL = "WARNING"


def handle_interrupt(signum, frame):
    """Absorb an interrupt so a blocking wait resumes.

    The foreground children receive the signal themselves through their
    process group.
    """
    os.write(STDOUT_FILENO, b"\n")


def install_interrupt_handler() -> None:
    """Install the interrupt handler, exiting if that is impossible."""
    try:
        signal.signal(signal.SIGINT, handle_interrupt)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot install interrupt handler: {e}")
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pipeshell", description="Simple command interpreter with pipes and redirection.")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-c", dest="command", metavar="LINE", help="run a single command line and exit")
    mode.add_argument("--serve", action="store_true", help="run as an MCP server")
    return parser


def serve() -> int:
    from pipeshell.config import TRANSPORT

    if TRANSPORT not in ("stdio", "sse"):
        logger.error(f"Invalid transport protocol: {TRANSPORT}. Must be 'stdio' or 'sse'")
        return 1

    from pipeshell.server import mcp

    logger.info(f"Starting server with transport protocol: {TRANSPORT}")
    mcp.run(transport=TRANSPORT)
    return 0


def resolve_log_level(name: str) -> str:
    """Return name if logging knows it, otherwise the default level."""
    if isinstance(logging.getLevelName(name), int):
        return name
    return DEFAULT_LOG_LEVEL


def main(argv: list[str] | None = None) -> int:
    """Entry point for the pipeshell CLI."""
    args = build_parser().parse_args(argv)

    level = resolve_log_level(LOG_LEVEL)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    if level != LOG_LEVEL:
        logger.warning(f"Unknown log level {LOG_LEVEL!r}, using {level}")

    if args.serve:
        return serve()

    install_interrupt_handler()

    if args.command is not None:
        return last_status(Sequencer().run_line(args.command))

    return run_interactive()


if __name__ == "__main__":
    sys.exit(main())
