"""Running command lines on behalf of the MCP server.

Each line runs in a fresh ``python -m pipeshell -c LINE`` process so that
forking never happens inside the server's event loop, and so a timeout can
kill the interpreter together with every pipeline it started.
"""

import asyncio
import logging
import os
import signal
import sys
from typing import TypedDict

from pipeshell.config import DEFAULT_TIMEOUT, MAX_OUTPUT_SIZE

# Configure module logger
logger = logging.getLogger(__name__)


class CommandResult(TypedDict):
    """Type definition for command execution results."""

    status: str
    output: str


class CommandValidationError(Exception):
    """Exception raised when a command line cannot be handed to the interpreter.

    This exception is raised for blank lines, lines spanning several
    lines, and lines containing NUL characters.
    """

    pass


class CommandExecutionError(Exception):
    """Exception raised when a command line fails to execute.

    This exception is raised when there's an error during execution,
    such as timeouts or failures to start the interpreter.
    """

    pass


def validate_command_line(command_line: str) -> None:
    """Check that a command line can be passed to the interpreter.

    Raises:
        CommandValidationError: If the line is blank, multi-line or contains NUL
    """
    if not command_line.strip():
        raise CommandValidationError("Empty command line")
    if "\n" in command_line or "\r" in command_line:
        raise CommandValidationError("Command line must be a single line")
    if "\0" in command_line:
        raise CommandValidationError("Command line must not contain NUL characters")


def interpreter_command(command_line: str) -> list[str]:
    return [sys.executable, "-m", "pipeshell", "-c", command_line]


def truncate_output(output: str) -> str:
    if len(output) > MAX_OUTPUT_SIZE:
        logger.info(f"Output truncated from {len(output)} to {MAX_OUTPUT_SIZE} characters")
        return output[:MAX_OUTPUT_SIZE] + "\n... (output truncated)"
    return output


async def _kill_process_group(process: asyncio.subprocess.Process) -> None:
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    await process.wait()


async def execute_command_line(command_line: str, timeout: int | None = None) -> CommandResult:
    """Execute a command line and return the result.

    Args:
        command_line: The command line to run
        timeout: Optional timeout in seconds (defaults to DEFAULT_TIMEOUT)

    Returns:
        CommandResult containing output and status

    Raises:
        CommandValidationError: If the command line is invalid
        CommandExecutionError: If the command line fails to execute
    """
    validate_command_line(command_line)

    if timeout is None:
        timeout = DEFAULT_TIMEOUT

    try:
        logger.debug(f"Executing command line: {command_line}")

        process = await asyncio.create_subprocess_exec(
            *interpreter_command(command_line),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            await _kill_process_group(process)
            raise

        returncode = process.returncode
        logger.debug(f"Command line completed with return code: {returncode}")

        stdout_str = truncate_output(stdout.decode("utf-8", errors="replace"))
        stderr_str = stderr.decode("utf-8", errors="replace")

        if returncode != 0:
            logger.warning(f"Command line failed with return code {returncode}: {command_line}")
            logger.debug(f"Command error output: {stderr_str}")
            return CommandResult(
                status="error",
                output=stderr_str or stdout_str or f"Command failed with exit status {returncode}",
            )

        return CommandResult(status="success", output=stdout_str)

    except asyncio.TimeoutError as timeout_error:
        logger.warning(f"Command line timed out after {timeout} seconds: {command_line}")
        raise CommandExecutionError(f"Command timed out after {timeout} seconds") from timeout_error
    except asyncio.CancelledError:
        raise
    except Exception as e:
        raise CommandExecutionError(f"Failed to execute command line: {str(e)}") from e
