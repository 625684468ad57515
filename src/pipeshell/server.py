"""MCP server implementation for pipeshell.

This module defines the MCP server instance and tool functions that let an
MCP client run command lines through the interpreter and read back the
history of what it ran.
"""

import logging

from mcp.server.fastmcp import Context, FastMCP
from pydantic import Field

from pipeshell.config import INSTRUCTIONS
from pipeshell.executor import (
    CommandExecutionError,
    CommandResult,
    CommandValidationError,
    execute_command_line,
)
from pipeshell.history import CommandHistory
from pipeshell.resources import register_resources

logger = logging.getLogger("pipeshell-server")

mcp = FastMCP(
    "Pipeshell",
    instructions=INSTRUCTIONS,
)

history = CommandHistory()

register_resources(mcp, history)


@mcp.tool()
async def shell_execute(
    command_line: str = Field(description="Command line with optional ';', '&', '|', '<', '>' and '>>' operators"),
    timeout: int | None = Field(
        description="Optional timeout in seconds. Default: 300s.",
        default=None,
    ),
    ctx: Context | None = None,
) -> CommandResult:
    """Run a command line and return its output.

    Commands are split on whitespace only; there is no quoting, globbing or
    variable expansion.

    EXAMPLES:
    - ls -l
    - cat notes.txt | grep TODO | wc -l
    - sort < names.txt > sorted.txt ; head -n 3 sorted.txt
    - make & ./run-tests

    Returns status ('success' or 'error') and the command output.
    """
    logger.info(f"Executing command line: {command_line}" + (f" with timeout: {timeout}" if timeout else ""))

    if ctx:
        await ctx.info("Executing command line" + (f" with timeout: {timeout}s" if timeout else ""))

    try:
        result = await execute_command_line(command_line, timeout)
        history.add(command_line)

        if ctx:
            if result["status"] == "success":
                await ctx.info("Command line executed successfully")
            else:
                await ctx.warning("Command line failed")

        return CommandResult(status=result["status"], output=result["output"])
    except CommandValidationError as e:
        logger.warning(f"Command validation error: {e}")
        return CommandResult(status="error", output=f"Command validation error: {str(e)}")
    except CommandExecutionError as e:
        logger.warning(f"Command execution error: {e}")
        history.add(command_line)
        return CommandResult(status="error", output=f"Command execution error: {str(e)}")
    except Exception as e:
        logger.error(f"Error in shell_execute: {e}")
        return CommandResult(status="error", output=f"Unexpected error: {str(e)}")


@mcp.tool()
async def shell_history() -> str:
    """List the command lines this server has executed, oldest first."""
    return history.format() or "No commands executed yet"
