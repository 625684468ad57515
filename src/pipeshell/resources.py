"""MCP resources for pipeshell.

Exposes the server's command history and the active interpreter settings
as read-only JSON resources.
"""

import logging

from pipeshell import config
from pipeshell.history import CommandHistory

logger = logging.getLogger(__name__)


def get_history_listing(history: CommandHistory) -> dict:
    return {
        "capacity": history.capacity,
        "entries": [{"number": number, "command_line": line} for number, line in enumerate(history.entries(), start=1)],
    }


def get_shell_config() -> dict:
    return {
        "prompt": config.PROMPT,
        "history_size": config.HISTORY_SIZE,
        "file_create_mode": oct(config.FILE_CREATE_MODE),
        "log_level": config.LOG_LEVEL,
        "timeout": config.DEFAULT_TIMEOUT,
        "max_output": config.MAX_OUTPUT_SIZE,
        "transport": config.TRANSPORT,
    }


def register_resources(mcp, history: CommandHistory):
    """Register all resources with the MCP server instance.

    Args:
        mcp: The FastMCP server instance
        history: The history that executed command lines are recorded in
    """
    logger.info("Registering pipeshell resources")

    @mcp.resource(
        name="pipeshell_history",
        description="Get command lines executed by this server",
        uri="pipeshell://history",
        mime_type="application/json",
    )
    async def pipeshell_history() -> dict:
        """Get command lines executed by this server, oldest first."""
        return get_history_listing(history)

    @mcp.resource(
        name="pipeshell_config",
        description="Get active interpreter settings",
        uri="pipeshell://config",
        mime_type="application/json",
    )
    async def pipeshell_config() -> dict:
        return get_shell_config()

    logger.info("Successfully registered all pipeshell resources")
