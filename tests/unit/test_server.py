"""Tests for the FastMCP server implementation."""

from unittest.mock import AsyncMock, patch

import pytest

from pipeshell.executor import CommandExecutionError, CommandValidationError
from pipeshell.server import history, mcp, shell_execute, shell_history


@pytest.fixture(autouse=True)
def clear_history():
    history._lines.clear()
    yield
    history._lines.clear()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "command_line,timeout,expected_result",
    [
        ("ls", None, {"status": "success", "output": "file\n"}),
        ("ls | wc -l", 60, {"status": "success", "output": "1\n"}),
        ("false", None, {"status": "error", "output": "Command failed with exit status 1"}),
    ],
)
async def test_shell_execute(command_line, timeout, expected_result):
    with patch("pipeshell.server.execute_command_line", new_callable=AsyncMock) as mock_execute:
        mock_execute.return_value = expected_result

        result = await shell_execute(command_line=command_line, timeout=timeout)

        assert result == expected_result
        mock_execute.assert_called_with(command_line, timeout)
        assert history.entries() == [command_line]


@pytest.mark.asyncio
async def test_shell_execute_with_context():
    mock_ctx = AsyncMock()

    with patch("pipeshell.server.execute_command_line", new_callable=AsyncMock) as mock_execute:
        mock_execute.return_value = {"status": "success", "output": "ok"}

        await shell_execute(command_line="true", timeout=5, ctx=mock_ctx)

        assert mock_ctx.info.call_count == 2
        assert "with timeout: 5s" in mock_ctx.info.call_args_list[0][0][0]
        assert "executed successfully" in mock_ctx.info.call_args_list[1][0][0]

    mock_ctx.reset_mock()
    with patch("pipeshell.server.execute_command_line", new_callable=AsyncMock) as mock_execute:
        mock_execute.return_value = {"status": "error", "output": "boom"}

        await shell_execute(command_line="false", timeout=None, ctx=mock_ctx)

        assert mock_ctx.info.call_count == 1
        mock_ctx.warning.assert_called_once()
        assert "Command line failed" in mock_ctx.warning.call_args[0][0]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exception,expected_error_type,recorded",
    [
        (CommandValidationError("Empty command line"), "Command validation error", False),
        (CommandExecutionError("Command timed out after 1 seconds"), "Command execution error", True),
        (Exception("Unexpected failure"), "Unexpected error", False),
    ],
)
async def test_shell_execute_errors(exception, expected_error_type, recorded):
    with patch("pipeshell.server.execute_command_line", side_effect=exception):
        result = await shell_execute(command_line="sleep 10", timeout=1)

    assert result["status"] == "error"
    assert expected_error_type in result["output"]
    assert str(exception) in result["output"]
    assert (history.entries() == ["sleep 10"]) is recorded


@pytest.mark.asyncio
async def test_shell_history():
    assert await shell_history() == "No commands executed yet"

    history.add("echo a")
    history.add("echo b")

    assert await shell_history() == "1: echo a\n2: echo b\n"


def test_mcp_server_initialization():
    assert mcp.name == "Pipeshell"
    assert "shell_execute" in mcp._mcp_server.instructions
    assert callable(shell_execute)
    assert callable(shell_history)
