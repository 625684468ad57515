"""Configuration settings for pipeshell.

Environment variables:
- PIPESHELL_PROMPT: Prompt printed by the interactive loop (default: "sh> ")
- PIPESHELL_HISTORY_SIZE: Number of lines kept in history (default: 100)
- PIPESHELL_FILE_MODE: Octal permission bits for files created by
  redirection (default: 600)
- PIPESHELL_LOG_LEVEL: Logging level name (default: "WARNING")
- PIPESHELL_TIMEOUT: Timeout in seconds for lines run through the MCP
  server (default: 300)
- PIPESHELL_MAX_OUTPUT: Maximum output size in characters returned by the
  MCP server (default: 100000)
- PIPESHELL_TRANSPORT: MCP transport protocol ("stdio" or "sse",
  default: "stdio")
"""

import os

PROMPT = os.environ.get("PIPESHELL_PROMPT", "sh> ")
HISTORY_SIZE = int(os.environ.get("PIPESHELL_HISTORY_SIZE", "100"))
FILE_CREATE_MODE = int(os.environ.get("PIPESHELL_FILE_MODE", "600"), 8)
LOG_LEVEL = os.environ.get("PIPESHELL_LOG_LEVEL", "WARNING").upper()

DEFAULT_TIMEOUT = int(os.environ.get("PIPESHELL_TIMEOUT", "300"))
MAX_OUTPUT_SIZE = int(os.environ.get("PIPESHELL_MAX_OUTPUT", "100000"))
TRANSPORT = os.environ.get("PIPESHELL_TRANSPORT", "stdio")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

INSTRUCTIONS = """
Pipeshell runs simple command lines on the host through two tools.

TOOLS:
- shell_execute: Run one command line and return its combined output
  Example: ls -l | head -n 5
  Example: sort < names.txt > sorted.txt ; wc -l sorted.txt
  Example: make & ./run-tests

- shell_history: List the command lines already executed by this server

SYNTAX (deliberately simple, no quoting or globbing):
- ';' runs the next command regardless of the previous result
- '&' stops the rest of the line if the command before it failed
- '|' connects standard output to the next command's standard input
- '<', '>', '>>' redirect standard input, truncate-write or append-write

RESOURCES:
- pipeshell://history: Executed command lines as JSON
- pipeshell://config: Active interpreter settings as JSON
"""
