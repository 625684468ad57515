"""Bounded command history."""

from collections import deque

from pipeshell.config import HISTORY_SIZE


class CommandHistory:
    """Ring buffer of the most recent command lines.

    Once full, adding a line evicts the oldest one.
    """

    def __init__(self, capacity: int = HISTORY_SIZE):
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self._lines: deque[str] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._lines.maxlen

    def add(self, line: str) -> None:
        self._lines.append(line)

    def entries(self) -> list[str]:
        """Lines from oldest to newest."""
        return list(self._lines)

    def format(self) -> str:
        """Numbered listing, one "N: line" per row starting at 1."""
        return "".join(f"{number}: {line}\n" for number, line in enumerate(self._lines, start=1))

    def __len__(self) -> int:
        return len(self._lines)
