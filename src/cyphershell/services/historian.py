"""In-memory record of the lines entered during this shell session."""
from typing import Optional


class Historian:
    """Keeps entered lines for the history command. Nothing is written to disk."""

    def __init__(self, max_entries: Optional[int] = 1000):
        self.max_entries = max_entries
        self._lines: list[str] = []

    def add(self, line: str):
        line = line.strip()
        if not line:
            return
        # Consecutive duplicates are collapsed, as readline does.
        if self._lines and self._lines[-1] == line:
            return
        self._lines.append(line)
        if self.max_entries is not None and len(self._lines) > self.max_entries:
            del self._lines[: len(self._lines) - self.max_entries]

    def get_history(self) -> list[str]:
        return list(self._lines)

    def clear(self):
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)
