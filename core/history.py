from __future__ import annotations

from typing import List, Optional


class History:
    """Append-only log of submitted strings with a browse cursor.

    The cursor is ``None`` while not browsing; browsing back from there starts
    at the newest entry. Every returned entry comes from ``[0, len)``.
    """

    def __init__(self) -> None:
        self._entries: List[str] = []
        self._cursor: Optional[int] = None

    def add(self, entry: str) -> None:
        self._entries.append(entry)

    def reset(self) -> None:
        self._cursor = None

    def empty(self) -> bool:
        return not self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[str]:
        return list(self._entries)

    @property
    def cursor(self) -> Optional[int]:
        return self._cursor

    def move_back(self) -> str:
        if not self._entries:
            raise IndexError("history is empty")
        if self._cursor is None:
            self._cursor = len(self._entries) - 1
        else:
            self._cursor = max(0, self._cursor - 1)
        return self._entries[self._cursor]

    def move_forward(self) -> str:
        if not self._entries:
            raise IndexError("history is empty")
        if self._cursor is None:
            self._cursor = len(self._entries) - 1
        else:
            self._cursor = min(len(self._entries) - 1, self._cursor + 1)
        return self._entries[self._cursor]
