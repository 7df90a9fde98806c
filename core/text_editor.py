from __future__ import annotations


class TextEditor:
    """Single-line edit buffer with a cursor; ``0 <= pos <= len(text)`` always holds."""

    def __init__(self, text: str = "") -> None:
        self._text = ""
        self._pos = 0
        self.set(text)

    @property
    def text(self) -> str:
        return self._text

    @property
    def pos(self) -> int:
        return self._pos

    def __len__(self) -> int:
        return len(self._text)

    def set(self, text: str) -> None:
        """Replace the contents and park the cursor at the end."""
        self._text = text or ""
        self._pos = len(self._text)

    def clear(self) -> None:
        self.set("")

    def insert(self, chars: str) -> None:
        self._text = self._text[:self._pos] + chars + self._text[self._pos:]
        self._pos += len(chars)

    def delete(self) -> None:
        if self._pos < len(self._text):
            self._text = self._text[:self._pos] + self._text[self._pos + 1:]

    def backspace(self) -> None:
        if self._pos > 0:
            self._text = self._text[:self._pos - 1] + self._text[self._pos:]
            self._pos -= 1

    def move_left(self) -> None:
        self._pos = max(0, self._pos - 1)

    def move_right(self) -> None:
        self._pos = min(len(self._text), self._pos + 1)

    def move_start(self) -> None:
        self._pos = 0

    def move_end(self) -> None:
        self._pos = len(self._text)
