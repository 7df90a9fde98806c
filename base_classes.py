"""
Abstract base classes for pkgbrowse components.

These classes define the interfaces that the record loader, renderer, process
runner, and configuration provider must implement to work with the session.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List


class RecordLoader(ABC):
    """
    Abstract class for record loaders
    """

    @abstractmethod
    def load_all(self) -> List[Any]:
        """Return every record ordered by name, deduplicated by name"""
        pass


class Renderer(ABC):
    """
    Abstract class for renderers
    """

    @abstractmethod
    def clear(self) -> None:
        pass

    @abstractmethod
    def reposition(self, width: int, height: int) -> None:
        pass

    @abstractmethod
    def present(self, view: Any) -> None:
        pass


class ProcessRunner(ABC):
    """
    Abstract class for external command runners
    """

    @abstractmethod
    def run(self, command: str) -> int:
        """Run the command and block until it exits"""
        pass


class ConfigProvider(ABC):
    """
    Abstract class for configuration providers
    """

    @abstractmethod
    def macro_table(self) -> Dict[str, str]:
        pass


class InteractionMode(ABC):
    """
    Abstract class for interaction handlers
    """

    @abstractmethod
    def start(self):
        pass


# --- Errors -----------------------------------------------------------------


class FatalError(Exception):
    """Aborts the whole session."""

    def __init__(self, user_message: str):
        super().__init__(user_message)
        self.user_message = user_message


class DatabaseError(FatalError):
    pass


class TerminalTooSmall(FatalError):
    def __init__(self, width: int, height: int, min_width: int, min_height: int):
        super().__init__(
            f"Window size is below required minimum ({width}x{height} < {min_width}x{min_height})"
        )
        self.width = width
        self.height = height
