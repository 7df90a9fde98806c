"""Adapters that let the session drive the Textual app."""

from __future__ import annotations

from typing import Any, Optional, Tuple

from base_classes import ProcessRunner, Renderer


class TuiRenderer(Renderer):
    """Forward session views to the app.

    Views presented before the app is mounted are held and drawn on mount.
    """

    def __init__(self, app) -> None:
        self.app = app
        self.pending: Any = None
        self.size: Optional[Tuple[int, int]] = None

    def clear(self) -> None:
        self.pending = None
        if self.app.ready:
            self.app.clear_panes()

    def reposition(self, width: int, height: int) -> None:
        self.size = (width, height)
        if self.app.ready:
            self.app.refresh(layout=True)

    def present(self, view: Any) -> None:
        if not self.app.ready:
            self.pending = view
            return
        self.pending = None
        self.app.render_view(view)

    def flush(self) -> None:
        if self.pending is not None:
            self.present(self.pending)


class TuiRunner(ProcessRunner):
    """Run commands with the app suspended so they own the terminal."""

    def __init__(self, app, inner: ProcessRunner) -> None:
        self.app = app
        self.inner = inner

    def run(self, command: str) -> int:
        if not self.app.ready:
            return self.inner.run(command)
        with self.app.suspend():
            return self.inner.run(command)
