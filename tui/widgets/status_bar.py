"""Status bar showing sort, colour and filter state."""

from __future__ import annotations

from rich.text import Text

from textual.widgets import Static

from core.session import SessionView


def status_text(view: SessionView) -> Text:
    text = Text(no_wrap=True, overflow="ellipsis")
    text.append("Sorted by: ", style="bold blue")
    text.append(view.sorted_by.caption)
    text.append(" Colored by: ", style="bold blue")
    text.append(view.colored_by.caption)
    text.append(" Filtered by: ", style="bold blue")
    text.append(view.filter_trail or "-")
    text.append(f"  [{len(view.filtered)}/{view.total}]", style="dim")
    return text


class StatusBar(Static):
    """Single-line inverted status bar."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        background: $foreground 80%;
        color: $background;
    }
    """

    def update_status(self, view: SessionView) -> None:
        self.update(status_text(view))
