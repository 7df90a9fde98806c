"""Static help overlay; the session leaves help mode on any key."""

from __future__ import annotations

from typing import Iterable

from rich.panel import Panel
from rich.text import Text

from textual.widgets import Static

from tui.models import HELP_ENTRIES, HelpEntry


def help_text(entries: Iterable[HelpEntry] = HELP_ENTRIES) -> Text:
    text = Text()
    for entry in entries:
        if entry.keys:
            text.append(f"{entry.keys}: ", style="bold")
        text.append(entry.help + "\n")
    text.append("\nconfigure macros and hotkeys in config.ini\n", style="dim")
    return text


class HelpOverlay(Static):
    def on_mount(self) -> None:
        self.update(Panel(help_text(), title="Help", subtitle="press any key", border_style="cyan"))
