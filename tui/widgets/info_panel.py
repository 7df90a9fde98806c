"""Widget displaying every attribute of the focused record."""

from __future__ import annotations

from typing import Optional

from rich.panel import Panel
from rich.text import Text

from textual.widgets import Static

from core.records import Attribute, Record


def caption_text(attr: Attribute) -> Text:
    """Caption with the attribute's field code highlighted on its first occurrence."""
    text = Text()
    code = attr.code
    done = False
    for char in attr.caption:
        if not done and char.lower() == code:
            text.append(char, style="bold white")
            done = True
        else:
            text.append(char, style="cyan")
    text.append(": ", style="cyan")
    return text


class InfoPanel(Static):
    """Show the attributes of one record."""

    def show_record(self, record: Optional[Record]) -> None:
        body = Text()
        if record is not None:
            for attr in Attribute:
                value = record.get(attr)
                if not value:
                    continue
                body.append_text(caption_text(attr))
                body.append(value + "\n")
        self.update(Panel(body, title="Info", border_style="grey50"))
