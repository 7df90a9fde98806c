"""Footer line used while a command argument is being typed."""

from __future__ import annotations

from rich.text import Text

from textual.widgets import Static

from core.session import Mode, SessionView


def input_text(view: SessionView) -> Text:
    """Operator tag followed by the buffer, with the cursor cell reversed."""
    text = Text(no_wrap=True)
    if view.mode is not Mode.INPUT or view.pending_op is None:
        return text
    text.append(view.pending_op.tag, style="bold")
    buffer = view.input_text
    pos = view.input_pos
    text.append(buffer[:pos])
    text.append(buffer[pos:pos + 1] or " ", style="reverse")
    text.append(buffer[pos + 1:])
    return text


class InputLine(Static):
    DEFAULT_CSS = """
    InputLine {
        height: 1;
    }
    """

    def update_input(self, view: SessionView) -> None:
        self.update(input_text(view))
