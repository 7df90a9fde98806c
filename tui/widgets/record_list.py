"""Scrolling list pane for records (used for both the list and the queue)."""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

from rich.panel import Panel
from rich.text import Text

from textual.widgets import Static

from core.records import Record


GROUP_STYLES = ("default", "green", "cyan", "blue", "magenta", "red")


def group_style(group: int) -> str:
    if group <= 0:
        return GROUP_STYLES[0]
    return GROUP_STYLES[1 + (group - 1) % (len(GROUP_STYLES) - 1)]


def visible_window(count: int, index: int, height: int) -> Tuple[int, int]:
    """Return the [start, end) slice that keeps ``index`` centred where possible."""
    if height <= 0 or count <= 0:
        return 0, 0
    if count <= height:
        return 0, count
    start = max(0, min(index - height // 2, count - height))
    return start, start + height


class RecordList(Static):
    """Render a window of records with the selection highlighted."""

    def __init__(self, title: str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.pane_title = title
        self.page_height = 10

    def show(
        self,
        records: Sequence[Record],
        index: int,
        *,
        focused: bool,
        groups: Optional[Dict[Record, int]] = None,
        footer: str = "",
    ) -> None:
        height = max(1, self.size.height - 2)
        self.page_height = height
        start, end = visible_window(len(records), index, height)
        body = Text(no_wrap=True, overflow="ellipsis")
        for pos in range(start, end):
            record = records[pos]
            style = group_style((groups or {}).get(record, 0))
            if pos == index:
                style = f"{style} reverse" if focused else f"{style} underline"
            body.append(record.name or "?", style=style)
            if pos < end - 1:
                body.append("\n")
        border = "bold white" if focused else "grey50"
        self.update(Panel(body, title=self.pane_title, subtitle=footer or None, border_style=border))
