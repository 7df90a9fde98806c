"""Common data structures used by the TUI widgets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List


@dataclass
class HelpEntry:
    """One line of the help overlay."""

    keys: str
    help: str


HELP_ENTRIES: List[HelpEntry] = [
    HelpEntry("esc", "cancel"),
    HelpEntry("q", "quit"),
    HelpEntry("1 to 0", "hotkeys (macros named 0-9 in config.ini)"),
    HelpEntry("!", "execute command, replacing %p with queued package names"),
    HelpEntry("@", "run the specified macros (comma separated)"),
    HelpEntry("r", "reload package info"),
    HelpEntry("/", "filter packages by specified fields (regexp unless alphanumeric)"),
    HelpEntry("", "   filters can be chained; prefix fields! to negate"),
    HelpEntry("n / d", "filter packages by name / description"),
    HelpEntry("c", "clear all package filters"),
    HelpEntry("C", "clear the package queue"),
    HelpEntry("?", "search packages"),
    HelpEntry(".", "sort packages by specified field"),
    HelpEntry(";", "colorcode packages by specified field"),
    HelpEntry("tab", "switch focus between list and queue panes"),
    HelpEntry("left/right arrows", "add/remove packages from the queue"),
    HelpEntry("up/down arrows, j/k, pg up/down, home/end", "navigation"),
    HelpEntry("up/down arrows (in input mode)", "browse history"),
]
