from __future__ import annotations

import os
import sys
from types import SimpleNamespace

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from core.interpreter import Operation
from core.records import Attribute, Record
from core.session import Focus, Mode, SessionView
from tui.keys import translate_key
from tui.widgets.help_overlay import help_text
from tui.widgets.info_panel import caption_text
from tui.widgets.input_line import input_text
from tui.widgets.record_list import GROUP_STYLES, group_style, visible_window
from tui.widgets.status_bar import status_text


def _view(**overrides):
    records = (Record.build(name="vim"), Record.build(name="zsh"))
    base = dict(
        mode=Mode.STANDARD,
        focus=Focus.LIST,
        pending_op=None,
        filtered=records,
        queue=(),
        list_index=0,
        queue_index=0,
        input_text="",
        input_pos=0,
        sorted_by=Attribute.NAME,
        colored_by=Attribute.INSTALLSTATE,
        filter_trail="",
        total=5,
    )
    base.update(overrides)
    return SessionView(**base)


def test_visible_window_keeps_selection_in_view():
    assert visible_window(5, 3, 10) == (0, 5)
    assert visible_window(100, 0, 10) == (0, 10)
    assert visible_window(100, 50, 10) == (45, 55)
    assert visible_window(100, 99, 10) == (90, 100)
    assert visible_window(0, 0, 10) == (0, 0)


def test_group_style_cycles():
    assert group_style(0) == "default"
    assert group_style(1) == GROUP_STYLES[1]
    assert group_style(len(GROUP_STYLES)) == GROUP_STYLES[1]


def test_translate_key():
    assert translate_key(SimpleNamespace(key="C", character="C", is_printable=True)) == "C"
    assert translate_key(SimpleNamespace(key="slash", character="/", is_printable=True)) == "/"
    assert translate_key(SimpleNamespace(key="pageup", character=None, is_printable=False)) == "pageup"
    assert translate_key(SimpleNamespace(key="tab", character="\t", is_printable=False)) == "tab"


def test_caption_highlights_field_code():
    text = caption_text(Attribute.INSTALLDATE)
    assert text.plain == "Install date: "
    highlighted = [span for span in text.spans if span.style == "bold white"]
    assert len(highlighted) == 1
    # the first 'a' of "Install"
    assert highlighted[0].start == 4


def test_status_text_shows_dash_without_filters():
    assert "Filtered by: -" in status_text(_view()).plain
    plain = status_text(_view(filter_trail="n:vim, d:editor", sorted_by=Attribute.SIZE)).plain
    assert "Sorted by: Size" in plain
    assert "Filtered by: n:vim, d:editor" in plain
    assert "[2/5]" in plain


def test_input_text_marks_cursor():
    view = _view(mode=Mode.INPUT, pending_op=Operation.FILTER, input_text="n:vi", input_pos=2)
    text = input_text(view)
    assert text.plain == "/n:vi"
    reversed_spans = [s for s in text.spans if s.style == "reverse"]
    assert len(reversed_spans) == 1
    assert text.plain[reversed_spans[0].start:reversed_spans[0].end] == "v"

    # cursor at the end shows an empty cell
    at_end = input_text(_view(mode=Mode.INPUT, pending_op=Operation.SORT, input_text="s", input_pos=1))
    assert at_end.plain == ".s "

    assert input_text(_view()).plain == ""


def test_help_text_lists_operators():
    plain = help_text().plain
    for tag in ("/", "?", ".", ";", "!", "@"):
        assert f"{tag}: " in plain
