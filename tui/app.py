"""Textual application for the pkgbrowse browser."""

from __future__ import annotations

from typing import Optional

from textual import events
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical

from base_classes import FatalError
from core.session import Focus, Mode, Session, SessionView
from tui.keys import translate_key
from tui.renderer import TuiRenderer, TuiRunner
from tui.widgets.help_overlay import HelpOverlay
from tui.widgets.info_panel import InfoPanel
from tui.widgets.input_line import InputLine
from tui.widgets.record_list import RecordList
from tui.widgets.status_bar import StatusBar


TICK_INTERVAL = 0.05


class BrowserApp(App):
    """Thin shell around the session: keys in, views out."""

    CSS_PATH = "styles/app.tcss"
    ENABLE_COMMAND_PALETTE = False

    def __init__(self, session: Session) -> None:
        super().__init__()
        self.session = session
        self.ready = False
        self.fatal: Optional[FatalError] = None

        self.renderer = TuiRenderer(self)
        session.renderer = self.renderer
        session.runner = TuiRunner(self, session.runner)

        self.record_list: Optional[RecordList] = None
        self.queue_list: Optional[RecordList] = None
        self.info_panel: Optional[InfoPanel] = None
        self.status_bar: Optional[StatusBar] = None
        self.input_line: Optional[InputLine] = None
        self.help_overlay: Optional[HelpOverlay] = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="panes"):
            with Vertical(id="left_column"):
                self.record_list = RecordList("Packages", id="record_list")
                yield self.record_list
                self.queue_list = RecordList("Queue", id="queue_list")
                yield self.queue_list
            self.info_panel = InfoPanel(id="info_panel")
            yield self.info_panel
        self.help_overlay = HelpOverlay(id="help_overlay")
        yield self.help_overlay
        self.status_bar = StatusBar(id="status_bar")
        yield self.status_bar
        self.input_line = InputLine(id="input_line")
        yield self.input_line

    def on_mount(self) -> None:
        self.ready = True
        self.session.logger.tui_event('start', {'records': len(self.session.records)})
        self.session.resize.request(self.size.width, self.size.height)
        self.set_interval(TICK_INTERVAL, self._tick)
        self._guard(self._tick)
        self.renderer.flush()

    def on_unmount(self) -> None:
        self.ready = False
        self.session.logger.tui_event('stop', {'queued': len(self.session.queue)})

    # ----- event plumbing -----------------------------------------
    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        key = translate_key(event)
        self.session.logger.tui_detail('key', {'key': key, 'mode': self.session.mode.value})
        self._guard(lambda: self.session.handle_key(key))
        if self.session.quit:
            self.exit()

    def on_resize(self, event: events.Resize) -> None:
        self.session.resize.request(event.size.width, event.size.height)

    def _tick(self) -> None:
        self._guard(self.session.tick)

    def _guard(self, func) -> None:
        if self.fatal is not None:
            return
        try:
            func()
        except FatalError as exc:
            self.session.logger.error('tui', exc)
            self.fatal = exc
            self.exit(return_code=1)

    # ----- drawing ------------------------------------------------
    def clear_panes(self) -> None:
        for pane in (self.record_list, self.queue_list):
            if pane is not None:
                pane.update("")
        if self.info_panel is not None:
            self.info_panel.show_record(None)

    def render_view(self, view: SessionView) -> None:
        if self.record_list is None:
            return
        helping = view.mode is Mode.HELP
        self.query_one("#panes").display = not helping
        self.help_overlay.display = helping

        self.record_list.show(
            view.filtered,
            view.list_index,
            focused=view.focus is Focus.LIST,
            groups=view.color_groups,
            footer=f"{len(view.filtered)} shown",
        )
        self.queue_list.show(
            view.queue,
            view.queue_index,
            focused=view.focus is Focus.QUEUE,
            groups=view.color_groups,
            footer=f"{len(view.queue)} queued" if view.queue else "",
        )
        self.info_panel.show_record(view.focused_record)
        self.status_bar.update_status(view)
        self.input_line.update_input(view)
        self.session.page_size = max(1, self.record_list.page_height)
