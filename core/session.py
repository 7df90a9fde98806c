"""Modal session state machine.

The session owns the full record collection, the filtered (working)
collection, the queue and the focus, and routes every key to navigation,
line editing, or the command interpreter depending on its mode.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from base_classes import ConfigProvider, ProcessRunner, RecordLoader, Renderer, TerminalTooSmall
from core.history import History
from core.interpreter import CommandInterpreter, CommandResult, Operation
from core.matcher import assign_color_groups, sort_records
from core.null_renderer import NullRenderer
from core.records import Attribute, Record
from core.runner import ShellRunner
from core.signals import ResizeSignal
from core.text_editor import TextEditor
from utils.logging_utils import LoggingHandler


MIN_WIDTH = 60
MIN_HEIGHT = 20
STARTUP_MACRO = "startup"


class Mode(Enum):
    STANDARD = "standard"
    INPUT = "input"
    HELP = "help"


class Focus(Enum):
    LIST = "list"
    QUEUE = "queue"


class Key:
    """Names of the non-character keys the session understands."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    PAGE_UP = "pageup"
    PAGE_DOWN = "pagedown"
    TAB = "tab"
    ENTER = "enter"
    ESCAPE = "escape"
    BACKSPACE = "backspace"
    DELETE = "delete"


# keys that open input mode with the buffer pre-seeded
QUICK_FILTERS = {"n": "n:", "d": "d:"}


class PaneCursor:
    """Selection index into a sequence owned elsewhere; always clamped."""

    def __init__(self, items: Callable[[], Sequence[Record]]) -> None:
        self._items = items
        self.index = 0

    def _last(self) -> int:
        return max(0, len(self._items()) - 1)

    def move(self, delta: int) -> None:
        self.move_abs(self.index + delta)

    def move_abs(self, index: int) -> None:
        self.index = min(max(0, index), self._last())

    def move_to_end(self) -> None:
        self.index = self._last()

    def clamp(self) -> None:
        self.move_abs(self.index)

    def selected(self) -> Optional[Record]:
        items = self._items()
        if not items:
            return None
        return items[min(self.index, len(items) - 1)]


@dataclass
class SessionView:
    """Snapshot handed to the renderer after every key."""

    mode: Mode
    focus: Focus
    pending_op: Optional[Operation]
    filtered: Tuple[Record, ...]
    queue: Tuple[Record, ...]
    list_index: int
    queue_index: int
    input_text: str
    input_pos: int
    sorted_by: Attribute
    colored_by: Attribute
    filter_trail: str
    total: int
    color_groups: Dict[Record, int] = field(default_factory=dict)
    focused_record: Optional[Record] = None


class Session:
    def __init__(
        self,
        loader: RecordLoader,
        config: ConfigProvider,
        renderer: Optional[Renderer] = None,
        runner: Optional[ProcessRunner] = None,
        logger: Optional[LoggingHandler] = None,
    ) -> None:
        self.loader = loader
        self.config = config
        self.renderer = renderer or NullRenderer()
        self.runner = runner or ShellRunner()
        self.logger = logger or LoggingHandler()
        self.resize = ResizeSignal()
        self.interpreter = CommandInterpreter(self)
        self.editor = TextEditor()
        self.histories: Dict[Operation, History] = {op: History() for op in Operation}
        self.page_size = 10
        self.quit = False

        self.records: List[Record] = []
        self.filtered: List[Record] = []
        self.queue: List[Record] = []
        self.macros: Dict[str, str] = {}
        self.color_groups: Dict[Record, int] = {}
        self.list_cursor = PaneCursor(lambda: self.filtered)
        self.queue_cursor = PaneCursor(lambda: self.queue)
        self._reset_state()

    def _reset_state(self) -> None:
        self.mode = Mode.STANDARD
        self.pending_op: Optional[Operation] = None
        self.sorted_by = Attribute.NAME
        self.colored_by = Attribute.INSTALLSTATE
        self.filter_trail = ""
        self.focus = Focus.LIST
        self.list_cursor.index = 0
        self.queue_cursor.index = 0
        self.editor.clear()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        self.load()
        self.present()

    def load(self, run_startup: bool = True) -> None:
        self.records = list(self.loader.load_all())
        self.filtered = sort_records(self.records, self.sorted_by)
        self.queue = []
        self.macros = dict(self.config.macro_table())
        self.colorcode(self.colored_by)
        self.logger.log('session_loaded', component='core.session', aspect='load',
                        data={'records': len(self.records), 'macros': len(self.macros)})

        if run_startup and STARTUP_MACRO in self.macros:
            self.interpreter.commit(Operation.MACRO, STARTUP_MACRO)

    def teardown(self) -> None:
        self.records = []
        self.filtered = []
        self.queue = []
        self.color_groups = {}
        self.renderer.clear()

    def reload(self) -> None:
        self.teardown()
        self._reset_state()
        self.load()
        # a filter applied by the startup macro does not survive a reload
        self.clear_filter()

    def history(self, op: Operation) -> History:
        return self.histories[op]

    # ------------------------------------------------------------------
    # Loop integration
    # ------------------------------------------------------------------
    def handle_key(self, key: str) -> None:
        if self.mode is Mode.STANDARD:
            self._standard_key(key)
        elif self.mode is Mode.INPUT:
            self._input_key(key)
        else:
            self.mode = Mode.STANDARD
        self.present()

    def feed(self, keys: Sequence[str]) -> None:
        for key in keys:
            self.handle_key(key)

    def tick(self) -> bool:
        """Handle at most one pending resize. Returns True if one was handled."""
        size = self.resize.consume()
        if size is None:
            return False
        width, height = size
        ensure_min_size(width, height)
        self.renderer.reposition(width, height)
        self.logger.tui_detail('resize', {'width': width, 'height': height})
        self.present()
        return True

    def present(self) -> None:
        self.renderer.present(self.view())

    def view(self) -> SessionView:
        return SessionView(
            mode=self.mode,
            focus=self.focus,
            pending_op=self.pending_op,
            filtered=tuple(self.filtered),
            queue=tuple(self.queue),
            list_index=self.list_cursor.index,
            queue_index=self.queue_cursor.index,
            input_text=self.editor.text,
            input_pos=self.editor.pos,
            sorted_by=self.sorted_by,
            colored_by=self.colored_by,
            filter_trail=self.filter_trail,
            total=len(self.records),
            color_groups=self.color_groups,
            focused_record=self.focused_record(),
        )

    # ------------------------------------------------------------------
    # Standard mode
    # ------------------------------------------------------------------
    def _standard_key(self, key: str) -> None:
        cursor = self._focused_cursor()
        if key in ("k", Key.UP):
            cursor.move(-1)
        elif key in ("j", Key.DOWN):
            cursor.move(1)
        elif key == Key.HOME:
            cursor.move_abs(0)
        elif key == Key.END:
            cursor.move_to_end()
        elif key == Key.PAGE_UP:
            cursor.move(-self.page_size)
        elif key == Key.PAGE_DOWN:
            cursor.move(self.page_size)
        elif key == Key.TAB:
            self.set_focus(Focus.QUEUE if self.focus is Focus.LIST else Focus.LIST)
        elif key == Key.RIGHT:
            self.promote()
        elif key == Key.LEFT:
            self.demote()
        elif key == "C":
            self.clear_queue()
        elif key == "h":
            self.mode = Mode.HELP
        elif key == "q":
            self.quit = True
        elif len(key) == 1 and key in "0123456789":
            self.interpreter.commit(Operation.MACRO, key)
        elif key == "r":
            self.reload()
        elif key == "c":
            self.clear_filter()
        elif key in QUICK_FILTERS:
            self.enter_input(Operation.FILTER, seed=QUICK_FILTERS[key])
        else:
            op = Operation.from_tag(key) if len(key) == 1 else None
            if op is not None:
                self.enter_input(op)

    def _focused_cursor(self) -> PaneCursor:
        return self.queue_cursor if self.focus is Focus.QUEUE else self.list_cursor

    def focused_record(self) -> Optional[Record]:
        return self._focused_cursor().selected()

    def set_focus(self, target: Focus) -> None:
        if target is Focus.QUEUE and not self.queue:
            target = Focus.LIST
        self.focus = target

    def promote(self) -> bool:
        if self.focus is not Focus.LIST or not self.filtered:
            return False
        record = self.list_cursor.selected()
        if any(queued is record for queued in self.queue):
            return False
        self.queue.append(record)
        self.queue_cursor.move_to_end()
        self.list_cursor.move(1)
        self.logger.queue_event('promote', {'name': record.name, 'queued': len(self.queue)})
        return True

    def demote(self) -> bool:
        if self.focus is not Focus.QUEUE or not self.queue:
            return False
        self._remove_selected()
        if not self.queue:
            self.set_focus(Focus.LIST)
        return True

    def clear_queue(self) -> None:
        while self.queue:
            self._remove_selected()
        self.set_focus(Focus.LIST)
        self.logger.queue_event('clear', {})

    def _remove_selected(self) -> None:
        record = self.queue.pop(min(self.queue_cursor.index, len(self.queue) - 1))
        self.queue_cursor.clamp()
        self.logger.queue_event('demote', {'name': record.name, 'queued': len(self.queue)})

    def clear_filter(self) -> None:
        self.filtered = sort_records(self.records, self.sorted_by)
        self.filter_trail = ""
        self.list_cursor.move_abs(0)

    def append_filter_trail(self, argument: str) -> None:
        self.filter_trail = f"{self.filter_trail}, {argument}" if self.filter_trail else argument

    def colorcode(self, attr: Attribute) -> None:
        self.color_groups = assign_color_groups(self.records, attr)
        self.colored_by = attr

    # ------------------------------------------------------------------
    # Input mode
    # ------------------------------------------------------------------
    def enter_input(self, op: Operation, seed: str = "") -> None:
        self.mode = Mode.INPUT
        self.editor.clear()
        self.history(op).reset()
        self.pending_op = op
        if seed:
            self.editor.set(seed)

    def exit_input(self, commit: bool) -> Optional[CommandResult]:
        op = self.pending_op
        text = self.editor.text
        self.mode = Mode.STANDARD
        self.pending_op = None
        self.editor.clear()
        if not commit or op is None or not text:
            return None
        return self.interpreter.commit(op, text)

    def _input_key(self, key: str) -> None:
        editor = self.editor
        if key == Key.ESCAPE:
            self.exit_input(commit=False)
        elif key == Key.ENTER:
            self.exit_input(commit=True)
        elif key == Key.DELETE:
            editor.delete()
        elif key == Key.BACKSPACE:
            editor.backspace()
        elif key == Key.LEFT:
            editor.move_left()
        elif key == Key.RIGHT:
            editor.move_right()
        elif key == Key.HOME:
            editor.move_start()
        elif key == Key.END:
            editor.move_end()
        elif key in (Key.UP, Key.DOWN):
            history = self.history(self.pending_op)
            if not history.empty():
                editor.set(history.move_back() if key == Key.UP else history.move_forward())
        elif len(key) == 1:
            editor.insert(key)


def ensure_min_size(width: int, height: int) -> None:
    if width < MIN_WIDTH or height < MIN_HEIGHT:
        raise TerminalTooSmall(width, height, MIN_WIDTH, MIN_HEIGHT)
