"""Command interpreter for the six operator tags.

Each committed command is dispatched through an Operation-keyed table to a
handler that mutates the session's working collections. User-input mistakes
(invalid regex, unknown macro, unknown operator) never raise; they come back
as a CommandResult whose outcome names the reason nothing changed.
"""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Deque, Dict, List, Optional

from core.matcher import (
    filter_records,
    find_next,
    first_attribute,
    parse_filter_argument,
    parse_search_argument,
    sort_records,
)

if TYPE_CHECKING:
    from core.session import Session


QUEUE_PLACEHOLDER = "%p"
MACRO_DELIMITER = ","
MAX_MACRO_EXPANSIONS = 64


class Operation(Enum):
    FILTER = "/"
    SORT = "."
    SEARCH = "?"
    COLORCODE = ";"
    EXEC = "!"
    MACRO = "@"

    @property
    def tag(self) -> str:
        return self.value

    @classmethod
    def from_tag(cls, tag: str) -> Optional["Operation"]:
        try:
            return cls(tag)
        except ValueError:
            return None


class Outcome(Enum):
    APPLIED = "applied"
    EMPTY_ARGUMENT = "empty_argument"
    EMPTY_PHRASE = "empty_phrase"
    INVALID_PATTERN = "invalid_pattern"
    NO_ATTRIBUTE = "no_attribute"
    NOT_FOUND = "not_found"
    UNKNOWN_MACRO = "unknown_macro"
    UNKNOWN_OPERATOR = "unknown_operator"
    EXPANSION_LIMIT = "expansion_limit"


@dataclass
class CommandResult:
    op: Operation
    argument: str
    outcome: Outcome
    detail: str = ""
    steps: List["CommandResult"] = field(default_factory=list)

    @property
    def applied(self) -> bool:
        return self.outcome is Outcome.APPLIED


class CommandInterpreter:
    """Executes operator commands against a session."""

    def __init__(self, session: "Session") -> None:
        self.session = session
        self._handlers: Dict[Operation, Callable[[str], CommandResult]] = {
            Operation.FILTER: self.filter,
            Operation.SORT: self.sort,
            Operation.SEARCH: self.search,
            Operation.COLORCODE: self.colorcode,
            Operation.EXEC: self.execute,
            Operation.MACRO: self.macro,
        }

    # ------------------------------------------------------------------
    def commit(self, op: Operation, argument: str) -> CommandResult:
        """Run one command the way pressing enter in input mode does."""
        if not argument:
            result = CommandResult(op, argument, Outcome.EMPTY_ARGUMENT)
        else:
            result = self._handlers[op](argument)
        self.session.logger.command(op.name.lower(), argument, result.outcome.value, result.detail)
        return result

    # ------------------------------------------------------------------
    def filter(self, argument: str) -> CommandResult:
        session = self.session
        session.history(Operation.FILTER).add(argument)

        parsed = parse_filter_argument(argument)
        if not parsed.phrase:
            return CommandResult(Operation.FILTER, argument, Outcome.EMPTY_PHRASE)

        try:
            survivors = filter_records(session.filtered, parsed)
        except re.error as e:
            return CommandResult(Operation.FILTER, argument, Outcome.INVALID_PATTERN, detail=str(e))

        removed = len(session.filtered) - len(survivors)
        session.filtered = survivors
        session.append_filter_trail(argument)
        session.list_cursor.move_abs(0)
        return CommandResult(Operation.FILTER, argument, Outcome.APPLIED, detail=f"removed={removed}")

    def sort(self, argument: str) -> CommandResult:
        session = self.session
        session.history(Operation.SORT).add(argument)

        attr = first_attribute(argument)
        if attr is None:
            return CommandResult(Operation.SORT, argument, Outcome.NO_ATTRIBUTE)

        session.sorted_by = attr
        session.filtered = sort_records(session.filtered, attr)
        return CommandResult(Operation.SORT, argument, Outcome.APPLIED, detail=attr.value)

    def search(self, argument: str) -> CommandResult:
        session = self.session
        session.history(Operation.SEARCH).add(argument)

        parsed = parse_search_argument(argument)
        if not parsed.phrase:
            return CommandResult(Operation.SEARCH, argument, Outcome.EMPTY_PHRASE)

        hit = find_next(session.filtered, session.list_cursor.index + 1, parsed)
        if hit is None:
            return CommandResult(Operation.SEARCH, argument, Outcome.NOT_FOUND)

        session.list_cursor.move_abs(hit)
        return CommandResult(Operation.SEARCH, argument, Outcome.APPLIED, detail=str(hit))

    def colorcode(self, argument: str) -> CommandResult:
        session = self.session
        session.history(Operation.COLORCODE).add(argument)

        attr = first_attribute(argument)
        if attr is None:
            return CommandResult(Operation.COLORCODE, argument, Outcome.NO_ATTRIBUTE)

        session.colorcode(attr)
        return CommandResult(Operation.COLORCODE, argument, Outcome.APPLIED, detail=attr.value)

    def execute(self, argument: str) -> CommandResult:
        session = self.session
        session.history(Operation.EXEC).add(argument)

        command = expand_placeholder(argument, [r.name for r in session.queue])
        session.logger.cmd_exec(command, queued=len(session.queue))
        exit_code = session.runner.run(command)
        session.logger.cmd_result(command, exit_code)
        return CommandResult(Operation.EXEC, argument, Outcome.APPLIED, detail=command)

    def macro(self, argument: str) -> CommandResult:
        """Expand a comma-separated macro list.

        Nested ``@`` commands push a new frame onto the work-list instead of
        recursing. An unresolved name or unknown operator drops the rest of
        its own frame; hitting MAX_MACRO_EXPANSIONS drops everything.
        """
        session = self.session
        session.history(Operation.MACRO).add(argument)

        result = CommandResult(Operation.MACRO, argument, Outcome.APPLIED)
        frames: List[Deque[str]] = [deque(split_macro_names(argument))]
        expansions = 0

        while frames:
            frame = frames[-1]
            if not frame:
                frames.pop()
                continue

            name = frame.popleft()
            expansions += 1
            if expansions > MAX_MACRO_EXPANSIONS:
                self._abort(result, Outcome.EXPANSION_LIMIT, name)
                break

            command = session.macros.get(name)
            if command is None:
                self._abort(result, Outcome.UNKNOWN_MACRO, name)
                frame.clear()
                continue

            op = Operation.from_tag(command[:1])
            if op is None:
                self._abort(result, Outcome.UNKNOWN_OPERATOR, name)
                frame.clear()
                continue

            operand = command[1:]
            session.logger.macro_step(name, command)
            if op is Operation.MACRO:
                if operand:
                    session.history(Operation.MACRO).add(operand)
                    frames.append(deque(split_macro_names(operand)))
                continue

            result.steps.append(self.commit(op, operand))

        return result

    @staticmethod
    def _abort(result: CommandResult, outcome: Outcome, name: str) -> None:
        # the first failure decides the reported outcome
        if result.outcome is Outcome.APPLIED:
            result.outcome = outcome
            result.detail = name


def split_macro_names(argument: str) -> List[str]:
    return [part.strip() for part in argument.split(MACRO_DELIMITER)]


def expand_placeholder(command: str, names: List[str]) -> str:
    """Replace every queue placeholder with the names, each followed by a space."""
    joined = "".join(f"{name} " for name in names)
    return command.replace(QUEUE_PLACEHOLDER, joined)
