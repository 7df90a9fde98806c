"""Record matching and ordering.

Every matcher takes the AttributeSet to search explicitly; there is no
module-level selection shared between commands.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Pattern, Sequence, Union

from core.records import Attribute, Record


DEFAULT_ATTRIBUTES = (Attribute.NAME, Attribute.DESCRIPTION)

_FILTER_PREFIX = re.compile(r"^(?:([A-Za-z]*)(!?):)?(.*)$", re.DOTALL)
_SEARCH_PREFIX = re.compile(r"^([A-Za-z]*)!?:(.*)$", re.DOTALL)


class AttributeSet:
    """Ordered set of attribute selectors; duplicates are dropped."""

    def __init__(self, attrs: Iterable[Attribute] = ()) -> None:
        self._attrs: List[Attribute] = []
        for attr in attrs:
            self.add(attr)

    @classmethod
    def default(cls) -> "AttributeSet":
        return cls(DEFAULT_ATTRIBUTES)

    @classmethod
    def from_codes(cls, codes: str) -> "AttributeSet":
        """Build a set from one-character field codes, skipping unknown ones."""
        return cls(a for a in (Attribute.from_code(c) for c in codes) if a is not None)

    def add(self, attr: Attribute) -> None:
        if attr not in self._attrs:
            self._attrs.append(attr)

    def __iter__(self) -> Iterator[Attribute]:
        return iter(self._attrs)

    def __len__(self) -> int:
        return len(self._attrs)

    def __contains__(self, attr: object) -> bool:
        return attr in self._attrs

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributeSet):
            return NotImplemented
        return self._attrs == other._attrs

    def __repr__(self) -> str:
        return f"AttributeSet({''.join(a.code for a in self._attrs)!r})"


def first_attribute(codes: str) -> Optional[Attribute]:
    """Return the attribute of the first valid code in ``codes``."""
    for char in codes:
        attr = Attribute.from_code(char)
        if attr is not None:
            return attr
    return None


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def matches_plain(record: Record, phrase: str, attrs: AttributeSet) -> bool:
    needle = phrase.lower()
    return any(needle in record.get(attr).lower() for attr in attrs)


def matches_pattern(record: Record, pattern: Pattern[str], attrs: AttributeSet) -> bool:
    return any(pattern.search(record.get(attr)) is not None for attr in attrs)


def compare_by_attribute(a: Record, b: Record, attr: Attribute) -> int:
    left, right = a.get(attr), b.get(attr)
    return (left > right) - (left < right)


def sort_records(records: Sequence[Record], attr: Attribute) -> List[Record]:
    """Stable sort by one attribute, ordered by compare_by_attribute."""
    return sorted(records, key=functools.cmp_to_key(lambda a, b: compare_by_attribute(a, b, attr)))


def is_simple_phrase(phrase: str) -> bool:
    return phrase.isalnum()


Needle = Union[str, Pattern[str]]


def compile_needle(phrase: str) -> Needle:
    """Return the phrase itself for the substring fast path, else a compiled regex.

    Raises re.error for invalid patterns.
    """
    if is_simple_phrase(phrase):
        return phrase
    return re.compile(phrase, re.IGNORECASE)


def predicate_for(needle: Needle, attrs: AttributeSet) -> Callable[[Record], bool]:
    if isinstance(needle, str):
        return lambda record: matches_plain(record, needle, attrs)
    return lambda record: matches_pattern(record, needle, attrs)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

@dataclass
class ParsedArgument:
    attrs: AttributeSet
    phrase: str
    negate: bool = False


def parse_filter_argument(text: str) -> ParsedArgument:
    """Split ``[(fields)(!)?:]phrase``.

    A non-empty field list replaces the default selection wholesale, even when
    none of its codes are known.
    """
    match = _FILTER_PREFIX.match(text)
    fields, bang, phrase = match.group(1), match.group(2), match.group(3)
    attrs = AttributeSet.from_codes(fields) if fields else AttributeSet.default()
    return ParsedArgument(attrs=attrs, phrase=phrase, negate=bool(bang))


def parse_search_argument(text: str) -> ParsedArgument:
    """Split ``[(fields):]phrase``; a ``!`` before the colon is accepted and ignored."""
    match = _SEARCH_PREFIX.match(text)
    if match is None:
        return ParsedArgument(attrs=AttributeSet.default(), phrase=text)
    fields, phrase = match.group(1), match.group(2)
    attrs = AttributeSet.from_codes(fields) if fields else AttributeSet.default()
    return ParsedArgument(attrs=attrs, phrase=phrase)


def filter_records(records: Sequence[Record], argument: ParsedArgument) -> List[Record]:
    """Keep the records matching the argument (or not matching, when negated).

    Raises re.error for an invalid pattern; survivors keep their order.
    """
    keep = predicate_for(compile_needle(argument.phrase), argument.attrs)
    return [r for r in records if keep(r) != argument.negate]


def find_next(records: Sequence[Record], start: int, argument: ParsedArgument) -> Optional[int]:
    """Index of the first plain match at or after ``start``, wrapping once to 0."""
    hit = None
    for idx in range(start, len(records)):
        if matches_plain(records[idx], argument.phrase, argument.attrs):
            hit = idx
            break
    if hit is None and start != 0:
        for idx in range(len(records)):
            if matches_plain(records[idx], argument.phrase, argument.attrs):
                hit = idx
                break
    return hit


COLOR_GROUPS = 6


def assign_color_groups(records: Sequence[Record], attr: Attribute, groups: int = COLOR_GROUPS) -> Dict[Record, int]:
    """Map each record to a colour group derived from one attribute.

    Empty values get group 0; distinct non-empty values are ranked in sorted
    order and spread over groups 1..groups-1, so equal values always share a
    group and the mapping does not depend on record order.
    """
    values = sorted({r.get(attr) for r in records} - {""})
    rank = {value: (idx % (groups - 1)) + 1 for idx, value in enumerate(values)}
    return {r: rank.get(r.get(attr), 0) for r in records}
