"""Package version ordering as pacman applies it.

Versions have the form ``[epoch:]version[-release]``. Each part is compared
segment by segment: runs of digits numerically, runs of letters lexically,
with a letter run always sorting before a number run.
"""

from __future__ import annotations

from string import ascii_letters, digits
from typing import Optional, Tuple

_ALPHA = frozenset(ascii_letters)
_DIGIT = frozenset(digits)
_ALNUM = _ALPHA | _DIGIT


def _cmp(left, right) -> int:
    return (left > right) - (left < right)


def _span(text: str, chars, inside: bool = True) -> int:
    """Length of the leading run of ``text`` that is (or is not) in ``chars``."""
    end = 0
    while end < len(text) and (text[end] in chars) == inside:
        end += 1
    return end


def split_evr(evr: str) -> Tuple[str, str, Optional[str]]:
    """Split ``evr`` into (epoch, version, release); release is None when absent."""
    head = _span(evr, _DIGIT)
    if head < len(evr) and evr[head] == ":":
        epoch, rest = evr[:head] or "0", evr[head + 1:]
    else:
        epoch, rest = "0", evr
    version, sep, release = rest.rpartition("-")
    if not sep:
        return epoch, rest, None
    return epoch, version, release


def compare_segments(one: str, two: str) -> int:
    """Compare a single version part (no epoch or release)."""
    if one == two:
        return 0

    while one and two:
        skip_one, skip_two = _span(one, _ALNUM, inside=False), _span(two, _ALNUM, inside=False)
        one, two = one[skip_one:], two[skip_two:]
        if not one or not two:
            break
        if skip_one != skip_two:
            return -1 if skip_one < skip_two else 1

        numeric = one[0] in _DIGIT
        chars = _DIGIT if numeric else _ALPHA
        seg_one, seg_two = one[:_span(one, chars)], two[:_span(two, chars)]
        one, two = one[len(seg_one):], two[len(seg_two):]

        # segments of different kinds: numbers are newer
        if not seg_two:
            return 1 if numeric else -1

        if numeric:
            seg_one, seg_two = seg_one.lstrip("0"), seg_two.lstrip("0")
            result = _cmp(len(seg_one), len(seg_two))
            if result:
                return result
        result = _cmp(seg_one, seg_two)
        if result:
            return result

    if not one and not two:
        return 0
    # a trailing letter run never beats an exhausted string
    if (not one and two[0] not in _ALPHA) or (one and one[0] in _ALPHA):
        return -1
    return 1


def vercmp(a: str, b: str) -> int:
    """Return -1, 0 or 1 as version ``a`` is older than, equal to or newer than ``b``."""
    if a == b:
        return 0
    epoch_a, version_a, release_a = split_evr(a)
    epoch_b, version_b, release_b = split_evr(b)
    result = compare_segments(epoch_a, epoch_b)
    if result == 0:
        result = compare_segments(version_a, version_b)
    if result == 0 and release_a is not None and release_b is not None:
        result = compare_segments(release_a, release_b)
    return result
