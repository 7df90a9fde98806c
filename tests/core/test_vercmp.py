from __future__ import annotations

import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from core.vercmp import split_evr, vercmp


def test_split_evr():
    assert split_evr("2:1.0-3") == ("2", "1.0", "3")
    assert split_evr("1.0") == ("0", "1.0", None)
    assert split_evr(":1.0-1") == ("0", "1.0", "1")
    assert split_evr("1.0-rc1-2") == ("0", "1.0-rc1", "2")


ORDERED = [
    ("1.0-1", "1.0-2"),
    ("2.0", "1:0.9"),
    ("1.9", "1.10"),
    ("1.0", "1.0.1"),
    ("1.0a", "1.0"),
    ("1.0alpha", "1.0beta"),
    ("1.0a", "1.0.1"),
    ("1.a", "1.1"),
]


def test_vercmp_orders_versions():
    for older, newer in ORDERED:
        assert vercmp(older, newer) == -1, (older, newer)
        assert vercmp(newer, older) == 1, (newer, older)


def test_vercmp_equal_versions():
    assert vercmp("9.1-1", "9.1-1") == 0
    assert vercmp("1.001", "1.1") == 0
    # a missing release does not decide the order
    assert vercmp("1.0", "1.0-5") == 0
    assert vercmp("0:1.0", "1.0") == 0
