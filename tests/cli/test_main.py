from __future__ import annotations

import os
import sys
from pathlib import Path

from click.testing import CliRunner

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from main import cli


def _make_db(tmp_path: Path) -> Path:
    db = tmp_path / "db"
    for name, desc in (
        ("vim", "Vi Improved"),
        ("neovim", "Fork of Vim"),
        ("emacs", "The extensible editor"),
    ):
        pkg = db / "local" / f"{name}-1.0-1"
        pkg.mkdir(parents=True)
        (pkg / "desc").write_text(
            f"%NAME%\n{name}\n\n%VERSION%\n1.0-1\n\n%DESC%\n{desc}\n\n",
            encoding="utf-8",
        )
    return db


def _write_cfg(tmp_path: Path, db: Path, extra: str = "") -> Path:
    cfg = tmp_path / "cfg.ini"
    cfg.write_text(
        "\n".join(
            [
                "[DEFAULT]",
                f"pacman_conf = {tmp_path / 'no-pacman.conf'}",
                "",
                "[PACMAN]",
                f"db_path = {db}",
                "",
                "[LOG]",
                "active = false",
                "",
                extra,
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    return cfg


def test_query_applies_filters_in_order(tmp_path: Path):
    cfg = _write_cfg(tmp_path, _make_db(tmp_path))
    runner = CliRunner()

    result = runner.invoke(cli, ["-c", str(cfg), "query", "vim"])
    assert result.exit_code == 0, result.output
    assert result.output.split() == ["neovim", "vim"]

    result = runner.invoke(cli, ["-c", str(cfg), "query", "vim", "n!:neo"])
    assert result.exit_code == 0, result.output
    assert result.output.split() == ["vim"]


def test_query_invalid_pattern_fails(tmp_path: Path):
    cfg = _write_cfg(tmp_path, _make_db(tmp_path))
    result = CliRunner().invoke(cli, ["-c", str(cfg), "query", "n:["])
    assert result.exit_code != 0
    assert "invalid_pattern" in result.output


def test_query_missing_database(tmp_path: Path):
    cfg = _write_cfg(tmp_path, tmp_path / "absent")
    result = CliRunner().invoke(cli, ["-c", str(cfg), "query", "vim"])
    assert result.exit_code != 0
    assert "Could not open package database" in result.output


def test_list_macros(tmp_path: Path):
    cfg = _write_cfg(tmp_path, _make_db(tmp_path), "[MACROS]\nstartup = /n:vim\n")
    result = CliRunner().invoke(cli, ["-c", str(cfg), "list-macros"])
    assert result.exit_code == 0, result.output
    assert "startup = /n:vim" in result.output
    assert "0 = !sudo pacman -S %p" in result.output


def test_missing_config_file(tmp_path: Path):
    result = CliRunner().invoke(cli, ["-c", str(tmp_path / "nope.ini"), "list-macros"])
    assert result.exit_code != 0
    assert "Could not find the custom config file" in result.output
