from __future__ import annotations

import os
import sys
import json

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from utils.logging_utils import LoggingHandler


class FakeConfig:
    def __init__(self, opts: dict):
        self._opts = opts

    def get_option(self, section: str, key: str, fallback=None):
        if section != 'LOG':
            return fallback
        return self._opts.get(key, fallback)


def _read_lines(tmp_path):
    files = [p for p in tmp_path.glob('*.log') if not p.is_symlink()]
    assert files, 'No log files created'
    with files[0].open('r', encoding='utf-8') as f:
        return [l.strip() for l in f if l.strip()]


def test_json_logging_redaction_and_truncation(tmp_path):
    cfg = FakeConfig({
        'active': True,
        'dir': str(tmp_path),
        'per_run': True,
        'format': 'json',
        'redact': True,
        'redact_keys': 'token,password,secret',
        'truncate_chars': 10,
        'log_settings': 'basic',
    })
    logger = LoggingHandler(cfg)

    logger.settings({'token': 'shhhhh', 'note': 'x' * 50})

    lines = _read_lines(tmp_path)
    assert lines, 'Log file empty'
    payload = json.loads(lines[-1])
    assert payload['event'] == 'settings'
    data = payload.get('data') or {}
    assert data.get('token') == '***redacted***'
    assert data.get('note', '').endswith('…')
    assert len(data.get('note')) == 11  # 10 chars + ellipsis


def test_text_logging_format(tmp_path):
    cfg = FakeConfig({
        'active': True,
        'dir': str(tmp_path),
        'per_run': False,
        'format': 'text',
    })
    logger = LoggingHandler(cfg)
    logger.command('filter', 'n:vim', 'applied')

    assert (tmp_path / 'pkgbrowse.log').is_file()
    lines = _read_lines(tmp_path)
    assert any('commands:command' in line and 'argument=n:vim' in line for line in lines)


def test_aspect_gating(tmp_path):
    cfg = FakeConfig({
        'active': True,
        'dir': str(tmp_path),
        'format': 'json',
        'log_commands': 'off',
        'log_queue': 'basic',
    })
    logger = LoggingHandler(cfg)
    logger.command('sort', 'd', 'applied')
    logger.macro_step('1', '/n:a')  # macros default to off
    logger.queue_event('promote', {'name': 'vim', 'queued': 1})

    events = [json.loads(line)['event'] for line in _read_lines(tmp_path)]
    assert events == ['promote']


def test_inactive_logger_writes_nothing(tmp_path):
    logger = LoggingHandler(None)
    logger.settings({'x': 1})
    logger.error('test', RuntimeError('boom'))
    assert list(tmp_path.iterdir()) == []
