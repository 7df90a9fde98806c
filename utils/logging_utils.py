from __future__ import annotations

import json
import os
import traceback
from datetime import datetime
from typing import Any, Dict, Optional


def _now_iso() -> str:
    return datetime.utcnow().strftime('%Y-%m-%dT%H:%M:%S.%fZ')


def _safe_str(x: Any) -> str:
    try:
        return str(x)
    except Exception:
        return '<unprintable>'


class LoggingHandler:
    """
    Centralized, configurable logging sink with per-aspect gating.

    - Format: JSONL or plain text
    - File policy: per-run timestamped file in [LOG].dir or explicit [LOG].file
    - Never writes to the terminal; the browser owns it while running
    - Redaction & truncation: applied to data payloads
    """

    # Aspect level mapping
    _LEVELS = {  # numeric for comparisons
        'off': 0,
        'minimal': 1,
        'basic': 1,
        'detail': 2,
        'trace': 3,
    }

    _DEFAULTS = {  # default levels when aspect unset and no global verbosity
        'settings': 'basic',
        'load': 'basic',
        'commands': 'basic',
        'macros': 'off',
        'queue': 'off',
        'cmd': 'minimal',
        'tui': 'off',
        'errors': 'basic',
    }

    def __init__(self, config=None) -> None:
        self._config = config
        self._active: bool = bool(self._get('active', False))
        self._format: str = (self._get('format', 'json') or 'json').strip().lower()
        if self._format not in ('json', 'text'):
            self._format = 'json'
        self._redact: bool = bool(self._get('redact', True))
        self._truncate: int = int(self._get('truncate_chars', 2000) or 2000)
        self._verbosity_base: Optional[str] = (self._get('verbosity', None) or None)
        if isinstance(self._verbosity_base, str):
            self._verbosity_base = self._verbosity_base.strip().lower()
        # Pre-parse per-aspect levels
        self._aspects: Dict[str, int] = {}
        for asp, default in self._DEFAULTS.items():
            raw = self._get(f'log_{asp}', None)
            if isinstance(raw, str) and raw.strip():
                level_name = raw.strip().lower()
            elif isinstance(self._verbosity_base, str):
                level_name = self._verbosity_base
            else:
                level_name = default
            self._aspects[asp] = self._LEVELS.get(level_name, self._LEVELS['off'])

        # File handling
        self._run_id = datetime.utcnow().strftime('%Y%m%d_%H%M%S')
        self._log_path = None
        if self._active:
            self._log_path = self._open_logfile()
        self._write = self._writer_json if self._format == 'json' else self._writer_text

    # Generic entry point
    def log(self, event: str, *, component: str, aspect: str, severity: str = 'info', data: Optional[dict] = None) -> None:
        if not self._should_log(aspect, 'basic'):
            return
        payload = self._prepare_payload(event, component, aspect, severity, data or {})
        self._write(payload)

    # Settings/events sugar
    def settings(self, effective: dict) -> None:
        if not self._should_log('settings', 'basic'): return
        self._write(self._prepare_payload('settings', 'core.session', 'settings', 'info', effective))

    def load_done(self, meta: dict) -> None:
        if not self._should_log('load', 'basic'): return
        self._write(self._prepare_payload('load_done', 'core.loader', 'load', 'info', meta))

    def load_warning(self, message: str, details: Optional[dict] = None) -> None:
        if not self._should_log('load', 'minimal'): return
        data = {'message': message, **(details or {})}
        self._write(self._prepare_payload('load_warning', 'core.loader', 'load', 'warning', data))

    def command(self, op: str, argument: str, outcome: str, detail: str = '') -> None:
        if not self._should_log('commands', 'basic'): return
        data = {'op': op, 'argument': argument, 'outcome': outcome}
        if detail and self._level_for('commands') >= self._LEVELS['detail']:
            data['detail'] = detail
        self._write(self._prepare_payload('command', 'core.interpreter', 'commands', 'info', data))

    def macro_step(self, name: str, command: str) -> None:
        if not self._should_log('macros', 'basic'): return
        self._write(self._prepare_payload('macro_step', 'core.interpreter', 'macros', 'info', {'name': name, 'command': command}))

    def queue_event(self, kind: str, details: dict) -> None:
        if not self._should_log('queue', 'basic'): return
        self._write(self._prepare_payload(kind, 'core.session', 'queue', 'info', details))

    def cmd_exec(self, cmd: str, queued: int = 0) -> None:
        if not self._should_log('cmd', 'minimal'): return
        data = {'cmd': cmd, 'queued': queued, 'cwd': os.getcwd()}
        self._write(self._prepare_payload('cmd_exec', 'core.runner', 'cmd', 'info', data))

    def cmd_result(self, cmd: str, exit_code: int) -> None:
        if not self._should_log('cmd', 'minimal'): return
        data = {'cmd': cmd, 'exit_code': exit_code}
        self._write(self._prepare_payload('cmd_result', 'core.runner', 'cmd', 'info', data))

    def tui_event(self, kind: str, details: dict, component: str = 'tui'):
        if not self._should_log('tui', 'basic'): return
        self._write(self._prepare_payload(kind, f'{component}', 'tui', 'info', details))

    def tui_detail(self, kind: str, details: dict, component: str = 'tui'):
        """TUI detail-level helper. Emits only when [LOG].log_tui >= detail."""
        if not self._should_log('tui', 'detail'): return
        self._write(self._prepare_payload(kind, f'{component}', 'tui', 'info', details))

    def error(self, where: str, exc: BaseException, *, stack: Optional[str] = None):
        if not self._should_log('errors', 'basic'): return
        s = stack or ''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        self._write(self._prepare_payload('error', where, 'errors', 'error', {'message': _safe_str(exc), 'stack': s}))

    # --- Internals ------------------------------------------------------
    def _get(self, key: str, fallback: Any = None) -> Any:
        if self._config is None:
            return fallback
        try:
            return self._config.get_option('LOG', key, fallback)
        except Exception:
            return fallback

    def _open_logfile(self) -> Optional[str]:
        try:
            # Determine application root (directory containing main.py; one level above utils/)
            app_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

            explicit = (self._get('file', '') or '').strip()
            per_run = bool(self._get('per_run', True))
            raw_dir = self._get('dir', 'logs') or 'logs'

            # Resolve directory: absolute stays; relative -> app_root/<dir>
            raw_dir = os.path.expanduser(str(raw_dir))
            log_dir = raw_dir if os.path.isabs(raw_dir) else os.path.join(app_root, raw_dir)
            os.makedirs(log_dir, exist_ok=True)

            # Resolve explicit file path when provided
            if explicit:
                explicit = os.path.expanduser(explicit)
                path = explicit if os.path.isabs(explicit) else os.path.join(log_dir, explicit)
            else:
                filename = f'pkgbrowse-{self._run_id}.log' if per_run else 'pkgbrowse.log'
                path = os.path.join(log_dir, filename)

            # Ensure parent dir exists for the file (in case explicit includes subfolders)
            os.makedirs(os.path.dirname(path) or log_dir, exist_ok=True)

            # Touch file
            with open(path, 'a', encoding='utf-8'):
                pass

            # Manage latest symlink optionally (keep inside resolved log_dir)
            if bool(self._get('symlink_latest', True)):
                try:
                    latest = os.path.join(log_dir, 'latest.log')
                    if os.path.islink(latest) or os.path.exists(latest):
                        os.remove(latest)
                    os.symlink(os.path.abspath(path), latest)
                except OSError:
                    pass
            return path
        except OSError:
            return None

    def _level_for(self, aspect: str) -> int:
        return self._aspects.get(aspect, 0)

    def _should_log(self, aspect: str, min_level_name: str) -> bool:
        if not self._active or not self._log_path:
            return False
        lvl = self._level_for(aspect)
        required = self._LEVELS.get(min_level_name, 1)
        return lvl >= required

    def _redact_and_truncate(self, data: Any) -> Any:
        raw = self._get('redact_keys', None)
        if isinstance(raw, str) and raw.strip():
            keys = [k.strip().lower() for k in raw.split(',') if k.strip()]
        else:
            keys = ['password', 'token', 'secret']

        def _walk(obj: Any) -> Any:
            # Truncate long strings
            if isinstance(obj, str):
                if self._truncate and len(obj) > self._truncate:
                    return obj[: self._truncate] + '…'
                return obj
            if isinstance(obj, dict):
                out = {}
                for k, v in obj.items():
                    kk = _safe_str(k)
                    if self._redact and kk.lower() in keys:
                        out[kk] = '***redacted***'
                    else:
                        out[kk] = _walk(v)
                return out
            if isinstance(obj, list):
                return [_walk(x) for x in obj]
            return obj

        return _walk(data)

    def _prepare_payload(self, event: str, component: str, aspect: str, severity: str, data: Dict[str, Any]) -> Dict[str, Any]:
        payload = {
            'ts': _now_iso(),
            'run_id': self._run_id,
            'event': event,
            'component': component,
            'aspect': aspect,
            'severity': severity,
            'data': self._redact_and_truncate(data or {}),
        }
        return payload

    def _append(self, line: str) -> None:
        try:
            with open(self._log_path, 'a', encoding='utf-8') as f:
                f.write(line + '\n')
        except OSError:
            pass

    def _writer_json(self, payload: Dict[str, Any]) -> None:
        try:
            line = json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError):
            # Fallback: stringify data
            safe = dict(payload)
            safe['data'] = _safe_str(payload.get('data'))
            line = json.dumps(safe, ensure_ascii=False)
        self._append(line)

    def _writer_text(self, payload: Dict[str, Any]) -> None:
        ts = payload.get('ts')
        comp = payload.get('component')
        asp = payload.get('aspect')
        ev = payload.get('event')
        data = payload.get('data') or {}
        # Flatten one line with key=val previews
        pairs = []
        for k, v in (data.items() if isinstance(data, dict) else []):
            vv = v
            if isinstance(vv, (dict, list)):
                try:
                    vv = json.dumps(vv, ensure_ascii=False)
                except (TypeError, ValueError):
                    vv = _safe_str(vv)
            pairs.append(f"{k}={vv}")
        line = f"[{ts}] {comp} {asp}:{ev} " + (' '.join(pairs))
        self._append(line)
