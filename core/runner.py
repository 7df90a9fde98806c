from __future__ import annotations

import os
import subprocess
from typing import Callable, Optional

from base_classes import ProcessRunner


class ShellRunner(ProcessRunner):
    """Runs a command through an interactive shell in the foreground terminal.

    The call blocks until the command exits, then waits for return so the
    user can read the output before the browser takes the terminal back.
    """

    def __init__(self, shell: Optional[str] = None, pause: bool = True,
                 prompt: Callable[[str], str] = input) -> None:
        self.shell = shell or os.environ.get('SHELL') or '/bin/bash'
        self.pause = pause
        self._prompt = prompt

    def run(self, command: str) -> int:
        try:
            result = subprocess.run([self.shell, '-ic', command], cwd=os.getcwd())
            exit_code = result.returncode
        except FileNotFoundError:
            print(f"Shell not found: {self.shell}")
            exit_code = 127
        except PermissionError:
            print(f"Permission denied: {self.shell}")
            exit_code = 126

        if self.pause:
            try:
                self._prompt("press return to continue...")
            except EOFError:
                pass
        return exit_code
