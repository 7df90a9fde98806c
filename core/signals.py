from __future__ import annotations

import threading
from typing import Optional, Tuple


class ResizeSignal:
    """Thread-safe resize flag raised by the terminal layer and consumed by the loop.

    - request(width, height) marks a resize pending; later requests overwrite
      the size of an unconsumed one.
    - consume() clears the flag and returns the pending size, or None.
    """

    def __init__(self) -> None:
        self._ev = threading.Event()
        self._size: Optional[Tuple[int, int]] = None
        self._lock = threading.Lock()

    def request(self, width: int, height: int) -> None:
        with self._lock:
            self._size = (int(width), int(height))
            self._ev.set()

    def pending(self) -> bool:
        return self._ev.is_set()

    def consume(self) -> Optional[Tuple[int, int]]:
        with self._lock:
            if not self._ev.is_set():
                return None
            self._ev.clear()
            size, self._size = self._size, None
            return size
