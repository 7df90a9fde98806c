from __future__ import annotations

from typing import Any, List, Optional, Tuple

from base_classes import Renderer


class NullRenderer(Renderer):
    """A non-drawing renderer for headless runs.

    - Does not touch the terminal; stores what it was asked to draw.
    - The last presented view stays available for inspection.
    """

    def __init__(self) -> None:
        self.views: List[Any] = []
        self.size: Optional[Tuple[int, int]] = None
        self.clears = 0

    def clear(self) -> None:
        self.clears += 1

    def reposition(self, width: int, height: int) -> None:
        self.size = (width, height)

    def present(self, view: Any) -> None:
        self.views.append(view)

    @property
    def last(self) -> Any:
        return self.views[-1] if self.views else None
