"""Mutable dashboard state owned by the consumer loop."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..snapshot import Snapshot
from ..ui_theme import UITheme


@dataclass
class DashboardState:
    root: Path
    snapshot: Snapshot
    theme: UITheme
    start: int = 0
    body_line_count: int = 0
    body_rows: int = 1
    columns: int = 80
    lines: int = 24
    dirty: bool = True
    clear_before_render: bool = False
    status_message: str = ""
    status_message_until: float = 0.0

    @property
    def max_start(self) -> int:
        return max(0, self.body_line_count - self.body_rows)

    def clamp_scroll(self) -> bool:
        """Pull ``start`` back inside the content; return whether it moved."""
        clamped = max(0, min(self.start, self.max_start))
        if clamped == self.start:
            return False
        self.start = clamped
        return True

    def replace_snapshot(self, snapshot: Snapshot) -> bool:
        """Swap in ``snapshot`` wholesale; return whether anything visible changed."""
        if snapshot == self.snapshot:
            return False
        self.snapshot = snapshot
        self.dirty = True
        return True
