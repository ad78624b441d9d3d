from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from shapely.geometry import Point, box


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def contains(self, x: float, y: float) -> bool:
        # Edges and the gutter between cells do not count as inside.
        return box(self.x, self.y, self.x + self.width, self.y + self.height).contains(Point(x, y))

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class CellMetrics:
    width: float
    height: float
    gap: float

    def rect(self, row: int, col: int) -> Rect:
        return Rect(
            x=col * (self.width + self.gap),
            y=row * (self.height + self.gap),
            width=self.width,
            height=self.height,
        )

    def locate(self, x: float, y: float, rows: int, cols: int) -> Optional[tuple[int, int]]:
        """Grid position whose rectangle contains (x, y), or None."""
        if x < 0 or y < 0:
            return None
        col = int(math.floor(x / (self.width + self.gap)))
        row = int(math.floor(y / (self.height + self.gap)))
        if not (0 <= row < rows and 0 <= col < cols):
            return None
        if not self.rect(row, col).contains(x, y):
            return None
        return row, col
