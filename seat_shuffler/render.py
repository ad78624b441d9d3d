from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

from .geometry import CellMetrics, Rect
from .layout import LayoutError, OccupancyGrid


@dataclass(eq=False)
class SeatCell:
    """
    One occupied grid position. Position never changes after rendering;
    assigned_number and the visual flags do.
    """

    row: int
    col: int
    assigned_number: int
    rect: Rect
    appear_delay: float = 0.0

    dragging: bool = False
    drag_over: bool = False
    swapped: bool = False

    occupied = True

    @property
    def classes(self) -> list[str]:
        out = ["seat"]
        if self.dragging:
            out.append("dragging")
        if self.drag_over:
            out.append("drag-over")
        if self.swapped:
            out.append("swapped")
        return out

    def to_dict(self) -> dict:
        return {
            "row": self.row,
            "col": self.col,
            "number": self.assigned_number,
            "occupied": True,
            "classes": self.classes,
            "appear_delay": self.appear_delay,
            "rect": self.rect.to_dict(),
        }


@dataclass(eq=False)
class Placeholder:
    row: int
    col: int
    rect: Rect

    occupied = False

    @property
    def classes(self) -> list[str]:
        return ["seat-placeholder"]

    def to_dict(self) -> dict:
        return {
            "row": self.row,
            "col": self.col,
            "number": None,
            "occupied": False,
            "classes": self.classes,
            "rect": self.rect.to_dict(),
        }


BoardItem = Union[SeatCell, Placeholder]


@dataclass
class Board:
    rows: int
    cols: int
    metrics: CellMetrics
    items: list[list[BoardItem]] = field(default_factory=list)

    @classmethod
    def from_grid(cls, grid: OccupancyGrid, metrics: CellMetrics, *, appear_stagger: float = 0.0) -> "Board":
        board = cls(rows=grid.rows, cols=grid.cols, metrics=metrics)
        index = 0
        for r in range(grid.rows):
            line: list[BoardItem] = []
            for c in range(grid.cols):
                value = grid.grid[r][c]
                rect = metrics.rect(r, c)
                if value is None:
                    line.append(Placeholder(r, c, rect))
                else:
                    line.append(SeatCell(r, c, value, rect, appear_delay=round(index * appear_stagger, 6)))
                    index += 1
            board.items.append(line)
        return board

    def at(self, row: int, col: int) -> BoardItem:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise LayoutError(f"cell out of bounds: row={row}, col={col}")
        return self.items[row][col]

    def item_at(self, x: float, y: float) -> Optional[BoardItem]:
        """Hit test a screen point; None when it falls outside every cell."""
        pos = self.metrics.locate(x, y, self.rows, self.cols)
        if pos is None:
            return None
        return self.items[pos[0]][pos[1]]

    def seats(self) -> Iterator[SeatCell]:
        for line in self.items:
            for item in line:
                if isinstance(item, SeatCell):
                    yield item

    def find(self, number: int) -> Optional[SeatCell]:
        for seat in self.seats():
            if seat.assigned_number == number:
                return seat
        return None

    def numbers(self) -> list[int]:
        return [s.assigned_number for s in self.seats()]

    def to_grid(self) -> OccupancyGrid:
        grid = OccupancyGrid(self.rows, self.cols)
        for seat in self.seats():
            grid.grid[seat.row][seat.col] = seat.assigned_number
        return grid

    def to_dict(self) -> dict:
        return {
            "rows": self.rows,
            "cols": self.cols,
            "cells": [item.to_dict() for line in self.items for item in line],
        }


def _cell(text: Optional[str], width: int) -> str:
    if not text:
        return ".".center(width)
    t = str(text)
    if len(t) > width:
        t = t[: max(0, width - 1)] + "…"
    return t.center(width)


def render_ascii(board: Board, *, cell_width: int = 6, title: str = "") -> str:
    cell_width = max(3, int(cell_width))
    body_width = board.cols * cell_width + max(0, board.cols - 1)
    gutter = " " * (cell_width + 2)

    lines = []
    if title:
        lines.append(title)
    lines.append(gutter + "[ podium ]".center(body_width))
    lines.append(gutter + " ".join(f"C{c + 1}".center(cell_width) for c in range(board.cols)))
    for r in range(board.rows):
        row_cells = " ".join(
            _cell(str(item.assigned_number) if isinstance(item, SeatCell) else None, cell_width)
            for item in board.items[r]
        )
        lines.append(f"R{r + 1}".ljust(cell_width + 2) + row_cells)
    return "\n".join(lines)
