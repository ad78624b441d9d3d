from __future__ import annotations

import logging
import random
from typing import Optional

from .config import Settings
from .geometry import CellMetrics
from .gestures import DragEventAdapter, TouchEventAdapter
from .layout import LayoutError, SeatLayoutRequest, balance, build_rng, generate_grid
from .rearrange import ManualScheduler, RearrangementEngine, Scheduler, SwapResult
from .render import Board, BoardItem


LOG = logging.getLogger(__name__)


class SeatingSession:
    """
    One page-load worth of state: the current board plus the engine that
    rearranges it. Each generate() replaces the board wholesale.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        rng: Optional[random.Random] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.settings = settings
        self.rng = rng or build_rng()
        self.metrics = CellMetrics(settings.cell_width, settings.cell_height, settings.cell_gap)
        self.engine = RearrangementEngine(
            scheduler or ManualScheduler(),
            swap_cue_seconds=settings.swap_cue_seconds,
            proxy_size=settings.touch_proxy_size,
        )
        self.drag = DragEventAdapter(self.engine)
        self.touch = TouchEventAdapter(self.engine, self._hit_test)
        self.board: Optional[Board] = None
        self.request: Optional[SeatLayoutRequest] = None
        self.title = ""

    def _hit_test(self, x: float, y: float) -> Optional[BoardItem]:
        if self.board is None:
            return None
        return self.board.item_at(x, y)

    @property
    def heading(self) -> str:
        return f"{self.title} seating result".strip()

    def optimize(self, student_count: int, column_count: int) -> list[int]:
        if student_count < 1 or column_count < 1:
            raise LayoutError("student_count and column_count must be positive integers")
        return balance(student_count, column_count)

    def generate(self, request: SeatLayoutRequest, *, title: str = "") -> Board:
        request.check_limits(self.settings)
        # A live drag would point at cells that are about to be discarded.
        self.engine.cancel()

        grid = generate_grid(request, self.rng)
        self.board = Board.from_grid(grid, self.metrics, appear_stagger=self.settings.appear_stagger_seconds)
        self.request = request
        self.title = title.strip()
        LOG.info("generated %dx%d board %r", self.board.rows, self.board.cols, self.title)
        return self.board

    def require_board(self) -> Board:
        if self.board is None:
            raise LayoutError("no layout has been generated yet")
        return self.board

    def item(self, row: Optional[int], col: Optional[int]) -> Optional[BoardItem]:
        """Board item at (row, col); None for a position outside the grid."""
        board = self.require_board()
        if row is None and col is None:
            return None
        if row is None or col is None:
            raise LayoutError("row and col must be given together")
        return board.at(row, col)

    def swap_numbers(self, a: int, b: int) -> Optional[SwapResult]:
        """Drag the seat holding `a` onto the seat holding `b`."""
        board = self.require_board()
        source = board.find(a)
        target = board.find(b)
        if source is None or target is None:
            raise LayoutError(f"seat numbers {a} and {b} must both be on the board")
        self.drag.dragstart(source)
        self.drag.dragenter(target)
        result = self.drag.drop(target)
        self.drag.dragend()
        return result

    def roster(self) -> list[tuple[int, int, int]]:
        board = self.require_board()
        return [(s.row, s.col, s.assigned_number) for s in board.seats()]

    def snapshot(self) -> dict:
        board = self.require_board()
        request = self.request
        return {
            "title": self.title,
            "heading": self.heading,
            "student_count": request.student_count if request else 0,
            "column_count": request.column_count if request else 0,
            "depths": list(request.depths) if request else [],
            "board": board.to_dict(),
            "drag": self.engine.session.to_dict() if self.engine.session else None,
        }
