from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .render import BoardItem, SeatCell


LOG = logging.getLogger(__name__)

DRAG = "drag"
TOUCH = "touch"


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> None: ...


class LoopScheduler:
    """Runs callbacks on the asyncio loop that is handling events."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_later(delay, callback)


class ManualScheduler:
    """Virtual clock; callbacks run only when advance() passes their deadline."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, Callable[[], None]]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        heapq.heappush(self._queue, (self.now + delay, next(self._seq), callback))

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, callback = heapq.heappop(self._queue)
            self.now = when
            callback()
        self.now = target

    @property
    def pending(self) -> int:
        return len(self._queue)


@dataclass
class TouchProxy:
    """Floating copy of the source cell that follows the finger."""

    number: int
    size: float
    x: float = 0.0
    y: float = 0.0

    def follow(self, x: float, y: float) -> None:
        self.x = x - self.size / 2
        self.y = y - self.size / 2

    def to_dict(self) -> dict:
        return {"number": self.number, "x": self.x, "y": self.y, "size": self.size}


@dataclass(eq=False)
class DragSession:
    source: SeatCell
    modality: str
    target: Optional[SeatCell] = None
    proxy: Optional[TouchProxy] = None
    suppress_scroll: bool = False

    def to_dict(self) -> dict:
        return {
            "modality": self.modality,
            "source": {"row": self.source.row, "col": self.source.col},
            "target": None if self.target is None else {"row": self.target.row, "col": self.target.col},
            "proxy": None if self.proxy is None else self.proxy.to_dict(),
            "suppress_scroll": self.suppress_scroll,
        }


@dataclass(frozen=True)
class SwapResult:
    source: SeatCell
    target: SeatCell

    @property
    def numbers(self) -> tuple[int, int]:
        return self.source.assigned_number, self.target.assigned_number


def _clear_swapped(*cells: SeatCell) -> None:
    for cell in cells:
        cell.swapped = False


class RearrangementEngine:
    """
    Drag lifecycle shared by every input modality:

        begin(source) -> update_target(candidate | None)* -> end(committed)

    Only one session lives at a time; begin() while dragging is ignored.
    Bad targets and cancelled gestures never raise, they just end the
    session without touching any number.
    """

    def __init__(self, scheduler: Scheduler, *, swap_cue_seconds: float = 0.3, proxy_size: float = 80.0):
        self.scheduler = scheduler
        self.swap_cue_seconds = swap_cue_seconds
        self.proxy_size = proxy_size
        self.session: Optional[DragSession] = None

    @property
    def active(self) -> bool:
        return self.session is not None

    def begin(self, source: Optional[BoardItem], *, modality: str = DRAG) -> Optional[DragSession]:
        if self.session is not None:
            LOG.debug("ignoring %s start: a drag is already in progress", modality)
            return None
        if not isinstance(source, SeatCell):
            return None

        source.dragging = True
        session = DragSession(source=source, modality=modality)
        if modality == TOUCH:
            session.proxy = TouchProxy(number=source.assigned_number, size=self.proxy_size)
            session.suppress_scroll = True
        self.session = session
        LOG.debug("drag started at R%dC%d (%s)", source.row, source.col, modality)
        return session

    def update_target(self, candidate: Optional[BoardItem]) -> Optional[SeatCell]:
        session = self.session
        if session is None:
            return None

        new_target = candidate if isinstance(candidate, SeatCell) and candidate is not session.source else None
        if session.target is not None and session.target is not new_target:
            session.target.drag_over = False
        if new_target is not None:
            new_target.drag_over = True
        session.target = new_target
        return new_target

    def end(self, committed: bool) -> Optional[SwapResult]:
        session = self.session
        if session is None:
            return None
        self.session = None

        source, target = session.source, session.target
        source.dragging = False
        if target is not None:
            target.drag_over = False

        if not committed or target is None:
            LOG.debug("drag from R%dC%d ended without a swap", source.row, source.col)
            return None

        source.assigned_number, target.assigned_number = target.assigned_number, source.assigned_number
        source.swapped = True
        target.swapped = True
        self.scheduler.call_later(self.swap_cue_seconds, lambda: _clear_swapped(source, target))
        LOG.debug(
            "swapped R%dC%d <-> R%dC%d (now %d, %d)",
            source.row,
            source.col,
            target.row,
            target.col,
            source.assigned_number,
            target.assigned_number,
        )
        return SwapResult(source, target)

    def cancel(self) -> None:
        self.end(committed=False)
