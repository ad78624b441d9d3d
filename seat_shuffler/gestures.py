from __future__ import annotations

from typing import Callable, Optional, Sequence

from .rearrange import DRAG, TOUCH, DragSession, RearrangementEngine, SwapResult
from .render import BoardItem


TouchPoint = tuple[float, float]
HitTest = Callable[[float, float], Optional[BoardItem]]


class DragEventAdapter:
    """
    Native drag events. The browser draws its own ghost image, so there is
    no proxy here. `item` is the cell the event fired on, or None when the
    pointer is outside the grid.
    """

    def __init__(self, engine: RearrangementEngine):
        self.engine = engine

    def _session(self) -> Optional[DragSession]:
        session = self.engine.session
        if session is None or session.modality != DRAG:
            return None
        return session

    def dragstart(self, item: Optional[BoardItem]) -> Optional[DragSession]:
        return self.engine.begin(item, modality=DRAG)

    def dragenter(self, item: Optional[BoardItem]) -> None:
        if self._session() is not None:
            self.engine.update_target(item)

    def dragover(self, item: Optional[BoardItem]) -> None:
        self.dragenter(item)

    def dragleave(self, item: Optional[BoardItem]) -> None:
        session = self._session()
        if session is not None and item is not None and session.target is item:
            self.engine.update_target(None)

    def drop(self, item: Optional[BoardItem]) -> Optional[SwapResult]:
        if self._session() is None:
            return None
        self.engine.update_target(item)
        return self.engine.end(committed=True)

    def dragend(self) -> None:
        # Fires after drop too; by then the session is already closed.
        if self._session() is not None:
            self.engine.end(committed=False)


class TouchEventAdapter:
    """
    Touch events. Only the first touch point is tracked. The target is
    whatever the board reports under the finger.
    """

    def __init__(self, engine: RearrangementEngine, hit_test: HitTest):
        self.engine = engine
        self.hit_test = hit_test

    def _session(self) -> Optional[DragSession]:
        session = self.engine.session
        if session is None or session.modality != TOUCH:
            return None
        return session

    def touchstart(self, item: Optional[BoardItem], touches: Sequence[TouchPoint]) -> Optional[DragSession]:
        if not touches:
            return None
        session = self.engine.begin(item, modality=TOUCH)
        if session is not None and session.proxy is not None:
            x, y = touches[0]
            session.proxy.follow(x, y)
        return session

    def touchmove(self, touches: Sequence[TouchPoint]) -> None:
        session = self._session()
        if session is None or not touches:
            return
        x, y = touches[0]
        if session.proxy is not None:
            session.proxy.follow(x, y)
        self.engine.update_target(self.hit_test(x, y))

    def touchend(self) -> Optional[SwapResult]:
        if self._session() is None:
            return None
        return self.engine.end(committed=True)

    def touchcancel(self) -> None:
        if self._session() is not None:
            self.engine.end(committed=False)
