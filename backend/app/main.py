from __future__ import annotations

import csv
import io
import logging
import uuid
from collections import OrderedDict
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from seat_shuffler.config import Settings, load_settings
from seat_shuffler.layout import LayoutError, SeatLayoutRequest, build_request, build_rng
from seat_shuffler.rearrange import LoopScheduler, SwapResult
from seat_shuffler.render import BoardItem
from seat_shuffler.session import SeatingSession

from .schemas import (
    BalanceRequest,
    BalanceResponse,
    DragEvent,
    GestureResult,
    LayoutCreate,
    Snapshot,
    TouchEvent,
)


LOG = logging.getLogger(__name__)


class LayoutStore:
    """
    In-memory sessions for this process; nothing survives a restart. Holds
    at most settings.max_sessions, evicting the least recently used.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.sessions: OrderedDict[str, SeatingSession] = OrderedDict()

    def create(self, seed: Optional[int] = None) -> tuple[str, SeatingSession]:
        while len(self.sessions) >= self.settings.max_sessions:
            old_id, old = self.sessions.popitem(last=False)
            old.engine.cancel()
            LOG.info("evicted layout session %s", old_id)
        layout_id = uuid.uuid4().hex
        session = SeatingSession(self.settings, rng=build_rng(seed=seed), scheduler=LoopScheduler())
        self.sessions[layout_id] = session
        LOG.info("opened layout session %s", layout_id)
        return layout_id, session

    def get(self, layout_id: str) -> SeatingSession:
        session = self.sessions.get(layout_id)
        if session is None:
            raise HTTPException(status_code=404, detail="layout not found")
        self.sessions.move_to_end(layout_id)
        return session

    def delete(self, layout_id: str) -> None:
        session = self.get(layout_id)
        session.engine.cancel()
        del self.sessions[layout_id]


app = FastAPI(title="Seat Shuffler API", version="0.1.0")
app.state.store = LayoutStore(load_settings())

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _store(request: Request) -> LayoutStore:
    return request.app.state.store


def _snapshot(layout_id: str, session: SeatingSession) -> Snapshot:
    return Snapshot(id=layout_id, **session.snapshot())


def _build(payload: LayoutCreate, settings: Settings) -> SeatLayoutRequest:
    try:
        request = build_request(
            student_count=payload.student_count,
            column_count=payload.column_count,
            depths=payload.depths,
            default_columns=settings.default_columns,
            default_depth=settings.default_depth,
        )
        request.check_limits(settings)
        return request
    except LayoutError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _item(session: SeatingSession, row: Optional[int], col: Optional[int]) -> Optional[BoardItem]:
    try:
        return session.item(row, col)
    except LayoutError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _result(layout_id: str, session: SeatingSession, swap: Optional[SwapResult]) -> GestureResult:
    return GestureResult(
        snapshot=_snapshot(layout_id, session),
        swapped=list(swap.numbers) if swap is not None else None,
    )


@app.get("/health")
def health() -> dict:
    return {"ok": True}


@app.post("/balance", response_model=BalanceResponse)
def balance_columns(payload: BalanceRequest, store: LayoutStore = Depends(_store)) -> BalanceResponse:
    settings = store.settings
    if payload.column_count > settings.max_columns:
        raise HTTPException(status_code=400, detail=f"at most {settings.max_columns} columns are supported")
    if payload.student_count > settings.max_seats:
        raise HTTPException(status_code=400, detail=f"total seats must be between 1 and {settings.max_seats}")
    depths = SeatingSession(settings).optimize(payload.student_count, payload.column_count)
    return BalanceResponse(depths=depths)


@app.post("/layouts", response_model=Snapshot)
async def create_layout(payload: LayoutCreate, store: LayoutStore = Depends(_store)) -> Snapshot:
    request = _build(payload, store.settings)
    layout_id, session = store.create(seed=payload.seed)
    session.generate(request, title=payload.title)
    return _snapshot(layout_id, session)


@app.get("/layouts/{layout_id}", response_model=Snapshot)
async def get_layout(layout_id: str, store: LayoutStore = Depends(_store)) -> Snapshot:
    return _snapshot(layout_id, store.get(layout_id))


@app.put("/layouts/{layout_id}", response_model=Snapshot)
async def regenerate_layout(layout_id: str, payload: LayoutCreate, store: LayoutStore = Depends(_store)) -> Snapshot:
    session = store.get(layout_id)
    request = _build(payload, store.settings)
    if payload.seed is not None:
        session.rng = build_rng(seed=payload.seed)
    session.generate(request, title=payload.title)
    return _snapshot(layout_id, session)


@app.delete("/layouts/{layout_id}")
async def delete_layout(layout_id: str, store: LayoutStore = Depends(_store)) -> dict:
    store.delete(layout_id)
    return {"deleted": True}


@app.post("/layouts/{layout_id}/drag", response_model=GestureResult)
async def drag_event(layout_id: str, event: DragEvent, store: LayoutStore = Depends(_store)) -> GestureResult:
    session = store.get(layout_id)
    item = _item(session, event.row, event.col)
    swap: Optional[SwapResult] = None

    if event.type == "dragstart":
        session.drag.dragstart(item)
    elif event.type == "dragenter":
        session.drag.dragenter(item)
    elif event.type == "dragover":
        session.drag.dragover(item)
    elif event.type == "dragleave":
        session.drag.dragleave(item)
    elif event.type == "drop":
        swap = session.drag.drop(item)
    else:
        session.drag.dragend()
    return _result(layout_id, session, swap)


@app.post("/layouts/{layout_id}/touch", response_model=GestureResult)
async def touch_event(layout_id: str, event: TouchEvent, store: LayoutStore = Depends(_store)) -> GestureResult:
    session = store.get(layout_id)
    touches = [(t.x, t.y) for t in event.touches]
    swap: Optional[SwapResult] = None

    if event.type == "touchstart":
        session.touch.touchstart(_item(session, event.row, event.col), touches)
    elif event.type == "touchmove":
        session.touch.touchmove(touches)
    elif event.type == "touchend":
        swap = session.touch.touchend()
    else:
        session.touch.touchcancel()
    return _result(layout_id, session, swap)


@app.get("/layouts/{layout_id}/roster.csv")
async def export_roster_csv(layout_id: str, store: LayoutStore = Depends(_store)) -> Response:
    session = store.get(layout_id)

    out = io.StringIO()
    w = csv.writer(out)
    w.writerow(["title", "row", "col", "seat"])
    for row, col, number in session.roster():
        w.writerow([session.title, row + 1, col + 1, number])

    return Response(
        content=out.getvalue(),
        media_type="text/csv",
        headers={"content-disposition": f'attachment; filename="layout_{layout_id}_roster.csv"'},
    )
