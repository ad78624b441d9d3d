from __future__ import annotations

from typing import Annotated, Literal, Optional

from pydantic import BaseModel, Field


class BalanceRequest(BaseModel):
    student_count: int = Field(ge=1)
    column_count: int = Field(ge=1)


class BalanceResponse(BaseModel):
    depths: list[int]


class LayoutCreate(BaseModel):
    # Either student_count (+ column_count) for a balanced layout, or depths
    # typed in per column.
    student_count: Optional[int] = Field(default=None, ge=1)
    column_count: Optional[int] = Field(default=None, ge=1)
    depths: Optional[list[Annotated[int, Field(ge=1)]]] = None
    seed: Optional[int] = None
    title: str = ""


class TouchPoint(BaseModel):
    x: float
    y: float


class DragEvent(BaseModel):
    type: Literal["dragstart", "dragenter", "dragover", "dragleave", "drop", "dragend"]
    # Cell the event fired on; omit both for "outside the grid".
    row: Optional[int] = None
    col: Optional[int] = None


class TouchEvent(BaseModel):
    type: Literal["touchstart", "touchmove", "touchend", "touchcancel"]
    row: Optional[int] = None
    col: Optional[int] = None
    touches: list[TouchPoint] = Field(default_factory=list)


class Snapshot(BaseModel):
    id: str
    title: str
    heading: str
    student_count: int
    column_count: int
    depths: list[int]
    board: dict
    drag: Optional[dict] = None


class GestureResult(BaseModel):
    snapshot: Snapshot
    # [source_number, target_number] after the swap, when one happened.
    swapped: Optional[list[int]] = None
