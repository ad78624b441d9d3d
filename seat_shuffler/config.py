from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from .layout import LayoutError


ENV_PREFIX = "SEAT_SHUFFLER_"


class Settings(BaseModel):
    # Form-layer limits; the algorithms themselves never check these.
    max_columns: int = Field(default=10, ge=1)
    max_depth: int = Field(default=10, ge=1)
    max_seats: int = Field(default=100, ge=1)

    default_columns: int = Field(default=6, ge=1)
    default_depth: int = Field(default=6, ge=1)

    swap_cue_seconds: float = Field(default=0.3, ge=0)
    appear_stagger_seconds: float = Field(default=0.03, ge=0)

    # Board geometry in screen units, used for touch hit testing.
    cell_width: float = Field(default=96.0, gt=0)
    cell_height: float = Field(default=72.0, gt=0)
    cell_gap: float = Field(default=12.0, ge=0)
    touch_proxy_size: float = Field(default=80.0, gt=0)

    # Live layouts kept by the HTTP service; least recently used go first.
    max_sessions: int = Field(default=50, ge=1)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build settings from SEAT_SHUFFLER_* environment variables, e.g.
    SEAT_SHUFFLER_SWAP_CUE_SECONDS=0.5. Unset variables keep their defaults.
    """
    env = os.environ if environ is None else environ
    raw = {}
    for name in Settings.model_fields:
        value = env.get(ENV_PREFIX + name.upper())
        if value is not None and value != "":
            raw[name] = value
    try:
        return Settings(**raw)
    except ValidationError as e:
        raise LayoutError(f"invalid settings: {e}") from e
