"""Pydantic schemas for body positions, motion and chart placements."""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class CelestialBody(str, Enum):
    """Closed set of bodies and chart points the core understands."""

    SUN = "sun"
    MOON = "moon"
    MERCURY = "mercury"
    VENUS = "venus"
    MARS = "mars"
    JUPITER = "jupiter"
    SATURN = "saturn"
    URANUS = "uranus"
    NEPTUNE = "neptune"
    PLUTO = "pluto"
    NORTH_NODE = "north_node"
    SOUTH_NODE = "south_node"
    CHIRON = "chiron"
    LILITH = "lilith"
    ASCENDANT = "ascendant"
    MIDHEAVEN = "midheaven"


class AngularPosition(BaseModel):
    """A body's ecliptic longitude at one instant.

    Accepts the provider shape ``{bodyId, longitudeDegrees, sampledAt}``
    as well as field names.
    """

    body: CelestialBody = Field(alias="bodyId")
    longitude: float = Field(alias="longitudeDegrees")
    sampled_at: datetime = Field(alias="sampledAt")

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("longitude")
    @classmethod
    def _normalize_longitude(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError(f"longitude must be finite, got {value!r}")
        value = value % 360.0
        # -1e-14 % 360.0 == 360.0 in floating point
        return 0.0 if value >= 360.0 else value


class MotionState(BaseModel):
    """Apparent direction of a body between two samples."""

    is_retrograde: bool
    forward_motion: float = Field(ge=0.0, lt=360.0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_flag(self) -> MotionState:
        if self.is_retrograde != (self.forward_motion > 180.0):
            raise ValueError("is_retrograde must equal forward_motion > 180")
        return self


class StationEvent(BaseModel):
    """A body changing apparent direction between consecutive days."""

    type: str  # 'station_retrograde' or 'station_direct'
    body: CelestialBody
    sign: str
    longitude: float

    model_config = {"frozen": True}


class Placement(BaseModel):
    """Birth-chart placement record as persisted and transmitted.

    Dump with ``by_alias=True`` for the wire shape (``eclipticLongitude``).
    """

    body: CelestialBody
    sign: str
    degree: int = Field(ge=0, lt=30)
    minute: int = Field(ge=0, lt=60)
    ecliptic_longitude: float = Field(ge=0.0, lt=360.0, alias="eclipticLongitude")
    retrograde: bool
    house: int | None = Field(default=None, ge=1, le=12)

    model_config = {"frozen": True, "populate_by_name": True}
