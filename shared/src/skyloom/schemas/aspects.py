"""Pydantic schemas for aspects and synastry comparisons."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from skyloom.schemas.positions import CelestialBody
from skyloom.schemas.transits import TransitSpan


class AspectType(str, Enum):
    """Major aspects, declared in canonical tie-break order."""

    CONJUNCTION = "conjunction"
    OPPOSITION = "opposition"
    TRINE = "trine"
    SQUARE = "square"
    SEXTILE = "sextile"


class AspectNature(str, Enum):
    HARMONIOUS = "harmonious"
    CHALLENGING = "challenging"
    INTENSE = "intense"


class AspectRelationship(BaseModel):
    """A named aspect formed by two longitudes."""

    aspect_type: AspectType
    separation: float = Field(ge=0.0, le=180.0)
    orb_used: float = Field(ge=0.0)
    residual: float = Field(ge=0.0)
    nature: AspectNature

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_within_orb(self) -> AspectRelationship:
        if self.residual > self.orb_used:
            raise ValueError(
                f"residual {self.residual} exceeds orb {self.orb_used} for {self.aspect_type.value}"
            )
        return self

    @property
    def is_harmonious(self) -> bool:
        return self.nature == AspectNature.HARMONIOUS


class ChartAspect(BaseModel):
    """An aspect between two bodies of the same chart."""

    body1: CelestialBody
    body2: CelestialBody
    relationship: AspectRelationship
    applying: bool = False

    model_config = {"frozen": True}


class TransitAspect(BaseModel):
    """A transiting body aspecting a natal placement."""

    transit_body: CelestialBody
    natal_body: CelestialBody
    relationship: AspectRelationship
    applying: bool
    span: TransitSpan

    model_config = {"frozen": True}


class SynastryAspect(BaseModel):
    """An aspect between a body of person 1 and a body of person 2."""

    person1_body: CelestialBody
    person2_body: CelestialBody
    person1_sign: str
    person2_sign: str
    relationship: AspectRelationship
    weight: float = Field(ge=0.0, le=100.0)

    model_config = {"frozen": True}


class BalanceCount(BaseModel):
    person1: int = 0
    person2: int = 0
    combined: int = 0

    model_config = {"frozen": True}


class ElementBalance(BaseModel):
    """Element distribution across two charts."""

    fire: BalanceCount = Field(default_factory=BalanceCount)
    earth: BalanceCount = Field(default_factory=BalanceCount)
    air: BalanceCount = Field(default_factory=BalanceCount)
    water: BalanceCount = Field(default_factory=BalanceCount)
    compatibility: str = "similar"  # 'similar', 'complementary', 'challenging'

    model_config = {"frozen": True}


class ModalityBalance(BaseModel):
    """Modality distribution across two charts."""

    cardinal: BalanceCount = Field(default_factory=BalanceCount)
    fixed: BalanceCount = Field(default_factory=BalanceCount)
    mutable: BalanceCount = Field(default_factory=BalanceCount)
    compatibility: str = "similar"

    model_config = {"frozen": True}


class SynastryReport(BaseModel):
    """Complete comparison of two charts."""

    aspects: list[SynastryAspect] = Field(default_factory=list)
    element_balance: ElementBalance
    modality_balance: ModalityBalance
    score: int = Field(ge=0, le=100)

    model_config = {"frozen": True}
