"""
api/models.py
Pydantic request/response models.

The manual-quote endpoint accepts either or both of:
  1. Free text:   freeText only ("10kg from China to Lagos by air")
  2. Structured:  mode / origin / destination / weightKg / ...
Structured fields always win over anything extracted from freeText.
"""
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from query_processor.models import Dimensions, LatLng, QuoteRequest


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Coordinates(_CamelModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class DimensionsCm(_CamelModel):
    length: float = Field(..., ge=0.1, description="Length in cm")
    width:  float = Field(..., ge=0.1, description="Width in cm")
    height: float = Field(..., ge=0.1, description="Height in cm")


class ManualQuoteRequest(_CamelModel):
    free_text:      Optional[str] = Field(
        default=None,
        alias="freeText",
        description="Customer message, e.g. '10kg from China to Lagos by air'.",
    )
    mode:           Optional[Literal["parcel", "air", "ocean", "ground"]] = None
    origin:         Optional[str]           = None
    destination:    Optional[str]           = None
    weight_kg:      Optional[float]         = Field(default=None, alias="weightKg", ge=0.001)
    dimensions_cm:  Optional[DimensionsCm]  = Field(default=None, alias="dimensionsCm")
    volume_cbm:     Optional[float]         = Field(default=None, alias="volumeCbm", ge=0)
    container_type: Optional[Literal["20ft", "40ft", "40hc"]] = Field(default=None, alias="containerType")
    distance_km:    Optional[float]         = Field(default=None, alias="distanceKm", ge=0)
    start:          Optional[Coordinates]   = None
    end:            Optional[Coordinates]   = None
    is_express:     Optional[bool]          = Field(default=None, alias="isExpress")
    demurrage_days: Optional[float]         = Field(default=None, alias="detentionDemurrageDays", ge=0)

    def to_quote_request(self) -> QuoteRequest:
        dims = self.dimensions_cm
        return QuoteRequest(
            free_text      =self.free_text,
            mode           =self.mode,
            origin         =self.origin,
            destination    =self.destination,
            weight_kg      =self.weight_kg,
            dimensions_cm  =Dimensions(dims.length, dims.width, dims.height) if dims else None,
            volume_cbm     =self.volume_cbm,
            container_type =self.container_type,
            demurrage_days =self.demurrage_days,
            distance_km    =self.distance_km,
            start          =LatLng(self.start.lat, self.start.lng) if self.start else None,
            end            =LatLng(self.end.lat, self.end.lng) if self.end else None,
            is_express     =self.is_express,
        )


class MoneyOut(BaseModel):
    amount:   float
    currency: str


class BreakdownOut(BaseModel):
    base:        MoneyOut
    surcharges:  MoneyOut
    margin:      MoneyOut
    total:       MoneyOut
    assumptions: list[str]


class QuoteOut(_CamelModel):
    provider:             str
    mode:                 str
    origin:               Optional[str]   = None
    destination:          Optional[str]   = None
    chargeable_weight_kg: Optional[float] = Field(default=None, alias="chargeableWeightKg")
    breakdown:            BreakdownOut


class ManualQuoteResponse(_CamelModel):
    status:         Literal["ok", "needs_clarification", "error"]
    message:        str
    quote:          Optional[QuoteOut] = None
    missing_fields: Optional[list[str]] = Field(default=None, alias="missingFields")
    summary:        Optional[str] = Field(default=None, description="Plain-language reply for chat clients")


class HealthResponse(BaseModel):
    status:    str
    version:   str
    extractor: str
    providers: dict[str, Any] = {}


class ErrorResponse(BaseModel):
    success: bool = False
    error:   str
