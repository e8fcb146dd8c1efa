"""
Request/response models for the quote API.

Field names follow the camelCase boundary used by the checkout flow.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..engine import Frequency, PropertyCategory


class QuoteRequestBody(BaseModel):
    """Request model for pricing a quote."""
    model_config = ConfigDict(extra="forbid")

    propertyCategory: PropertyCategory
    frequency: Frequency
    commercialSubtype: Optional[str] = None
    unitCount: Optional[int] = Field(default=None, ge=0)
    hoaUnitCount: Optional[int] = Field(default=None, ge=0)
    hasPadCleaning: bool = False
    specialRequirements: Optional[str] = None


class BreakdownResponse(BaseModel):
    unitCleaning: float
    padCleaning: float
    frequencyMultiplier: float
    total: float


class QuoteResponse(BaseModel):
    """Response model for a priced quote."""
    propertyCategory: str
    frequency: str
    basePrice: float
    calculatedPrice: float
    finalPrice: float
    lowEstimate: int
    highEstimate: int
    minimumFloorApplied: bool
    requiresManualReview: bool
    reviewReasons: list[str]
    floorReasons: list[str]
    breakdown: BreakdownResponse
    checkoutRoute: str


class RateTablesResponse(BaseModel):
    """Response model for the active rate tables."""
    frequency_multipliers: dict[str, float]
    base_prices: dict[str, float]
    unit_surcharges: dict[str, float]
    minimum_floors: dict[str, dict[str, float]]
    pad_addon: float
    pad_floor: float
    review_price_threshold: float
    review_unit_threshold: int
    range_low_factor: float
    range_high_factor: float
    residential_range: list[float]
    source: str
