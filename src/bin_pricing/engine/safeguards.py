"""
No-lowball safeguards applied after a quote has been priced.

- Minimum floors keep commercial quotes from going out underpriced
- Manual review rules route complex jobs to a person
- Price range gives the customer a low/high estimate band
"""
import math
from dataclasses import dataclass
from typing import Optional

from .models import CommercialRequest, Frequency, HOARequest, QuoteRequest, ResidentialRequest
from .rate_tables import RateTables


def format_money(amount: float) -> str:
    """Format a currency amount, dropping cents for whole dollars."""
    if float(amount).is_integer():
        return f"${int(amount)}"
    return f"${amount:.2f}"


@dataclass(frozen=True)
class FloorDecision:
    """Outcome of the minimum floor step."""
    floor: float
    final_price: float
    applied: bool
    reasons: tuple[str, ...]


def binding_floor(request: QuoteRequest, rates: RateTables) -> float:
    """
    The floor a request is held to.

    Only commercial requests have one. With pad cleaning the pad floor
    competes with the category/frequency floor and the larger wins.
    """
    if not isinstance(request, CommercialRequest):
        return 0.0
    floor = rates.commercial_floor(request.is_restaurant, request.frequency)
    if request.has_pad_cleaning:
        floor = max(floor, rates.pad_floor)
    return floor


def enforce_minimum_floor(request: QuoteRequest, calculated: float, rates: RateTables) -> FloorDecision:
    """Raise the calculated price to the binding floor when it falls short."""
    floor = binding_floor(request, rates)
    if floor <= 0:
        return FloorDecision(floor=0.0, final_price=calculated, applied=False, reasons=())

    reasons = []
    pad_binds = request.has_pad_cleaning and rates.pad_floor >= rates.commercial_floor(
        request.is_restaurant, request.frequency
    )
    if pad_binds and calculated < rates.pad_floor:
        reasons.append(
            f"Dumpster pad cleaning requires minimum {format_money(rates.pad_floor)}/month"
        )

    if calculated < floor:
        label = "restaurant" if request.is_restaurant else "commercial"
        reasons.append(
            f"Price adjusted to meet minimum {label} {request.frequency.value.lower()} "
            f"threshold of {format_money(floor)}/month"
        )
        return FloorDecision(floor=floor, final_price=floor, applied=True, reasons=tuple(reasons))

    return FloorDecision(floor=floor, final_price=calculated, applied=False, reasons=tuple(reasons))


def _requested_unit_count(request: QuoteRequest) -> Optional[int]:
    # The raw count the customer asked for, before any defaulting
    if isinstance(request, CommercialRequest):
        return request.dumpster_count
    if isinstance(request, HOARequest):
        return request.bin_count
    return None


def review_reasons(request: QuoteRequest, final_price: float, rates: RateTables) -> list[str]:
    """
    Evaluate every manual review rule.

    Rules are independent; each one that holds adds its reason, in this order:
    price threshold, dumpster count, weekly restaurant, weekly pad, special
    requirements.
    """
    reasons = []

    if final_price > rates.review_price_threshold:
        reasons.append(
            f"Total monthly price exceeds {format_money(rates.review_price_threshold)}"
        )

    count = _requested_unit_count(request)
    if count and count >= rates.review_unit_threshold:
        reasons.append(f"Dumpster count ({count}) requires custom scheduling")

    if isinstance(request, CommercialRequest):
        if request.is_restaurant and request.frequency == Frequency.WEEKLY:
            reasons.append("Weekly restaurant service requires custom review")
        if request.has_pad_cleaning and request.frequency == Frequency.WEEKLY:
            reasons.append("Weekly dumpster pad cleaning requires custom scheduling")

    if request.has_special_requirements:
        reasons.append("Special requirements need custom review")

    return reasons


def price_range(request: QuoteRequest, final_price: float, floor: float, rates: RateTables) -> tuple[int, int]:
    """
    Derive the low/high estimate band around the final price.

    Residential is clamped into its known band; commercial never estimates
    below the floor it was held to. The result is always ordered low <= high.
    """
    # round first so float noise (e.g. 100 * 1.15) does not push ceil/floor over
    low = math.floor(round(final_price * rates.range_low_factor, 6))
    high = math.ceil(round(final_price * rates.range_high_factor, 6))

    if isinstance(request, ResidentialRequest):
        band_low, band_high = rates.residential_range
        low = max(low, math.floor(band_low))
        high = min(high, math.ceil(band_high))
    elif isinstance(request, CommercialRequest):
        low = max(low, math.floor(floor))

    if low > high:
        low, high = high, low
    return low, high
