"""
Quote Engine - turns a bin/dumpster cleaning request into a priced quote.

Pipeline, in order:
1. Base lookup from the rate tables (category, restaurant subtype)
2. Pad cleaning add-on (commercial only, before frequency)
3. Frequency scaling of the whole subtotal
4. Minimum floor enforcement (commercial only)
5. Manual review evaluation
6. Low/high price range

The engine holds no per-call state. Every call reads one RateTables
reference and returns a new, frozen QuoteResult.
"""
import logging
from typing import Optional

from .models import (
    CommercialRequest,
    HOARequest,
    PricingBreakdown,
    QuoteRequest,
    QuoteResult,
    ResidentialRequest,
    TraceStep,
)
from .rate_tables import (
    COMMERCIAL,
    DEFAULT_RATE_TABLES,
    HOA_BIN,
    HOA_UNIT,
    RESIDENTIAL,
    RESTAURANT,
    RateTables,
)
from .safeguards import enforce_minimum_floor, format_money, price_range, review_reasons

logger = logging.getLogger(__name__)


def _money(amount: float) -> float:
    return round(amount, 2)


def _base_cost(request: QuoteRequest, rates: RateTables) -> tuple[float, float, list[TraceStep]]:
    """
    Look up the unscaled unit-cleaning cost.

    Returns (base_price, unit_cleaning, trace). Missing or zero counts price
    as a single bin/dumpster.
    """
    trace = []

    if isinstance(request, ResidentialRequest):
        bins = request.bin_count or 1
        base_price = rates.base_prices[RESIDENTIAL]
        unit_cleaning = base_price + rates.unit_surcharges[RESIDENTIAL] * max(0, bins - 1)
        trace.append(TraceStep("Base Lookup", f"Residential, {bins} bin(s)", format_money(unit_cleaning)))

    elif isinstance(request, CommercialRequest):
        key = RESTAURANT if request.is_restaurant else COMMERCIAL
        dumpsters = request.dumpster_count or 1
        base_price = rates.base_prices[key]
        unit_cleaning = base_price + rates.unit_surcharges[key] * max(0, dumpsters - 1)
        trace.append(TraceStep(
            "Base Lookup",
            f"{'Restaurant' if request.is_restaurant else 'Commercial'}, {dumpsters} dumpster(s)",
            format_money(unit_cleaning),
        ))

    elif isinstance(request, HOARequest):
        units = request.housing_units or 1
        bins = request.bin_count or 1
        base_price = units * rates.unit_surcharges[HOA_UNIT]
        unit_cleaning = base_price + bins * rates.unit_surcharges[HOA_BIN]
        trace.append(TraceStep("Base Lookup", f"HOA, {units} unit(s) and {bins} bin(s)", format_money(unit_cleaning)))

    else:
        raise TypeError(f"Unsupported request type: {type(request).__name__}")

    return float(base_price), float(unit_cleaning), trace


def calculate_quote(request: QuoteRequest, rates: Optional[RateTables] = None) -> QuoteResult:
    """
    Price a request with all safeguards applied.

    Args:
        request: One of ResidentialRequest, CommercialRequest, HOARequest
        rates: Rate tables to price with, defaults to the built-in tables

    Returns:
        Frozen QuoteResult with price, range, breakdown and review flags
    """
    rates = rates or DEFAULT_RATE_TABLES

    base_price, unit_cleaning, trace = _base_cost(request, rates)

    pad_cleaning = 0.0
    if isinstance(request, CommercialRequest) and request.has_pad_cleaning:
        pad_cleaning = rates.pad_addon
        trace.append(TraceStep("Pad Add-on", "Dumpster pad cleaning", format_money(pad_cleaning)))

    multiplier = rates.multiplier(request.frequency)
    calculated = _money((unit_cleaning + pad_cleaning) * multiplier)
    trace.append(TraceStep("Frequency", f"{request.frequency.value} × {multiplier}", format_money(calculated)))

    decision = enforce_minimum_floor(request, calculated, rates)
    final_price = decision.final_price
    if decision.applied:
        trace.append(TraceStep("Minimum Floor", "Raised to floor", format_money(final_price)))
        logger.debug("Floor applied for %s %s: %s -> %s",
                     request.category.value, request.frequency.value, calculated, final_price)
    elif decision.floor:
        trace.append(TraceStep("Minimum Floor", f"Floor {format_money(decision.floor)} already met"))

    reasons = review_reasons(request, final_price, rates)
    if reasons:
        trace.append(TraceStep("Manual Review", f"{len(reasons)} rule(s) triggered"))
        logger.debug("Quote flagged for review: %s", "; ".join(reasons))

    low, high = price_range(request, final_price, decision.floor, rates)
    trace.append(TraceStep("Price Range", "Estimate band", f"{format_money(low)}–{format_money(high)}"))

    return QuoteResult(
        property_category=request.category,
        frequency=request.frequency,
        base_price=base_price,
        calculated_price=calculated,
        final_price=final_price,
        low_estimate=low,
        high_estimate=high,
        breakdown=PricingBreakdown(
            unit_cleaning=_money(unit_cleaning * multiplier),
            pad_cleaning=_money(pad_cleaning * multiplier),
            frequency_multiplier=multiplier,
            total=final_price,
        ),
        minimum_floor_applied=decision.applied,
        requires_manual_review=bool(reasons),
        review_reasons=tuple(reasons),
        floor_reasons=decision.reasons,
        trace=tuple(trace),
    )


class QuoteEngine:
    """
    Quote engine bound to one set of rate tables.

    reload_rates swaps the whole table reference, so a call that is already
    running keeps pricing with the tables it started with.
    """

    def __init__(self, rates: Optional[RateTables] = None):
        self.rates = rates or DEFAULT_RATE_TABLES

    def reload_rates(self, rates: RateTables):
        """Replace the rate tables used by future calls."""
        self.rates = rates
        logger.info("Rate tables swapped (source: %s)", rates.source)

    def calculate(self, request: QuoteRequest) -> QuoteResult:
        """Calculate a quote with the current rate tables."""
        return calculate_quote(request, self.rates)
