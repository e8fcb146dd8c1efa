"""
Quote engine tests: base prices, surcharges, frequency scaling, floors,
review flags and estimate ranges for the built-in rate tables.
"""
import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from bin_pricing.engine import (
    CommercialRequest,
    Frequency,
    HOARequest,
    QuoteEngine,
    ResidentialRequest,
    build_request,
    calculate_quote,
)


@pytest.fixture(scope="module")
def engine():
    return QuoteEngine()


def office(count=1, frequency="Monthly", **kwargs):
    return CommercialRequest(frequency=frequency, dumpster_count=count,
                             commercial_subtype="Office Building", **kwargs)


def restaurant(count=1, frequency="Monthly", **kwargs):
    return CommercialRequest(frequency=frequency, dumpster_count=count,
                             commercial_subtype="Restaurant", **kwargs)


# ---------------------------------------------------------------------------
# Frequency multipliers
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("frequency, multiplier", [
    ("Monthly", 1.0),
    ("Bi-weekly", 1.8),
    ("Weekly", 3.2),
])
def test_frequency_multiplier_in_breakdown(engine, frequency, multiplier):
    for request in (office(frequency=frequency),
                    ResidentialRequest(frequency=frequency, bin_count=1),
                    HOARequest(frequency=frequency, housing_units=10, bin_count=1)):
        result = engine.calculate(request)
        assert result.breakdown.frequency_multiplier == multiplier


# ---------------------------------------------------------------------------
# Base pricing and additional units
# ---------------------------------------------------------------------------

def test_commercial_base_price(engine):
    result = engine.calculate(office())
    assert result.breakdown.unit_cleaning == 95
    assert result.base_price == 95


def test_restaurant_base_price(engine):
    result = engine.calculate(restaurant())
    assert result.breakdown.unit_cleaning == 120


def test_residential_base_price(engine):
    result = engine.calculate(ResidentialRequest(frequency="Monthly", bin_count=1))
    assert result.base_price == 55
    assert result.final_price == 55


@pytest.mark.parametrize("count, expected", [(2, 110), (3, 125), (6, 170)])
def test_commercial_additional_dumpsters(engine, count, expected):
    result = engine.calculate(office(count))
    assert result.breakdown.unit_cleaning == expected, f"{count} dumpsters should be ${expected}"


@pytest.mark.parametrize("count, expected", [(2, 140), (3, 160)])
def test_restaurant_additional_dumpsters(engine, count, expected):
    result = engine.calculate(restaurant(count))
    assert result.breakdown.unit_cleaning == expected


def test_residential_additional_bins(engine):
    result = engine.calculate(ResidentialRequest(frequency="Monthly", bin_count=3))
    assert result.final_price == 75  # $55 + 2 × $10


def test_hoa_priced_per_unit_and_bin(engine):
    result = engine.calculate(HOARequest(frequency="Monthly", housing_units=10, bin_count=2))
    assert result.base_price == 250
    assert result.final_price == 266  # 10 × $25 + 2 × $8
    assert result.minimum_floor_applied is False


def test_unrecognised_subtype_uses_commercial_table(engine):
    result = engine.calculate(CommercialRequest(frequency="Monthly", dumpster_count=2,
                                                commercial_subtype="restaurant"))
    assert result.final_price == 110


def test_zero_dumpsters_priced_as_one(engine):
    result = engine.calculate(office(0))
    assert result.final_price == 95
    assert result.requires_manual_review is False


def test_missing_counts_priced_as_one(engine):
    assert engine.calculate(CommercialRequest(frequency="Monthly")).final_price == 95
    assert engine.calculate(ResidentialRequest(frequency="Monthly")).final_price == 55
    assert engine.calculate(HOARequest(frequency="Monthly")).final_price == 33


# ---------------------------------------------------------------------------
# Pad cleaning
# ---------------------------------------------------------------------------

def test_pad_adds_flat_fee(engine):
    result = engine.calculate(office(has_pad_cleaning=True))
    assert result.breakdown.pad_cleaning == 75
    assert result.final_price == 170
    assert result.minimum_floor_applied is False
    assert result.floor_reasons == ()


def test_pad_fee_scales_with_frequency(engine):
    result = engine.calculate(office(frequency="Bi-weekly", has_pad_cleaning=True))
    assert result.breakdown.pad_cleaning == 135
    assert result.final_price == 306  # (95 + 75) × 1.8


@pytest.mark.parametrize("frequency", ["Monthly", "Bi-weekly", "Weekly"])
def test_pad_quotes_never_below_pad_floor(engine, frequency):
    for request in (office(frequency=frequency, has_pad_cleaning=True),
                    restaurant(frequency=frequency, has_pad_cleaning=True)):
        assert engine.calculate(request).final_price >= 150


def test_pad_ignored_outside_commercial():
    request = build_request("residential", "Monthly", unit_count=1, has_pad_cleaning=True)
    result = calculate_quote(request)
    assert result.breakdown.pad_cleaning == 0
    assert result.final_price == 55


# ---------------------------------------------------------------------------
# Minimum floors
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("subtype, frequency, floor", [
    ("Office Building", "Monthly", 95),
    ("Office Building", "Bi-weekly", 180),
    ("Office Building", "Weekly", 300),
    ("Restaurant", "Monthly", 120),
    ("Restaurant", "Bi-weekly", 250),
    ("Restaurant", "Weekly", 350),
])
def test_minimum_floors_hold(engine, subtype, frequency, floor):
    request = CommercialRequest(frequency=frequency, dumpster_count=1, commercial_subtype=subtype)
    result = engine.calculate(request)
    assert result.final_price >= floor
    if result.minimum_floor_applied:
        assert result.final_price == floor
        assert len(result.floor_reasons) > 0


def test_commercial_biweekly_raised_to_floor(engine):
    result = engine.calculate(office(frequency="Bi-weekly"))
    assert result.calculated_price == 171
    assert result.final_price == 180
    assert result.minimum_floor_applied is True
    assert result.floor_reasons == (
        "Price adjusted to meet minimum commercial bi-weekly threshold of $180/month",
    )
    assert result.breakdown.total == 180


def test_restaurant_biweekly_raised_to_floor(engine):
    result = engine.calculate(restaurant(frequency="Bi-weekly"))
    assert result.final_price == 250
    assert result.floor_reasons == (
        "Price adjusted to meet minimum restaurant bi-weekly threshold of $250/month",
    )


def test_residential_and_hoa_never_raised(engine):
    for request in (ResidentialRequest(frequency="Bi-weekly", bin_count=1),
                    HOARequest(frequency="Monthly", housing_units=1, bin_count=1)):
        result = engine.calculate(request)
        assert result.minimum_floor_applied is False
        assert result.final_price == result.calculated_price


# ---------------------------------------------------------------------------
# Manual review
# ---------------------------------------------------------------------------

def test_office_single_dumpster_monthly_is_clean(engine):
    result = engine.calculate(office())
    assert result.final_price == 95
    assert result.minimum_floor_applied is False
    assert result.requires_manual_review is False
    assert result.review_reasons == ()
    assert result.checkout_route == "automatic_checkout"


def test_flags_price_over_500(engine):
    result = engine.calculate(office(6, frequency="Weekly"))
    assert result.final_price == 544
    assert result.requires_manual_review is True
    assert "Total monthly price exceeds $500" in result.review_reasons


def test_price_of_exactly_500_not_flagged_for_price(engine):
    # $95 + 22 × $15 + $75 pad = $500
    result = engine.calculate(office(23, has_pad_cleaning=True))
    assert result.final_price == 500
    assert "Total monthly price exceeds $500" not in result.review_reasons

    result = engine.calculate(office(24, has_pad_cleaning=True))
    assert result.final_price == 515
    assert "Total monthly price exceeds $500" in result.review_reasons


def test_flags_four_dumpsters(engine):
    result = engine.calculate(CommercialRequest(frequency="Monthly", dumpster_count=4))
    assert result.requires_manual_review is True
    assert "Dumpster count (4) requires custom scheduling" in result.review_reasons


def test_three_dumpsters_not_flagged(engine):
    assert engine.calculate(office(3)).requires_manual_review is False


def test_flags_many_hoa_bins(engine):
    result = engine.calculate(HOARequest(frequency="Monthly", housing_units=2, bin_count=5))
    assert result.review_reasons == ("Dumpster count (5) requires custom scheduling",)


def test_residential_bins_not_counted_as_dumpsters(engine):
    result = engine.calculate(ResidentialRequest(frequency="Monthly", bin_count=5))
    assert result.requires_manual_review is False


def test_flags_weekly_restaurant(engine):
    result = engine.calculate(restaurant(frequency="Weekly"))
    assert result.final_price == 384
    assert result.minimum_floor_applied is False
    assert result.requires_manual_review is True
    assert result.review_reasons == ("Weekly restaurant service requires custom review",)
    assert result.checkout_route == "manual_review"


def test_flags_weekly_pad_cleaning(engine):
    result = engine.calculate(office(has_pad_cleaning=True, frequency="Weekly"))
    assert result.requires_manual_review is True
    assert "Weekly dumpster pad cleaning requires custom scheduling" in result.review_reasons


def test_flags_special_requirements(engine):
    result = engine.calculate(office(special_requirements="Need grease trap cleaning"))
    assert result.requires_manual_review is True
    assert result.review_reasons == ("Special requirements need custom review",)


@pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
def test_blank_special_requirements_ignored(engine, text):
    result = engine.calculate(office(special_requirements=text))
    assert result.requires_manual_review is False


def test_review_reasons_accumulate_in_order(engine):
    request = restaurant(4, frequency="Weekly", has_pad_cleaning=True,
                        special_requirements="Gate code 1234")
    result = engine.calculate(request)
    assert result.review_reasons == (
        "Total monthly price exceeds $500",
        "Dumpster count (4) requires custom scheduling",
        "Weekly restaurant service requires custom review",
        "Weekly dumpster pad cleaning requires custom scheduling",
        "Special requirements need custom review",
    )


def test_very_high_dumpster_count(engine):
    result = engine.calculate(office(10))
    assert result.requires_manual_review is True
    assert result.final_price > 0


# ---------------------------------------------------------------------------
# Estimate range
# ---------------------------------------------------------------------------

def test_commercial_range_clamped_to_floor(engine):
    result = engine.calculate(office())
    assert result.low_estimate == 95  # floor(80.75) raised to the $95 floor
    assert result.high_estimate == 110  # ceil(109.25)


def test_commercial_pad_range_clamped_to_pad_floor(engine):
    result = engine.calculate(office(has_pad_cleaning=True))
    assert result.low_estimate == 150  # floor(144.5) raised to the pad floor
    assert result.high_estimate == 196


def test_residential_range_band(engine):
    result = engine.calculate(ResidentialRequest(frequency="Monthly", bin_count=1))
    assert (result.low_estimate, result.high_estimate) == (55, 64)

    result = engine.calculate(ResidentialRequest(frequency="Monthly", bin_count=4))
    assert (result.low_estimate, result.high_estimate) == (72, 85)


def test_residential_range_swapped_when_inverted(engine):
    # $272 weekly: low 231 and high capped at 85, so the pair is swapped
    result = engine.calculate(ResidentialRequest(frequency="Weekly", bin_count=4))
    assert (result.low_estimate, result.high_estimate) == (85, 231)


def test_hoa_range_unclamped(engine):
    result = engine.calculate(HOARequest(frequency="Monthly", housing_units=40, bin_count=2))
    assert result.final_price == 1016
    assert (result.low_estimate, result.high_estimate) == (863, 1169)


def test_range_formula_on_round_prices(engine):
    result = engine.calculate(office(frequency="Weekly"))  # $304
    assert result.low_estimate == 300  # floor(258.4) raised to the $300 floor
    assert result.high_estimate == 350  # ceil(349.6)


@pytest.mark.parametrize("request_fields", [
    dict(property_category="residential", frequency="Monthly", unit_count=1),
    dict(property_category="residential", frequency="Weekly", unit_count=9),
    dict(property_category="commercial", frequency="Weekly", unit_count=3, commercial_subtype="Restaurant"),
    dict(property_category="commercial", frequency="Bi-weekly", unit_count=1, has_pad_cleaning=True),
    dict(property_category="hoa", frequency="Bi-weekly", unit_count=3, hoa_unit_count=12),
])
def test_low_never_above_high(engine, request_fields):
    result = engine.calculate(build_request(**request_fields))
    assert result.low_estimate <= result.high_estimate
    assert result.final_price >= 0


# ---------------------------------------------------------------------------
# Purity
# ---------------------------------------------------------------------------

def test_identical_requests_give_identical_results(engine):
    request = restaurant(5, frequency="Bi-weekly", has_pad_cleaning=True, special_requirements="x")
    first = engine.calculate(request)
    second = engine.calculate(request)
    assert first == second
    assert first.to_dict() == second.to_dict()
    assert first.get_trace_text() == second.get_trace_text()


def test_result_is_frozen(engine):
    result = engine.calculate(office())
    with pytest.raises(AttributeError):
        result.final_price = 1


def test_to_dict_boundary_shape(engine):
    data = engine.calculate(office(has_pad_cleaning=True)).to_dict()
    assert data["finalPrice"] == 170
    assert data["breakdown"] == {
        "unitCleaning": 95,
        "padCleaning": 75,
        "frequencyMultiplier": 1.0,
        "total": 170,
    }
    assert data["reviewReasons"] == []
    assert data["checkoutRoute"] == "automatic_checkout"
    assert data["frequency"] == Frequency.MONTHLY.value
