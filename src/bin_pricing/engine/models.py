"""
Data models for the quoting engine.

Uses frozen dataclasses so requests and results cannot change once built.
A request is one of three variants, one per property category, each carrying
only the fields that category is priced on.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class QuoteValidationError(ValueError):
    """Raised when a quote request cannot be built from the supplied fields."""


class PropertyCategory(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    HOA = "hoa"


class Frequency(str, Enum):
    MONTHLY = "Monthly"
    BI_WEEKLY = "Bi-weekly"
    WEEKLY = "Weekly"


RESTAURANT_SUBTYPE = "Restaurant"


def _check_count(name: str, value: Optional[int]):
    if value is not None and value < 0:
        raise QuoteValidationError(f"{name} must be zero or greater, got {value}")


def _coerce_frequency(value) -> Frequency:
    try:
        return Frequency(value)
    except ValueError:
        valid = ", ".join(f.value for f in Frequency)
        raise QuoteValidationError(f"Unknown frequency '{value}', must be one of: {valid}") from None


@dataclass(frozen=True)
class _BaseRequest:
    frequency: Frequency
    special_requirements: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'frequency', _coerce_frequency(self.frequency))

    @property
    def has_special_requirements(self) -> bool:
        return bool(self.special_requirements and self.special_requirements.strip())


@dataclass(frozen=True)
class ResidentialRequest(_BaseRequest):
    """Curbside bin cleaning for a single home."""
    bin_count: Optional[int] = None

    category = PropertyCategory.RESIDENTIAL

    def __post_init__(self):
        super().__post_init__()
        _check_count("bin_count", self.bin_count)


@dataclass(frozen=True)
class CommercialRequest(_BaseRequest):
    """Dumpster cleaning for a business, optionally with the concrete pad."""
    dumpster_count: Optional[int] = None
    commercial_subtype: Optional[str] = None
    has_pad_cleaning: bool = False

    category = PropertyCategory.COMMERCIAL

    def __post_init__(self):
        super().__post_init__()
        _check_count("dumpster_count", self.dumpster_count)

    @property
    def is_restaurant(self) -> bool:
        return self.commercial_subtype == RESTAURANT_SUBTYPE


@dataclass(frozen=True)
class HOARequest(_BaseRequest):
    """Community bin cleaning priced per housing unit and per bin."""
    housing_units: Optional[int] = None
    bin_count: Optional[int] = None

    category = PropertyCategory.HOA

    def __post_init__(self):
        super().__post_init__()
        _check_count("housing_units", self.housing_units)
        _check_count("bin_count", self.bin_count)


QuoteRequest = Union[ResidentialRequest, CommercialRequest, HOARequest]


def build_request(
    property_category: str,
    frequency: str,
    unit_count: Optional[int] = None,
    hoa_unit_count: Optional[int] = None,
    commercial_subtype: Optional[str] = None,
    has_pad_cleaning: bool = False,
    special_requirements: Optional[str] = None,
) -> QuoteRequest:
    """
    Build the request variant for a flat set of boundary fields.

    Fields that do not apply to the category are ignored.
    """
    try:
        category = PropertyCategory(property_category)
    except ValueError:
        valid = ", ".join(c.value for c in PropertyCategory)
        raise QuoteValidationError(
            f"Unknown property category '{property_category}', must be one of: {valid}"
        ) from None

    if category == PropertyCategory.RESIDENTIAL:
        return ResidentialRequest(
            frequency=frequency,
            special_requirements=special_requirements,
            bin_count=unit_count,
        )
    if category == PropertyCategory.COMMERCIAL:
        return CommercialRequest(
            frequency=frequency,
            special_requirements=special_requirements,
            dumpster_count=unit_count,
            commercial_subtype=commercial_subtype,
            has_pad_cleaning=bool(has_pad_cleaning),
        )
    return HOARequest(
        frequency=frequency,
        special_requirements=special_requirements,
        housing_units=hoa_unit_count,
        bin_count=unit_count,
    )


@dataclass(frozen=True)
class TraceStep:
    """A single step in the quote pipeline trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class PricingBreakdown:
    """Itemized components, all after frequency scaling."""
    unit_cleaning: float
    pad_cleaning: float
    frequency_multiplier: float
    total: float


@dataclass(frozen=True)
class QuoteResult:
    """Complete result of one quote calculation."""
    property_category: PropertyCategory
    frequency: Frequency
    base_price: float
    calculated_price: float  # before the minimum floor
    final_price: float
    low_estimate: int
    high_estimate: int
    breakdown: PricingBreakdown
    minimum_floor_applied: bool = False
    requires_manual_review: bool = False
    review_reasons: tuple[str, ...] = ()
    floor_reasons: tuple[str, ...] = ()
    trace: tuple[TraceStep, ...] = field(default=(), compare=False)

    @property
    def checkout_route(self) -> str:
        """Where the surrounding checkout flow should send this quote."""
        return "manual_review" if self.requires_manual_review else "automatic_checkout"

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Convert to the camelCase shape consumed by checkout and admin screens."""
        return {
            "propertyCategory": self.property_category.value,
            "frequency": self.frequency.value,
            "basePrice": self.base_price,
            "calculatedPrice": self.calculated_price,
            "finalPrice": self.final_price,
            "lowEstimate": self.low_estimate,
            "highEstimate": self.high_estimate,
            "minimumFloorApplied": self.minimum_floor_applied,
            "requiresManualReview": self.requires_manual_review,
            "reviewReasons": list(self.review_reasons),
            "floorReasons": list(self.floor_reasons),
            "breakdown": {
                "unitCleaning": self.breakdown.unit_cleaning,
                "padCleaning": self.breakdown.pad_cleaning,
                "frequencyMultiplier": self.breakdown.frequency_multiplier,
                "total": self.breakdown.total,
            },
            "checkoutRoute": self.checkout_route,
        }
