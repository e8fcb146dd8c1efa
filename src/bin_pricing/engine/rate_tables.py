"""
Rate tables for the quoting engine.

A RateTables instance is built once and never changed. Reloading rates means
building a new instance and swapping the reference, never editing entries.
"""
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .models import Frequency


class RateCardError(ValueError):
    """Raised when a set of rates is incomplete or invalid."""


# Keys used by the keyed tables
COMMERCIAL = "commercial"
RESTAURANT = "restaurant"
RESIDENTIAL = "residential"
HOA_UNIT = "hoa_unit"
HOA_BIN = "hoa_bin"

BASE_PRICE_KEYS = (COMMERCIAL, RESTAURANT, RESIDENTIAL)
SURCHARGE_KEYS = (COMMERCIAL, RESTAURANT, RESIDENTIAL, HOA_UNIT, HOA_BIN)
FLOOR_KEYS = (COMMERCIAL, RESTAURANT)


def _freeze(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class RateTables:
    """Every number the engine prices with."""
    frequency_multipliers: Mapping[Frequency, float]
    base_prices: Mapping[str, float]
    unit_surcharges: Mapping[str, float]
    minimum_floors: Mapping[str, Mapping[Frequency, float]]
    pad_addon: float = 75.0
    pad_floor: float = 150.0
    review_price_threshold: float = 500.0
    review_unit_threshold: int = 4
    range_low_factor: float = 0.85
    range_high_factor: float = 1.15
    residential_range: tuple[float, float] = (55.0, 85.0)
    source: str = field(default="built-in", compare=False)

    def __post_init__(self):
        multipliers = {_frequency_key(k): float(v) for k, v in self.frequency_multipliers.items()}
        _require_keys("frequency_multipliers", multipliers, tuple(Frequency))

        base_prices = {str(k): float(v) for k, v in self.base_prices.items()}
        _require_keys("base_prices", base_prices, BASE_PRICE_KEYS)

        surcharges = {str(k): float(v) for k, v in self.unit_surcharges.items()}
        _require_keys("unit_surcharges", surcharges, SURCHARGE_KEYS)

        floors = {}
        for key, by_frequency in self.minimum_floors.items():
            table = {_frequency_key(k): float(v) for k, v in by_frequency.items()}
            _require_keys(f"minimum_floors[{key}]", table, tuple(Frequency))
            floors[str(key)] = _freeze(table)
        missing_floors = [k for k in FLOOR_KEYS if k not in floors]
        if missing_floors:
            raise RateCardError(f"minimum_floors is missing entries for: {', '.join(missing_floors)}")

        for name in ('pad_addon', 'pad_floor', 'review_price_threshold',
                     'review_unit_threshold', 'range_low_factor', 'range_high_factor'):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise RateCardError(f"{name} must be a finite number")
            if value < 0:
                raise RateCardError(f"{name} must not be negative")

        low, high = self.residential_range
        if not (math.isfinite(low) and math.isfinite(high)):
            raise RateCardError("residential_range must be finite numbers")
        if low > high:
            raise RateCardError(f"residential_range low {low} is above high {high}")

        object.__setattr__(self, 'frequency_multipliers', _freeze(multipliers))
        object.__setattr__(self, 'base_prices', _freeze(base_prices))
        object.__setattr__(self, 'unit_surcharges', _freeze(surcharges))
        object.__setattr__(self, 'minimum_floors', _freeze(floors))
        object.__setattr__(self, 'residential_range', (float(low), float(high)))

    def multiplier(self, frequency: Frequency) -> float:
        return self.frequency_multipliers[frequency]

    def commercial_floor(self, is_restaurant: bool, frequency: Frequency) -> float:
        key = RESTAURANT if is_restaurant else COMMERCIAL
        return self.minimum_floors[key][frequency]

    def to_dict(self) -> dict:
        """Plain JSON-friendly view of the tables."""
        data = {}
        data["frequency_multipliers"] = {f.value: v for f, v in self.frequency_multipliers.items()}
        data["base_prices"] = dict(self.base_prices)
        data["unit_surcharges"] = dict(self.unit_surcharges)
        data["minimum_floors"] = {
            key: {f.value: v for f, v in table.items()}
            for key, table in self.minimum_floors.items()
        }
        data["pad_addon"] = self.pad_addon
        data["pad_floor"] = self.pad_floor
        data["review_price_threshold"] = self.review_price_threshold
        data["review_unit_threshold"] = self.review_unit_threshold
        data["range_low_factor"] = self.range_low_factor
        data["range_high_factor"] = self.range_high_factor
        data["residential_range"] = list(self.residential_range)
        data["source"] = self.source
        return data


def _frequency_key(value) -> Frequency:
    try:
        return Frequency(value)
    except ValueError:
        raise RateCardError(f"Unknown frequency '{value}' in rate table") from None


def _label(key) -> str:
    return key.value if isinstance(key, Frequency) else str(key)


def _require_keys(table_name: str, table: Mapping, required: tuple):
    missing = [k.value if isinstance(k, Frequency) else k for k in required if k not in table]
    if missing:
        raise RateCardError(f"{table_name} is missing entries for: {', '.join(missing)}")
    infinite = [k for k, v in table.items() if not math.isfinite(v)]
    if infinite:
        raise RateCardError(f"{table_name} has non-finite values for: {', '.join(map(_label, infinite))}")
    negative = [k for k, v in table.items() if v < 0]
    if negative:
        raise RateCardError(f"{table_name} has negative values for: {', '.join(map(_label, negative))}")


DEFAULT_RATE_TABLES = RateTables(
    frequency_multipliers={
        Frequency.MONTHLY: 1.0,
        Frequency.BI_WEEKLY: 1.8,
        Frequency.WEEKLY: 3.2,
    },
    base_prices={
        COMMERCIAL: 95,
        RESTAURANT: 120,
        RESIDENTIAL: 55,
    },
    unit_surcharges={
        COMMERCIAL: 15,
        RESTAURANT: 20,
        RESIDENTIAL: 10,
        HOA_UNIT: 25,
        HOA_BIN: 8,
    },
    minimum_floors={
        COMMERCIAL: {
            Frequency.MONTHLY: 95,
            Frequency.BI_WEEKLY: 180,
            Frequency.WEEKLY: 300,
        },
        RESTAURANT: {
            Frequency.MONTHLY: 120,
            Frequency.BI_WEEKLY: 250,
            Frequency.WEEKLY: 350,
        },
    },
)
