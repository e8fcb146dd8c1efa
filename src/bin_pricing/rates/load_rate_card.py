"""
Rate Card Loader - Validates a rate card CSV and builds RateTables from it.

Reads rate_card.csv (table, key, frequency, value), validates every row,
and returns an immutable RateTables. Errors are reported with their CSV
line number.
"""
import io
import logging
import math
import sys
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from ..engine.models import Frequency
from ..engine.rate_tables import DEFAULT_RATE_TABLES, RateCardError, RateTables

logger = logging.getLogger(__name__)

CSV_COLUMNS = ['table', 'key', 'frequency', 'value']

# table name -> (needs key, needs frequency)
KEYED_TABLES = {
    'frequency_multiplier': (False, True),
    'base_price': (True, False),
    'unit_surcharge': (True, False),
    'minimum_floor': (True, True),
    'residential_range': (True, False),
}

SCALAR_TABLES = {
    'pad_addon': float,
    'pad_floor': float,
    'review_price_threshold': float,
    'review_unit_threshold': int,
    'range_low_factor': float,
    'range_high_factor': float,
}


def read_rate_card(source: Union[Path, str], name: Optional[str] = None) -> pd.DataFrame:
    """
    Read a rate card CSV with every cell stripped.

    source is a path or an open text buffer; name labels error messages.
    """
    name = name or Path(source).name
    try:
        df = pd.read_csv(source, dtype=str).fillna('')
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise RateCardError(f"{name}: {e}") from e
    df.columns = [c.strip().lower() for c in df.columns]
    missing = [c for c in CSV_COLUMNS if c not in df.columns]
    if missing:
        raise RateCardError(f"{name} is missing columns: {', '.join(missing)}")
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df


def validate_row(row: dict, line_num: int) -> tuple[Optional[tuple], list[str]]:
    """
    Validate one rate card row.

    Returns ((table, key, frequency, value), errors); the tuple is None when
    the row is invalid.
    """
    table = row.get('table', '')
    key = row.get('key', '')
    frequency = row.get('frequency', '')
    raw_value = row.get('value', '')

    if not table:
        return None, [f"Line {line_num}: table is required"]

    if table not in KEYED_TABLES and table not in SCALAR_TABLES:
        valid = sorted(set(KEYED_TABLES) | set(SCALAR_TABLES))
        return None, [f"Line {line_num}: unknown table '{table}', must be one of: {valid}"]

    errors = []
    if table in KEYED_TABLES:
        needs_key, needs_frequency = KEYED_TABLES[table]
        if needs_key and not key:
            errors.append(f"Line {line_num}: {table} requires a key")
        if needs_frequency:
            try:
                frequency = Frequency(frequency)
            except ValueError:
                valid = [f.value for f in Frequency]
                errors.append(f"Line {line_num}: frequency '{frequency}' must be one of: {valid}")

    caster = SCALAR_TABLES.get(table, float)
    try:
        value = caster(raw_value)
    except ValueError:
        errors.append(f"Line {line_num}: value '{raw_value}' must be numeric for {table}")
        return None, errors

    if not math.isfinite(value):
        errors.append(f"Line {line_num}: value '{raw_value}' must be a finite number")
    elif value < 0:
        errors.append(f"Line {line_num}: value must not be negative")

    if errors:
        return None, errors
    return (table, key or None, frequency or None, value), []


def build_rate_tables(rows: list[tuple], source: str = "rate card") -> RateTables:
    """Assemble validated rows into RateTables (missing entries raise RateCardError)."""
    multipliers = {}
    base_prices = {}
    surcharges = {}
    floors: dict[str, dict] = {}
    residential_range = {}
    scalars = {}

    for table, key, frequency, value in rows:
        if table == 'frequency_multiplier':
            multipliers[frequency] = value
        elif table == 'base_price':
            base_prices[key] = value
        elif table == 'unit_surcharge':
            surcharges[key] = value
        elif table == 'minimum_floor':
            floors.setdefault(key, {})[frequency] = value
        elif table == 'residential_range':
            residential_range[key] = value
        else:
            scalars[table] = value

    if residential_range:
        if set(residential_range) != {'low', 'high'}:
            raise RateCardError("residential_range needs exactly a 'low' and a 'high' row")
        scalars['residential_range'] = (residential_range['low'], residential_range['high'])

    return RateTables(
        frequency_multipliers=multipliers,
        base_prices=base_prices,
        unit_surcharges=surcharges,
        minimum_floors=floors,
        source=source,
        **scalars,
    )


def load_rate_card(path: Path) -> RateTables:
    """
    Load and validate a rate card CSV.

    Raises RateCardError listing every invalid row.
    """
    if not path.exists():
        raise RateCardError(f"Rate card not found: {path}")

    tables = _parse_rate_card(read_rate_card(path), source=str(path))
    logger.info("Loaded rate card %s", path)
    return tables


def parse_rate_card_text(text: str, name: str = "uploaded rate card") -> RateTables:
    """Validate rate card CSV content that is not on disk."""
    return _parse_rate_card(read_rate_card(io.StringIO(text), name=name), source=name)


def _parse_rate_card(df: pd.DataFrame, source: str) -> RateTables:
    rows = []
    all_errors = []
    seen: dict[tuple, int] = {}
    for idx, row in enumerate(df.to_dict(orient='records')):
        line_num = idx + 2  # +2 for 1-indexed header row
        parsed, errors = validate_row(row, line_num)
        if errors:
            all_errors.extend(errors)
            continue

        entry = parsed[:3]
        if entry in seen:
            table, key, frequency = entry
            label = ", ".join(str(getattr(p, 'value', p)) for p in (table, key, frequency) if p)
            all_errors.append(f"Line {line_num}: duplicate entry {label} (first set on line {seen[entry]})")
            continue
        seen[entry] = line_num
        rows.append(parsed)

    if all_errors:
        raise RateCardError("; ".join(all_errors))

    return build_rate_tables(rows, source=source)


def load_rate_tables(path: Optional[Path] = None) -> RateTables:
    """Load the rate card at path, or the built-in tables when there is none."""
    if path is None or not path.exists():
        if path is not None:
            logger.warning("Rate card %s not found, using built-in rate tables", path)
        return DEFAULT_RATE_TABLES
    return load_rate_card(path)


def same_rates(a: RateTables, b: RateTables) -> bool:
    """True when two tables price identically, wherever they were loaded from."""
    a_dict, b_dict = a.to_dict(), b.to_dict()
    a_dict.pop('source')
    b_dict.pop('source')
    return a_dict == b_dict


def main():
    """CLI entry point."""
    from ..config.settings import get_settings

    settings = get_settings()
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else settings.rate_card_csv

    print(f"Validating rate card {path}...")
    try:
        tables = load_rate_card(path)
    except RateCardError as e:
        print("Validation errors:")
        for err in str(e).split("; "):
            print(f"  ❌ {err}")
        sys.exit(1)

    print("✅ Rate card is valid")
    for frequency, multiplier in tables.frequency_multipliers.items():
        print(f"   {frequency.value}: ×{multiplier}")
    if same_rates(tables, DEFAULT_RATE_TABLES):
        print("   Matches the built-in rate tables")
    else:
        print("   Differs from the built-in rate tables")


if __name__ == "__main__":
    main()
