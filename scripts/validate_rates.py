#!/usr/bin/env python
"""
Rate card check - validates the rate card and runs the engine tests.

Usage:
    python scripts/validate_rates.py [path/to/rate_card.csv]
"""
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from bin_pricing.config.settings import get_settings
from bin_pricing.engine import RateCardError, calculate_quote, build_request
from bin_pricing.rates.load_rate_card import load_rate_card


def main():
    print("=" * 60)
    print("BIN PRICING RATE CARD CHECK")
    print("=" * 60)
    print()

    path = Path(sys.argv[1]) if len(sys.argv) > 1 else get_settings().rate_card_csv

    print(f"[1/2] Validating {path}...")
    try:
        rates = load_rate_card(path)
    except RateCardError as e:
        print("\n❌ RATE CARD INVALID")
        for error in str(e).split("; "):
            print(f"  ERROR: {error}")
        sys.exit(1)

    print()
    print("[2/2] Running engine tests...")

    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests/test_quote_engine.py', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )

    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)

    print()
    print("=" * 60)
    print("✅ RATE CARD OK")
    print("=" * 60)
    print()
    print("Sample quotes with this card:")
    samples = [
        ("Residential, 1 bin", build_request("residential", "Monthly", unit_count=1)),
        ("Office, 1 dumpster", build_request("commercial", "Monthly", unit_count=1, commercial_subtype="Office Building")),
        ("Restaurant, weekly", build_request("commercial", "Weekly", unit_count=1, commercial_subtype="Restaurant")),
        ("HOA, 40 units / 2 bins", build_request("hoa", "Monthly", unit_count=2, hoa_unit_count=40)),
    ]
    for label, request in samples:
        result = calculate_quote(request, rates)
        flag = " (review)" if result.requires_manual_review else ""
        print(f"  {label}: ${result.final_price:,.2f}{flag}")


if __name__ == "__main__":
    main()
