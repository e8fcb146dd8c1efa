"""
Shared engine instance for the API routers.

Rate tables are read once at import; reloads swap them on this engine.
"""
from datetime import datetime

from ..config.settings import get_settings
from ..engine import QuoteEngine
from ..rates.load_rate_card import load_rate_tables

settings = get_settings()
engine = QuoteEngine(load_rate_tables(settings.rate_card_csv))
rates_loaded_at = datetime.now()


def reload_engine_rates():
    """Re-read the rate card and swap it into the shared engine."""
    global rates_loaded_at
    engine.reload_rates(load_rate_tables(settings.rate_card_csv))
    rates_loaded_at = datetime.now()
    return engine.rates
