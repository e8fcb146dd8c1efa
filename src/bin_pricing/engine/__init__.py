"""Engine subpackage - quote pricing, floors and review flags."""
from .quote_engine import QuoteEngine, calculate_quote
from .models import (
    CommercialRequest,
    Frequency,
    HOARequest,
    PropertyCategory,
    QuoteRequest,
    QuoteResult,
    QuoteValidationError,
    ResidentialRequest,
    build_request,
)
from .rate_tables import DEFAULT_RATE_TABLES, RateCardError, RateTables

__all__ = [
    'QuoteEngine', 'calculate_quote',
    'CommercialRequest', 'Frequency', 'HOARequest', 'PropertyCategory',
    'QuoteRequest', 'QuoteResult', 'QuoteValidationError', 'ResidentialRequest',
    'build_request',
    'DEFAULT_RATE_TABLES', 'RateCardError', 'RateTables',
]
