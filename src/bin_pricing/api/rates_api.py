"""
Rates API - FastAPI router for inspecting and reloading the rate tables.
"""
import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..engine import RateCardError
from ..rates.load_rate_card import parse_rate_card_text
from . import state
from .schemas import RateTablesResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rates", tags=["rates"])


class ValidateRequest(BaseModel):
    """Request model for validating rate card CSV content."""
    csv: str


class ValidationResponse(BaseModel):
    """Response model for validation."""
    valid: bool
    errors: list[str]


@router.get("", response_model=RateTablesResponse)
def get_rates():
    """Get the rate tables the engine is pricing with."""
    return state.engine.rates.to_dict()


@router.post("/reload", response_model=RateTablesResponse)
def reload_rates():
    """Re-read the configured rate card and swap it into the engine."""
    try:
        rates = state.reload_engine_rates()
    except RateCardError as e:
        logger.warning("Rate card reload rejected: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    return rates.to_dict()


@router.post("/validate", response_model=ValidationResponse)
def validate_rates(request: ValidateRequest):
    """Validate a rate card without loading it into the engine."""
    try:
        parse_rate_card_text(request.csv)
    except RateCardError as e:
        return ValidationResponse(valid=False, errors=str(e).split("; "))
    return ValidationResponse(valid=True, errors=[])
