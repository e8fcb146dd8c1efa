import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ..config.settings import get_settings
from ..engine import QuoteValidationError, build_request
from . import state
from .rates_api import router as rates_router
from .schemas import QuoteRequestBody, QuoteResponse

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Bin Pricing API",
    description="Quote engine for bin and dumpster cleaning bookings",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include rates management API
app.include_router(rates_router)


@app.get("/")
async def root():
    return {"status": "online", "message": "Bin Pricing API Active"}


@app.post("/quote", response_model=QuoteResponse)
async def create_quote(req: QuoteRequestBody):
    try:
        request = build_request(
            property_category=req.propertyCategory,
            frequency=req.frequency,
            unit_count=req.unitCount,
            hoa_unit_count=req.hoaUnitCount,
            commercial_subtype=req.commercialSubtype,
            has_pad_cleaning=req.hasPadCleaning,
            special_requirements=req.specialRequirements,
        )
    except QuoteValidationError as e:
        logger.warning("Rejected quote request: %s", e)
        raise HTTPException(status_code=422, detail=str(e))

    try:
        result = state.engine.calculate(request)
    except Exception as e:
        logger.exception("Quote calculation failed")
        raise HTTPException(status_code=500, detail=str(e))

    if result.requires_manual_review:
        logger.info("Quote routed to manual review: %s", "; ".join(result.review_reasons))
    return result.to_dict()


@app.get("/system/status")
async def get_status():
    rate_card = settings.rate_card_csv
    return {
        "engine_active": True,
        "rates_source": state.engine.rates.source,
        "rate_card_path": str(rate_card) if rate_card else None,
        "rates_loaded_at": state.rates_loaded_at.isoformat(),
    }
