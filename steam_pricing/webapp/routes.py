"""
FastAPI routes for the Steam price cache.

Handles:
- Pricing a title in a currency (fetches and converts on demand)
- Reading a title's stored prices
- Resetting a title's prices to zero
"""

import logging

from fastapi import APIRouter, Depends, Form, Request

from steam_pricing.services.price_cache import PriceCache
from steam_pricing.webapp.schemas import ClearPriceResponse, ErrorResponse, PriceRecordResponse

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


# ============================================================================
# Dependency Injection
# ============================================================================

def get_price_cache(request: Request) -> PriceCache:
    """Price cache built during application startup."""
    return request.app.state.price_cache


# ============================================================================
# Routes
# ============================================================================

# Sync handlers run in the threadpool, so concurrent requests contend only on
# the record lock of the title they touch.
@router.post("/game", response_model=PriceRecordResponse, responses=ERROR_RESPONSES)
def get_game_cost(
    appid: str = Form(..., description="Steam appid"),
    currency: str = Form(..., description="USD, EUR, GBP, RUB or BTC"),
    price_cache: PriceCache = Depends(get_price_cache),
) -> PriceRecordResponse:
    """Price a title in the requested currency."""
    logger.debug(f"POST request get cost game: id={appid} currency={currency}")
    record = price_cache.get_price(appid, currency)
    return PriceRecordResponse.from_record(record)


@router.get("/aboutgame/{appid}", response_model=PriceRecordResponse, responses=ERROR_RESPONSES)
def about_game(
    appid: str,
    price_cache: PriceCache = Depends(get_price_cache),
) -> PriceRecordResponse:
    """Return the stored prices of a title without fetching anything."""
    record = price_cache.get_record(appid)
    return PriceRecordResponse.from_record(record)


@router.delete("/del/{appid}", response_model=ClearPriceResponse, responses=ERROR_RESPONSES)
def clear_price_game(
    appid: str,
    price_cache: PriceCache = Depends(get_price_cache),
) -> ClearPriceResponse:
    """Reset every price of a title to zero."""
    price_cache.clear_price(appid)
    return ClearPriceResponse(item_id=appid)
