"""
Pydantic models for request/response bodies of the web application.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from steam_pricing.storage.models import PriceRecord


class PriceRecordResponse(BaseModel):
    """
    A price record as returned to API clients.

    ``base_price`` is in USD cents; ``prices`` maps currency codes to minor
    units (cents, or satoshi for BTC) rounded to 2 decimals.
    """

    item_id: str = Field(..., description="Steam appid")
    record_key: str = Field(..., description="Internal record key")
    name: str = Field("", description="Title name")
    base_price: int = Field(0, ge=0, description="Reference price in USD cents")
    prices: Dict[str, float] = Field(default_factory=dict)

    @classmethod
    def from_record(cls, record: PriceRecord) -> "PriceRecordResponse":
        return cls(**record.to_dict())


class ClearPriceResponse(BaseModel):
    """Response for the clear endpoint."""

    status: str = "cleared"
    item_id: str


class ErrorResponse(BaseModel):
    """Error body produced by the pricing exception handler."""

    error: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
    record: Optional[PriceRecordResponse] = None
