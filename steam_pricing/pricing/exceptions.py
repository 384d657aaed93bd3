"""
Pricing error taxonomy.

Every failure the price cache can surface maps to one of these classes.
Each carries an HTTP status and a stable error code so the web layer can
render it without inspecting messages.
"""

from typing import Any, Dict, Optional


class PricingError(Exception):
    """Base exception for price cache errors."""

    status_code: int = 500
    error_code: str = "PRICING_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if status_code:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ItemNotFoundError(PricingError):
    """Raised when an item identifier is unknown to the store or the catalog."""

    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, item_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"Item not found: {item_id}",
            details={"item_id": item_id},
        )
        self.item_id = item_id


class UpstreamUnavailableError(PricingError):
    """Raised on transport failure talking to the catalog or rate service."""

    status_code = 502
    error_code = "UPSTREAM_UNAVAILABLE"

    def __init__(self, message: str, upstream: str):
        super().__init__(message, details={"upstream": upstream})
        self.upstream = upstream


class MalformedResponseError(PricingError):
    """Raised when an upstream payload cannot be parsed."""

    status_code = 502
    error_code = "MALFORMED_RESPONSE"

    def __init__(self, message: str, upstream: str):
        super().__init__(message, details={"upstream": upstream})
        self.upstream = upstream


class RateUnavailableError(PricingError):
    """Raised when one of the two pivot rate lookups fails."""

    status_code = 502
    error_code = "RATE_UNAVAILABLE"

    def __init__(self, currency: str, reason: str):
        super().__init__(
            f"Exchange rate unavailable for {currency}: {reason}",
            details={"currency": currency},
        )
        self.currency = currency


class InvalidCurrencyError(PricingError):
    """Raised for currency codes outside the supported set."""

    status_code = 400
    error_code = "INVALID_CURRENCY"

    def __init__(self, code: Any, supported: list):
        super().__init__(
            f"Unsupported currency: {code!r}",
            details={"currency": code, "supported": supported},
        )


class StorageFaultError(PricingError):
    """
    Raised when a persistence write fails.

    The in-memory record already holds the computed value; ``record`` is a
    snapshot of it so callers can still use the result or retry the write.
    """

    status_code = 500
    error_code = "STORAGE_FAULT"

    def __init__(self, item_id: str, fields: list, record: Any = None):
        super().__init__(
            f"Failed to persist {', '.join(fields)} for item {item_id}",
            details={"item_id": item_id, "fields": fields},
        )
        self.record = record
