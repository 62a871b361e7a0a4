"""
Error taxonomy for the trade query engine.

Every error is reported synchronously to the immediate caller. The HTTP layer
maps each class to a status code in ``trade_engine.main``.
"""

from typing import Any, Dict, Optional


class TradeEngineError(Exception):
    """Base class for all engine errors."""

    code = "TRADE_ENGINE_ERROR"
    status_code = 500

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.__class__.__name__, "code": self.code, "message": str(self)}


class ValidationError(TradeEngineError):
    """Malformed or out-of-range filter, sort or pagination input.

    Carries the offending field so callers can point the user at it.
    Values are never silently clamped or corrected.
    """

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, field: str, reason: str, value: Optional[Any] = None):
        self.field = field
        self.reason = reason
        self.value = value
        super().__init__(f"{field}: {reason}")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field
        if self.value is not None:
            data["value"] = str(self.value)
        return data


class NotFoundError(TradeEngineError):
    """A referenced trader or stock does not exist in reference data."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found")


class UpstreamUnavailable(TradeEngineError):
    """The trade store failed or timed out.

    Never converted into an empty result.
    """

    code = "UPSTREAM_UNAVAILABLE"
    status_code = 503

    def __init__(self, operation: str, detail: Optional[str] = None):
        self.operation = operation
        message = f"Trade store unavailable during {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
