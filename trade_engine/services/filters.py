"""
Filter validation.

Turns raw query-string parameters into an immutable FilterSpec. Every bad
value fails with a ValidationError naming the parameter; nothing is clamped
or silently dropped.
"""

import math
import re
import uuid
from datetime import date
from typing import Mapping, Optional, Tuple

from trade_engine.errors import ValidationError
from trade_engine.models import (
    FilterSpec,
    SortDirection,
    SortField,
    TraderType,
    TransactionType,
)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _blank(value: Optional[str]) -> bool:
    return value is None or str(value).strip() == ""


def parse_date(field: str, raw: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` calendar date."""
    text = str(raw).strip()
    if not _ISO_DATE.match(text):
        raise ValidationError(field, "must be a date in YYYY-MM-DD format", raw)
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValidationError(field, "must be a date in YYYY-MM-DD format", raw) from None


def parse_positive_int(field: str, raw: str, maximum: Optional[int] = None) -> int:
    text = str(raw).strip()
    if not (text.isascii() and text.isdigit()):
        raise ValidationError(field, "must be a positive integer", raw)
    value = int(text)
    if value < 1:
        raise ValidationError(field, "must be at least 1", raw)
    if maximum is not None and value > maximum:
        raise ValidationError(field, f"must be between 1 and {maximum}", raw)
    return value


def parse_amount(field: str, raw: str) -> float:
    try:
        value = float(str(raw).strip())
    except ValueError:
        raise ValidationError(field, "must be a number", raw) from None
    if math.isnan(value) or math.isinf(value):
        raise ValidationError(field, "must be a finite number", raw)
    if value < 0:
        raise ValidationError(field, "must be a non-negative number", raw)
    return value


def parse_trader_id(field: str, raw: str) -> str:
    """Trader ids are UUIDs; anything else is bad input, not an unknown id."""
    text = str(raw).strip()
    try:
        return str(uuid.UUID(text))
    except ValueError:
        raise ValidationError(field, "must be a valid UUID", raw) from None


def parse_symbol(field: str, raw: str) -> str:
    text = str(raw).strip().upper()
    if not text:
        raise ValidationError(field, "must not be empty", raw)
    return text


def parse_enum(field: str, raw: str, enum_cls):
    text = str(raw).strip()
    for member in enum_cls:
        if member.value == text:
            return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise ValidationError(field, f"must be one of: {allowed}", raw)


def parse_pagination(
    params: Mapping[str, str], default_limit: int = DEFAULT_LIMIT
) -> Tuple[int, int]:
    page = DEFAULT_PAGE
    limit = default_limit
    if params.get("page") is not None:
        page = parse_positive_int("page", params["page"])
    if params.get("limit") is not None:
        limit = parse_positive_int("limit", params["limit"], maximum=MAX_LIMIT)
    return page, limit


def parse_filters(params: Mapping[str, str], default_limit: int = DEFAULT_LIMIT) -> FilterSpec:
    """Validate raw parameters into a FilterSpec.

    Recognised keys: startDate, endDate, transactionType, minValue, maxValue,
    symbol (or tickerSymbol), traderId, traderType, page, limit. Unknown keys
    are ignored. Blank optional values are treated as absent, except page and
    limit which must be valid whenever supplied.

    Raises:
        ValidationError: naming the first offending parameter
    """
    start_date = end_date = None
    if not _blank(params.get("startDate")):
        start_date = parse_date("startDate", params["startDate"])
    if not _blank(params.get("endDate")):
        end_date = parse_date("endDate", params["endDate"])
    if start_date and end_date and start_date > end_date:
        raise ValidationError("endDate", "must not be before startDate", params["endDate"])

    transaction_type = None
    if not _blank(params.get("transactionType")):
        transaction_type = parse_enum("transactionType", params["transactionType"], TransactionType)

    min_value = max_value = None
    if not _blank(params.get("minValue")):
        min_value = parse_amount("minValue", params["minValue"])
    if not _blank(params.get("maxValue")):
        max_value = parse_amount("maxValue", params["maxValue"])
    if min_value is not None and max_value is not None and min_value > max_value:
        raise ValidationError("maxValue", "must not be less than minValue", params["maxValue"])

    ticker_symbol = None
    symbol_key = "symbol" if params.get("symbol") is not None else "tickerSymbol"
    if params.get(symbol_key) is not None:
        ticker_symbol = parse_symbol(symbol_key, params[symbol_key])

    trader_id = None
    if not _blank(params.get("traderId")):
        trader_id = parse_trader_id("traderId", params["traderId"])

    trader_type = None
    if not _blank(params.get("traderType")):
        trader_type = parse_enum("traderType", params["traderType"], TraderType)

    page, limit = parse_pagination(params, default_limit)

    return FilterSpec(
        start_date=start_date,
        end_date=end_date,
        transaction_type=transaction_type,
        min_value=min_value,
        max_value=max_value,
        ticker_symbol=ticker_symbol,
        trader_id=trader_id,
        trader_type=trader_type,
        page=page,
        limit=limit,
    )


def parse_sort(params: Mapping[str, str]) -> Tuple[SortField, SortDirection]:
    """Read sortBy/sortOrder, defaulting to transaction date descending."""
    sort_field = SortField.TRANSACTION_DATE
    direction = SortDirection.DESC
    if not _blank(params.get("sortBy")):
        sort_field = parse_enum("sortBy", params["sortBy"], SortField)
    if not _blank(params.get("sortOrder")):
        direction = parse_enum("sortOrder", params["sortOrder"], SortDirection)
    return sort_field, direction
