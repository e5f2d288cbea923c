# woosync/utils/prices.py
import re
from typing import Any

# Price fields Woo expects as text-encoded decimals ("19.99")
PRICE_FIELDS = ("regular_price", "sale_price", "price")

_PRICE_RE = re.compile(r"^\d+(\.\d+)?$")


def is_price_string(val: Any) -> bool:
    """True for Woo-style price strings: digits with an optional fractional part."""
    return isinstance(val, str) and bool(_PRICE_RE.match(val.strip()))


def blank(val: Any) -> bool:
    """Treat None/"" (and whitespace-only text) as 'not provided'."""
    return val is None or (isinstance(val, str) and not val.strip())
