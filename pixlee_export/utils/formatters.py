# pixlee_export/utils/formatters.py
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit


def format_price(amount: Decimal) -> str:
    """Price with two decimals, as reported in cart events"""
    return str(Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def price_value(amount: Optional[Decimal]) -> Optional[float]:
    """Price as a JSON number"""
    return float(amount) if amount is not None else None


def unix_timestamp() -> int:
    return int(time.time())


def replace_host(url: str, host: Optional[str]) -> str:
    """Swap the host of an absolute URL, keeping scheme, path and query"""
    if not host:
        return url
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, host, parts.path, parts.query, parts.fragment))


def absolute_url(base_url: str, path: str) -> str:
    return urljoin(base_url.rstrip("/") + "/", path.lstrip("/"))
