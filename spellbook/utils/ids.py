"""Business id and timestamp helpers"""
import random
import string
import time
from datetime import datetime, timezone
from typing import Any

_ID_ALPHABET = string.ascii_lowercase + string.digits


def now_ms() -> int:
    return int(time.time() * 1000)


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def new_business_id(prefix: str) -> str:
    """
    Mint a business id like `formula-1718000000000-k3j9x0a2b`.

    Args:
        prefix: Entity kind ('formula', 'tag', 'snippet')
    """
    suffix = ''.join(random.choices(_ID_ALPHABET, k=9))
    return f"{prefix}-{now_ms()}-{suffix}"


def timestamp_ms(value: Any) -> float:
    """
    Epoch milliseconds for a stored timestamp.

    Numbers are taken as epoch ms; ISO-8601 strings are parsed with their
    offset (naive ones as UTC). Missing or unparseable values return -inf
    so they order as oldest.
    """
    if isinstance(value, bool) or value is None:
        return float('-inf')
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return float('-inf')
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp() * 1000
