import random
import string
import time
from datetime import datetime, timezone
from typing import Optional


# ----------------------------
# Helpers
# ----------------------------
def now_ms() -> int:
    # provider events carry millisecond timestamps
    return int(time.time() * 1000)


def to_iso(ts_ms: int | None) -> Optional[str]:
    if ts_ms is None:
        return None
    return datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc).isoformat()


_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_order_id() -> str:
    return "ord_" + "".join(random.choices(_ID_ALPHABET, k=6))


_CURRENCY_SYMBOLS = {"usd": "$", "eur": "€", "gbp": "£"}


def format_amount(amount: int, currency: str) -> str:
    # "$42.00"; unknown currencies fall back to "CHF 42.00"
    symbol = _CURRENCY_SYMBOLS.get(currency.lower())
    if symbol is None:
        return f"{currency.upper()} {amount / 100:.2f}"
    return f"{symbol}{amount / 100:.2f}"


def env_flag(value: Optional[str]) -> bool:
    return (value or "").strip() == "1"
