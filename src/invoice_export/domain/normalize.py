import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Tuple

from ..logging import get_logger

_LOG = get_logger("normalize")

_DE_DATE = re.compile(r"(\d{2})\.(\d{2})\.(\d{4})")
_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def posting_date(value: Optional[str]) -> str:
    """Convert a German DD.MM.YYYY date to ISO YYYY-MM-DD for ERPNext.

    - DD.MM.YYYY anywhere in the string -> YYYY-MM-DD
    - Anything else (ISO included) is passed through unchanged
    - None/empty -> ""
    """
    if not value:
        return ""
    m = _DE_DATE.search(value)
    if m:
        d, mth, y = m.groups()
        return f"{y}-{mth}-{d}"
    if not _ISO_DATE.fullmatch(value):
        _LOG.debug(f"Unrecognised posting date kept verbatim: {value!r}")
    return value


def split_amount(amount: float) -> Tuple[float, float]:
    """Split a signed amount into (deposit, withdrawal), both non-negative."""
    deposit = amount if amount > 0 else 0
    withdrawal = abs(amount) if amount < 0 else 0
    return deposit, withdrawal


def percent_or_na(confidence: Optional[float]) -> str:
    """Render a 0..1 confidence as a whole percentage, e.g. 0.875 -> '88%'."""
    if confidence is None:
        return "N/A"
    # Halves round away from zero: 0.125 -> 13%.
    pct = Decimal(confidence * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"{pct}%"
