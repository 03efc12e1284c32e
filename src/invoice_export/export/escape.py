"""Cell escapers for the delimited-text dialects.

Every dialect picks one of these as its escaping policy:

- ``escape_csv_field``: RFC-4180 style quoting, used by all CSV dialects.
- ``raw_field``: plain text form, no escaping (invoice-item TSV).
- ``escape_tsv_field``: tabs and line breaks replaced by spaces.
"""

from __future__ import annotations

import math
from decimal import Decimal

from ..domain.models import Scalar

_CSV_SPECIALS = ('"', ",", "\n", "\r")


def _number_text(value: float) -> str:
    """Shortest round-trip digits laid out like JavaScript's ``String(number)``.

    Plain notation for decimal exponents -7 < e < 21, otherwise ``1e-7``
    and ``1e+21`` style.
    """
    if value == 0:
        return "0"
    sign, digits, exp = Decimal(repr(value)).normalize().as_tuple()
    ds = "".join(str(d) for d in digits)
    k = len(ds)
    n = exp + k
    if k <= n <= 21:
        body = ds + "0" * (n - k)
    elif 0 < n <= 21:
        body = ds[:n] + "." + ds[n:]
    elif -6 < n <= 0:
        body = "0." + "0" * -n + ds
    else:
        mantissa = ds if k == 1 else ds[0] + "." + ds[1:]
        body = f"{mantissa}e{'+' if n - 1 >= 0 else '-'}{abs(n - 1)}"
    return "-" + body if sign else body


def text_of(value: Scalar) -> str:
    """Natural text form of a scalar: ``None`` -> '', ``True`` -> 'true', ``2.0`` -> '2'."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return _number_text(value)
    if isinstance(value, (int, Decimal)):
        return str(value)
    return str(value)


def escape_csv_field(value: Scalar) -> str:
    text = text_of(value)
    if any(ch in text for ch in _CSV_SPECIALS):
        return '"' + text.replace('"', '""') + '"'
    return text


def unescape_csv_field(cell: str) -> str:
    """Inverse of ``escape_csv_field`` for a single, already isolated cell."""
    if len(cell) >= 2 and cell.startswith('"') and cell.endswith('"'):
        return cell[1:-1].replace('""', '"')
    return cell


def raw_field(value: Scalar) -> str:
    return text_of(value)


def escape_tsv_field(value: Scalar) -> str:
    return text_of(value).replace("\t", " ").replace("\n", " ").replace("\r", " ")
