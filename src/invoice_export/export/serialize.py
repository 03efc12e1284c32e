from __future__ import annotations

import csv
import io
import json
import math
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence

from ..domain.models import Scalar
from .dialects import Dialect, RecordKind
from .flatten import flatten


def serialize(header: Sequence[str], rows: Sequence[Sequence[Scalar]], dialect: Dialect) -> str:
    """Join header and rows into one text blob.

    Empty ``rows`` yields "" rather than a lone header. Lines are joined by
    a single LF with no trailing newline.
    """
    if not rows:
        return ""
    sep = dialect.delimiter
    lines = [sep.join(header)]
    lines.extend(sep.join(dialect.escape(cell) for cell in row) for row in rows)
    return "\n".join(lines)


def render(records: Iterable[Any], dialect: Dialect) -> str:
    """Flatten and serialize ``records`` for ``dialect``."""
    return serialize(dialect.header, flatten(records, dialect), dialect)


def _plain(value: Any) -> Any:
    """Whole floats as ints (``-850.0`` -> ``-850``), NaN/Infinity as null, Decimals as numbers."""
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, Decimal):
        value = float(value) if value != value.to_integral_value() else int(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value) if value.is_integer() else value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def to_json(records: Iterable[Any], kind: Optional[RecordKind] = None) -> str:
    """Pretty-printed JSON array.

    With a ``kind`` that has a ``json_row`` builder every record becomes a
    flat object keyed by its column headers; otherwise records with
    ``to_dict`` are converted first.
    """
    if kind is not None and kind.json_row is not None:
        payload = [kind.json_row(r) for r in records]
    else:
        payload = [r.to_dict() if hasattr(r, "to_dict") else r for r in records]
    return json.dumps(_plain(payload), indent=2, ensure_ascii=False)


def read_table(text: str, delimiter: str = ",") -> List[List[str]]:
    """Split serialized CSV back into cell texts, honouring quoted fields."""
    if not text:
        return []
    return list(csv.reader(io.StringIO(text, newline=""), delimiter=delimiter))
