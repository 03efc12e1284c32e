from __future__ import annotations

from typing import Any, Iterable, List, Sequence

from ..domain.models import Scalar
from .dialects import Dialect, Expansion, lookup


Row = List[Scalar]


def _sub_collection(record: Any, name: str) -> Sequence[Any]:
    return lookup(record, name) or ()


def flatten_record(record: Any, dialect: Dialect) -> List[Row]:
    """Expand one record into ``max(1, longest nested collection)`` rows.

    Base columns are extracted once. Under BLANK_CONTINUATION they appear
    on the first row only; under REPEAT_BASE on every row. Nested columns
    read the i-th element of their collection, or stay None past its end.
    """
    collections = {name: _sub_collection(record, name) for name in dialect.collections}
    base = [None if c.collection else c.extract(record) for c in dialect.columns]
    row_count = max([1] + [len(items) for items in collections.values()])

    rows: List[Row] = []
    for i in range(row_count):
        show_base = i == 0 or dialect.expansion is Expansion.REPEAT_BASE
        row: Row = []
        for col, base_value in zip(dialect.columns, base):
            if col.collection is None:
                row.append(base_value if show_base else None)
                continue
            items = collections[col.collection]
            row.append(col.extract(items[i]) if i < len(items) else None)
        rows.append(row)
    return rows


def flatten(records: Iterable[Any], dialect: Dialect) -> List[Row]:
    rows: List[Row] = []
    for record in records:
        rows.extend(flatten_record(record, dialect))
    return rows
