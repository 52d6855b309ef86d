"""
Arrow Utilities

Conversions between PyArrow tables and the plain Python records the
query engine operates on. Arrow data is converted to rows at the source
and back to a table only at the output boundary.
"""

from typing import Any, Dict, Iterable, List, Union

import pyarrow as pa


def is_arrow(data) -> bool:
    """Check if data is a PyArrow table."""
    return isinstance(data, pa.Table)


def to_list(data: Union[pa.Table, Iterable[Any]]) -> List[Any]:
    """Convert a table to a list of rows (dicts for Arrow tables)."""
    if is_arrow(data):
        return data.to_pylist()
    return list(data)


def to_arrow(data: Union[pa.Table, List[Dict[str, Any]]]) -> pa.Table:
    """Convert a list of dict records to a PyArrow table."""
    if is_arrow(data):
        return data
    if not data:
        return pa.table({})
    return pa.Table.from_pylist(data)
