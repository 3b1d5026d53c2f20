"""SQL interpreter for tab predicates.

The in-memory interpreter lives on :class:`~orderdesk.domain.models.tabs.Condition`;
this one must agree with it on every row.  Values are converted with the
same encoders the repository uses for writes so comparisons line up.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List, Tuple

from orderdesk.domain.models.core import format_timestamp
from orderdesk.domain.models.tabs import Condition, Field, Op, Predicate

# Whitelisted column names; field enums are the only thing interpolated.
_COLUMNS = {
    Field.ID: "id",
    Field.STATUS: "status",
    Field.IS_READ: "is_read",
    Field.DELETED_AT: "deleted_at",
    Field.CREATED_AT: "created_at",
}


def encode_value(value: Any) -> Any:
    """Convert a Python value into its storage representation."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return format_timestamp(value)
    return value


def _compile_condition(condition: Condition) -> Tuple[str, List[Any]]:
    column = _COLUMNS[condition.field]
    op = condition.op
    if op is Op.IS_NULL:
        return f"{column} IS NULL", []
    if op is Op.NOT_NULL:
        return f"{column} IS NOT NULL", []
    if op in (Op.IN, Op.NOT_IN):
        values = sorted(encode_value(v) for v in condition.value)
        if not values:
            # Empty IN matches nothing; empty NOT IN matches everything
            return ("0" if op is Op.IN else "1"), []
        placeholders = ", ".join("?" for _ in values)
        keyword = "IN" if op is Op.IN else "NOT IN"
        return f"{column} {keyword} ({placeholders})", values
    if op is Op.LT:
        return f"{column} < ?", [encode_value(condition.value)]
    if condition.field is Field.STATUS:
        # NULL status reads as "new"
        return f"COALESCE({column}, 'new') = ?", [encode_value(condition.value)]
    return f"{column} = ?", [encode_value(condition.value)]


def compile_predicate(predicate: Predicate) -> Tuple[str, List[Any]]:
    """Return ``(where_sql, params)``; an empty predicate compiles to ``1``."""
    if not predicate.conditions:
        return "1", []
    clauses: List[str] = []
    params: List[Any] = []
    for condition in predicate.conditions:
        sql, values = _compile_condition(condition)
        clauses.append(f"({sql})")
        params.extend(values)
    return " AND ".join(clauses), params
