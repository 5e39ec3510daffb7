"""
Presentation Filters

Search, type filter and re-sort over an already ranked list. Each step
builds a new list; the engine's output is never modified.
"""

import re
from typing import Any, List, Optional, Sequence, Union

from errors import ValidationError
from .constants import ALL_TYPES, DEFAULT_SORT, SortKey

_NON_DIGITS = re.compile(r"[^\d]")


def parse_salary(salary: Optional[str]) -> int:
    """Digits of a salary string as an int ("$8,000/month" -> 8000); 0 when none."""
    if not salary:
        return 0
    digits = _NON_DIGITS.sub("", salary)
    return int(digits) if digits else 0


def filter_by_query(items: Sequence[Any], query: str) -> List[Any]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(items)
    return [
        item for item in items
        if needle in item.title.lower() or needle in item.organization.lower()
    ]


def filter_by_type(items: Sequence[Any], type_filter: str) -> List[Any]:
    if not type_filter or type_filter == ALL_TYPES:
        return list(items)
    return [item for item in items if item.type == type_filter]


def sort_items(items: Sequence[Any], sort_by: Union[SortKey, str] = DEFAULT_SORT) -> List[Any]:
    try:
        key = SortKey(sort_by)
    except ValueError:
        allowed = ", ".join(k.value for k in SortKey)
        raise ValidationError(f"Unknown sort key {sort_by!r} (expected one of: {allowed})")

    if key is SortKey.BEST_MATCH:
        return sorted(items, key=lambda x: getattr(x, "match_percentage", 0), reverse=True)
    if key is SortKey.DEADLINE_SOON:
        return sorted(items, key=lambda x: x.deadline or "")
    if key is SortKey.RECENTLY_ADDED:
        return sorted(items, key=lambda x: x.id, reverse=True)
    return sorted(items, key=lambda x: parse_salary(x.salary), reverse=True)


def filter_opportunities(
    items: Sequence[Any],
    query: str = "",
    type_filter: str = ALL_TYPES,
    sort_by: Union[SortKey, str] = DEFAULT_SORT,
) -> List[Any]:
    """Apply query filter, then type filter, then re-sort."""
    result = filter_by_query(items, query)
    result = filter_by_type(result, type_filter)
    return sort_items(result, sort_by)
