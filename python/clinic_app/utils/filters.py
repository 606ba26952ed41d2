"""
Client-side list filtering for dashboard tables

Search runs against the rows already held in memory; nothing is sent to the
data store.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

ALL = "all"


def matches_search(row: Dict[str, Any], search_term: str,
                   search_fields: Iterable[Callable[[Dict[str, Any]], Optional[str]]]) -> bool:
    """
    Case-insensitive substring match of search_term against any search field

    Args:
        row: Record to test
        search_term: Text typed into the search box
        search_fields: Callables extracting the searchable strings from a row

    Returns:
        True when the term is blank or found in at least one field
    """
    if not search_term or not search_term.strip():
        return True
    # Surrounding spaces are part of the term
    needle = search_term.lower()
    for extract in search_fields:
        value = extract(row)
        if value is not None and needle in str(value).lower():
            return True
    return False


def matches_exact(row: Dict[str, Any], field_name: str, expected: Optional[str]) -> bool:
    """Case-insensitive equality; empty or 'all' disables the filter"""
    if expected is None or str(expected).strip() == "" or str(expected).lower() == ALL:
        return True
    value = row.get(field_name)
    return value is not None and str(value).lower() == str(expected).lower()


def filter_rows(rows: List[Dict[str, Any]], search_term: str = "",
                search_fields: Iterable[Callable] = (),
                exact: Dict[str, Optional[str]] = None) -> List[Dict[str, Any]]:
    """
    Narrow rows by search text and exact-match filters, combined with AND

    Args:
        rows: Full in-memory list
        search_term: Substring to look for
        search_fields: Per-entity field extractors
        exact: Mapping of column name to required value (e.g. {'gender': 'Female'})

    Returns:
        Filtered list preserving the original order
    """
    search_fields = tuple(search_fields)
    exact = exact or {}
    return [
        row for row in rows
        if matches_search(row, search_term, search_fields)
        and all(matches_exact(row, name, value) for name, value in exact.items())
    ]
