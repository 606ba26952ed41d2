"""
Route table for the dashboard

The ``page`` query parameter selects the route. No value is the entry page;
unknown values render the not-found page. Every other route needs a signed-in
session and falls back to the entry page without one.
"""

from typing import Optional

ENTRY = 'entry'
NOT_FOUND = 'not_found'

PROTECTED_ROUTES = ('dashboard', 'patients', 'appointments', 'records', 'register', 'reports')
PUBLIC_ROUTES = (ENTRY, NOT_FOUND)


def resolve_route(page: Optional[str], authenticated: bool) -> str:
    """
    Map a ``page`` query value to the route to render

    Args:
        page: Raw query parameter value (None when absent)
        authenticated: Whether a live backend session exists

    Returns:
        Route name
    """
    page = (page or '').strip().lower()
    if not page or page == ENTRY:
        return ENTRY
    if page not in PROTECTED_ROUTES:
        return NOT_FOUND
    if not authenticated:
        return ENTRY
    return page


def is_redirect(page: Optional[str], route: str) -> bool:
    """True when the requested page was replaced by the entry page"""
    requested = (page or '').strip().lower()
    return route == ENTRY and requested not in ('', ENTRY)
