"""
Search Widgets Component for Wellness+ Clinic Dashboard

List toolbar used by every tab: search box, optional exact-match filter and
the result caption. Filtering itself runs client-side through RecordFetcher.
"""

import streamlit as st
from typing import Dict, Optional, Sequence, Tuple
import logging

from clinic_app.utils.filters import ALL

logger = logging.getLogger(__name__)


def render_list_toolbar(key: str, placeholder: str,
                        exact_filter: Optional[Tuple[str, str, Sequence[str]]] = None,
                        on_refresh=None) -> Tuple[str, Dict[str, str]]:
    """
    Render the search box and an optional filter select

    Args:
        key: Unique key prefix for the widgets
        placeholder: Search box placeholder
        exact_filter: ``(column, label, options)`` for an exact-match filter
        on_refresh: Called when the refresh button is pressed

    Returns:
        Tuple of the search term and the exact-match filter values
    """
    exact: Dict[str, str] = {}
    try:
        if exact_filter:
            col1, col2, col3 = st.columns([4, 2, 1])
        else:
            col1, col3 = st.columns([6, 1])
            col2 = None

        with col1:
            search_term = st.text_input(
                "Search",
                placeholder=placeholder,
                key=f"{key}_search",
                label_visibility="collapsed",
            )

        if exact_filter and col2 is not None:
            column_name, label, options = exact_filter
            with col2:
                exact[column_name] = st.selectbox(
                    label,
                    options=[ALL] + list(options),
                    format_func=lambda o: f"All {label.lower()}" if o == ALL else o,
                    key=f"{key}_{column_name}_filter",
                    label_visibility="collapsed",
                )

        with col3:
            if st.button("🔄", key=f"{key}_refresh", help="Reload from the database") and on_refresh:
                on_refresh()

        return search_term, exact

    except Exception as e:
        logger.error(f"Error rendering list toolbar: {e}")
        st.error("Search unavailable")
        return "", exact


def render_results_caption(shown: int, total: int, noun: str) -> None:
    if total:
        st.caption(f"Showing {shown} of {total} {noun}")


def render_empty_state(message: str, loading: bool = False) -> None:
    if loading:
        st.info("Loading...")
    else:
        st.info(message)
