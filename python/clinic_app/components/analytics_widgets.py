"""
Analytics Widgets Component for Wellness+ Clinic Dashboard

Metric cards and charts built on Streamlit's native charting, plus the
renderer for stored report payloads.
"""

import streamlit as st
import pandas as pd
from typing import Any, Dict, Optional, Union
import logging

logger = logging.getLogger(__name__)


def render_metric_card(title: str, value: Union[int, float, str],
                       delta: Optional[Union[int, float, str]] = None,
                       help_text: str = None) -> None:
    """
    Render a metric card with title, value, and optional delta

    Args:
        title: Metric title
        value: Primary metric value
        delta: Optional delta/change value
        help_text: Optional help text
    """
    try:
        with st.container(border=True):
            st.metric(label=title, value=value, delta=delta, help=help_text)

    except Exception as e:
        logger.error(f"Error rendering metric card: {e}")
        st.error("Error displaying metric")


def counts_to_frame(counts: Dict[str, Any], label: str = "Category",
                    value: str = "Count") -> pd.DataFrame:
    """Two-column frame from a ``{category: count}`` mapping"""
    return pd.DataFrame(
        [(str(k), v) for k, v in (counts or {}).items()],
        columns=[label, value],
    )


def render_distribution_chart(counts: Dict[str, Any], title: str, height: int = 280) -> None:
    """Bar chart of a category count mapping"""
    try:
        df = counts_to_frame(counts)
        if df.empty or df['Count'].sum() == 0:
            st.caption(f"{title}: no data")
            return
        st.markdown(f"**{title}**")
        st.bar_chart(df.set_index('Category')['Count'], height=height)

    except Exception as e:
        logger.error(f"Error rendering chart '{title}': {e}")
        st.error(f"Error displaying {title}")


def humanize_key(key: str) -> str:
    return key.replace('_', ' ').title()


def render_report_payload(report_data: Dict[str, Any]) -> None:
    """
    Render a stored report: scalar entries as metrics, mappings as charts

    Args:
        report_data: Decoded ``report_data`` payload
    """
    if not isinstance(report_data, dict) or not report_data:
        st.info("This report has no data.")
        return

    scalars = {k: v for k, v in report_data.items() if not isinstance(v, (dict, list))}
    mappings = {k: v for k, v in report_data.items() if isinstance(v, dict)}

    if scalars:
        columns = st.columns(min(len(scalars), 4))
        for index, (key, value) in enumerate(scalars.items()):
            with columns[index % len(columns)]:
                render_metric_card(humanize_key(key), value if value is not None else "N/A")

    for key, value in mappings.items():
        render_distribution_chart(value, humanize_key(key))
