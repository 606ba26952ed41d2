"""
Reports Page for Wellness+ Clinic Dashboard

Report cards that generate a new report from live data, and the list of
generated reports with a JSON download for each.
"""

import streamlit as st
import logging

from clinic_app.components import analytics_widgets, forms, search_widgets
from clinic_app.services.entities import REPORTS
from clinic_app.services.reports import (
    REPORT_DESCRIPTIONS, REPORT_TYPES, ReportGenerator, download_filename, report_data_of,
    report_to_json,
)
from clinic_app.services.session_manager import get_data_service, get_fetcher, get_session_manager
from clinic_app.utils import config, helpers

logger = logging.getLogger(__name__)

REPORT_ICONS = {
    "Patient Summary": "👥",
    "Appointment Stats": "📅",
    "Medical Analysis": "🩺",
}


def render():
    """Entry point called by main.py"""
    render_reports()


def render_reports():
    st.title("📈 Reports")
    st.markdown("Generate and download clinic reports")

    fetcher = get_fetcher('reports', REPORTS)
    fetcher.ensure_loaded()
    features = config.get_feature_flags()

    if features.get('enable_report_generation', True):
        _render_report_cards(fetcher)

    st.divider()
    st.subheader("Generated Reports")

    search_term, exact = search_widgets.render_list_toolbar(
        key="reports",
        placeholder="Search by report name, type or author",
        exact_filter=('report_type', 'Type', REPORT_TYPES),
        on_refresh=fetcher.fetch,
    )

    rows = fetcher.filtered(search_term, **exact)
    if not rows:
        search_widgets.render_empty_state(fetcher.empty_message(search_term), fetcher.loading)
        return

    for report in rows:
        _render_report_row(report, features.get('enable_downloads', True))


def _render_report_cards(fetcher):
    columns = st.columns(len(REPORT_TYPES))
    for column, report_type in zip(columns, REPORT_TYPES):
        with column:
            with st.container(border=True):
                st.markdown(f"### {REPORT_ICONS.get(report_type, '📄')} {report_type}")
                st.caption(REPORT_DESCRIPTIONS[report_type])
                if st.button("Generate", key=f"generate_{report_type}", use_container_width=True):
                    _generate(fetcher, report_type)


def _generate(fetcher, report_type: str):
    generator = ReportGenerator(get_data_service())
    try:
        with st.spinner(f"Generating {report_type}..."):
            generator.generate(report_type, generated_by=get_session_manager().user)
    except Exception as e:
        logger.error(f"Error generating {report_type}: {e}")
        forms.toast('error', "Failed to generate report. Please try again.")
        return

    forms.toast('success', f"{report_type} report generated.")
    fetcher.fetch()
    st.rerun()


def _render_report_row(report, downloads: bool):
    try:
        generated_at = helpers.format_date(report.get('generated_at'), '%b %d, %Y %H:%M')
        title = f"{REPORT_ICONS.get(report.get('report_type'), '📄')} {report.get('report_name')}"
        with st.expander(f"{title} · {generated_at}"):
            st.caption(f"{report.get('report_type')} · generated by {report.get('generated_by') or 'N/A'}")
            analytics_widgets.render_report_payload(report_data_of(report))
            if downloads:
                st.download_button(
                    "⬇️ Download JSON",
                    data=report_to_json(report),
                    file_name=download_filename(report.get('report_name')),
                    mime="application/json",
                    key=f"download_report_{report['id']}",
                )

    except Exception as e:
        logger.error(f"Error rendering report {report.get('id')}: {e}")
        st.error("Error displaying report")
