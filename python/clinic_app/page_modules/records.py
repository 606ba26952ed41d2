"""
Medical Records Page for Wellness+ Clinic Dashboard

Record list (newest first) with search and type filter, the add-record form
and per-record downloads.
"""

import streamlit as st
from datetime import date
import logging

from clinic_app.components import forms, search_widgets
from clinic_app.services.entities import MEDICAL_RECORDS, PATIENT_PICKER, RECORD_TYPES, full_name
from clinic_app.services.entry_forms import add_medical_record_form
from clinic_app.services.reports import download_filename, record_to_json
from clinic_app.services.session_manager import get_data_service, get_fetcher, refresh_tables
from clinic_app.utils import config, helpers

logger = logging.getLogger(__name__)

ADD_FORM = 'add_medical_record'


def render():
    """Entry point called by main.py"""
    render_records()


def render_records():
    fetcher = get_fetcher('records', MEDICAL_RECORDS)
    fetcher.ensure_loaded()

    title_col, action_col = st.columns([4, 1])
    with title_col:
        st.title("📋 Medical Records")
        st.markdown("Consultations, results and prescriptions, newest first")
    with action_col:
        st.write("")
        if st.button("➕ Add Record", type="primary", use_container_width=True):
            st.session_state.open_form = ADD_FORM
            get_fetcher('record_patient_picker', PATIENT_PICKER).invalidate()

    if st.session_state.get('open_form') == ADD_FORM:
        _render_add_record()

    search_term, exact = search_widgets.render_list_toolbar(
        key="records",
        placeholder="Search by patient, patient ID, title or type",
        exact_filter=('record_type', 'Type', RECORD_TYPES),
        on_refresh=fetcher.fetch,
    )

    rows = fetcher.filtered(search_term, **exact)
    if not rows:
        search_widgets.render_empty_state(fetcher.empty_message(search_term), fetcher.loading)
        return

    search_widgets.render_results_caption(len(rows), len(fetcher.rows), "records")
    downloads = config.get_feature_flags().get('enable_downloads', True)
    for record in rows:
        render_record_card(record, downloads)


def render_record_card(record, downloads: bool = True) -> None:
    """Single medical record with its download action"""
    try:
        with st.container(border=True):
            col1, col2, col3 = st.columns([4, 2, 1])
            with col1:
                icon = helpers.get_record_type_icon(record.get('record_type'))
                st.markdown(f"**{icon} {record.get('title') or 'Untitled'}**")
                patient = record.get('patient')
                st.caption(f"{full_name(patient) or 'Unknown patient'} · "
                           f"{(patient or {}).get('patient_id', 'N/A')}")
                if record.get('description'):
                    st.text(helpers.truncate_text(record['description'], 160))
            with col2:
                st.markdown(record.get('record_type') or 'N/A')
                st.caption(f"{helpers.format_date(record.get('record_date'), '%b %d, %Y')} · "
                           f"{record.get('provider_name') or 'No provider'}")
            with col3:
                if not downloads:
                    return
                if record.get('file_url'):
                    st.link_button("⬇️ File", record['file_url'])
                else:
                    st.download_button(
                        "⬇️ JSON",
                        data=record_to_json(record),
                        file_name=download_filename(record.get('title')),
                        mime="application/json",
                        key=f"download_record_{record['id']}",
                    )

    except Exception as e:
        logger.error(f"Error rendering record {record.get('id')}: {e}")
        st.error("Error displaying medical record")


def _render_add_record():
    service = get_data_service()
    picker = get_fetcher('record_patient_picker', PATIENT_PICKER)
    picker.ensure_loaded()

    def on_success():
        forms.close_form(ADD_FORM)
        refresh_tables(MEDICAL_RECORDS.table)

    submission = forms.get_submission(
        ADD_FORM, lambda: add_medical_record_form(service, on_success=on_success, notify=forms.toast))

    with st.form("add_medical_record_form"):
        st.subheader("New Medical Record")
        patient_id = forms.render_patient_picker(picker.rows, key="record_patient")

        col1, col2 = st.columns(2)
        with col1:
            record_type = forms.optional_choice("Record Type *", RECORD_TYPES, key="record_type_choice")
        with col2:
            record_date = st.date_input("Record Date *", value=date.today(), max_value=date.today())

        title = st.text_input("Title *")
        description = st.text_area("Description")
        col1, col2 = st.columns(2)
        with col1:
            provider_name = st.text_input("Provider")
        with col2:
            file_url = st.text_input("File URL")

        col1, col2 = st.columns([1, 5])
        with col1:
            submitted = forms.submit_button("Save Record", submission, key="add_record_submit")
        with col2:
            cancelled = st.form_submit_button("Cancel")

    if cancelled:
        forms.close_form(ADD_FORM)
        st.rerun()

    if submitted and submission.submit({
        'patient_id': patient_id,
        'record_type': record_type,
        'record_date': record_date,
        'title': title,
        'description': description,
        'provider_name': provider_name,
        'file_url': file_url,
    }):
        st.rerun()

    forms.render_field_errors(submission.errors)
