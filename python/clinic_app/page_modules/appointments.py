"""
Appointments Page for Wellness+ Clinic Dashboard

Appointment list ordered by date and time, the schedule form and the status
controls (status change and cancellation).
"""

import streamlit as st
from datetime import date, time
import logging

from clinic_app.components import forms, patient_cards, search_widgets
from clinic_app.services.entities import APPOINTMENT_STATUSES, APPOINTMENTS, PATIENT_PICKER, full_name
from clinic_app.services.entry_forms import add_appointment_form
from clinic_app.services.session_manager import get_data_service, get_fetcher, refresh_tables
from clinic_app.utils import config, helpers

logger = logging.getLogger(__name__)

ADD_FORM = 'add_appointment'


def render():
    """Entry point called by main.py"""
    render_appointments()


def render_appointments():
    fetcher = get_fetcher('appointments', APPOINTMENTS)
    fetcher.ensure_loaded()

    title_col, action_col = st.columns([4, 1])
    with title_col:
        st.title("📅 Appointments")
        st.markdown("Scheduled visits, earliest first")
    with action_col:
        st.write("")
        if st.button("➕ New Appointment", type="primary", use_container_width=True):
            st.session_state.open_form = ADD_FORM
            get_fetcher('appointment_patient_picker', PATIENT_PICKER).invalidate()

    if st.session_state.get('open_form') == ADD_FORM:
        _render_add_appointment()

    search_term, exact = search_widgets.render_list_toolbar(
        key="appointments",
        placeholder="Search by patient name, patient ID or case",
        exact_filter=('status', 'Status', APPOINTMENT_STATUSES),
        on_refresh=fetcher.fetch,
    )

    rows = fetcher.filtered(search_term, **exact)
    if not rows:
        search_widgets.render_empty_state(fetcher.empty_message(search_term), fetcher.loading)
        return

    search_widgets.render_results_caption(len(rows), len(fetcher.rows), "appointments")
    patient_cards.render_appointment_table(rows)

    if config.get_feature_flags().get('enable_status_updates', True):
        _render_status_controls(rows)


def _appointment_label(appointment) -> str:
    return (f"{helpers.format_date(appointment.get('appointment_date'), '%b %d, %Y')} "
            f"{helpers.format_time(appointment.get('appointment_time'))} · "
            f"{full_name(appointment.get('patient')) or 'Unknown patient'} · "
            f"{appointment.get('status')}")


def _render_status_controls(rows):
    st.subheader("Update Status")
    labels = {_appointment_label(a): a for a in rows}
    choice = st.selectbox("Appointment", options=list(labels.keys()), key="appointment_status_target")
    if not choice:
        return
    appointment = labels[choice]
    service = get_data_service()

    col1, col2, col3 = st.columns([2, 1, 1])
    with col1:
        current = appointment.get('status')
        new_status = st.selectbox(
            "New status", APPOINTMENT_STATUSES,
            index=APPOINTMENT_STATUSES.index(current) if current in APPOINTMENT_STATUSES else 0,
            key=f"status_select_{appointment['id']}",
        )
    with col2:
        st.write("")
        update_clicked = st.button("Update Status", key=f"status_update_{appointment['id']}")
    with col3:
        st.write("")
        cancel_clicked = st.button("Cancel Appointment", key=f"status_cancel_{appointment['id']}",
                                   disabled=current == 'Cancelled')

    try:
        if update_clicked:
            service.update_appointment_status(appointment['id'], new_status)
            forms.toast('success', f"Appointment marked {new_status}.")
        elif cancel_clicked:
            service.cancel_appointment(appointment['id'])
            forms.toast('success', "Appointment cancelled.")
        else:
            return
    except Exception as e:
        logger.error(f"Error updating appointment {appointment['id']}: {e}")
        forms.toast('error', "Failed to update appointment. Please try again.")
        return

    refresh_tables(APPOINTMENTS.table)
    st.rerun()


def _render_add_appointment():
    service = get_data_service()
    picker = get_fetcher('appointment_patient_picker', PATIENT_PICKER)
    picker.ensure_loaded()

    def on_success():
        forms.close_form(ADD_FORM)
        refresh_tables(APPOINTMENTS.table)

    submission = forms.get_submission(
        ADD_FORM, lambda: add_appointment_form(service, on_success=on_success, notify=forms.toast))

    with st.form("add_appointment_form"):
        st.subheader("Schedule Appointment")
        patient_id = forms.render_patient_picker(picker.rows, key="appointment_patient")

        col1, col2 = st.columns(2)
        with col1:
            appointment_date = st.date_input("Date *", value=None, min_value=date.today())
        with col2:
            appointment_time = st.time_input("Time *", value=time(9, 0), step=900)

        appointment_case = st.text_input("Case / Reason *")
        provider_name = st.text_input("Provider")
        notes = st.text_area("Notes")

        col1, col2 = st.columns([1, 5])
        with col1:
            submitted = forms.submit_button("Schedule", submission, key="add_appointment_submit")
        with col2:
            cancelled = st.form_submit_button("Cancel")

    if cancelled:
        forms.close_form(ADD_FORM)
        st.rerun()

    if submitted and submission.submit({
        'patient_id': patient_id,
        'appointment_date': appointment_date,
        'appointment_time': appointment_time,
        'appointment_case': appointment_case,
        'provider_name': provider_name,
        'notes': notes,
    }):
        st.rerun()

    forms.render_field_errors(submission.errors)
