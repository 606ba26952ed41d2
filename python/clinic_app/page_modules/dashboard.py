"""
Dashboard Page for Wellness+ Clinic Dashboard

Headline metrics from live data, today's appointment queue and the most
recently registered patients.
"""

import streamlit as st
import logging

from clinic_app.components import analytics_widgets, patient_cards
from clinic_app.services.data_service import get_dashboard_stats, todays_appointments
from clinic_app.services.entities import APPOINTMENTS, MEDICAL_RECORDS, PATIENTS
from clinic_app.services.session_manager import get_fetcher

logger = logging.getLogger(__name__)


def render():
    """Entry point called by main.py"""
    render_dashboard()


def render_dashboard():
    st.title("📊 Dashboard")
    st.markdown("Today's overview of the clinic")

    patients = get_fetcher('dashboard_patients', PATIENTS)
    appointments = get_fetcher('dashboard_appointments', APPOINTMENTS)
    records = get_fetcher('dashboard_records', MEDICAL_RECORDS)

    with st.spinner("Loading clinic data..."):
        for fetcher in (patients, appointments, records):
            fetcher.ensure_loaded()

    stats = get_dashboard_stats(patients.rows, appointments.rows, records.rows)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        analytics_widgets.render_metric_card(
            "Total Patients", stats['total_patients'],
            delta=f"+{stats['new_patients_this_month']} this month" if stats['new_patients_this_month'] else None,
        )
    with col2:
        analytics_widgets.render_metric_card("Appointments", stats['total_appointments'],
                                             help_text=f"{stats['upcoming_appointments']} upcoming")
    with col3:
        analytics_widgets.render_metric_card("Today's Appointments", stats['todays_appointments'])
    with col4:
        analytics_widgets.render_metric_card("Medical Records", stats['total_records'])

    st.divider()

    queue_col, recent_col = st.columns([3, 2])
    with queue_col:
        st.subheader("📅 Today's Appointments")
        patient_cards.render_appointment_queue(todays_appointments(appointments.rows))

    with recent_col:
        st.subheader("🆕 Recent Patients")
        recent = patients.rows[:5]
        if not recent:
            st.info(PATIENTS.empty_message)
        for patient in recent:
            st.markdown(f"**{patient_cards.patient_label(patient)}**")
            st.caption(f"Registered {patient.get('created_at', 'N/A')}")

    if st.button("🔄 Refresh", key="dashboard_refresh"):
        for fetcher in (patients, appointments, records):
            fetcher.fetch()
        st.rerun()
