"""
Patient Cards Component for Wellness+ Clinic Dashboard

Patient table, patient detail card and the appointment/record tables that
show an embedded patient.
"""

import streamlit as st
import pandas as pd
from typing import Any, Callable, Dict, List, Optional
import logging

from clinic_app.services.entities import full_name
from clinic_app.utils import helpers

logger = logging.getLogger(__name__)

PATIENT_COLUMNS = {
    'Patient ID': 'patient_id',
    'Name': full_name,
    'Age': lambda p: helpers.calculate_age(p.get('date_of_birth')),
    'Gender': 'gender',
    'Email': lambda p: p.get('email') or 'N/A',
    'Phone': lambda p: helpers.format_phone_number(p.get('primary_phone')),
    'Registered': lambda p: helpers.format_date(p.get('created_at')),
}

APPOINTMENT_COLUMNS = {
    'Date': lambda a: helpers.format_date(a.get('appointment_date'), '%b %d, %Y'),
    'Time': lambda a: helpers.format_time(a.get('appointment_time')),
    'Patient': lambda a: full_name(a.get('patient')) or 'Unknown patient',
    'Patient ID': lambda a: (a.get('patient') or {}).get('patient_id'),
    'Case': 'appointment_case',
    'Provider': lambda a: a.get('provider_name') or 'Unassigned',
    'Status': lambda a: f"{helpers.get_status_badge(a.get('status'))} {a.get('status')}",
}


def patient_label(patient: Dict[str, Any]) -> str:
    return f"{full_name(patient)} · {patient.get('patient_id', 'N/A')}"


def render_patient_table(patients: List[Dict[str, Any]], key: str = "patients_table") -> None:
    """Render patients as a read-only table"""
    try:
        df = helpers.rows_to_dataframe(patients, PATIENT_COLUMNS)
        st.dataframe(df, use_container_width=True, hide_index=True, key=key)
    except Exception as e:
        logger.error(f"Error rendering patient table: {e}")
        st.error("Error displaying patients")


def render_appointment_table(appointments: List[Dict[str, Any]], key: str = "appointments_table") -> None:
    try:
        df = helpers.rows_to_dataframe(appointments, APPOINTMENT_COLUMNS)
        st.dataframe(df, use_container_width=True, hide_index=True, key=key)
    except Exception as e:
        logger.error(f"Error rendering appointment table: {e}")
        st.error("Error displaying appointments")


def render_patient_card(patient: Dict[str, Any], key: str,
                        on_edit: Optional[Callable[[Dict[str, Any]], None]] = None) -> None:
    """
    Render a patient detail card

    Args:
        patient: Patient row
        key: Unique key for the component
        on_edit: Optional callback when the edit button is pressed
    """
    try:
        with st.container(border=True):
            col1, col2, col3, col4 = st.columns([3, 2, 3, 1])

            with col1:
                st.markdown(f"**{full_name(patient) or 'Unknown'}**")
                st.text(f"Patient ID: {patient.get('patient_id', 'N/A')}")
                age = helpers.calculate_age(patient.get('date_of_birth'))
                st.text(f"Age: {age if age is not None else 'Unknown'} | Gender: {patient.get('gender', 'Unknown')}")

            with col2:
                st.markdown("**Profile**")
                st.text(f"Marital status: {patient.get('marital_status') or 'N/A'}")
                st.text(f"Language: {patient.get('preferred_language') or 'N/A'}")

            with col3:
                st.markdown("**Contact**")
                st.text(f"📧 {patient.get('email') or 'N/A'}")
                st.text(f"📞 {helpers.format_phone_number(patient.get('primary_phone'))}")
                if patient.get('secondary_phone'):
                    st.text(f"📱 {helpers.format_phone_number(patient.get('secondary_phone'))}")

            with col4:
                if on_edit and st.button("Edit", key=f"edit_{key}"):
                    on_edit(patient)

    except Exception as e:
        logger.error(f"Error rendering patient card: {e}")
        st.error("Error displaying patient")
        st.text(f"Patient ID: {patient.get('patient_id', 'Unknown')}")


def render_appointment_queue(appointments: List[Dict[str, Any]]) -> None:
    """Compact list of appointments for the dashboard"""
    if not appointments:
        st.info("No appointments scheduled for today.")
        return
    for appointment in appointments:
        col1, col2, col3 = st.columns([1, 3, 2])
        with col1:
            st.markdown(f"**{helpers.format_time(appointment.get('appointment_time'))}**")
        with col2:
            st.markdown(full_name(appointment.get('patient')) or 'Unknown patient')
            st.caption(helpers.truncate_text(appointment.get('appointment_case'), 60))
        with col3:
            status = appointment.get('status')
            st.markdown(f"{helpers.get_status_badge(status)} {status}")


def patients_to_csv(patients: List[Dict[str, Any]]) -> bytes:
    df: pd.DataFrame = helpers.rows_to_dataframe(patients, PATIENT_COLUMNS)
    return df.to_csv(index=False).encode('utf-8')
