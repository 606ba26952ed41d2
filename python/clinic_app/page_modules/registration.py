"""
Patient Registration Page for Wellness+ Clinic Dashboard

Six-step intake wizard. The WizardState value lives in session state and is
replaced on every field change; Previous/Next only move the step counter and
the draft survives navigation in both directions.
"""

import streamlit as st
from datetime import date
from typing import Any, Dict
import logging

from clinic_app.components import forms
from clinic_app.services.entities import (
    ALCOHOL_CONSUMPTION, EXERCISE_FREQUENCIES, GENDERS, LANGUAGES, MARITAL_STATUSES,
    RELATIONSHIPS, SMOKING_STATUSES,
)
from clinic_app.services.exceptions import RegistrationError
from clinic_app.services.registration_wizard import (
    STEPS, TOTAL_STEPS, RegistrationService, WizardState, first_invalid_step,
)
from clinic_app.services.session_manager import get_data_service, refresh_tables

logger = logging.getLogger(__name__)

PREFERRED_TIMES = ("09:00", "10:00", "11:00", "14:00", "15:00", "16:00")


def render():
    """Entry point called by main.py"""
    render_registration()


def get_wizard_state() -> WizardState:
    if 'wizard_state' not in st.session_state:
        st.session_state.wizard_state = WizardState()
    return st.session_state.wizard_state


def set_wizard_state(state: WizardState):
    st.session_state.wizard_state = state


def _as_date(value: Any):
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def render_registration():
    state = get_wizard_state()
    step = state.current_step

    st.title("📝 Patient Registration")
    st.progress(int(state.progress), text=f"Step {state.step} of {TOTAL_STEPS}: {step.title}")

    st.caption(" · ".join(
        f"**{s.icon} {s.title}**" if s.number == state.step else f"{s.icon} {s.title}"
        for s in STEPS
    ))

    with st.container(border=True):
        st.subheader(f"{step.icon} {step.title}")
        values = STEP_RENDERERS[state.step](state.draft)

    for name, value in values.items():
        if getattr(state.draft, name) != value:
            state = state.set_field(name, value)
    set_wizard_state(state)

    errors = st.session_state.get('registration_errors') or {}
    forms.render_field_errors({k: v for k, v in errors.items() if k in step.fields})

    col1, col2, col3 = st.columns([1, 4, 1])
    with col1:
        if st.button("← Previous", disabled=state.is_first, use_container_width=True):
            set_wizard_state(state.previous())
            st.rerun()
    with col3:
        if state.is_last:
            service = get_registration_service()
            if st.button("Submit Registration", type="primary", use_container_width=True,
                         key="registration_submit", disabled=service.submitting,
                         on_click=service.mark_submitting):
                _submit(state, service)
        elif st.button("Next →", type="primary", use_container_width=True):
            set_wizard_state(state.next())
            st.rerun()


def get_registration_service() -> RegistrationService:
    """RegistrationService kept across reruns so its in-flight flag survives them"""
    data_service = get_data_service()
    service = st.session_state.get('registration_service')
    if service is None or service.data_service is not data_service:
        service = RegistrationService(data_service)
        st.session_state.registration_service = service
    return service


def _submit(state: WizardState, service: RegistrationService):
    try:
        with st.spinner("Registering patient..."):
            result = service.submit(state)
    except RegistrationError as e:
        st.session_state.registration_errors = e.errors
        invalid_step = first_invalid_step(e.errors)
        if invalid_step:
            forms.toast('error', f"Please complete the required fields in step {invalid_step}.")
            set_wizard_state(state.go_to(invalid_step))
            st.rerun()
        else:
            st.error("Failed to register patient. Please try again.")
        return

    st.session_state.registration_errors = {}
    set_wizard_state(WizardState())
    refresh_tables('patients', 'appointments', 'medical_records')
    forms.toast('success', f"Patient {result.patient['patient_id']} registered successfully!")
    st.query_params['page'] = 'patients'
    st.rerun()


def _render_personal(draft) -> Dict[str, Any]:
    values = {}
    col1, col2, col3 = st.columns(3)
    with col1:
        values['first_name'] = st.text_input("First Name *", value=draft.first_name, key="reg_first_name")
    with col2:
        values['middle_name'] = st.text_input("Middle Name", value=draft.middle_name, key="reg_middle_name")
    with col3:
        values['last_name'] = st.text_input("Last Name *", value=draft.last_name, key="reg_last_name")

    col1, col2, col3 = st.columns(3)
    with col1:
        values['date_of_birth'] = st.date_input(
            "Date of Birth *", value=_as_date(draft.date_of_birth),
            min_value=date(1900, 1, 1), max_value=date.today(), key="reg_date_of_birth") or ""
    with col2:
        values['gender'] = forms.optional_choice("Gender *", GENDERS, key="reg_gender", value=draft.gender)
    with col3:
        values['national_id'] = st.text_input("National ID", value=draft.national_id, key="reg_national_id")

    col1, col2 = st.columns(2)
    with col1:
        values['marital_status'] = forms.optional_choice(
            "Marital Status", MARITAL_STATUSES, key="reg_marital_status", value=draft.marital_status)
    with col2:
        values['preferred_language'] = forms.optional_choice(
            "Preferred Language", LANGUAGES, key="reg_preferred_language", value=draft.preferred_language)

    col1, col2, col3 = st.columns(3)
    with col1:
        values['email'] = st.text_input("Email *", value=draft.email, key="reg_email")
    with col2:
        values['primary_phone'] = st.text_input("Primary Phone *", value=draft.primary_phone,
                                                key="reg_primary_phone")
    with col3:
        values['secondary_phone'] = st.text_input("Secondary Phone", value=draft.secondary_phone,
                                                  key="reg_secondary_phone")
    return values


def _render_address(draft) -> Dict[str, Any]:
    values = {
        'street_address': st.text_area("Street Address *", value=draft.street_address,
                                       key="reg_street_address"),
    }
    col1, col2 = st.columns(2)
    with col1:
        values['city'] = st.text_input("City *", value=draft.city, key="reg_city")
        values['zip_postal_code'] = st.text_input("ZIP/Postal Code *", value=draft.zip_postal_code,
                                                  key="reg_zip_postal_code")
    with col2:
        values['state_province'] = st.text_input("State/Province *", value=draft.state_province,
                                                 key="reg_state_province")
        values['country'] = st.text_input("Country *", value=draft.country, key="reg_country")
    return values


def _render_emergency(draft) -> Dict[str, Any]:
    values = {}
    col1, col2 = st.columns(2)
    with col1:
        values['emergency_name'] = st.text_input("Contact Name *", value=draft.emergency_name,
                                                 key="reg_emergency_name")
        values['emergency_phone'] = st.text_input("Phone *", value=draft.emergency_phone,
                                                  key="reg_emergency_phone")
    with col2:
        values['emergency_relationship'] = forms.optional_choice(
            "Relationship *", RELATIONSHIPS, key="reg_emergency_relationship",
            value=draft.emergency_relationship)
        values['emergency_email'] = st.text_input("Email", value=draft.emergency_email,
                                                  key="reg_emergency_email")
    values['emergency_address'] = st.text_area("Address", value=draft.emergency_address,
                                               key="reg_emergency_address")
    return values


def _render_medical_history(draft) -> Dict[str, Any]:
    values = {}
    col1, col2 = st.columns(2)
    with col1:
        values['current_medications'] = st.text_area(
            "Current Medications", value=draft.current_medications, key="reg_current_medications")
        values['previous_surgeries'] = st.text_area(
            "Previous Surgeries", value=draft.previous_surgeries, key="reg_previous_surgeries")
        values['family_history'] = st.text_area(
            "Family Medical History", value=draft.family_history, key="reg_family_history")
    with col2:
        values['known_allergies'] = st.text_area(
            "Known Allergies", value=draft.known_allergies, key="reg_known_allergies")
        values['chronic_conditions'] = st.text_area(
            "Chronic Conditions", value=draft.chronic_conditions, key="reg_chronic_conditions")
        values['current_symptoms'] = st.text_area(
            "Current Symptoms / Reason for Visit", value=draft.current_symptoms,
            key="reg_current_symptoms")
    values['previous_providers'] = st.text_input(
        "Previous Healthcare Providers", value=draft.previous_providers, key="reg_previous_providers")
    return values


def _render_lifestyle(draft) -> Dict[str, Any]:
    values = {'occupation': st.text_input("Occupation", value=draft.occupation, key="reg_occupation")}
    col1, col2, col3 = st.columns(3)
    with col1:
        values['smoking_status'] = forms.optional_choice(
            "Smoking Status", SMOKING_STATUSES, key="reg_smoking_status", value=draft.smoking_status)
    with col2:
        values['alcohol_consumption'] = forms.optional_choice(
            "Alcohol Consumption", ALCOHOL_CONSUMPTION, key="reg_alcohol_consumption",
            value=draft.alcohol_consumption)
    with col3:
        values['exercise_habits'] = forms.optional_choice(
            "Exercise Habits", EXERCISE_FREQUENCIES, key="reg_exercise_habits",
            value=draft.exercise_habits)
    values['dietary_restrictions'] = st.text_area(
        "Dietary Restrictions", value=draft.dietary_restrictions, key="reg_dietary_restrictions")
    return values


def _render_appointment(draft) -> Dict[str, Any]:
    values = {}
    col1, col2 = st.columns(2)
    with col1:
        values['preferred_date'] = st.date_input(
            "Preferred Date *", value=_as_date(draft.preferred_date),
            min_value=date.today(), key="reg_preferred_date") or ""
    with col2:
        values['preferred_time'] = forms.optional_choice(
            "Preferred Time *", PREFERRED_TIMES, key="reg_preferred_time", value=draft.preferred_time)
    values['appointment_case'] = st.text_area(
        "Appointment Case *", value=draft.appointment_case, key="reg_appointment_case",
        placeholder="Describe the reason for the visit")
    return values


STEP_RENDERERS = {
    1: _render_personal,
    2: _render_address,
    3: _render_emergency,
    4: _render_medical_history,
    5: _render_lifestyle,
    6: _render_appointment,
}
