"""
Patients Page for Wellness+ Clinic Dashboard

Patient list with search and gender filter, the quick add-patient form and
the contact-details edit form.
"""

import streamlit as st
from datetime import date
import logging

from clinic_app.components import forms, patient_cards, search_widgets
from clinic_app.services.entities import GENDERS, LANGUAGES, MARITAL_STATUSES, PATIENTS
from clinic_app.services.entry_forms import add_patient_form, edit_patient_form
from clinic_app.services.session_manager import get_data_service, get_fetcher, refresh_tables
from clinic_app.utils import config

logger = logging.getLogger(__name__)

ADD_FORM = 'add_patient'


def render():
    """Entry point called by main.py"""
    render_patients()


def render_patients():
    fetcher = get_fetcher('patients', PATIENTS)
    fetcher.ensure_loaded()

    title_col, action_col = st.columns([4, 1])
    with title_col:
        st.title("👥 Patients")
        st.markdown("Registered patients of the clinic")
    with action_col:
        st.write("")
        if st.button("➕ Add Patient", type="primary", use_container_width=True):
            st.session_state.open_form = ADD_FORM

    if st.session_state.get('open_form') == ADD_FORM:
        _render_add_patient()

    search_term, exact = search_widgets.render_list_toolbar(
        key="patients",
        placeholder="Search by name, patient ID, email or phone",
        exact_filter=('gender', 'Gender', GENDERS),
        on_refresh=fetcher.fetch,
    )

    rows = fetcher.filtered(search_term, **exact)
    if not rows:
        search_widgets.render_empty_state(fetcher.empty_message(search_term), fetcher.loading)
        return

    search_widgets.render_results_caption(len(rows), len(fetcher.rows), "patients")
    patient_cards.render_patient_table(rows)

    st.download_button(
        "⬇️ Export CSV",
        data=patient_cards.patients_to_csv(rows),
        file_name="patients.csv",
        mime="text/csv",
    )

    st.subheader("Patient Details")
    labels = {patient_cards.patient_label(p): p for p in rows}
    choice = st.selectbox("Select a patient", options=list(labels.keys()), key="patients_selected")
    if choice:
        patient = labels[choice]
        can_edit = config.get_feature_flags().get('enable_patient_edit', True)
        patient_cards.render_patient_card(
            patient, key=patient['id'],
            on_edit=(lambda p: st.session_state.update(open_form=f"edit_{p['id']}")) if can_edit else None,
        )
        if st.session_state.get('open_form') == f"edit_{patient['id']}":
            _render_edit_patient(patient)


def _render_add_patient():
    service = get_data_service()

    def on_success():
        forms.close_form(ADD_FORM)
        refresh_tables(PATIENTS.table)

    submission = forms.get_submission(
        ADD_FORM, lambda: add_patient_form(service, on_success=on_success, notify=forms.toast))

    with st.form("add_patient_form", clear_on_submit=False):
        st.subheader("New Patient")
        col1, col2, col3 = st.columns(3)
        with col1:
            first_name = st.text_input("First Name *")
        with col2:
            middle_name = st.text_input("Middle Name")
        with col3:
            last_name = st.text_input("Last Name *")

        col1, col2, col3 = st.columns(3)
        with col1:
            date_of_birth = st.date_input("Date of Birth *", value=None,
                                          min_value=date(1900, 1, 1), max_value=date.today())
        with col2:
            gender = forms.optional_choice("Gender *", GENDERS, key="add_patient_gender")
        with col3:
            marital_status = forms.optional_choice("Marital Status", MARITAL_STATUSES,
                                                   key="add_patient_marital")

        col1, col2, col3 = st.columns(3)
        with col1:
            email = st.text_input("Email")
        with col2:
            primary_phone = st.text_input("Primary Phone *")
        with col3:
            secondary_phone = st.text_input("Secondary Phone")

        col1, col2 = st.columns(2)
        with col1:
            national_id = st.text_input("National ID")
        with col2:
            preferred_language = st.selectbox("Preferred Language", LANGUAGES)

        col1, col2 = st.columns([1, 5])
        with col1:
            submitted = forms.submit_button("Save Patient", submission, key="add_patient_submit")
        with col2:
            cancelled = st.form_submit_button("Cancel")

    if cancelled:
        forms.close_form(ADD_FORM)
        st.rerun()

    if submitted:
        saved = submission.submit({
            'first_name': first_name,
            'middle_name': middle_name,
            'last_name': last_name,
            'date_of_birth': date_of_birth,
            'gender': gender,
            'email': email,
            'primary_phone': primary_phone,
            'secondary_phone': secondary_phone,
            'national_id': national_id,
            'marital_status': marital_status,
            'preferred_language': preferred_language,
        })
        if saved:
            st.rerun()

    forms.render_field_errors(submission.errors)


def _render_edit_patient(patient):
    service = get_data_service()
    form_key = f"edit_{patient['id']}"

    def on_success():
        forms.close_form(form_key)
        refresh_tables(PATIENTS.table)

    submission = forms.get_submission(
        form_key,
        lambda: edit_patient_form(service, patient['id'], on_success=on_success, notify=forms.toast))

    with st.form(f"edit_patient_form_{patient['id']}"):
        st.markdown(f"**Edit contact details for {patient_cards.patient_label(patient)}**")
        col1, col2 = st.columns(2)
        with col1:
            email = st.text_input("Email", value=patient.get('email') or "")
            primary_phone = st.text_input("Primary Phone *", value=patient.get('primary_phone') or "")
            secondary_phone = st.text_input("Secondary Phone", value=patient.get('secondary_phone') or "")
        with col2:
            marital_status = forms.optional_choice("Marital Status", MARITAL_STATUSES,
                                                   key=f"edit_marital_{patient['id']}",
                                                   value=patient.get('marital_status'))
            preferred_language = forms.optional_choice("Preferred Language", LANGUAGES,
                                                       key=f"edit_language_{patient['id']}",
                                                       value=patient.get('preferred_language'))

        col1, col2 = st.columns([1, 5])
        with col1:
            submitted = forms.submit_button("Update", submission, key=f"edit_patient_submit_{patient['id']}")
        with col2:
            cancelled = st.form_submit_button("Cancel")

    if cancelled:
        forms.close_form(form_key)
        st.rerun()

    if submitted and submission.submit({
        'email': email,
        'primary_phone': primary_phone,
        'secondary_phone': secondary_phone,
        'marital_status': marital_status,
        'preferred_language': preferred_language,
    }):
        st.rerun()

    forms.render_field_errors(submission.errors)
