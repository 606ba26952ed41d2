"""
Form helpers shared by the entry forms

Toast notifier and guarded submit button for FormSubmission, inline field
errors and the patient picker used by the appointment and medical record forms.
"""

import streamlit as st
from typing import Any, Callable, Dict, List, Optional
import logging

from clinic_app.services.entities import full_name

logger = logging.getLogger(__name__)

TOAST_ICONS = {
    'success': '✅',
    'error': '❌',
    'info': 'ℹ️',
}


def toast(level: str, message: str):
    """Notifier passed to FormSubmission"""
    st.toast(message, icon=TOAST_ICONS.get(level, 'ℹ️'))


def get_submission(key: str, factory: Callable[[], Any]):
    """FormSubmission kept in session state while its form is open"""
    submissions = st.session_state.setdefault('form_submissions', {})
    if key not in submissions:
        submissions[key] = factory()
    return submissions[key]


def submit_button(label: str, submission, key: str) -> bool:
    """
    Primary submit button of an entry form

    The click marks the submission in flight before the rerun, so the button
    is already disabled while that rerun writes.
    """
    return st.form_submit_button(label, type="primary", key=key,
                                 disabled=submission.submitting,
                                 on_click=submission.mark_submitting)


def close_form(key: str):
    st.session_state.setdefault('form_submissions', {}).pop(key, None)
    if st.session_state.get('open_form') == key:
        st.session_state.open_form = None


def render_field_errors(errors: Dict[str, str]) -> None:
    if not errors:
        return
    st.error("Please fix the highlighted fields:\n\n" +
             "\n".join(f"- {message}" for message in errors.values()))


def patient_option_label(patient: Dict[str, Any]) -> str:
    return f"{full_name(patient)} ({patient.get('patient_id') or 'no code'})"


def patient_options(patients: List[Dict[str, Any]]) -> Dict[str, str]:
    """Picker label to internal patient ``id``"""
    return {patient_option_label(p): p['id'] for p in patients if p.get('id')}


def render_patient_picker(patients: List[Dict[str, Any]], key: str,
                          label: str = "Patient *") -> Optional[str]:
    """
    Patient selector for entry forms

    Returns:
        The selected patient's internal id, or None
    """
    options = patient_options(patients)
    if not options:
        st.warning("No patients available. Register a patient first.")
        return None
    choice = st.selectbox(label, options=[""] + list(options.keys()), key=key,
                          format_func=lambda o: o or "Select a patient")
    return options.get(choice)


def optional_choice(label: str, options, key: str, value: Any = None) -> str:
    """Selectbox with a leading blank entry; returns "" when nothing is chosen"""
    choices = [""] + list(options)
    index = choices.index(value) if value in choices else 0
    return st.selectbox(label, options=choices, index=index, key=key,
                        format_func=lambda o: o or "Select...")
