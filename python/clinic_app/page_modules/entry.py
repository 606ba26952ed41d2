"""
Entry Page for Wellness+ Clinic Dashboard

Public landing page with the clinic introduction and the sign-in form.
Signing in opens the backend session and sends the user to the dashboard.
"""

import streamlit as st
import logging

from clinic_app.services.exceptions import AuthenticationError
from clinic_app.services.session_manager import get_session_manager
from clinic_app.utils import config

logger = logging.getLogger(__name__)

FEATURES = (
    ("👥", "Patient Management", "Register patients and keep their contact details current."),
    ("📅", "Appointments", "Schedule visits and track their status through the day."),
    ("📋", "Medical Records", "Capture consultations, results and prescriptions."),
    ("📈", "Reports", "Generate summaries from live clinic data."),
)


def render():
    """Entry point called by main.py"""
    render_entry()


def render_entry():
    app_config = config.get_app_config()
    manager = get_session_manager()

    st.title(f"🩺 {app_config.get('clinic_name', 'Wellness+')}")
    st.markdown("Patient management dashboard for clinic staff")

    if st.session_state.pop('redirected_to_entry', False):
        st.warning("Please sign in to continue.")

    intro_col, form_col = st.columns([3, 2])

    with intro_col:
        for icon, title, text in FEATURES:
            st.markdown(f"#### {icon} {title}")
            st.caption(text)

    with form_col:
        if manager.is_authenticated():
            st.success(f"Signed in as **{manager.user}**")
            if st.button("Go to Dashboard", type="primary", use_container_width=True):
                st.query_params['page'] = 'dashboard'
                st.rerun()
            return

        _render_sign_in_form(manager)


def _render_sign_in_form(manager):
    with st.form("sign_in_form"):
        st.subheader("Staff Sign In")
        user = st.text_input("User name")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign In", type="primary", use_container_width=True)

    if manager.backend == config.BACKEND_MEMORY:
        st.caption("Demo mode: data is kept in memory for this server process.")

    if not submitted:
        return

    try:
        with st.spinner("Signing in..."):
            manager.sign_in(user, password)
    except AuthenticationError as e:
        st.error(str(e))
        return

    st.query_params['page'] = 'dashboard'
    st.rerun()
