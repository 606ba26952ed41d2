"""
Wellness+ Clinic Dashboard - Main Application

Streamlit entry point for the clinic's patient management dashboard:
- Patient registration (quick form and six-step intake wizard)
- Appointment scheduling and status tracking
- Medical record entry and downloads
- Reports generated from live clinic data

Routing uses the ``page`` query parameter; every page except the entry page
requires a signed-in backend session.
"""

import streamlit as st
from datetime import datetime
import logging

from clinic_app.components import sidebar
from clinic_app.page_modules import (
    appointments, dashboard, entry, not_found, patients, records, registration, reports,
)
from clinic_app.page_modules.routes import ENTRY, NOT_FOUND, is_redirect, resolve_route
from clinic_app.services.session_manager import activate_route, clear_page_state, get_session_manager
from clinic_app.utils import config

logger = logging.getLogger(__name__)

# Configure the Streamlit page
st.set_page_config(
    page_title="Wellness+ Clinic Dashboard",
    page_icon="🩺",
    layout="wide",
    initial_sidebar_state="expanded",
    menu_items={
        'Get Help': None,
        'Report a bug': None,
        'About': "Wellness+ Clinic Dashboard - Patient management for clinic staff"
    }
)

PAGES = {
    ENTRY: entry.render,
    'dashboard': dashboard.render,
    'patients': patients.render,
    'appointments': appointments.render,
    'records': records.render,
    'register': registration.render,
    'reports': reports.render,
    NOT_FOUND: not_found.render,
}


def initialize_session_state():
    """Initialize session state variables for the application"""
    if 'initialized' not in st.session_state:
        st.session_state.initialized = True
        st.session_state.sidebar_collapsed = False
        st.session_state.open_form = None
        st.session_state.last_refresh = datetime.now()


def sign_out():
    get_session_manager().sign_out()
    clear_page_state()
    st.query_params.clear()
    st.rerun()


def render_main_content(route: str):
    """Render the page for the resolved route"""
    try:
        PAGES[route]()

    except Exception as e:
        logger.error(f"Error rendering page '{route}': {e}")
        st.error(f"Error rendering page '{route}': {str(e)}")
        st.markdown("Please try refreshing the page or contact support.")

        # Show error details in expander for debugging
        with st.expander("Error Details (for debugging)"):
            st.exception(e)


def render_footer():
    """Render the application footer"""
    st.markdown("---")
    app_config = config.get_app_config()
    st.caption(f"{app_config.get('clinic_name', 'Wellness+')} · v{app_config.get('app_version', '1.0.0')}")


def main():
    """Main application entry point"""

    # Initialize application
    initialize_session_state()

    # Load configuration
    config.load_app_config()

    manager = get_session_manager()
    page = st.query_params.get('page')
    route = resolve_route(page, manager.is_authenticated())

    if is_redirect(page, route):
        logger.info(f"Redirecting unauthenticated request for '{page}' to the entry page")
        st.session_state.redirected_to_entry = True
        st.query_params.clear()

    if route not in (ENTRY, NOT_FOUND):
        if not manager.check_connection():
            st.warning("Connection to the database could not be verified.")
        sidebar.render_sidebar(route, user=manager.user, on_sign_out=sign_out)

    activate_route(route)
    render_main_content(route)
    render_footer()


if __name__ == "__main__":
    main()
