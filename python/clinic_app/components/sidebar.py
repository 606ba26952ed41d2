"""
Sidebar Navigation Component for Wellness+ Clinic Dashboard

Static list of dashboard targets. The active route is highlighted and a
collapse toggle hides the labels while keeping the icons; the collapsed flag
lives in session state only.
"""

import streamlit as st
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavItem:
    route: str
    label: str
    icon: str


NAV_ITEMS = (
    NavItem('dashboard', 'Dashboard', '📊'),
    NavItem('patients', 'Patients', '👥'),
    NavItem('register', 'Patient Registration', '📝'),
    NavItem('appointments', 'Appointments', '📅'),
    NavItem('records', 'Medical Records', '📋'),
    NavItem('reports', 'Reports', '📈'),
)


def navigation_items(active_route: Optional[str], collapsed: bool = False) -> List[Dict[str, object]]:
    """
    Build the display entries for the sidebar

    Args:
        active_route: Route currently rendered
        collapsed: Whether labels are hidden

    Returns:
        One dict per target with ``route``, ``text`` and ``active``
    """
    return [
        {
            'route': item.route,
            'text': item.icon if collapsed else f"{item.icon} {item.label}",
            'help': item.label,
            'active': item.route == active_route,
        }
        for item in NAV_ITEMS
    ]


def toggle_collapsed():
    st.session_state.sidebar_collapsed = not st.session_state.get('sidebar_collapsed', False)


def navigate(route: str):
    st.query_params['page'] = route


def render_sidebar(active_route: str, user: str = None,
                   on_sign_out: Callable[[], None] = None) -> None:
    """
    Render the navigation sidebar

    Args:
        active_route: Route currently rendered
        user: Signed-in user name
        on_sign_out: Called when the sign-out button is pressed
    """
    try:
        collapsed = st.session_state.get('sidebar_collapsed', False)

        with st.sidebar:
            header_col, toggle_col = st.columns([4, 1])
            with header_col:
                if not collapsed:
                    st.markdown("## 🩺 Wellness+")
            with toggle_col:
                st.button("»" if collapsed else "«", key="sidebar_toggle",
                          help="Expand menu" if collapsed else "Collapse menu",
                          on_click=toggle_collapsed)

            for entry in navigation_items(active_route, collapsed):
                st.button(
                    entry['text'],
                    key=f"nav_{entry['route']}",
                    help=entry['help'],
                    type="primary" if entry['active'] else "secondary",
                    use_container_width=True,
                    on_click=navigate,
                    args=(entry['route'],),
                )

            st.markdown("---")
            if user and not collapsed:
                st.caption(f"Signed in as **{user}**")
            if st.button("🚪" if collapsed else "🚪 Sign Out", key="sidebar_sign_out",
                         use_container_width=True):
                if on_sign_out:
                    on_sign_out()

    except Exception as e:
        logger.error(f"Error rendering sidebar: {e}")
        st.sidebar.error("Navigation unavailable")
