"""
Not Found Page for Wellness+ Clinic Dashboard
"""

import streamlit as st
import logging

logger = logging.getLogger(__name__)


def render():
    """Entry point called by main.py"""
    page = st.query_params.get('page')
    logger.info(f"Unknown page requested: {page}")

    st.title("404")
    st.markdown(f"The page **{page}** does not exist.")
    if st.button("Return to Home", type="primary"):
        st.query_params.clear()
        st.rerun()
