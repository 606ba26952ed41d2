"""
Wellness+ Clinic Dashboard

Streamlit application for clinic staff. ``main.py`` is the entry point;
the subpackages hold the services, shared components, pages, utilities and
the demo data generator.
"""

__version__ = "1.0.0"
