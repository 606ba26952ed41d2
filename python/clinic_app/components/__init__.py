"""
Components Module for Wellness+ Clinic Dashboard

This module contains reusable UI components that can be used across different pages.

Components:
- sidebar: Navigation sidebar with collapse toggle
- patient_cards: Patient and appointment tables and cards
- search_widgets: List toolbar (search box, exact-match filter)
- analytics_widgets: Metric cards, charts and report payloads
- forms: Toast notifier, field errors and the patient picker
"""

from .sidebar import render_sidebar, navigation_items, NAV_ITEMS
from .patient_cards import render_patient_card, render_patient_table, render_appointment_table
from .search_widgets import render_list_toolbar, render_empty_state
from .analytics_widgets import render_metric_card, render_distribution_chart, render_report_payload
from .forms import toast, render_field_errors, render_patient_picker

__all__ = [
    'render_sidebar',
    'navigation_items',
    'NAV_ITEMS',
    'render_patient_card',
    'render_patient_table',
    'render_appointment_table',
    'render_list_toolbar',
    'render_empty_state',
    'render_metric_card',
    'render_distribution_chart',
    'render_report_payload',
    'toast',
    'render_field_errors',
    'render_patient_picker',
]
