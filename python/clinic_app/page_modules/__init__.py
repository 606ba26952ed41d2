"""
Pages Module for Wellness+ Clinic Dashboard

Each page is a self-contained module with a ``render()`` entry point called by
main.py for its route.

Pages:
- entry: Public landing page and staff sign-in
- dashboard: Headline metrics and today's appointments
- patients: Patient list, add and edit forms
- appointments: Appointment list, schedule form and status controls
- records: Medical record list, add form and downloads
- registration: Six-step patient registration wizard
- reports: Report generation and downloads
- not_found: Fallback for unknown routes
"""

from .routes import resolve_route, is_redirect, ENTRY, NOT_FOUND, PROTECTED_ROUTES

__all__ = [
    'resolve_route',
    'is_redirect',
    'ENTRY',
    'NOT_FOUND',
    'PROTECTED_ROUTES',
]
