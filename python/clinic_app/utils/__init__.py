"""
Utils Module for Wellness+ Clinic Dashboard

This module contains utility functions and helpers used throughout the application.
Includes data formatting, validation, list filtering and configuration management.

Modules:
- helpers: Formatting helpers for tables, cards and reports
- validators: Field validation rules used by the entry forms
- filters: Client-side search and exact-match filtering
- config: Configuration management and environment setup
"""

from .helpers import (
    format_date, format_time, format_phone_number, calculate_age,
    truncate_text, get_status_badge, get_record_type_icon, rows_to_dataframe,
)

from .validators import (
    validate_required, validate_min_length, validate_email, validate_phone_number,
    validate_choice, validate_iso_date, validate_time, is_valid_email,
)

from .filters import filter_rows, matches_search, matches_exact

from .config import (
    get_app_config, get_database_config, get_auth_config, get_feature_flags,
    is_development, is_production, get_log_level,
)

__all__ = [
    # Helpers
    'format_date', 'format_time', 'format_phone_number', 'calculate_age',
    'truncate_text', 'get_status_badge', 'get_record_type_icon', 'rows_to_dataframe',

    # Validators
    'validate_required', 'validate_min_length', 'validate_email', 'validate_phone_number',
    'validate_choice', 'validate_iso_date', 'validate_time',
    'is_valid_email',

    # Filters
    'filter_rows', 'matches_search', 'matches_exact',

    # Config
    'get_app_config', 'get_database_config', 'get_auth_config', 'get_feature_flags',
    'is_development', 'is_production', 'get_log_level',
]
