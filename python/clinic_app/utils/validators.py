"""
Input Validation Utilities for Wellness+ Clinic Dashboard

Validation functions for form inputs. Each validator returns a tuple of
(is_valid, error_message) so form schemas can surface the message inline.
"""

import re
import pandas as pd
from datetime import datetime, date, time
from typing import Any, Iterable, Tuple, Union
import logging

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return str(value).strip() == ""


def validate_required(value: Any, message: str) -> Tuple[bool, str]:
    """
    Validate that a value was supplied

    Args:
        value: Field value
        message: Message returned when the value is missing

    Returns:
        Tuple of (is_valid, error_message)
    """
    if _is_blank(value):
        return False, message
    return True, ""


def validate_min_length(value: Any, min_length: int, message: str) -> Tuple[bool, str]:
    """
    Validate minimum length of a text value

    Args:
        value: Field value
        min_length: Minimum number of characters
        message: Message returned when the value is too short

    Returns:
        Tuple of (is_valid, error_message)
    """
    text = "" if _is_blank(value) else str(value)
    if len(text) < min_length:
        return False, message
    return True, ""


def is_valid_email(email: str) -> bool:
    """True for a well-formed address; a blank value passes (the field is optional)"""
    if _is_blank(email):
        return True
    return EMAIL_PATTERN.match(str(email).strip().lower()) is not None


def validate_email(email: str, message: str = "Invalid email address") -> Tuple[bool, str]:
    if is_valid_email(email):
        return True, ""
    return False, message


def validate_phone_number(phone: str) -> Tuple[bool, str]:
    """
    Check the digit count of an optional phone number

    Separators, spaces and a leading ``+`` are ignored; between 10 and 15
    digits must remain.

    Args:
        phone: Phone number as typed

    Returns:
        Tuple of (is_valid, error_message)
    """
    if _is_blank(phone):
        return True, ""
    digit_count = sum(ch.isdigit() for ch in str(phone))
    if not 10 <= digit_count <= 15:
        return False, "Phone number must be between 10 and 15 digits"
    return True, ""


def validate_choice(value: Any, options: Iterable[str], message: str) -> Tuple[bool, str]:
    """Validate that a non-empty value is one of the allowed options"""
    if _is_blank(value):
        return True, ""
    if value not in tuple(options):
        return False, message
    return True, ""


def validate_iso_date(value: Union[str, date, datetime], message: str) -> Tuple[bool, str]:
    """
    Validate a date given as a date object or a YYYY-MM-DD string

    Args:
        value: Date value
        message: Message returned for unparseable values

    Returns:
        Tuple of (is_valid, error_message)
    """
    if _is_blank(value) or isinstance(value, (date, datetime)):
        return True, ""
    try:
        datetime.strptime(str(value), '%Y-%m-%d')
        return True, ""
    except ValueError:
        return False, message


def validate_time(value: Union[str, time], message: str) -> Tuple[bool, str]:
    """Validate a time given as a time object or an HH:MM[:SS] string"""
    if _is_blank(value) or isinstance(value, time):
        return True, ""
    for fmt in ('%H:%M', '%H:%M:%S'):
        try:
            datetime.strptime(str(value), fmt)
            return True, ""
        except ValueError:
            continue
    return False, message


def validate_not_future(value: Union[str, date, datetime], message: str) -> Tuple[bool, str]:
    """Reject dates after today (e.g. date of birth)"""
    if _is_blank(value):
        return True, ""
    try:
        if isinstance(value, datetime):
            value = value.date()
        elif isinstance(value, str):
            value = datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        return True, ""  # Format errors are reported by validate_iso_date
    if value > date.today():
        return False, message
    return True, ""

