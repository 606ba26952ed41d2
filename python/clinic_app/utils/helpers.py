"""
Helper Utilities for Wellness+ Clinic Dashboard

Display formatting shared by tables, cards and reports. Values usually arrive
as the strings the data store hands back, so every helper accepts text and
falls back to a readable placeholder instead of raising.
"""

import pandas as pd
from datetime import datetime, date, time
from typing import Any, Dict, List, Optional, Union
import re
import logging

logger = logging.getLogger(__name__)

MISSING = "N/A"


def _is_missing(value: Any) -> bool:
    if value is None or (isinstance(value, str) and not value.strip()):
        return True
    return not isinstance(value, str) and bool(pd.isna(value))


def _to_date(value: Union[datetime, date, str]) -> Optional[date]:
    """Coerce store values (ISO strings, timestamps, dates) to a date"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = pd.to_datetime(str(value), errors='coerce')
    return None if pd.isna(parsed) else parsed.date()


def format_date(date_value: Union[datetime, date, str], format_str: str = "%Y-%m-%d") -> str:
    """
    Render a date or timestamp for display

    Args:
        date_value: date, datetime or ISO string
        format_str: strftime pattern

    Returns:
        Formatted text; unparseable strings are returned unchanged
    """
    if _is_missing(date_value):
        return MISSING
    if isinstance(date_value, (datetime, date)):
        return date_value.strftime(format_str)

    parsed = pd.to_datetime(str(date_value), errors='coerce')
    if pd.isna(parsed):
        return str(date_value)
    return parsed.strftime(format_str)


def format_time(time_value: Union[time, str]) -> str:
    """Format a 24h time (``14:00`` or ``14:00:00``) as ``2:00 PM``"""
    if not time_value:
        return MISSING
    if isinstance(time_value, str):
        for fmt in ('%H:%M:%S', '%H:%M'):
            try:
                time_value = datetime.strptime(time_value, fmt).time()
                break
            except ValueError:
                continue
        else:
            return time_value
    return time_value.strftime('%I:%M %p').lstrip('0')


def format_phone_number(phone: str) -> str:
    """
    Group the digits of a phone number for display

    Ten-digit North American numbers become ``(555) 123-4567`` and a leading
    country code 1 is shown as ``+1``. Anything else, including local
    Indonesian mobile numbers, is shown as entered.
    """
    if _is_missing(phone):
        return MISSING

    digits = re.sub(r'\D', '', str(phone))
    if len(digits) == 11 and digits.startswith('1'):
        country, digits = '+1 ', digits[1:]
    elif len(digits) == 10 and not digits.startswith('0'):
        country = ''
    else:
        return str(phone)
    return f"{country}({digits[:3]}) {digits[3:6]}-{digits[6:]}"


def calculate_age(birth_date: Union[datetime, date, str],
                  reference_date: Union[datetime, date] = None) -> Optional[int]:
    """
    Whole years between a birth date and a reference day

    Args:
        birth_date: Date of birth
        reference_date: Day to measure at (default: today)

    Returns:
        Age in years, or None when the birth date is missing or unparseable
    """
    if _is_missing(birth_date):
        return None
    born = _to_date(birth_date)
    if born is None:
        logger.debug(f"Unparseable birth date: {birth_date!r}")
        return None

    on = _to_date(reference_date) if reference_date is not None else date.today()
    had_birthday = (on.month, on.day) >= (born.month, born.day)
    return on.year - born.year - (0 if had_birthday else 1)


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """Shorten text to at most ``max_length`` characters, ending with ``suffix``"""
    if _is_missing(text):
        return ""
    text = str(text)
    return text if len(text) <= max_length else text[:max_length - len(suffix)] + suffix


def get_status_badge(status: str) -> str:
    """Emoji badge for an appointment status"""
    badges = {
        'SCHEDULED': '🔵',
        'CONFIRMED': '🟢',
        'IN PROGRESS': '🟡',
        'COMPLETED': '✅',
        'CANCELLED': '🔴',
        'NO SHOW': '⚫',
    }
    return badges.get(str(status).upper(), '⚪')


def get_record_type_icon(record_type: str) -> str:
    icons = {
        'Consultation': '🩺',
        'Lab Result': '🧪',
        'Imaging': '🩻',
        'Treatment': '💉',
        'Prescription': '💊',
        'Referral': '📨',
    }
    return icons.get(record_type, '📄')


def rows_to_dataframe(rows: List[Dict[str, Any]], columns: Dict[str, Any]) -> pd.DataFrame:
    """
    Build a display DataFrame from records

    Args:
        rows: Records to display
        columns: Ordered mapping of display header to a column name or a
            callable taking the row

    Returns:
        DataFrame with one column per header
    """
    data = []
    for row in rows:
        data.append({
            header: (source(row) if callable(source) else row.get(source))
            for header, source in columns.items()
        })
    return pd.DataFrame(data, columns=list(columns.keys()))

