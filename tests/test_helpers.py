"""Unit tests for formatting helpers."""

from datetime import date, datetime, time

import pytest

from clinic_app.utils.helpers import (
    calculate_age, format_date, format_phone_number, format_time, get_record_type_icon,
    get_status_badge, rows_to_dataframe, truncate_text,
)


class TestFormatting:
    @pytest.mark.parametrize("value, expected", [
        ("14:00", "2:00 PM"),
        ("09:05:00", "9:05 AM"),
        ("12:30", "12:30 PM"),
        (time(0, 15), "12:15 AM"),
    ])
    def test_format_time(self, value, expected) -> None:
        assert format_time(value) == expected

    def test_format_time_passthrough(self) -> None:
        assert format_time("") == "N/A"
        assert format_time("soon") == "soon"

    def test_format_date(self) -> None:
        assert format_date("2025-03-14T10:30:00", "%b %d, %Y") == "Mar 14, 2025"
        assert format_date(date(2025, 3, 14)) == "2025-03-14"
        assert format_date(None) == "N/A"

    def test_format_phone_number(self) -> None:
        assert format_phone_number("5551234567") == "(555) 123-4567"
        assert format_phone_number("15551234567") == "+1 (555) 123-4567"
        assert format_phone_number("081234567890") == "081234567890"
        assert format_phone_number("") == "N/A"

    def test_truncate_text(self) -> None:
        assert truncate_text("short") == "short"
        assert truncate_text("a" * 20, max_length=10) == "aaaaaaa..."
        assert truncate_text(None) == ""


class TestCalculateAge:
    def test_birthday_not_reached(self) -> None:
        assert calculate_age("1990-05-20", date(2025, 3, 14)) == 34

    def test_birthday_today(self) -> None:
        assert calculate_age(date(2000, 3, 14), datetime(2025, 3, 14, 8, 0)) == 25

    @pytest.mark.parametrize("value", [None, "", "not a date"])
    def test_missing_or_invalid(self, value) -> None:
        assert calculate_age(value, date(2025, 3, 14)) is None


class TestBadgesAndTables:
    def test_status_badge(self) -> None:
        assert get_status_badge("Completed") == "✅"
        assert get_status_badge("no show") == "⚫"
        assert get_status_badge("Unknown") == "⚪"

    def test_record_type_icon(self) -> None:
        assert get_record_type_icon("Prescription") == "💊"
        assert get_record_type_icon("Other") == "📄"

    def test_rows_to_dataframe(self) -> None:
        rows = [{'first_name': 'Raisa', 'last_name': 'Anggiani', 'gender': 'Female'}]
        df = rows_to_dataframe(rows, {
            'Name': lambda r: f"{r['first_name']} {r['last_name']}",
            'Gender': 'gender',
        })

        assert list(df.columns) == ['Name', 'Gender']
        assert df.iloc[0]['Name'] == 'Raisa Anggiani'

    def test_rows_to_dataframe_empty_keeps_headers(self) -> None:
        assert list(rows_to_dataframe([], {'Name': 'name'}).columns) == ['Name']
