"""Unit tests for client-side list filtering."""

import pytest

from clinic_app.services.entities import APPOINTMENTS, MEDICAL_RECORDS, PATIENTS, REPORTS
from clinic_app.utils.filters import filter_rows, matches_exact, matches_search

PATIENT_ROWS = [
    {'id': '1', 'first_name': 'Raisa', 'last_name': 'Anggiani', 'patient_id': 'PAT123456001',
     'email': 'raisa@example.com', 'primary_phone': '081234567890', 'gender': 'Female'},
    {'id': '2', 'first_name': 'Budi', 'last_name': 'Santoso', 'patient_id': 'PAT123456002',
     'email': None, 'primary_phone': '082200001111', 'gender': 'Male'},
    {'id': '3', 'first_name': 'Rina', 'last_name': 'Wijaya', 'patient_id': 'PAT123456003',
     'email': 'rina@example.com', 'primary_phone': '083300002222', 'gender': 'Female'},
]


def _ids(rows):
    return [r['id'] for r in rows]


class TestSearch:
    def test_case_insensitive_full_name(self) -> None:
        rows = filter_rows(PATIENT_ROWS, "raisa", PATIENTS.search_fields)
        assert _ids(rows) == ['1']

    def test_matches_across_first_and_last_name(self) -> None:
        assert _ids(filter_rows(PATIENT_ROWS, "Raisa Anggiani", PATIENTS.search_fields)) == ['1']

    def test_no_match(self) -> None:
        assert filter_rows(PATIENT_ROWS, "zzz", PATIENTS.search_fields) == []

    @pytest.mark.parametrize("term", ["", "   ", None])
    def test_empty_search_returns_all(self, term) -> None:
        assert filter_rows(PATIENT_ROWS, term, PATIENTS.search_fields) == PATIENT_ROWS

    def test_surrounding_spaces_are_part_of_the_term(self) -> None:
        rows = [{'id': 'a', 'first_name': 'Ann', 'last_name': 'Lee'},
                {'id': 'b', 'first_name': 'Nina', 'last_name': 'Park'}]

        assert _ids(filter_rows(rows, "n ", PATIENTS.search_fields)) == ['a']
        assert _ids(filter_rows(rows, "n", PATIENTS.search_fields)) == ['a', 'b']
        assert _ids(filter_rows(rows, " lee", PATIENTS.search_fields)) == ['a']
        assert PATIENTS.empty_list_message("n ") == "No patients found matching your search."

    def test_matches_code_email_and_phone(self) -> None:
        assert _ids(filter_rows(PATIENT_ROWS, "pat123456002", PATIENTS.search_fields)) == ['2']
        assert _ids(filter_rows(PATIENT_ROWS, "@example", PATIENTS.search_fields)) == ['1', '3']
        assert _ids(filter_rows(PATIENT_ROWS, "0833", PATIENTS.search_fields)) == ['3']

    def test_none_fields_are_skipped(self) -> None:
        assert matches_search(PATIENT_ROWS[1], "example", PATIENTS.search_fields) is False

    def test_appointment_search_uses_embedded_patient(self) -> None:
        row = {'appointment_case': 'Back pain',
               'patient': {'first_name': 'Raisa', 'last_name': 'Anggiani', 'patient_id': 'PAT9'}}

        assert matches_search(row, "anggiani", APPOINTMENTS.search_fields)
        assert matches_search(row, "pat9", APPOINTMENTS.search_fields)
        assert matches_search(row, "back", APPOINTMENTS.search_fields)

    def test_record_search_without_patient(self) -> None:
        row = {'title': 'Chest X-ray', 'record_type': 'Imaging', 'patient': None}

        assert matches_search(row, "imaging", MEDICAL_RECORDS.search_fields)
        assert not matches_search(row, "raisa", MEDICAL_RECORDS.search_fields)

    def test_report_search(self) -> None:
        row = {'report_name': 'Patient Summary - March', 'report_type': 'Patient Summary',
               'generated_by': 'admin'}
        assert matches_search(row, "ADMIN", REPORTS.search_fields)


class TestExactFilters:
    def test_search_and_gender_compose_with_and(self) -> None:
        rows = filter_rows(PATIENT_ROWS, "r", PATIENTS.search_fields, {'gender': 'Female'})
        assert _ids(rows) == ['1', '3']

        rows = filter_rows(PATIENT_ROWS, "budi", PATIENTS.search_fields, {'gender': 'Female'})
        assert rows == []

    @pytest.mark.parametrize("value", ["all", "ALL", "", None])
    def test_all_or_empty_disables_filter(self, value) -> None:
        assert filter_rows(PATIENT_ROWS, "", PATIENTS.search_fields, {'gender': value}) == PATIENT_ROWS

    def test_exact_match_is_case_insensitive(self) -> None:
        assert matches_exact(PATIENT_ROWS[1], 'gender', 'male')
        assert not matches_exact(PATIENT_ROWS[0], 'gender', 'male')

    def test_preserves_order(self) -> None:
        rows = filter_rows(list(reversed(PATIENT_ROWS)), "", PATIENTS.search_fields, {'gender': 'Female'})
        assert _ids(rows) == ['3', '1']
