"""Unit tests for report generation and JSON exports."""

import json
from datetime import date

import pytest

from clinic_app.services.data_service import DataService
from clinic_app.services.memory_store import InMemoryDataStore
from clinic_app.services.reports import (
    APPOINTMENT_STATS, MEDICAL_ANALYSIS, PATIENT_SUMMARY, ReportGenerator,
    build_appointment_stats, build_medical_analysis, build_patient_summary, download_filename,
    record_to_json, report_data_of, report_to_json,
)

TODAY = date(2025, 3, 14)


class TestBuilders:
    def test_patient_summary(self, seeded_store: InMemoryDataStore) -> None:
        summary = build_patient_summary(seeded_store.tables['patients'], TODAY)

        assert summary['total_patients'] == 3
        assert summary['new_patients_this_month'] == 2
        assert summary['gender_distribution'] == {'Male': 1, 'Female': 2, 'Other': 0}
        # Ages 34, 65 and 14
        assert summary['average_age'] == pytest.approx(37.7)
        assert summary['age_groups'] == {'0-17': 1, '18-34': 1, '35-49': 0, '50-64': 0, '65+': 1}
        assert summary['language_distribution'] == {'English': 2, 'Indonesian': 1}

    def test_patient_summary_empty(self) -> None:
        summary = build_patient_summary([], TODAY)

        assert summary['total_patients'] == 0
        assert summary['average_age'] is None
        assert summary['registrations_by_month'] == {}

    def test_appointment_stats(self, seeded_store: InMemoryDataStore) -> None:
        stats = build_appointment_stats(seeded_store.tables['appointments'], TODAY)

        assert stats['total_appointments'] == 4
        assert stats['status_distribution']['Scheduled'] == 2
        assert stats['status_distribution']['Completed'] == 0
        assert stats['no_show_rate'] == 25.0
        assert stats['upcoming_appointments'] == 3
        assert stats['appointments_by_month'] == {'2025-02': 1, '2025-03': 2, '2025-04': 1}

    def test_medical_analysis(self, seeded_store: InMemoryDataStore) -> None:
        analysis = build_medical_analysis(seeded_store.tables['medical_records'], TODAY)

        assert analysis['total_records'] == 2
        assert analysis['record_type_distribution']['Lab Result'] == 1
        assert analysis['patients_with_records'] == 2
        assert analysis['average_records_per_patient'] == 1.0

    def test_payloads_are_json_serialisable(self, seeded_store: InMemoryDataStore) -> None:
        tables = seeded_store.tables
        for payload in (build_patient_summary(tables['patients'], TODAY),
                        build_appointment_stats(tables['appointments'], TODAY),
                        build_medical_analysis(tables['medical_records'], TODAY)):
            json.dumps(payload)


class TestReportGenerator:
    def test_generate_stores_report(self, seeded_store: InMemoryDataStore,
                                    seeded_service: DataService) -> None:
        report = ReportGenerator(seeded_service).generate(APPOINTMENT_STATS, generated_by='admin')

        assert report['report_name'] == "Appointment Stats - March 14, 2025"
        assert report['report_type'] == APPOINTMENT_STATS
        assert report['generated_by'] == 'admin'
        assert report['report_data']['total_appointments'] == 4
        assert report['report_data']['period_end'] == '2025-03-14'
        assert len(seeded_store.tables['reports']) == 1

    @pytest.mark.parametrize("report_type", [PATIENT_SUMMARY, MEDICAL_ANALYSIS])
    def test_generate_on_empty_store(self, data_service: DataService, report_type: str) -> None:
        report = ReportGenerator(data_service).generate(report_type)
        assert report['report_type'] == report_type

    def test_unknown_type(self, data_service: DataService) -> None:
        with pytest.raises(ValueError):
            ReportGenerator(data_service).generate("Revenue")


class TestExports:
    def test_report_to_json_decodes_string_payload(self) -> None:
        report = {'report_name': 'R', 'report_type': PATIENT_SUMMARY, 'generated_by': 'admin',
                  'generated_at': '2025-03-14T10:30:00', 'report_data': '{"total_patients": 3}'}

        document = json.loads(report_to_json(report))

        assert document['report_data'] == {'total_patients': 3}
        assert report_data_of(report) == {'total_patients': 3}

    def test_record_to_json(self) -> None:
        record = {'title': 'Chest X-ray', 'record_type': 'Imaging', 'record_date': '2025-03-01',
                  'provider_name': None, 'description': 'Clear',
                  'patient': {'first_name': 'Raisa', 'last_name': 'Anggiani', 'patient_id': 'PAT1'}}

        document = json.loads(record_to_json(record))

        assert document['patient'] == {'patient_id': 'PAT1', 'name': 'Raisa Anggiani'}
        assert document['title'] == 'Chest X-ray'

    def test_download_filename(self) -> None:
        assert download_filename("Patient Summary - March 14, 2025") == "patient_summary___march_14__2025.json"
        assert download_filename(None) == "document.json"
