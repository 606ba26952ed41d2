"""Unit tests for the data service write rules and dashboard statistics."""

import random
import re
from datetime import date, datetime

import pytest

from clinic_app.services.data_service import DataService, get_dashboard_stats, todays_appointments
from clinic_app.services.memory_store import InMemoryDataStore

FIXED_NOW = datetime(2025, 3, 14, 10, 30, 0)


class TestPatientCode:
    def test_format(self, data_service: DataService) -> None:
        code = data_service.generate_patient_code()

        assert re.fullmatch(r'PAT\d{9}', code)
        millis = str(int(FIXED_NOW.timestamp() * 1000))
        assert code[3:9] == millis[-6:]

    def test_retries_on_collision(self, memory_store: InMemoryDataStore) -> None:
        first = DataService(memory_store, clock=lambda: FIXED_NOW, rng=random.Random(1))
        taken = first.generate_patient_code()
        memory_store.insert('patients', {'patient_id': taken})

        retry = DataService(memory_store, clock=lambda: FIXED_NOW, rng=random.Random(1))
        code = retry.generate_patient_code()

        assert code != taken
        assert sum(1 for c in memory_store.calls if c[0] == 'select') == 3

    def test_gives_up_after_max_attempts(self, memory_store: InMemoryDataStore) -> None:
        class FixedRandom(random.Random):
            def randint(self, a, b):
                return 5

        service = DataService(memory_store, clock=lambda: FIXED_NOW, rng=FixedRandom())
        memory_store.insert('patients', {'patient_id': service.generate_patient_code()})

        with pytest.raises(RuntimeError):
            service.generate_patient_code(max_attempts=3)


class TestWrites:
    def test_create_patient_defaults_language(self, data_service: DataService) -> None:
        patient = data_service.create_patient({'first_name': 'Raisa', 'last_name': 'Anggiani'})

        assert patient['preferred_language'] == 'English'
        assert patient['patient_id'].startswith('PAT')

    def test_update_contact_rejects_identity_fields(self, seeded_service: DataService) -> None:
        with pytest.raises(ValueError):
            seeded_service.update_patient_contact('p-1', {'patient_id': 'PAT000000000'})

    def test_update_contact(self, seeded_store: InMemoryDataStore, seeded_service: DataService) -> None:
        assert seeded_service.update_patient_contact('p-1', {'email': 'new@example.com'}) == 1
        patient = next(p for p in seeded_store.tables['patients'] if p['id'] == 'p-1')
        assert patient['email'] == 'new@example.com'

    def test_appointment_keeps_explicit_status(self, data_service: DataService) -> None:
        row = data_service.create_appointment({'patient_id': 'p-1', 'status': 'Confirmed'})
        assert row['status'] == 'Confirmed'

    def test_status_change_and_cancel(self, seeded_store: InMemoryDataStore,
                                      seeded_service: DataService) -> None:
        seeded_service.update_appointment_status('a-1', 'Completed')
        seeded_service.cancel_appointment('a-2')

        statuses = {a['id']: a['status'] for a in seeded_store.tables['appointments']}
        assert statuses['a-1'] == 'Completed'
        assert statuses['a-2'] == 'Cancelled'

    def test_unknown_status_rejected(self, seeded_service: DataService) -> None:
        with pytest.raises(ValueError):
            seeded_service.update_appointment_status('a-1', 'Postponed')

    def test_medical_record_defaults_date(self, data_service: DataService) -> None:
        row = data_service.create_medical_record({'patient_id': 'p-1', 'record_type': 'Imaging',
                                                  'title': 'X-ray'})
        assert row['record_date'] == '2025-03-14'

    def test_create_report(self, memory_store: InMemoryDataStore, data_service: DataService) -> None:
        row = data_service.create_report('Summary', 'Patient Summary', {'total': 1}, 'admin')

        assert row['generated_at'] == '2025-03-14T10:30:00'
        assert memory_store.tables['reports'][0]['report_data'] == {'total': 1}


class TestDashboardStats:
    def test_counts(self, seeded_store: InMemoryDataStore) -> None:
        tables = seeded_store.tables
        stats = get_dashboard_stats(tables['patients'], tables['appointments'],
                                    tables['medical_records'], today=date(2025, 3, 14))

        assert stats == {
            'total_patients': 3,
            'new_patients_this_month': 2,
            'total_appointments': 4,
            'todays_appointments': 2,
            'upcoming_appointments': 3,
            'total_records': 2,
        }

    def test_empty(self) -> None:
        assert get_dashboard_stats([], [], [])['total_patients'] == 0

    def test_todays_appointments_ordered_by_time(self, seeded_store: InMemoryDataStore) -> None:
        rows = todays_appointments(seeded_store.tables['appointments'], today=date(2025, 3, 14))
        assert [r['id'] for r in rows] == ['a-2', 'a-1']
