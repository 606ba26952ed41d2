import random
from datetime import datetime

import pytest

from clinic_app.services.data_service import DataService
from clinic_app.services.memory_store import InMemoryDataStore

FIXED_NOW = datetime(2025, 3, 14, 10, 30, 0)


def _patient(row_id, code, first, last, gender, **extra):
    row = {
        'id': row_id,
        'created_at': '2025-03-01T09:00:00',
        'patient_id': code,
        'first_name': first,
        'middle_name': None,
        'last_name': last,
        'date_of_birth': '1990-05-20',
        'gender': gender,
        'email': f"{first.lower()}@example.com",
        'primary_phone': '081234567890',
        'secondary_phone': None,
        'national_id': None,
        'marital_status': 'Single',
        'preferred_language': 'English',
    }
    row.update(extra)
    return row


@pytest.fixture
def memory_store() -> InMemoryDataStore:
    return InMemoryDataStore()


@pytest.fixture
def seeded_store() -> InMemoryDataStore:
    patients = [
        _patient('p-1', 'PAT123456001', 'Raisa', 'Anggiani', 'Female',
                 created_at='2025-03-10T08:00:00', preferred_language='Indonesian'),
        _patient('p-2', 'PAT123456002', 'Budi', 'Santoso', 'Male',
                 date_of_birth='1960-01-15', marital_status='Married'),
        _patient('p-3', 'PAT123456003', 'Emily', 'Davis', 'Female',
                 created_at='2025-01-20T08:00:00', date_of_birth='2010-07-04'),
    ]
    appointments = [
        {'id': 'a-1', 'created_at': '2025-03-01T09:00:00', 'patient_id': 'p-1',
         'appointment_date': '2025-03-14', 'appointment_time': '14:00',
         'appointment_case': 'Follow-up consultation', 'provider_name': 'Dr. Chen',
         'status': 'Scheduled', 'notes': None},
        {'id': 'a-2', 'created_at': '2025-03-01T09:00:00', 'patient_id': 'p-2',
         'appointment_date': '2025-03-14', 'appointment_time': '09:00',
         'appointment_case': 'Blood pressure review', 'provider_name': 'Dr. Chen',
         'status': 'Confirmed', 'notes': None},
        {'id': 'a-3', 'created_at': '2025-02-01T09:00:00', 'patient_id': 'p-3',
         'appointment_date': '2025-02-02', 'appointment_time': '10:00',
         'appointment_case': 'Flu symptoms', 'provider_name': 'Dr. Davis',
         'status': 'No Show', 'notes': None},
        {'id': 'a-4', 'created_at': '2025-02-01T09:00:00', 'patient_id': 'p-3',
         'appointment_date': '2025-04-01', 'appointment_time': '11:00',
         'appointment_case': 'Vaccination', 'provider_name': None,
         'status': 'Scheduled', 'notes': None},
    ]
    records = [
        {'id': 'r-1', 'created_at': '2025-02-02T11:00:00', 'patient_id': 'p-3',
         'appointment_id': None, 'record_type': 'Lab Result', 'title': 'Complete blood count',
         'description': 'Normal ranges', 'provider_name': 'Dr. Davis',
         'record_date': '2025-02-02', 'file_url': None},
        {'id': 'r-2', 'created_at': '2025-03-05T11:00:00', 'patient_id': 'p-1',
         'appointment_id': None, 'record_type': 'Prescription', 'title': 'Antibiotic course',
         'description': None, 'provider_name': 'Dr. Chen',
         'record_date': '2025-03-05', 'file_url': 'https://files.example.com/r-2.pdf'},
    ]
    return InMemoryDataStore({
        'patients': patients,
        'appointments': appointments,
        'medical_records': records,
    })


@pytest.fixture
def data_service(memory_store: InMemoryDataStore) -> DataService:
    return DataService(memory_store, clock=lambda: FIXED_NOW, rng=random.Random(7))


@pytest.fixture
def seeded_service(seeded_store: InMemoryDataStore) -> DataService:
    return DataService(seeded_store, clock=lambda: FIXED_NOW, rng=random.Random(7))
