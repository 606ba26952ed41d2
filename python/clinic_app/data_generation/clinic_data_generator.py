"""
Wellness+ Clinic Dashboard - Demo Data Generator

Generates realistic synthetic clinic data (patients with their address,
emergency contact and lifestyle rows, appointments and medical records) for
local demos and for loading into a fresh database.
"""

import random
import uuid
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

import numpy as np
from faker import Faker

from clinic_app.services.entities import (
    ALCOHOL_CONSUMPTION, EXERCISE_FREQUENCIES, GENDERS, LANGUAGES, MARITAL_STATUSES,
    RELATIONSHIPS, SMOKING_STATUSES,
)

APPOINTMENT_TIMES = ['09:00', '10:00', '11:00', '14:00', '15:00', '16:00']

# Relative frequencies in the order of the value tuples
GENDER_WEIGHTS = dict(zip(GENDERS, (0.48, 0.5, 0.02)))
LANGUAGE_WEIGHTS = dict(zip(LANGUAGES, (0.45, 0.08, 0.05, 0.04, 0.35, 0.03)))
SMOKING_WEIGHTS = dict(zip(SMOKING_STATUSES, (0.65, 0.2, 0.15)))
ALCOHOL_WEIGHTS = dict(zip(ALCOHOL_CONSUMPTION, (0.4, 0.4, 0.15, 0.05)))
EXERCISE_WEIGHTS = dict(zip(EXERCISE_FREQUENCIES, (0.15, 0.3, 0.4, 0.15)))


class ClinicDataGenerator:
    """Generate realistic clinic data for demonstration purposes."""

    def __init__(self, seed: int = 42, locales: Optional[List[str]] = None):
        """Initialize generator with consistent seed for reproducible data."""
        random.seed(seed)
        np.random.seed(seed)
        self.fake = Faker(locales or ['en_US', 'id_ID'])
        Faker.seed(seed)
        self.today = date.today()

        # Visit reasons with relative frequency
        self.appointment_cases = {
            'Annual check-up': 0.22,
            'Follow-up consultation': 0.18,
            'Flu symptoms': 0.12,
            'Back pain': 0.08,
            'Blood pressure review': 0.1,
            'Skin rash': 0.06,
            'Diabetes management': 0.08,
            'Headache and dizziness': 0.07,
            'Vaccination': 0.09,
        }

        self.providers = [
            'Dr. Sarah Johnson', 'Dr. Budi Santoso', 'Dr. Michael Chen',
            'Dr. Putri Lestari', 'Dr. Emily Davis',
        ]

        self.record_titles = {
            'Consultation': ['General consultation', 'Follow-up visit', 'Specialist consultation'],
            'Lab Result': ['Complete blood count', 'Lipid panel', 'HbA1c test', 'Urinalysis'],
            'Imaging': ['Chest X-ray', 'Abdominal ultrasound', 'Knee MRI'],
            'Treatment': ['Wound dressing', 'Physiotherapy session', 'Nebulizer treatment'],
            'Prescription': ['Antibiotic course', 'Antihypertensive refill', 'Pain management'],
            'Referral': ['Cardiology referral', 'Dermatology referral', 'Orthopedic referral'],
        }

        self.conditions = [
            'Hypertension', 'Type 2 diabetes', 'Asthma', 'Migraine', 'Hypothyroidism',
            'Osteoarthritis', 'GERD', 'Seasonal allergies',
        ]

    def _weighted_choice(self, weights: Dict[str, float]) -> str:
        options = list(weights.keys())
        probabilities = np.array(list(weights.values()))
        return str(np.random.choice(options, p=probabilities / probabilities.sum()))

    def _new_row(self, created_at: datetime) -> Dict[str, Any]:
        return {'id': str(uuid.uuid4()), 'created_at': created_at.isoformat(timespec='seconds')}

    def _patient_code(self, created_at: datetime) -> str:
        millis = str(int(created_at.timestamp() * 1000))
        return f"PAT{millis[-6:]}{random.randint(0, 999):03d}"

    def generate_patient(self) -> Dict[str, Any]:
        """Generate one patient row."""
        gender = self._weighted_choice(GENDER_WEIGHTS)
        if gender == 'Male':
            first_name = self.fake.first_name_male()
        elif gender == 'Female':
            first_name = self.fake.first_name_female()
        else:
            first_name = self.fake.first_name()

        created_at = datetime.combine(
            self.today - timedelta(days=int(np.random.randint(0, 365))),
            datetime.min.time(),
        ) + timedelta(minutes=int(np.random.randint(8 * 60, 17 * 60)))

        patient = self._new_row(created_at)
        patient.update({
            'patient_id': self._patient_code(created_at),
            'first_name': first_name,
            'middle_name': self.fake.first_name() if random.random() < 0.25 else None,
            'last_name': self.fake.last_name(),
            'date_of_birth': self.fake.date_of_birth(minimum_age=1, maximum_age=90).isoformat(),
            'gender': gender,
            'email': self.fake.email() if random.random() < 0.85 else None,
            'primary_phone': self.fake.numerify('08##########'),
            'secondary_phone': self.fake.numerify('08##########') if random.random() < 0.3 else None,
            'national_id': self.fake.numerify('################') if random.random() < 0.6 else None,
            'marital_status': random.choice(MARITAL_STATUSES),
            'preferred_language': self._weighted_choice(LANGUAGE_WEIGHTS),
        })
        return patient

    def generate_address(self, patient: Dict[str, Any]) -> Dict[str, Any]:
        row = self._new_row(datetime.fromisoformat(patient['created_at']))
        row.update({
            'patient_id': patient['id'],
            'street_address': self.fake.street_address(),
            'city': self.fake.city(),
            'state_province': self.fake.state(),
            'zip_postal_code': self.fake.postcode(),
            'country': self.fake.current_country(),
        })
        return row

    def generate_emergency_contact(self, patient: Dict[str, Any]) -> Dict[str, Any]:
        row = self._new_row(datetime.fromisoformat(patient['created_at']))
        row.update({
            'patient_id': patient['id'],
            'contact_name': self.fake.name(),
            'relationship': random.choice(RELATIONSHIPS),
            'phone_number': self.fake.numerify('08##########'),
            'email': self.fake.email() if random.random() < 0.5 else None,
            'street_address': self.fake.street_address() if random.random() < 0.4 else None,
        })
        return row

    def generate_lifestyle(self, patient: Dict[str, Any]) -> Dict[str, Any]:
        row = self._new_row(datetime.fromisoformat(patient['created_at']))
        row.update({
            'patient_id': patient['id'],
            'occupation': self.fake.job(),
            'smoking_status': self._weighted_choice(SMOKING_WEIGHTS),
            'alcohol_consumption': self._weighted_choice(ALCOHOL_WEIGHTS),
            'exercise_habits': self._weighted_choice(EXERCISE_WEIGHTS),
            'dietary_restrictions': random.choice([None, None, 'Vegetarian', 'Halal', 'Gluten-free']),
        })
        return row

    def generate_appointments(self, patient: Dict[str, Any], count: int) -> List[Dict[str, Any]]:
        """Appointments spread from 90 days ago to 30 days ahead, with status by date."""
        appointments = []
        for _ in range(count):
            appointment_date = self.today + timedelta(days=int(np.random.randint(-90, 31)))
            if appointment_date < self.today:
                status = str(np.random.choice(['Completed', 'Cancelled', 'No Show'], p=[0.8, 0.12, 0.08]))
            elif appointment_date == self.today:
                status = str(np.random.choice(['Scheduled', 'Confirmed', 'In Progress']))
            else:
                status = str(np.random.choice(['Scheduled', 'Confirmed'], p=[0.6, 0.4]))

            row = self._new_row(datetime.fromisoformat(patient['created_at']))
            row.update({
                'patient_id': patient['id'],
                'appointment_date': appointment_date.isoformat(),
                'appointment_time': random.choice(APPOINTMENT_TIMES),
                'appointment_case': self._weighted_choice(self.appointment_cases),
                'provider_name': random.choice(self.providers),
                'status': status,
                'notes': self.fake.sentence(nb_words=8) if random.random() < 0.3 else None,
            })
            appointments.append(row)
        return appointments

    def generate_medical_records(self, patient: Dict[str, Any],
                                 appointments: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """One record per completed appointment, plus an occasional standalone result."""
        records = []
        for appointment in appointments:
            if appointment['status'] != 'Completed':
                continue
            record_type = random.choice(list(self.record_titles.keys()))
            row = self._new_row(datetime.fromisoformat(patient['created_at']))
            row.update({
                'patient_id': patient['id'],
                'appointment_id': appointment['id'],
                'record_type': record_type,
                'title': random.choice(self.record_titles[record_type]),
                'description': (f"{appointment['appointment_case']}. "
                                f"History of {random.choice(self.conditions).lower()}."),
                'provider_name': appointment['provider_name'],
                'record_date': appointment['appointment_date'],
                'file_url': None,
            })
            records.append(row)
        return records

    def generate_dataset(self, patient_count: int = 25,
                         appointments_per_patient: int = 2) -> Dict[str, List[Dict[str, Any]]]:
        """
        Generate a complete, internally consistent dataset

        Args:
            patient_count: Number of patients
            appointments_per_patient: Average appointments per patient

        Returns:
            Mapping of table name to rows
        """
        tables: Dict[str, List[Dict[str, Any]]] = {
            'patients': [], 'patient_addresses': [], 'emergency_contacts': [],
            'patient_lifestyle': [], 'appointments': [], 'medical_records': [],
        }
        codes = set()
        for _ in range(patient_count):
            patient = self.generate_patient()
            while patient['patient_id'] in codes:
                patient['patient_id'] = self._patient_code(datetime.fromisoformat(patient['created_at']))
            codes.add(patient['patient_id'])

            tables['patients'].append(patient)
            tables['patient_addresses'].append(self.generate_address(patient))
            tables['emergency_contacts'].append(self.generate_emergency_contact(patient))
            if random.random() < 0.7:
                tables['patient_lifestyle'].append(self.generate_lifestyle(patient))

            appointments = self.generate_appointments(
                patient, int(np.random.poisson(appointments_per_patient)))
            tables['appointments'].extend(appointments)
            tables['medical_records'].extend(self.generate_medical_records(patient, appointments))
        return tables

    def load_into(self, store, patient_count: int = 25,
                  appointments_per_patient: int = 2) -> Dict[str, int]:
        """
        Insert a generated dataset into a data store

        Args:
            store: Any DataStore
            patient_count: Number of patients
            appointments_per_patient: Average appointments per patient

        Returns:
            Mapping of table name to inserted row count
        """
        dataset = self.generate_dataset(patient_count, appointments_per_patient)
        counts = {}
        with store.transaction():
            for table, rows in dataset.items():
                for row in rows:
                    store.insert(table, row)
                counts[table] = len(rows)
        return counts
