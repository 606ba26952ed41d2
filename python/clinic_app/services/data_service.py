"""
Data Service for Wellness+ Clinic Dashboard

Entity-level write operations and dashboard statistics on top of a DataStore.
Reads for list screens go through RecordFetcher; this service owns the rules
that apply when rows are created or changed: generated patient codes,
appointment status defaults, record dates and the immutable business code.
"""

import random
import time
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional
import logging

from clinic_app.services.data_store import DataStore, Filter, Query
from clinic_app.services.entities import (
    APPOINTMENT_STATUSES, DEFAULT_APPOINTMENT_STATUS, DEFAULT_LANGUAGE, PATIENTS,
)

logger = logging.getLogger(__name__)

PATIENT_CONTACT_FIELDS = ('email', 'primary_phone', 'secondary_phone',
                          'marital_status', 'preferred_language')


class DataService:
    """Central write service for the dashboard"""

    def __init__(self, store: DataStore, clock: Callable[[], datetime] = datetime.now,
                 rng: random.Random = None):
        self.store = store
        self.clock = clock
        self.rng = rng or random.Random()

    def generate_patient_code(self, max_attempts: int = 5) -> str:
        """
        Generate a unique human-readable patient code

        Format is ``PAT`` + last 6 digits of the epoch milliseconds + 3 random
        digits. Codes already present in the store are retried.

        Returns:
            New patient code
        """
        code = None
        for _ in range(max_attempts):
            millis = str(int(self.clock().timestamp() * 1000))
            code = f"PAT{millis[-6:]}{self.rng.randint(0, 999):03d}"
            existing = self.store.select(Query(
                table=PATIENTS.table,
                columns=('id',),
                filters=(Filter('patient_id', 'eq', code),),
            ))
            if not existing:
                return code
            logger.warning(f"Patient code collision on {code}, retrying")
            time.sleep(0.001)
        raise RuntimeError(f"Could not generate a unique patient code after {max_attempts} attempts")

    def create_patient(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(payload)
        row['patient_id'] = self.generate_patient_code()
        row['preferred_language'] = row.get('preferred_language') or DEFAULT_LANGUAGE
        created = self.store.insert('patients', row)
        logger.info(f"Registered patient {created['patient_id']}")
        return created

    def update_patient_contact(self, patient_row_id: str, values: Dict[str, Any]) -> int:
        """
        Update a patient's contact details

        The business code and identity fields are never edited here.

        Args:
            patient_row_id: Internal row id of the patient
            values: New contact values (only contact fields are accepted)

        Returns:
            Number of updated rows
        """
        unexpected = set(values) - set(PATIENT_CONTACT_FIELDS)
        if unexpected:
            raise ValueError(f"Fields cannot be edited: {sorted(unexpected)}")
        return self.store.update('patients', dict(values), [Filter('id', 'eq', patient_row_id)])

    def create_appointment(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(payload)
        row['status'] = row.get('status') or DEFAULT_APPOINTMENT_STATUS
        created = self.store.insert('appointments', row)
        logger.info(f"Scheduled appointment {created['id']} for patient {created['patient_id']}")
        return created

    def update_appointment_status(self, appointment_id: str, status: str) -> int:
        if status not in APPOINTMENT_STATUSES:
            raise ValueError(f"Unknown appointment status: {status}")
        updated = self.store.update('appointments', {'status': status},
                                    [Filter('id', 'eq', appointment_id)])
        logger.info(f"Appointment {appointment_id} set to {status}")
        return updated

    def cancel_appointment(self, appointment_id: str) -> int:
        return self.update_appointment_status(appointment_id, 'Cancelled')

    def create_medical_record(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(payload)
        if not row.get('record_date'):
            row['record_date'] = self.clock().date().isoformat()
        created = self.store.insert('medical_records', row)
        logger.info(f"Added {created['record_type']} record {created['id']}")
        return created

    def create_report(self, report_name: str, report_type: str, report_data: Any,
                      generated_by: Optional[str] = None) -> Dict[str, Any]:
        row = {
            'report_name': report_name,
            'report_type': report_type,
            'generated_by': generated_by,
            'report_data': report_data,
            'generated_at': self.clock().isoformat(timespec='seconds'),
        }
        created = self.store.insert('reports', row)
        logger.info(f"Generated report '{report_name}' ({report_type})")
        return created


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.strptime(value[:10], '%Y-%m-%d').date()
        except ValueError:
            return None
    return None


def todays_appointments(appointments: List[Dict[str, Any]],
                        today: date = None) -> List[Dict[str, Any]]:
    """Appointments on the given day (default today), ordered by time"""
    today = today or date.today()
    todays = [a for a in appointments if _as_date(a.get('appointment_date')) == today]
    return sorted(todays, key=lambda a: str(a.get('appointment_time') or ''))


def get_dashboard_stats(patients: List[Dict[str, Any]],
                        appointments: List[Dict[str, Any]],
                        records: List[Dict[str, Any]],
                        today: date = None) -> Dict[str, int]:
    """
    Headline metrics for the dashboard page

    Args:
        patients: Patient rows
        appointments: Appointment rows
        records: Medical record rows
        today: Reference day (default today)

    Returns:
        Dictionary of metric name to count
    """
    today = today or date.today()
    month_start = today.replace(day=1)
    return {
        'total_patients': len(patients),
        'new_patients_this_month': sum(
            1 for p in patients
            if (_as_date(p.get('created_at')) or date.min) >= month_start
        ),
        'total_appointments': len(appointments),
        'todays_appointments': len(todays_appointments(appointments, today)),
        'upcoming_appointments': sum(
            1 for a in appointments
            if (_as_date(a.get('appointment_date')) or date.min) >= today
            and a.get('status') in ('Scheduled', 'Confirmed')
        ),
        'total_records': len(records),
    }
