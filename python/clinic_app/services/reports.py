"""
Report generation for Wellness+ Clinic Dashboard

Each report type is computed from the live tables with pandas and stored as a
new, immutable row in ``reports``. Reports and medical records can also be
exported as JSON documents for download.
"""

import json
import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from clinic_app.services.data_service import DataService
from clinic_app.services.entities import (
    APPOINTMENT_STATUSES, APPOINTMENTS, GENDERS, MEDICAL_RECORDS, PATIENTS, RECORD_TYPES,
)
from clinic_app.utils.helpers import calculate_age

logger = logging.getLogger(__name__)

PATIENT_SUMMARY = "Patient Summary"
APPOINTMENT_STATS = "Appointment Stats"
MEDICAL_ANALYSIS = "Medical Analysis"

REPORT_TYPES = (PATIENT_SUMMARY, APPOINTMENT_STATS, MEDICAL_ANALYSIS)

REPORT_DESCRIPTIONS = {
    PATIENT_SUMMARY: "Overview of registered patients and demographics",
    APPOINTMENT_STATS: "Appointment volumes, status mix and no-show rate",
    MEDICAL_ANALYSIS: "Medical record activity by type and provider",
}

AGE_BINS = [0, 18, 35, 50, 65, 200]
AGE_LABELS = ["0-17", "18-34", "35-49", "50-64", "65+"]


def _counts(series: pd.Series, keys=()) -> Dict[str, int]:
    """value_counts as a plain dict, listing expected keys even when zero"""
    counts = {key: 0 for key in keys}
    for key, value in series.dropna().astype(str).value_counts().items():
        counts[key] = int(value)
    return counts


def _to_datetimes(values: pd.Series) -> pd.Series:
    """Parse to naive timestamps; unparseable values become NaT"""
    parsed = pd.to_datetime(values.astype(str), errors='coerce', utc=True, format='ISO8601')
    return parsed.dt.tz_localize(None)


def _monthly(dates: pd.Series) -> Dict[str, int]:
    parsed = _to_datetimes(dates).dropna()
    if parsed.empty:
        return {}
    counts = parsed.dt.strftime('%Y-%m').value_counts().sort_index()
    return {month: int(count) for month, count in counts.items()}


def _rate(part: int, total: int) -> float:
    return round(part / total * 100, 1) if total else 0.0


def build_patient_summary(patients: List[Dict[str, Any]], today: date = None) -> Dict[str, Any]:
    """
    Demographic summary of registered patients

    Args:
        patients: Patient rows
        today: Reference day for ages and "this month" (default today)

    Returns:
        JSON-serialisable report payload
    """
    today = today or date.today()
    df = pd.DataFrame(patients, columns=['date_of_birth', 'gender', 'marital_status',
                                         'preferred_language', 'created_at'])

    ages = df['date_of_birth'].map(lambda dob: calculate_age(dob, today)).dropna().astype(float)
    created = _to_datetimes(df['created_at'])
    month_start = pd.Timestamp(today.replace(day=1))

    age_groups = pd.cut(ages, bins=AGE_BINS, labels=AGE_LABELS, right=False)

    return {
        'total_patients': int(len(df)),
        'new_patients_this_month': int((created >= month_start).sum()),
        'average_age': round(float(ages.mean()), 1) if not ages.empty else None,
        'gender_distribution': _counts(df['gender'], GENDERS),
        'age_groups': _counts(age_groups, AGE_LABELS),
        'marital_status_distribution': _counts(df['marital_status']),
        'language_distribution': _counts(df['preferred_language']),
        'registrations_by_month': _monthly(df['created_at']),
    }


def build_appointment_stats(appointments: List[Dict[str, Any]], today: date = None) -> Dict[str, Any]:
    """Appointment volume and outcome statistics"""
    today = today or date.today()
    df = pd.DataFrame(appointments, columns=['appointment_date', 'appointment_time',
                                             'status', 'provider_name'])
    total = int(len(df))
    dates = _to_datetimes(df['appointment_date'])
    status = df['status'].fillna('')

    completed = int((status == 'Completed').sum())
    no_shows = int((status == 'No Show').sum())
    cancelled = int((status == 'Cancelled').sum())
    upcoming = int(((dates >= pd.Timestamp(today)) & status.isin(['Scheduled', 'Confirmed'])).sum())

    hours = df['appointment_time'].dropna().astype(str).str.slice(0, 2)
    busiest = {f"{hour}:00": int(count) for hour, count in hours.value_counts().head(3).items()}

    return {
        'total_appointments': total,
        'status_distribution': _counts(df['status'], APPOINTMENT_STATUSES),
        'appointments_by_month': _monthly(df['appointment_date']),
        'upcoming_appointments': upcoming,
        'completion_rate': _rate(completed, total),
        'cancellation_rate': _rate(cancelled, total),
        'no_show_rate': _rate(no_shows, total),
        'busiest_hours': busiest,
        'appointments_by_provider': _counts(df['provider_name']),
    }


def build_medical_analysis(records: List[Dict[str, Any]], today: date = None) -> Dict[str, Any]:
    """Medical record activity by type, month and provider"""
    df = pd.DataFrame(records, columns=['patient_id', 'record_type', 'record_date', 'provider_name'])
    total = int(len(df))
    per_patient = df.groupby('patient_id').size() if total else pd.Series(dtype=float)

    top_providers = df['provider_name'].dropna().value_counts().head(5)

    return {
        'total_records': total,
        'record_type_distribution': _counts(df['record_type'], RECORD_TYPES),
        'records_by_month': _monthly(df['record_date']),
        'patients_with_records': int(df['patient_id'].nunique()),
        'average_records_per_patient': round(float(per_patient.mean()), 2) if total else 0.0,
        'top_providers': {name: int(count) for name, count in top_providers.items()},
    }


REPORT_BUILDERS: Dict[str, Callable[..., Dict[str, Any]]] = {
    PATIENT_SUMMARY: build_patient_summary,
    APPOINTMENT_STATS: build_appointment_stats,
    MEDICAL_ANALYSIS: build_medical_analysis,
}

REPORT_SOURCES = {
    PATIENT_SUMMARY: PATIENTS,
    APPOINTMENT_STATS: APPOINTMENTS,
    MEDICAL_ANALYSIS: MEDICAL_RECORDS,
}


class ReportGenerator:
    """Computes a report from live data and stores it"""

    def __init__(self, data_service: DataService):
        self.data_service = data_service

    def generate(self, report_type: str, generated_by: Optional[str] = None,
                 today: date = None) -> Dict[str, Any]:
        """
        Generate and persist a report

        Args:
            report_type: One of REPORT_TYPES
            generated_by: Signed-in user requesting the report
            today: Reference day (default: the service clock's date)

        Returns:
            The stored report row
        """
        if report_type not in REPORT_BUILDERS:
            raise ValueError(f"Unknown report type: {report_type}")

        today = today or self.data_service.clock().date()
        source = REPORT_SOURCES[report_type]
        rows = self.data_service.store.select(source.query())
        report_data = REPORT_BUILDERS[report_type](rows, today)
        report_data['period_end'] = today.isoformat()

        report_name = f"{report_type} - {today.strftime('%B %d, %Y')}"
        logger.info(f"Generating {report_type} from {len(rows)} {source.table} rows")
        return self.data_service.create_report(report_name, report_type, report_data, generated_by)


def _json_default(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def report_data_of(report: Dict[str, Any]) -> Any:
    """Report payload as a Python object; stores may hand back a JSON string"""
    data = report.get('report_data')
    if isinstance(data, str):
        try:
            return json.loads(data)
        except ValueError:
            logger.warning(f"Report {report.get('id')} has non-JSON report_data")
    return data


def report_to_json(report: Dict[str, Any]) -> str:
    document = {
        'report_name': report.get('report_name'),
        'report_type': report.get('report_type'),
        'generated_by': report.get('generated_by'),
        'generated_at': report.get('generated_at'),
        'report_data': report_data_of(report),
    }
    return json.dumps(document, indent=2, default=_json_default)


def record_to_json(record: Dict[str, Any]) -> str:
    """Downloadable JSON document for one medical record"""
    patient = record.get('patient') or {}
    document = {
        'title': record.get('title'),
        'record_type': record.get('record_type'),
        'record_date': record.get('record_date'),
        'provider_name': record.get('provider_name'),
        'description': record.get('description'),
        'patient': {
            'patient_id': patient.get('patient_id'),
            'name': f"{patient.get('first_name') or ''} {patient.get('last_name') or ''}".strip(),
        },
    }
    return json.dumps(document, indent=2, default=_json_default)


def download_filename(title: str, suffix: str = "json") -> str:
    slug = "".join(c if c.isalnum() else "_" for c in (title or "document").lower()).strip("_")
    return f"{slug or 'document'}.{suffix}"
