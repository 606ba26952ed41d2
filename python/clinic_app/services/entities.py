"""
Entity registry for the Wellness+ dashboard

Each EntityConfig describes how one list screen reads its table: projection,
ordering, relational embed, the fields the search box looks at and the two
messages shown when the list is empty.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from clinic_app.services.data_store import Embed, Order, Query

GENDERS = ("Male", "Female", "Other")
MARITAL_STATUSES = ("Single", "Married", "Divorced", "Widowed", "Separated")
LANGUAGES = ("English", "Spanish", "French", "German", "Indonesian", "Other")
APPOINTMENT_STATUSES = ("Scheduled", "Confirmed", "In Progress", "Completed", "Cancelled", "No Show")
RECORD_TYPES = ("Consultation", "Lab Result", "Imaging", "Treatment", "Prescription", "Referral")
SMOKING_STATUSES = ("Never", "Former", "Current")
ALCOHOL_CONSUMPTION = ("Never", "Occasionally", "Regularly", "Heavily")
EXERCISE_FREQUENCIES = ("Never", "Rarely", "Weekly", "Daily")
RELATIONSHIPS = ("Spouse", "Parent", "Child", "Sibling", "Friend", "Other")

DEFAULT_APPOINTMENT_STATUS = "Scheduled"
DEFAULT_LANGUAGE = "English"

SearchField = Callable[[Dict[str, Any]], Optional[str]]


def column(name: str) -> SearchField:
    return lambda row: row.get(name)


def full_name(row: Optional[Dict[str, Any]]) -> str:
    if not row:
        return ""
    return f"{row.get('first_name') or ''} {row.get('last_name') or ''}".strip()


def embedded(alias: str, name: str) -> SearchField:
    return lambda row: (row.get(alias) or {}).get(name)


def embedded_full_name(alias: str) -> SearchField:
    return lambda row: full_name(row.get(alias))


PATIENT_EMBED = Embed(
    table="patients",
    foreign_key="patient_id",
    columns=("first_name", "last_name", "patient_id"),
    alias="patient",
)


@dataclass(frozen=True)
class EntityConfig:
    table: str
    label: str
    order: Tuple[Order, ...]
    columns: Tuple[str, ...] = ('*',)
    embed: Optional[Embed] = None
    search_fields: Tuple[SearchField, ...] = field(default=())
    empty_message: str = "No records available yet."
    no_match_message: str = "No records found matching your search."

    def query(self) -> Query:
        return Query(table=self.table, columns=self.columns, order=self.order, embed=self.embed)

    @property
    def tables(self) -> Tuple[str, ...]:
        """Tables whose writes change this list, embedded ones included"""
        return (self.table,) + ((self.embed.table,) if self.embed else ())

    def empty_list_message(self, search_term: str = "") -> str:
        """Message for an empty list; differs when a search is active"""
        return self.no_match_message if (search_term or "").strip() else self.empty_message


PATIENTS = EntityConfig(
    table="patients",
    label="Patients",
    order=(Order("created_at", ascending=False),),
    search_fields=(full_name, column("patient_id"), column("email"), column("primary_phone")),
    empty_message="No patients registered yet.",
    no_match_message="No patients found matching your search.",
)

APPOINTMENTS = EntityConfig(
    table="appointments",
    label="Appointments",
    order=(Order("appointment_date"), Order("appointment_time")),
    embed=PATIENT_EMBED,
    search_fields=(
        embedded_full_name("patient"),
        embedded("patient", "patient_id"),
        column("appointment_case"),
    ),
    empty_message="No appointments scheduled yet.",
    no_match_message="No appointments found matching your search.",
)

MEDICAL_RECORDS = EntityConfig(
    table="medical_records",
    label="Medical Records",
    order=(Order("record_date", ascending=False),),
    embed=PATIENT_EMBED,
    search_fields=(
        embedded_full_name("patient"),
        embedded("patient", "patient_id"),
        column("title"),
        column("record_type"),
    ),
    empty_message="No medical records available yet.",
    no_match_message="No medical records found matching your search.",
)

REPORTS = EntityConfig(
    table="reports",
    label="Generated Reports",
    order=(Order("generated_at", ascending=False),),
    search_fields=(column("report_name"), column("report_type"), column("generated_by")),
    empty_message="No reports generated yet. Use the report cards above to generate one.",
    no_match_message="No reports found matching your search.",
)

# Lightweight list for the patient selector in entry forms
PATIENT_PICKER = EntityConfig(
    table="patients",
    label="Patients",
    columns=("id", "patient_id", "first_name", "last_name"),
    order=(Order("first_name"),),
    search_fields=(full_name, column("patient_id")),
    empty_message="No patients available for selection.",
    no_match_message="No patients found matching your search.",
)

JSON_COLUMNS = {"reports": ("report_data",)}
