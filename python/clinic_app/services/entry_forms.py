"""
Entry form schemas and the submission controller shared by every add/edit form.

A FormSchema lists each field with its ordered validation rules. The
FormSubmission controller validates synchronously, converts optional blank
values to None, calls the write operation and reports the outcome through a
notifier (a toast in the UI) and an ``on_success`` callback. It also carries
the in-flight flag that keeps the submit button disabled.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Callable, Dict, Optional, Tuple

from clinic_app.services.data_service import DataService, PATIENT_CONTACT_FIELDS
from clinic_app.services.entities import GENDERS, LANGUAGES, MARITAL_STATUSES, RECORD_TYPES
from clinic_app.utils import validators

logger = logging.getLogger(__name__)

Rule = Callable[[Any], Tuple[bool, str]]
Notifier = Callable[[str, str], None]


def required(message: str) -> Rule:
    return lambda value: validators.validate_required(value, message)


def min_length(length: int, message: str) -> Rule:
    return lambda value: validators.validate_min_length(value, length, message)


def email(message: str = "Invalid email address") -> Rule:
    return lambda value: validators.validate_email(value, message)


def phone() -> Rule:
    return validators.validate_phone_number


def one_of(options, message: str) -> Rule:
    return lambda value: validators.validate_choice(value, options, message)


def iso_date(message: str = "Enter a valid date (YYYY-MM-DD)") -> Rule:
    return lambda value: validators.validate_iso_date(value, message)


def not_future(message: str) -> Rule:
    return lambda value: validators.validate_not_future(value, message)


def time_of_day(message: str = "Enter a valid time (HH:MM)") -> Rule:
    return lambda value: validators.validate_time(value, message)


def _normalize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat(timespec='seconds')
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime('%H:%M:%S')
    if isinstance(value, str):
        return value.strip()
    return value


@dataclass(frozen=True)
class FormSchema:
    name: str
    fields: Dict[str, Tuple[Rule, ...]]
    optional_fields: Tuple[str, ...] = ()

    def validate(self, values: Dict[str, Any]) -> Dict[str, str]:
        """
        Run every field's rules in order against the trimmed values

        Args:
            values: Submitted field values

        Returns:
            Mapping of field name to the first failing rule's message
        """
        errors: Dict[str, str] = {}
        for field_name, rules in self.fields.items():
            value = values.get(field_name)
            if isinstance(value, str):
                value = value.strip()
            for rule in rules:
                is_valid, message = rule(value)
                if not is_valid:
                    errors[field_name] = message
                    break
        return errors

    def build_payload(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Insert payload: trimmed values, optional blanks become None"""
        payload = {}
        for field_name in self.fields:
            value = _normalize(values.get(field_name))
            if field_name in self.optional_fields and (value is None or value == ""):
                value = None
            payload[field_name] = value
        return payload


PATIENT_SCHEMA = FormSchema(
    name="add_patient",
    fields={
        'first_name': (min_length(2, "First name must be at least 2 characters"),),
        'middle_name': (),
        'last_name': (min_length(2, "Last name must be at least 2 characters"),),
        'date_of_birth': (
            required("Date of birth is required"),
            iso_date(),
            not_future("Date of birth cannot be in the future"),
        ),
        'gender': (required("Gender is required"), one_of(GENDERS, "Select a valid gender")),
        'email': (email(),),
        'primary_phone': (min_length(10, "Phone number must be at least 10 digits"), phone()),
        'secondary_phone': (phone(),),
        'national_id': (),
        'marital_status': (one_of(MARITAL_STATUSES, "Select a valid marital status"),),
        'preferred_language': (one_of(LANGUAGES, "Select a valid language"),),
    },
    optional_fields=('middle_name', 'email', 'secondary_phone', 'national_id',
                     'marital_status', 'preferred_language'),
)

EDIT_PATIENT_SCHEMA = FormSchema(
    name="edit_patient",
    fields={name: PATIENT_SCHEMA.fields[name] for name in PATIENT_CONTACT_FIELDS},
    optional_fields=('email', 'secondary_phone', 'marital_status', 'preferred_language'),
)

APPOINTMENT_SCHEMA = FormSchema(
    name="add_appointment",
    fields={
        'patient_id': (required("Patient is required"),),
        'appointment_date': (required("Appointment date is required"), iso_date()),
        'appointment_time': (required("Appointment time is required"), time_of_day()),
        'appointment_case': (required("Appointment case is required"),),
        'provider_name': (),
        'notes': (),
    },
    optional_fields=('provider_name', 'notes'),
)

MEDICAL_RECORD_SCHEMA = FormSchema(
    name="add_medical_record",
    fields={
        'patient_id': (required("Patient is required"),),
        'appointment_id': (),
        'record_type': (required("Record type is required"),
                        one_of(RECORD_TYPES, "Select a valid record type")),
        'title': (required("Title is required"),),
        'description': (),
        'provider_name': (),
        'record_date': (required("Record date is required"), iso_date()),
        'file_url': (),
    },
    optional_fields=('appointment_id', 'description', 'provider_name', 'file_url'),
)


class FormSubmission:
    """Validates and submits one form; one instance lives as long as the form is open"""

    def __init__(self, schema: FormSchema, write: Callable[[Dict[str, Any]], Any],
                 on_success: Optional[Callable[[], None]] = None,
                 notify: Optional[Notifier] = None,
                 success_message: str = "Saved successfully!",
                 error_message: str = "Failed to save. Please try again."):
        self.schema = schema
        self.write = write
        self.on_success = on_success
        self.notify = notify
        self.success_message = success_message
        self.error_message = error_message
        self.pending = False
        self.in_flight = False
        self.errors: Dict[str, str] = {}
        self.last_error: Optional[str] = None

    @property
    def submitting(self) -> bool:
        return self.pending or self.in_flight

    def mark_submitting(self):
        """Submit button on_click; runs before the rerun that renders the button disabled"""
        self.pending = True

    def _notify(self, level: str, message: str):
        if self.notify:
            self.notify(level, message)

    def submit(self, values: Dict[str, Any]) -> bool:
        """
        Validate and write the form values

        Args:
            values: Current field values

        Returns:
            True when the write succeeded
        """
        if self.in_flight:
            logger.warning(f"Ignoring duplicate submit of {self.schema.name} while in flight")
            return False
        self.pending = False

        self.errors = self.schema.validate(values)
        if self.errors:
            logger.info(f"{self.schema.name} rejected: {sorted(self.errors)}")
            return False

        payload = self.schema.build_payload(values)
        self.in_flight = True
        try:
            self.write(payload)
        except Exception as e:
            logger.error(f"Error submitting {self.schema.name}: {e}")
            self.last_error = str(e)
            self._notify('error', self.error_message)
            return False
        finally:
            self.in_flight = False

        self.last_error = None
        if self.on_success:
            self.on_success()
        self._notify('success', self.success_message)
        return True


def add_patient_form(service: DataService, on_success=None, notify: Notifier = None) -> FormSubmission:
    return FormSubmission(
        PATIENT_SCHEMA, service.create_patient, on_success, notify,
        success_message="Patient registered successfully!",
        error_message="Failed to register patient. Please try again.",
    )


def edit_patient_form(service: DataService, patient_row_id: str,
                      on_success=None, notify: Notifier = None) -> FormSubmission:
    return FormSubmission(
        EDIT_PATIENT_SCHEMA,
        lambda payload: service.update_patient_contact(patient_row_id, payload),
        on_success, notify,
        success_message="Patient details updated.",
        error_message="Failed to update patient. Please try again.",
    )


def add_appointment_form(service: DataService, on_success=None, notify: Notifier = None) -> FormSubmission:
    return FormSubmission(
        APPOINTMENT_SCHEMA, service.create_appointment, on_success, notify,
        success_message="Appointment scheduled successfully!",
        error_message="Failed to schedule appointment. Please try again.",
    )


def add_medical_record_form(service: DataService, on_success=None, notify: Notifier = None) -> FormSubmission:
    return FormSubmission(
        MEDICAL_RECORD_SCHEMA, service.create_medical_record, on_success, notify,
        success_message="Medical record added successfully!",
        error_message="Failed to add medical record. Please try again.",
    )
