"""
Six-step patient registration wizard.

WizardState is an immutable value: ``next``, ``previous`` and ``set_field``
each return a new state, and the page swaps it into session state wholesale.
Moving between steps never validates and never clears the draft.
RegistrationService persists a finished draft across the patient, address,
emergency contact, lifestyle, medical record and appointment tables inside a
single store transaction.
"""

import logging
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, List, Optional, Tuple

from clinic_app.services.data_service import DataService
from clinic_app.services.entities import (
    ALCOHOL_CONSUMPTION, EXERCISE_FREQUENCIES, GENDERS, LANGUAGES, MARITAL_STATUSES,
    RELATIONSHIPS, SMOKING_STATUSES,
)
from clinic_app.services.entry_forms import (
    FormSchema, email, iso_date, min_length, not_future, one_of, phone, required, time_of_day,
)
from clinic_app.services.exceptions import RegistrationError

logger = logging.getLogger(__name__)

TOTAL_STEPS = 6


@dataclass(frozen=True)
class RegistrationDraft:
    # Personal Information
    first_name: Any = ""
    middle_name: Any = ""
    last_name: Any = ""
    date_of_birth: Any = ""
    gender: Any = ""
    national_id: Any = ""
    marital_status: Any = ""
    preferred_language: Any = ""
    email: Any = ""
    primary_phone: Any = ""
    secondary_phone: Any = ""
    # Address Information
    street_address: Any = ""
    city: Any = ""
    state_province: Any = ""
    zip_postal_code: Any = ""
    country: Any = ""
    # Emergency Contact
    emergency_name: Any = ""
    emergency_relationship: Any = ""
    emergency_phone: Any = ""
    emergency_email: Any = ""
    emergency_address: Any = ""
    # Medical History
    current_medications: Any = ""
    known_allergies: Any = ""
    previous_surgeries: Any = ""
    chronic_conditions: Any = ""
    family_history: Any = ""
    current_symptoms: Any = ""
    previous_providers: Any = ""
    # Lifestyle Information
    occupation: Any = ""
    smoking_status: Any = ""
    alcohol_consumption: Any = ""
    exercise_habits: Any = ""
    dietary_restrictions: Any = ""
    # Appointment
    preferred_date: Any = ""
    preferred_time: Any = ""
    appointment_case: Any = ""

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def with_field(self, name: str, value: Any) -> 'RegistrationDraft':
        if name not in self.field_names():
            raise KeyError(f"Unknown registration field: {name}")
        return replace(self, **{name: value})

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class WizardStep:
    number: int
    title: str
    icon: str
    fields: Tuple[str, ...]


STEPS: Tuple[WizardStep, ...] = (
    WizardStep(1, "Personal Information", "👤", (
        'first_name', 'middle_name', 'last_name', 'date_of_birth', 'gender', 'national_id',
        'marital_status', 'preferred_language', 'email', 'primary_phone', 'secondary_phone',
    )),
    WizardStep(2, "Address Information", "📍", (
        'street_address', 'city', 'state_province', 'zip_postal_code', 'country',
    )),
    WizardStep(3, "Emergency Contact", "📞", (
        'emergency_name', 'emergency_relationship', 'emergency_phone', 'emergency_email',
        'emergency_address',
    )),
    WizardStep(4, "Medical History", "❤️", (
        'current_medications', 'known_allergies', 'previous_surgeries', 'chronic_conditions',
        'family_history', 'current_symptoms', 'previous_providers',
    )),
    WizardStep(5, "Lifestyle Information", "💼", (
        'occupation', 'smoking_status', 'alcohol_consumption', 'exercise_habits',
        'dietary_restrictions',
    )),
    WizardStep(6, "Appointment", "📅", (
        'preferred_date', 'preferred_time', 'appointment_case',
    )),
)


@dataclass(frozen=True)
class WizardState:
    step: int = 1
    draft: RegistrationDraft = field(default_factory=RegistrationDraft)

    @property
    def progress(self) -> float:
        """Completion percentage, derived from the step"""
        return self.step / TOTAL_STEPS * 100

    @property
    def current_step(self) -> WizardStep:
        return STEPS[self.step - 1]

    @property
    def is_first(self) -> bool:
        return self.step == 1

    @property
    def is_last(self) -> bool:
        return self.step == TOTAL_STEPS

    @property
    def can_submit(self) -> bool:
        return self.is_last

    def next(self) -> 'WizardState':
        if self.is_last:
            return self
        return replace(self, step=self.step + 1)

    def previous(self) -> 'WizardState':
        if self.is_first:
            return self
        return replace(self, step=self.step - 1)

    def go_to(self, step: int) -> 'WizardState':
        if not 1 <= step <= TOTAL_STEPS:
            raise ValueError(f"Step must be between 1 and {TOTAL_STEPS}")
        return replace(self, step=step)

    def set_field(self, name: str, value: Any) -> 'WizardState':
        return replace(self, draft=self.draft.with_field(name, value))


REGISTRATION_SCHEMA = FormSchema(
    name="patient_registration",
    fields={
        'first_name': (min_length(2, "First name must be at least 2 characters"),),
        'middle_name': (),
        'last_name': (min_length(2, "Last name must be at least 2 characters"),),
        'date_of_birth': (required("Date of birth is required"), iso_date(),
                          not_future("Date of birth cannot be in the future")),
        'gender': (required("Gender is required"), one_of(GENDERS, "Select a valid gender")),
        'national_id': (),
        'marital_status': (one_of(MARITAL_STATUSES, "Select a valid marital status"),),
        'preferred_language': (one_of(LANGUAGES, "Select a valid language"),),
        'email': (required("Email address is required"), email()),
        'primary_phone': (min_length(10, "Phone number must be at least 10 digits"), phone()),
        'secondary_phone': (phone(),),
        'street_address': (required("Street address is required"),),
        'city': (required("City is required"),),
        'state_province': (required("State/Province is required"),),
        'zip_postal_code': (required("ZIP/Postal code is required"),),
        'country': (required("Country is required"),),
        'emergency_name': (required("Emergency contact name is required"),),
        'emergency_relationship': (required("Relationship is required"),
                                   one_of(RELATIONSHIPS, "Select a valid relationship")),
        'emergency_phone': (required("Emergency contact phone is required"), phone()),
        'emergency_email': (email(),),
        'emergency_address': (),
        'current_medications': (),
        'known_allergies': (),
        'previous_surgeries': (),
        'chronic_conditions': (),
        'family_history': (),
        'current_symptoms': (),
        'previous_providers': (),
        'occupation': (),
        'smoking_status': (one_of(SMOKING_STATUSES, "Select a valid smoking status"),),
        'alcohol_consumption': (one_of(ALCOHOL_CONSUMPTION, "Select a valid option"),),
        'exercise_habits': (one_of(EXERCISE_FREQUENCIES, "Select a valid option"),),
        'dietary_restrictions': (),
        'preferred_date': (required("Preferred appointment date is required"), iso_date()),
        'preferred_time': (required("Preferred time is required"), time_of_day()),
        'appointment_case': (required("Appointment case is required"),),
    },
    optional_fields=(
        'middle_name', 'national_id', 'marital_status', 'preferred_language', 'secondary_phone',
        'emergency_email', 'emergency_address', 'current_medications', 'known_allergies',
        'previous_surgeries', 'chronic_conditions', 'family_history', 'current_symptoms',
        'previous_providers', 'occupation', 'smoking_status', 'alcohol_consumption',
        'exercise_habits', 'dietary_restrictions',
    ),
)

MEDICAL_HISTORY_LABELS = (
    ('current_symptoms', "Current symptoms / reason for visit"),
    ('current_medications', "Current medications"),
    ('known_allergies', "Known allergies"),
    ('previous_surgeries', "Previous surgeries"),
    ('chronic_conditions', "Chronic conditions"),
    ('family_history', "Family medical history"),
    ('previous_providers', "Previous healthcare providers"),
)

LIFESTYLE_FIELDS = ('occupation', 'smoking_status', 'alcohol_consumption',
                    'exercise_habits', 'dietary_restrictions')


def step_for_field(field_name: str) -> Optional[int]:
    for step in STEPS:
        if field_name in step.fields:
            return step.number
    return None


def validate_draft(draft: RegistrationDraft) -> Dict[str, str]:
    return REGISTRATION_SCHEMA.validate(draft.as_dict())


def first_invalid_step(errors: Dict[str, str]) -> Optional[int]:
    steps = [step_for_field(name) for name in errors]
    steps = [s for s in steps if s is not None]
    return min(steps) if steps else None


def build_intake_summary(payload: Dict[str, Any]) -> Optional[str]:
    """Labelled medical-history text for the intake record, or None when empty"""
    lines = [
        f"{label}: {payload[name]}"
        for name, label in MEDICAL_HISTORY_LABELS
        if payload.get(name)
    ]
    return "\n".join(lines) if lines else None


@dataclass
class RegistrationResult:
    patient: Dict[str, Any]
    appointment: Dict[str, Any]
    rows_written: List[str]


class RegistrationService:
    """Persists a completed registration draft"""

    def __init__(self, data_service: DataService):
        self.data_service = data_service
        self.pending = False
        self.in_flight = False

    @property
    def submitting(self) -> bool:
        return self.pending or self.in_flight

    def mark_submitting(self):
        """Submit button on_click, so the next render shows the button disabled"""
        self.pending = True

    def submit(self, state: WizardState, provider_name: str = None) -> RegistrationResult:
        """
        Validate the draft and write every table it maps onto

        Args:
            state: Wizard state; must be on the final step
            provider_name: Optional provider for the booked appointment

        Returns:
            RegistrationResult with the created patient and appointment

        Raises:
            RegistrationError: Not on the last step, invalid draft, duplicate
                submission, or a failed write (in which case nothing is kept)
        """
        if self.in_flight:
            raise RegistrationError("Registration is already being submitted")
        self.pending = False
        if not state.can_submit:
            raise RegistrationError("Registration can only be submitted from the final step")

        errors = validate_draft(state.draft)
        if errors:
            raise RegistrationError("Some required fields are missing or invalid", errors)

        payload = REGISTRATION_SCHEMA.build_payload(state.draft.as_dict())
        store = self.data_service.store
        written: List[str] = []
        self.in_flight = True
        try:
            with store.transaction():
                patient = self.data_service.create_patient({
                    name: payload[name] for name in (
                        'first_name', 'middle_name', 'last_name', 'date_of_birth', 'gender',
                        'email', 'primary_phone', 'secondary_phone', 'national_id',
                        'marital_status', 'preferred_language',
                    )
                })
                written.append('patients')

                store.insert('patient_addresses', {
                    'patient_id': patient['id'],
                    'street_address': payload['street_address'],
                    'city': payload['city'],
                    'state_province': payload['state_province'],
                    'zip_postal_code': payload['zip_postal_code'],
                    'country': payload['country'],
                })
                written.append('patient_addresses')

                store.insert('emergency_contacts', {
                    'patient_id': patient['id'],
                    'contact_name': payload['emergency_name'],
                    'relationship': payload['emergency_relationship'],
                    'phone_number': payload['emergency_phone'],
                    'email': payload['emergency_email'],
                    'street_address': payload['emergency_address'],
                })
                written.append('emergency_contacts')

                if any(payload.get(name) for name in LIFESTYLE_FIELDS):
                    store.insert('patient_lifestyle', {
                        'patient_id': patient['id'],
                        **{name: payload.get(name) for name in LIFESTYLE_FIELDS},
                    })
                    written.append('patient_lifestyle')

                intake = build_intake_summary(payload)
                if intake:
                    self.data_service.create_medical_record({
                        'patient_id': patient['id'],
                        'record_type': 'Consultation',
                        'title': 'Registration intake',
                        'description': intake,
                    })
                    written.append('medical_records')

                appointment = self.data_service.create_appointment({
                    'patient_id': patient['id'],
                    'appointment_date': payload['preferred_date'],
                    'appointment_time': payload['preferred_time'],
                    'appointment_case': payload['appointment_case'],
                    'provider_name': provider_name,
                })
                written.append('appointments')
        except RegistrationError:
            raise
        except Exception as e:
            logger.error(f"Registration failed after writing {written}: {e}")
            raise RegistrationError(str(e)) from e
        finally:
            self.in_flight = False

        logger.info(f"Registered {patient['patient_id']} across {written}")
        return RegistrationResult(patient=patient, appointment=appointment, rows_written=written)
