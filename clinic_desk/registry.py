from __future__ import annotations
import logging
from datetime import date
from typing import TYPE_CHECKING, Any, Iterator, Optional

from .errors import Reason, RegistrationError, TemporalRejected
from .identifier import validate_identifier
from .models import ACCEPTED, Patient, Verdict, whole_years
from .temporal import Clock, parse_date, system_clock

if TYPE_CHECKING:
    from .scheduler import AppointmentScheduler

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 5
MIN_AGE = 13
ORDER_FIELDS = ("identifier", "name")


def validate_name(name: str) -> Verdict:
    if len(name.strip()) < MIN_NAME_LENGTH:
        return Verdict.reject(Reason.INVALID_NAME)
    return ACCEPTED


def validate_birth_date(value: Any, clock: Clock = system_clock) -> Verdict:
    born = parse_date(value)
    if born is None:
        return Verdict.reject(Reason.UNPARSEABLE)
    if whole_years(born, clock().date()) < MIN_AGE:
        return Verdict.reject(Reason.UNDERAGE)
    return ACCEPTED


class PatientRegistry:
    """Registered patients keyed by CPF.

    Deleting a patient also drops its appointment history from the scheduler
    bound to this registry; a patient with an active appointment is kept.
    """

    def __init__(self, clock: Clock = system_clock):
        self._clock = clock
        self._patients: dict[str, Patient] = {}
        self._scheduler: Optional["AppointmentScheduler"] = None

    def bind(self, scheduler: "AppointmentScheduler") -> None:
        self._scheduler = scheduler

    def __contains__(self, patient_id: object) -> bool:
        return patient_id in self._patients

    def __len__(self) -> int:
        return len(self._patients)

    def __iter__(self) -> Iterator[Patient]:
        return iter(list(self._patients.values()))

    def __getitem__(self, patient_id: str) -> Patient:
        return self._patients[patient_id]

    def get(self, patient_id: str) -> Optional[Patient]:
        return self._patients.get(patient_id)

    def ids(self) -> frozenset[str]:
        return frozenset(self._patients)

    def register(self, patient_id: str, name: str, birth_date: date | str) -> Patient:
        verdict = validate_identifier(patient_id, self._patients)
        if verdict.reason is Reason.DUPLICATE:
            raise RegistrationError(Reason.DUPLICATE_IDENTIFIER, f"CPF {patient_id} already registered")
        verdict.raise_for_reason()

        validate_name(name).raise_for_reason()

        born = parse_date(birth_date)
        if born is None:
            raise TemporalRejected(Reason.UNPARSEABLE)
        validate_birth_date(born, self._clock).raise_for_reason()

        patient = Patient(id=patient_id, name=name.strip(), birth_date=born)
        self._patients[patient_id] = patient
        logger.info("registered patient %s", patient_id)
        return patient

    def delete(self, patient_id: str) -> Patient:
        if patient_id not in self._patients:
            raise RegistrationError(Reason.NOT_FOUND, f"Patient {patient_id} not found")
        if self._scheduler is not None and self._scheduler.has_active_appointment(patient_id):
            logger.debug("refusing to delete %s: active appointment", patient_id)
            raise RegistrationError(Reason.HAS_ACTIVE_APPOINTMENT)

        patient = self._patients.pop(patient_id)
        if self._scheduler is not None:
            self._scheduler.discard(patient_id)
        logger.info("deleted patient %s", patient_id)
        return patient

    def list_ordered_by(self, field: str = "name") -> list[Patient]:
        if field == "identifier":
            return sorted(self._patients.values(), key=lambda p: int(p.id))
        if field == "name":
            return sorted(self._patients.values(), key=lambda p: p.name.lower())
        raise ValueError(f"cannot order patients by {field!r}; expected one of {ORDER_FIELDS}")
