"""Rejection codes and exceptions raised by the scheduling engine.

Every failure the engine reports is one of the ``Reason`` members below.
Validators hand them back inside a ``Verdict``; engine operations raise a
``ClinicError`` subclass carrying the reason.
"""
from __future__ import annotations
from enum import Enum


class Reason(str, Enum):
    # identifier
    DUPLICATE = "duplicate"
    BAD_LENGTH = "bad_length"
    BLACKLISTED = "blacklisted"
    BAD_CHECKSUM = "bad_checksum"
    # temporal
    UNPARSEABLE = "unparseable"
    OUTSIDE_BUSINESS_HOURS = "outside_business_hours"
    NOT_AFTER_PRIOR = "not_after_prior"
    BAD_GRANULARITY = "bad_granularity"
    BEFORE_PRIOR = "before_prior"
    IN_PAST = "in_past"
    # registry
    INVALID_NAME = "invalid_name"
    UNDERAGE = "underage"
    DUPLICATE_IDENTIFIER = "duplicate_identifier"
    NOT_FOUND = "not_found"
    HAS_ACTIVE_APPOINTMENT = "has_active_appointment"
    # scheduler
    PATIENT_NOT_FOUND = "patient_not_found"
    ALREADY_SCHEDULED = "already_scheduled"
    NO_ACTIVE_APPOINTMENT = "no_active_appointment"
    NO_APPOINTMENTS = "no_appointments"
    ALREADY_MATCHES_LATEST = "already_matches_latest"
    NO_FUTURE_APPOINTMENT = "no_future_appointment"


MESSAGES: dict[Reason, str] = {
    Reason.DUPLICATE: "CPF already registered",
    Reason.BAD_LENGTH: "CPF must contain 11 digits",
    Reason.BLACKLISTED: "Invalid CPF",
    Reason.BAD_CHECKSUM: "Invalid CPF",
    Reason.UNPARSEABLE: "Invalid date or time",
    Reason.OUTSIDE_BUSINESS_HOURS: "Opening hours are between 8h and 19h",
    Reason.NOT_AFTER_PRIOR: "End time must be after the start time",
    Reason.BAD_GRANULARITY: "Times must be in 15 minute steps",
    Reason.BEFORE_PRIOR: "Date must not be before the start date",
    Reason.IN_PAST: "Appointment date must be after the current date",
    Reason.INVALID_NAME: "Name must contain at least 5 characters",
    Reason.UNDERAGE: "Patient must be at least 13 years old",
    Reason.DUPLICATE_IDENTIFIER: "CPF already registered",
    Reason.NOT_FOUND: "Patient not found",
    Reason.HAS_ACTIVE_APPOINTMENT: "Patient has a scheduled appointment",
    Reason.PATIENT_NOT_FOUND: "Patient not registered",
    Reason.ALREADY_SCHEDULED: "Patient is already scheduled",
    Reason.NO_ACTIVE_APPOINTMENT: "Patient has no scheduled appointment",
    Reason.NO_APPOINTMENTS: "No appointments scheduled",
    Reason.ALREADY_MATCHES_LATEST: "Appointment found",
    Reason.NO_FUTURE_APPOINTMENT: "No future appointments found",
}


class ClinicError(Exception):
    """Base class for every typed rejection raised by the engine."""

    def __init__(self, reason: Reason, detail: str | None = None):
        self.reason = reason
        self.message = MESSAGES[reason]
        super().__init__(detail or self.message)


class IdentifierRejected(ClinicError):
    pass


class TemporalRejected(ClinicError):
    pass


class RegistrationError(ClinicError):
    """Raised by registry operations (register/delete)."""


class PatientNotFound(ClinicError):
    def __init__(self, patient_id: str):
        self.patient_id = patient_id
        super().__init__(Reason.PATIENT_NOT_FOUND, f"Patient {patient_id} not registered")


class SchedulingError(ClinicError):
    pass


IDENTIFIER_REASONS = frozenset(
    {Reason.DUPLICATE, Reason.BAD_LENGTH, Reason.BLACKLISTED, Reason.BAD_CHECKSUM}
)
TEMPORAL_REASONS = frozenset(
    {
        Reason.UNPARSEABLE,
        Reason.OUTSIDE_BUSINESS_HOURS,
        Reason.NOT_AFTER_PRIOR,
        Reason.BAD_GRANULARITY,
        Reason.BEFORE_PRIOR,
        Reason.IN_PAST,
    }
)


def error_for(reason: Reason) -> ClinicError:
    """Build the exception matching a validator reason."""
    if reason in IDENTIFIER_REASONS:
        return IdentifierRejected(reason)
    if reason in TEMPORAL_REASONS:
        return TemporalRejected(reason)
    return RegistrationError(reason)
