"""Per-patient appointment history and the booking/cancellation rules.

Each patient's history is kept oldest first. Only the last appointment can
be in the future, so it doubles as the active-appointment pointer:
booking appends, cancelling pops.
"""
from __future__ import annotations
import datetime as dt
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from .errors import PatientNotFound, Reason, SchedulingError, TemporalRejected
from .models import Lookup, Patient, ScheduleState, TimeOfDay
from .registry import PatientRegistry
from .temporal import Clock, parse_date, system_clock, validate_date, validate_time_of_day

logger = logging.getLogger(__name__)


class AppointmentSlot(BaseModel):
    """One contiguous time range on one day, inside business hours."""
    model_config = ConfigDict(frozen=True)

    date: dt.date
    start_time: TimeOfDay
    end_time: TimeOfDay

    @model_validator(mode="after")
    def _check_times(self) -> "AppointmentSlot":
        for verdict in (
            validate_time_of_day(self.start_time),
            validate_time_of_day(self.end_time, self.start_time),
        ):
            if not verdict.accepted:
                raise ValueError(verdict.message)
        return self

    @property
    def start_instant(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.start_time.to_time())

    @property
    def end_instant(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.end_time.to_time())

    @property
    def duration(self) -> dt.timedelta:
        return self.end_instant - self.start_instant

    @property
    def duration_text(self) -> str:
        minutes = int(self.duration.total_seconds()) // 60
        return f"{minutes // 60}:{minutes % 60:02d}"


class Appointment(BaseModel):
    model_config = ConfigDict(frozen=True)

    slot: AppointmentSlot

    def is_future(self, now: dt.datetime) -> bool:
        return self.slot.start_instant > now


class AgendaEntry(BaseModel):
    appointment: Appointment
    patient: Patient


class AppointmentScheduler:
    def __init__(self, registry: PatientRegistry, clock: Clock = system_clock):
        self._registry = registry
        self._clock = clock
        self._entries: dict[str, list[Appointment]] = {}
        registry.bind(self)

    def _state(self, patient_id: str, now: dt.datetime) -> ScheduleState:
        entry = self._entries.get(patient_id)
        if not entry:
            return ScheduleState.EMPTY
        if entry[-1].is_future(now):
            return ScheduleState.HAS_ACTIVE
        return ScheduleState.HAS_EXPIRED_ONLY

    def state(self, patient_id: str) -> ScheduleState:
        return self._state(patient_id, self._clock())

    def has_active_appointment(self, patient_id: str) -> bool:
        # unscheduled patients are simply inactive
        return self.state(patient_id) is ScheduleState.HAS_ACTIVE

    def history(self, patient_id: str) -> tuple[Appointment, ...]:
        return tuple(self._entries.get(patient_id, ()))

    def latest_active(self, patient_id: str) -> Appointment | None:
        if self.has_active_appointment(patient_id):
            return self._entries[patient_id][-1]
        return None

    def ensure_bookable(self, patient_id: str) -> None:
        """Raise unless the patient exists and has no active appointment."""
        if patient_id not in self._registry:
            raise PatientNotFound(patient_id)
        if self.has_active_appointment(patient_id):
            logger.debug("refusing to book %s: already scheduled", patient_id)
            raise SchedulingError(Reason.ALREADY_SCHEDULED)

    def book(self, patient_id: str, slot: AppointmentSlot) -> Appointment:
        self.ensure_bookable(patient_id)
        validate_date(slot.date, clock=self._clock).raise_for_reason()

        appointment = Appointment(slot=slot)
        self._entries.setdefault(patient_id, []).append(appointment)
        logger.info(
            "booked %s on %s %s-%s", patient_id, slot.date.isoformat(), slot.start_time, slot.end_time
        )
        return appointment

    def cancel_latest(self, patient_id: str) -> Appointment:
        if not self.has_active_appointment(patient_id):
            raise SchedulingError(Reason.NO_ACTIVE_APPOINTMENT)
        entry = self._entries[patient_id]
        appointment = entry.pop()
        if not entry:
            del self._entries[patient_id]
        logger.info("cancelled %s appointment on %s", patient_id, appointment.slot.date.isoformat())
        return appointment

    def find_bookable_or_cancelable(self, patient_id: str, date: Any, start_time: Any) -> Lookup:
        """Look for the patient's future appointment.

        An exact match on the latest appointment's date and start time yields
        ``ALREADY_MATCHES_LATEST`` without a handle, so nothing gets cancelled
        on that path.
        """
        day = parse_date(date)
        start = TimeOfDay.parse(start_time)
        if day is None or start is None:
            raise TemporalRejected(Reason.UNPARSEABLE)
        if patient_id not in self._registry:
            raise PatientNotFound(patient_id)

        entry = self._entries.get(patient_id)
        if not entry:
            return Lookup(outcome=Reason.NO_APPOINTMENTS)
        latest = entry[-1]
        if latest.slot.date == day and latest.slot.start_time == start:
            return Lookup(outcome=Reason.ALREADY_MATCHES_LATEST)
        if not latest.is_future(self._clock()):
            return Lookup(outcome=Reason.NO_FUTURE_APPOINTMENT)
        return Lookup(patient_id=patient_id)

    def list_in_range(self, start_date: Any, end_date: Any) -> list[AgendaEntry]:
        """Appointments dated within [start_date, end_date], earliest first."""
        first, last = parse_date(start_date), parse_date(end_date)
        if first is None or last is None:
            raise TemporalRejected(Reason.UNPARSEABLE)
        if last < first:
            raise TemporalRejected(Reason.BEFORE_PRIOR)

        found = [
            AgendaEntry(appointment=appointment, patient=self._registry[patient_id])
            for patient_id, entry in self._entries.items()
            for appointment in entry
            if first <= appointment.slot.date <= last
        ]
        return sorted(found, key=lambda item: item.appointment.slot.start_instant)

    def discard(self, patient_id: str) -> None:
        """Forget a patient's whole history (used when the patient is deleted)."""
        self._entries.pop(patient_id, None)
