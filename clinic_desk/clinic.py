from __future__ import annotations
import logging
from typing import Any

from .errors import SchedulingError
from .models import Lookup, Patient, ScheduleState, TimeOfDay
from .registry import PatientRegistry
from .scheduler import AgendaEntry, Appointment, AppointmentScheduler, AppointmentSlot
from .temporal import Clock, parse_date, system_clock, validate_date, validate_time_of_day

logger = logging.getLogger(__name__)


class Clinic:
    """One clinic's patients and schedule, sharing a single clock.

    Front ends (console menu, HTTP API) own an instance each; nothing is kept
    at module level, so every test can build its own.
    """

    def __init__(self, clock: Clock = system_clock):
        self.clock = clock
        self.patients = PatientRegistry(clock=clock)
        self.schedule = AppointmentScheduler(self.patients, clock=clock)

    def register(self, patient_id: str, name: str, birth_date: Any) -> Patient:
        return self.patients.register(patient_id, name, birth_date)

    def delete_patient(self, patient_id: str) -> Patient:
        return self.patients.delete(patient_id)

    def patients_ordered_by(self, field: str = "name") -> list[Patient]:
        return self.patients.list_ordered_by(field)

    def state(self, patient_id: str) -> ScheduleState:
        return self.schedule.state(patient_id)

    def book(self, patient_id: str, date: Any, start_time: Any, end_time: Any) -> Appointment:
        """Validate raw slot values, build the slot and book it."""
        self.schedule.ensure_bookable(patient_id)
        validate_date(date, clock=self.clock).raise_for_reason()
        validate_time_of_day(start_time).raise_for_reason()
        validate_time_of_day(end_time, start_time).raise_for_reason()
        slot = AppointmentSlot(
            date=parse_date(date),
            start_time=TimeOfDay.parse(start_time),
            end_time=TimeOfDay.parse(end_time),
        )
        return self.schedule.book(patient_id, slot)

    def find(self, patient_id: str, date: Any, start_time: Any) -> Lookup:
        return self.schedule.find_bookable_or_cancelable(patient_id, date, start_time)

    def cancel(self, patient_id: str, date: Any, start_time: Any) -> Appointment:
        """Cancel the patient's active appointment once the lookup hands it over.

        Any lookup outcome (including an exact match on the latest appointment)
        is raised as a ``SchedulingError`` and nothing is removed.
        """
        lookup = self.find(patient_id, date, start_time)
        if not lookup.found:
            logger.debug("no cancellation for %s: %s", patient_id, lookup.outcome.value)
            raise SchedulingError(lookup.outcome)
        return self.schedule.cancel_latest(lookup.patient_id)

    def agenda(self, start_date: Any, end_date: Any) -> list[AgendaEntry]:
        return self.schedule.list_in_range(start_date, end_date)
