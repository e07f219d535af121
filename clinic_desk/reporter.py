"""Fixed-width text listings of patients and of the agenda. Read-only."""
from __future__ import annotations
from datetime import date
from typing import Iterable

from .clinic import Clinic
from .scheduler import AgendaEntry

DISPLAY_DATE = "%d/%m/%Y"
PATIENT_RULE = "-" * 59
AGENDA_RULE = "-" * 72
INDENT = " " * 12


def render_patients(clinic: Clinic, order: str = "name") -> str:
    today = clinic.clock().date()
    lines = [
        "Patients:",
        PATIENT_RULE,
        "CPF         Name                              Birth date Age",
        PATIENT_RULE,
    ]
    for patient in clinic.patients_ordered_by(order):
        lines.append(
            f"{patient.id} {patient.name:<33} "
            f"{patient.birth_date.strftime(DISPLAY_DATE)} {patient.age(today)}"
        )
        active = clinic.schedule.latest_active(patient.id)
        if active is not None:
            slot = active.slot
            lines.append(f"{INDENT}Scheduled for {slot.date.strftime(DISPLAY_DATE)}")
            lines.append(f"{INDENT}{slot.start_time} to {slot.end_time}")
    lines.append(PATIENT_RULE)
    return "\n".join(lines)


def render_agenda(entries: Iterable[AgendaEntry]) -> str:
    lines = [
        "Appointments:",
        AGENDA_RULE,
        "Date       Start End   Length Name                     Birth date",
        AGENDA_RULE,
    ]
    previous: date | None = None
    for entry in entries:
        slot, patient = entry.appointment.slot, entry.patient
        # repeated dates are left blank
        day = " " * 10 if slot.date == previous else slot.date.strftime(DISPLAY_DATE)
        previous = slot.date
        lines.append(
            f"{day} {slot.start_time} {slot.end_time} {slot.duration_text:>6} "
            f"{patient.name:<24} {patient.birth_date.strftime(DISPLAY_DATE)}"
        )
    lines.append(AGENDA_RULE)
    return "\n".join(lines)
