"""Interactive front-desk menu.

``InputProvider`` keeps asking for a field until its validator accepts it,
showing the rejection message each time. ``FrontDesk`` drives the menus and
hands finished values to the clinic.
"""
from __future__ import annotations
from typing import Any, Callable, Optional

from .clinic import Clinic
from .config import configure_logging, settings
from .errors import ClinicError, Reason
from .identifier import validate_identifier
from .models import ACCEPTED, TimeOfDay, Verdict
from .registry import validate_birth_date, validate_name
from .reporter import render_agenda, render_patients
from .temporal import parse_date, validate_date, validate_time_of_day

Reader = Callable[[str], str]
Writer = Callable[[str], None]


class InputProvider:
    def __init__(self, clinic: Clinic, read: Reader = input, write: Writer = print):
        self.clinic = clinic
        self.read = read
        self.write = write
        self.formats = (settings.date_input_format,)

    def alert(self, message: str) -> None:
        self.write(f"Error: {message}\n")

    def ask(self, prompt: str, validate: Callable[[str], Verdict], convert: Callable[[str], Any] = str):
        while True:
            raw = self.read(prompt).strip()
            verdict = validate(raw)
            if verdict.accepted:
                return convert(raw)
            self.alert(verdict.message)

    def _date(self, raw: str):
        return parse_date(raw, self.formats)

    def new_identifier(self) -> str:
        return self.ask("CPF: ", lambda raw: validate_identifier(raw, self.clinic.patients))

    def registered_identifier(self) -> str:
        def known(raw: str) -> Verdict:
            return ACCEPTED if raw in self.clinic.patients else Verdict.reject(Reason.PATIENT_NOT_FOUND)

        return self.ask("CPF: ", known)

    def name(self) -> str:
        return self.ask("Name: ", validate_name)

    def birth_date(self):
        return self.ask(
            "Birth date: ",
            lambda raw: validate_birth_date(self._date(raw), self.clinic.clock),
            self._date,
        )

    def date(self, prompt: str = "Appointment date: ", only_basic: bool = False, prior=None):
        return self.ask(
            prompt,
            lambda raw: validate_date(
                self._date(raw), only_basic=only_basic, prior_date=prior, clock=self.clinic.clock
            ),
            self._date,
        )

    def time_of_day(self, prior: Optional[TimeOfDay] = None) -> TimeOfDay:
        label = "End" if prior is not None else "Start"
        return self.ask(
            f"{label} time (HH:MM): ",
            lambda raw: validate_time_of_day(raw, prior),
            TimeOfDay.parse,
        )


class FrontDesk:
    def __init__(self, clinic: Clinic, read: Reader = input, write: Writer = print):
        self.clinic = clinic
        self.inputs = InputProvider(clinic, read, write)
        self.write = write

    def _menu(self, title: str, options: list[tuple[str, Optional[Callable[[], None]]]]) -> None:
        while True:
            self.write(title)
            for number, (label, _) in enumerate(options, start=1):
                self.write(f"{number} - {label}")
            choice = self.inputs.read("Option: ").strip()
            if not choice.isdigit() or not 1 <= int(choice) <= len(options):
                self.inputs.alert("Invalid option")
                continue
            action = options[int(choice) - 1][1]
            if action is None:
                return
            try:
                action()
            except ClinicError as exc:
                self.inputs.alert(exc.message)

    def run(self) -> None:
        try:
            self._menu(
                settings.clinic_name,
                [("Patients", self.patient_menu), ("Agenda", self.agenda_menu), ("Exit", None)],
            )
        except EOFError:
            pass
        self.write("Leaving...")

    def patient_menu(self) -> None:
        self._menu(
            "Patient",
            [
                ("Register patient", self.register_patient),
                ("Delete patient", self.delete_patient),
                ("List patients (ordered by CPF)", lambda: self.write(render_patients(self.clinic, "identifier"))),
                ("List patients (ordered by name)", lambda: self.write(render_patients(self.clinic, "name"))),
                ("Back to main menu", None),
            ],
        )

    def agenda_menu(self) -> None:
        self._menu(
            "Agenda",
            [
                ("Book appointment", self.book),
                ("Cancel appointment", self.cancel),
                ("List agenda", self.list_agenda),
                ("Back to main menu", None),
            ],
        )

    def register_patient(self) -> None:
        patient_id = self.inputs.new_identifier()
        name = self.inputs.name()
        born = self.inputs.birth_date()
        self.clinic.register(patient_id, name, born)
        self.write("\nPatient registered!\n")

    def delete_patient(self) -> None:
        patient_id = self.inputs.read("CPF: ").strip()
        self.clinic.delete_patient(patient_id)
        self.write("\nPatient deleted!\n")

    def book(self) -> None:
        patient_id = self.inputs.read("CPF: ").strip()
        self.clinic.schedule.ensure_bookable(patient_id)
        day = self.inputs.date()
        start = self.inputs.time_of_day()
        end = self.inputs.time_of_day(start)
        self.clinic.book(patient_id, day, start, end)
        self.write("Appointment booked")

    def cancel(self) -> None:
        patient_id = self.inputs.registered_identifier()
        day = self.inputs.date(only_basic=True)
        start = self.inputs.time_of_day()
        lookup = self.clinic.find(patient_id, day, start)
        if lookup.outcome is Reason.ALREADY_MATCHES_LATEST:
            # matched, but the lookup hands back nothing to cancel
            self.write("Appointment found")
            return
        if not lookup.found:
            self.inputs.alert(Verdict.reject(lookup.outcome).message)
            return
        self.clinic.schedule.cancel_latest(lookup.patient_id)
        self.write("Appointment cancelled!\n")

    def list_agenda(self) -> None:
        start = self.inputs.date("Start date: ", only_basic=True)
        end = self.inputs.date("End date: ", only_basic=True, prior=start)
        self.write(render_agenda(self.clinic.agenda(start, end)))


def main() -> None:
    configure_logging()
    FrontDesk(Clinic()).run()


if __name__ == "__main__":
    main()
