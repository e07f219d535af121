from datetime import date

from clinic_desk.reporter import AGENDA_RULE, render_agenda, render_patients

from conftest import ANA, JOAO, MARIA, TOMORROW


def test_patient_listing(clinic, maria):
    clinic.register(JOAO, "Joao Pereira", date(1985, 6, 2))
    clinic.book(MARIA, TOMORROW, "09:00", "09:30")

    lines = render_patients(clinic, "name").splitlines()
    assert lines[0] == "Patients:"
    assert lines[4] == f"{JOAO} {'Joao Pereira':<33} 02/06/1985 40"
    assert lines[5] == f"{MARIA} {'Maria Silva':<33} 10/03/2006 20"
    assert lines[6] == "            Scheduled for 11/03/2026"
    assert lines[7] == "            09:00 to 09:30"
    assert len(lines) == 9


def test_patient_listing_hides_past_appointments(clinic, clock, maria):
    clinic.book(MARIA, TOMORROW, "09:00", "09:30")
    clock.advance(days=3)
    assert "Scheduled for" not in render_patients(clinic, "identifier")


def test_agenda_blanks_repeated_dates(clinic, maria):
    clinic.register(ANA, "Ana Beatriz", date(2000, 12, 24))
    clinic.book(MARIA, TOMORROW, "09:00", "09:30")
    clinic.book(ANA, TOMORROW, "10:00", "11:15")

    lines = render_agenda(clinic.agenda(TOMORROW, TOMORROW)).splitlines()
    assert lines[-1] == AGENDA_RULE
    assert lines[4] == f"11/03/2026 09:00 09:30   0:30 {'Maria Silva':<24} 10/03/2006"
    assert lines[5] == f"{' ' * 10} 10:00 11:15   1:15 {'Ana Beatriz':<24} 24/12/2000"


def test_empty_agenda(clinic):
    assert len(render_agenda([]).splitlines()) == 5
