from datetime import date

import pytest

from clinic_desk.errors import IdentifierRejected, Reason, RegistrationError, TemporalRejected
from clinic_desk.models import ScheduleState
from clinic_desk.registry import PatientRegistry, validate_birth_date, validate_name

from conftest import ANA, JOAO, MARIA, NOW, TOMORROW, FakeClock


def test_register_patient(clinic):
    patient = clinic.register(MARIA, "Maria Silva", "10/03/2006")
    assert patient.id == MARIA
    assert patient.birth_date == date(2006, 3, 10)
    assert patient.age(NOW.date()) == 20
    assert MARIA in clinic.patients


def test_duplicate_identifier(clinic, maria):
    with pytest.raises(RegistrationError) as exc:
        clinic.register(MARIA, "Maria Souza", date(1990, 1, 1))
    assert exc.value.reason is Reason.DUPLICATE_IDENTIFIER
    assert clinic.patients[MARIA].name == "Maria Silva"


def test_invalid_identifier_aborts(clinic):
    with pytest.raises(IdentifierRejected) as exc:
        clinic.register("11144477736", "Maria Silva", date(1990, 1, 1))
    assert exc.value.reason is Reason.BAD_CHECKSUM
    assert len(clinic.patients) == 0


def test_short_name_aborts(clinic):
    with pytest.raises(RegistrationError) as exc:
        clinic.register(MARIA, "Ana ", date(1990, 1, 1))
    assert exc.value.reason is Reason.INVALID_NAME
    assert MARIA not in clinic.patients


def test_underage_aborts(clinic):
    with pytest.raises(RegistrationError) as exc:
        clinic.register(MARIA, "Maria Silva", date(2013, 3, 11))
    assert exc.value.reason is Reason.UNDERAGE
    assert MARIA not in clinic.patients


def test_thirteenth_birthday_is_old_enough(clinic):
    assert clinic.register(MARIA, "Maria Silva", date(2013, 3, 10)).age(NOW.date()) == 13


def test_unparseable_birth_date(clinic):
    with pytest.raises(TemporalRejected) as exc:
        clinic.register(MARIA, "Maria Silva", "30/02/2000")
    assert exc.value.reason is Reason.UNPARSEABLE


def test_field_validators():
    assert validate_name("Maria").accepted
    assert validate_name("    Bia  ").reason is Reason.INVALID_NAME
    clock = FakeClock(NOW)
    assert validate_birth_date("10/03/2000", clock).accepted
    assert validate_birth_date("10/03/2020", clock).reason is Reason.UNDERAGE
    assert validate_birth_date(None, clock).reason is Reason.UNPARSEABLE


def test_delete_unknown_patient(clinic):
    with pytest.raises(RegistrationError) as exc:
        clinic.delete_patient(MARIA)
    assert exc.value.reason is Reason.NOT_FOUND


def test_delete_refused_with_active_appointment(clinic, maria):
    clinic.book(MARIA, TOMORROW, "09:00", "09:30")
    with pytest.raises(RegistrationError) as exc:
        clinic.delete_patient(MARIA)
    assert exc.value.reason is Reason.HAS_ACTIVE_APPOINTMENT
    assert MARIA in clinic.patients
    assert clinic.state(MARIA) is ScheduleState.HAS_ACTIVE


def test_delete_drops_expired_history(clinic, clock, maria):
    clinic.book(MARIA, TOMORROW, "09:00", "09:30")
    clock.advance(days=2)
    clinic.delete_patient(MARIA)
    assert MARIA not in clinic.patients
    assert clinic.schedule.history(MARIA) == ()
    assert clinic.state(MARIA) is ScheduleState.EMPTY


def test_registry_without_scheduler():
    registry = PatientRegistry(clock=FakeClock(NOW))
    registry.register(MARIA, "Maria Silva", date(2000, 1, 1))
    registry.delete(MARIA)
    assert len(registry) == 0


def test_list_ordered_by_name_ignores_case(clinic):
    clinic.register(JOAO, "bruno Costa", date(1990, 1, 1))
    clinic.register(MARIA, "Ana Lima", date(1990, 1, 1))
    clinic.register(ANA, "carla Dias", date(1990, 1, 1))
    assert [p.name for p in clinic.patients_ordered_by("name")] == ["Ana Lima", "bruno Costa", "carla Dias"]


def test_list_ordered_by_identifier(clinic):
    clinic.register(JOAO, "Joao Pereira", date(1990, 1, 1))
    clinic.register(MARIA, "Maria Silva", date(1990, 1, 1))
    clinic.register(ANA, "Ana Beatriz", date(1990, 1, 1))
    assert [p.id for p in clinic.patients_ordered_by("identifier")] == [MARIA, ANA, JOAO]


def test_name_ties_keep_registration_order(clinic):
    clinic.register(JOAO, "Maria Silva", date(1990, 1, 1))
    clinic.register(MARIA, "MARIA SILVA", date(1990, 1, 1))
    assert [p.id for p in clinic.patients_ordered_by("name")] == [JOAO, MARIA]


def test_unknown_order_field(clinic):
    with pytest.raises(ValueError):
        clinic.patients_ordered_by("birth_date")
