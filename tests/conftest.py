from datetime import date, datetime, timedelta

import pytest

from clinic_desk.clinic import Clinic

NOW = datetime(2026, 3, 10, 10, 0)  # a Tuesday morning
TOMORROW = date(2026, 3, 11)

MARIA = "11144477735"
JOAO = "52998224725"
ANA = "12345678909"


class FakeClock:
    """Stands in for datetime.now so tests can move time around."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def clinic(clock):
    return Clinic(clock=clock)


@pytest.fixture
def maria(clinic):
    return clinic.register(MARIA, "Maria Silva", date(2006, 3, 10))
