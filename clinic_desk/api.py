from datetime import date
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from .clinic import Clinic
from .config import configure_logging, settings
from .errors import ClinicError, Reason
from .identifier import validate_identifier
from .models import Patient, ScheduleState, Verdict
from .scheduler import AgendaEntry, Appointment


class RegisterRequest(BaseModel):
    patient_id: str = Field(alias="cpf")
    name: str
    birth_date: date

    model_config = {
        "populate_by_name": True
    }


class BookRequest(BaseModel):
    patient_id: str
    date: str  # dd/mm/yyyy or YYYY-MM-DD
    start_time: str  # HH:MM
    end_time: str


class CancelRequest(BaseModel):
    patient_id: str
    date: str
    start_time: str


class HistoryResp(BaseModel):
    patient_id: str
    state: ScheduleState
    appointments: list[Appointment]


NOT_FOUND = {Reason.NOT_FOUND, Reason.PATIENT_NOT_FOUND}
CONFLICTS = {
    Reason.DUPLICATE_IDENTIFIER,
    Reason.ALREADY_SCHEDULED,
    Reason.HAS_ACTIVE_APPOINTMENT,
    Reason.NO_ACTIVE_APPOINTMENT,
    Reason.NO_APPOINTMENTS,
    Reason.ALREADY_MATCHES_LATEST,
    Reason.NO_FUTURE_APPOINTMENT,
}

# HTTPBearer scheme so Swagger-UI can attach the Authorization header globally
auth_scheme = HTTPBearer(auto_error=False)

configure_logging()
app = FastAPI(title="Clinic Front Desk")
app.state.clinic = Clinic()


def get_clinic(request: Request) -> Clinic:
    return request.app.state.clinic


def verify_api_key(credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth_scheme)):
    """Validate Bearer token provided via Authorization header (when a key is configured)"""
    if not settings.api_key:
        return
    if credentials is None or credentials.scheme.lower() != "bearer" or credentials.credentials != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


def as_http_error(exc: ClinicError) -> HTTPException:
    if exc.reason in NOT_FOUND:
        status = 404
    elif exc.reason in CONFLICTS:
        status = 409
    else:
        status = 422
    return HTTPException(status_code=status, detail={"reason": exc.reason.value, "message": exc.message})


# Patients -------------------------------------------------------------------

@app.post("/patients", dependencies=[Depends(verify_api_key)], response_model=Patient, status_code=201)
async def register_patient(req: RegisterRequest, clinic: Clinic = Depends(get_clinic)):
    """Register a new patient."""
    try:
        return clinic.register(req.patient_id, req.name, req.birth_date)
    except ClinicError as exc:
        raise as_http_error(exc)


@app.delete("/patients/{patient_id}", dependencies=[Depends(verify_api_key)], status_code=204)
async def delete_patient(patient_id: str, clinic: Clinic = Depends(get_clinic)):
    """Delete a patient and their appointment history. Refused while an appointment is pending."""
    try:
        clinic.delete_patient(patient_id)
    except ClinicError as exc:
        raise as_http_error(exc)
    return None


@app.get("/patients", dependencies=[Depends(verify_api_key)], response_model=list[Patient])
async def list_patients(
    order: str = Query("name", pattern="^(identifier|name)$", description="Sort by CPF or by name"),
    clinic: Clinic = Depends(get_clinic),
):
    return clinic.patients_ordered_by(order)


@app.get("/patients/{patient_id}/appointments", dependencies=[Depends(verify_api_key)], response_model=HistoryResp)
async def patient_history(patient_id: str, clinic: Clinic = Depends(get_clinic)):
    """Return a patient's appointments, oldest first, and where the schedule stands."""
    if patient_id not in clinic.patients:
        raise HTTPException(status_code=404, detail="Patient not found")
    return HistoryResp(
        patient_id=patient_id,
        state=clinic.state(patient_id),
        appointments=list(clinic.schedule.history(patient_id)),
    )


# Booking related endpoints -------------------------------------------------

@app.post("/appointments", dependencies=[Depends(verify_api_key)], response_model=Appointment, status_code=201)
async def book_appt(req: BookRequest, clinic: Clinic = Depends(get_clinic)):
    try:
        return clinic.book(req.patient_id, req.date, req.start_time, req.end_time)
    except ClinicError as exc:
        raise as_http_error(exc)


@app.post("/appointments/cancel", dependencies=[Depends(verify_api_key)], response_model=Appointment)
async def cancel_appt(req: CancelRequest, clinic: Clinic = Depends(get_clinic)):
    """Cancel the patient's pending appointment (always the most recently booked one)."""
    try:
        return clinic.cancel(req.patient_id, req.date, req.start_time)
    except ClinicError as exc:
        raise as_http_error(exc)


# Read-only endpoints

@app.get("/agenda", dependencies=[Depends(verify_api_key)], response_model=list[AgendaEntry])
async def agenda(
    start: str = Query(..., description="First day, dd/mm/yyyy or YYYY-MM-DD"),
    end: str = Query(..., description="Last day (inclusive)"),
    clinic: Clinic = Depends(get_clinic),
):
    try:
        return clinic.agenda(start, end)
    except ClinicError as exc:
        raise as_http_error(exc)


@app.get("/validate/identifier/{candidate}", dependencies=[Depends(verify_api_key)], response_model=Verdict)
async def check_identifier(candidate: str, clinic: Clinic = Depends(get_clinic)):
    """Run the CPF checks against the currently registered patients."""
    return validate_identifier(candidate, clinic.patients)
