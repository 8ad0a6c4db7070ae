from __future__ import annotations

from fastapi import APIRouter, Depends

from portal.clients.care_api_client import CareApiClient
from portal.dependencies import get_care_api_client
from portal.response import success_response
from portal.schemas.views import AppointmentRequest
from portal.services.booking_service import BookingForm, submit_appointment

router = APIRouter(prefix="/v1/appointments", tags=["appointments"])


@router.post("", status_code=201)
async def create_appointment(
    payload: AppointmentRequest,
    client: CareApiClient = Depends(get_care_api_client),
) -> dict:
    form = BookingForm(doctor_id=payload.doctor_id, date=payload.date, time=payload.time)
    created = await submit_appointment(client, form)
    return success_response(created, meta={})
