"""
Booking endpoints
=================

POST  /api/v1/bookings               -- submit a transfer request
GET   /api/v1/bookings               -- the caller's own bookings, newest first
GET   /api/v1/bookings/{booking_id}  -- one booking (owner or admin)
PATCH /api/v1/bookings/{booking_id}/cancel  -- cancel a booking
POST  /api/v1/bookings/{booking_id}/status  -- move a booking to a new status
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from airport_transfer.api.dependencies import get_current_caller, get_lifecycle
from airport_transfer.api.middleware import limiter
from airport_transfer.api.schemas import (
    BookingCreateRequest,
    BookingResponse,
    StatusChangeRequest,
)
from airport_transfer.config import settings
from airport_transfer.domain.entities import Caller, TripRequest
from airport_transfer.domain.lifecycle import BookingLifecycle, combine_date_time

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post(
    "",
    status_code=201,
    response_model=BookingResponse,
    summary="Submit a booking",
    responses={401: {"description": "Sign in required before booking."}},
)
@limiter.limit(settings.rate_limit)
async def submit_booking(
    request: Request,
    body: BookingCreateRequest,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    caller: Optional[Caller] = Depends(get_current_caller),
):
    trip = TripRequest(
        pickup=body.pickup,
        drop=body.drop,
        scheduled_at=body.scheduled_at or combine_date_time(body.date, body.time),
        vehicle_class=body.vehicle_class,
        idempotency_key=body.idempotency_key,
    )
    return await lifecycle.submit(caller, trip)


@router.get("", response_model=list[BookingResponse], summary="My bookings")
@limiter.limit(settings.rate_limit)
async def list_my_bookings(
    request: Request,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    caller: Optional[Caller] = Depends(get_current_caller),
):
    return await lifecycle.list_for_owner(caller)


@router.get("/{booking_id}", response_model=BookingResponse, summary="Get a booking")
@limiter.limit(settings.rate_limit)
async def get_booking(
    request: Request,
    booking_id: str,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    caller: Optional[Caller] = Depends(get_current_caller),
):
    return await lifecycle.get(booking_id, caller)


@router.patch(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking",
    description=(
        "Customers may cancel their own PENDING bookings; administrators may "
        "also cancel CONFIRMED ones."
    ),
)
@limiter.limit(settings.rate_limit)
async def cancel_booking(
    request: Request,
    booking_id: str,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    caller: Optional[Caller] = Depends(get_current_caller),
):
    return await lifecycle.cancel(booking_id, caller)


@router.post(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Change a booking's status",
)
@limiter.limit(settings.rate_limit)
async def change_status(
    request: Request,
    booking_id: str,
    body: StatusChangeRequest,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    caller: Optional[Caller] = Depends(get_current_caller),
):
    return await lifecycle.transition(booking_id, body.status, caller)
