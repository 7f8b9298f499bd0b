"""
Admin endpoints
===============

GET    /api/v1/admin/bookings               -- all bookings, filterable
GET    /api/v1/admin/stats                  -- revenue / pending / volume
DELETE /api/v1/admin/bookings/{booking_id}  -- permanently delete a record
GET    /api/v1/admin/health                 -- simple health check
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from airport_transfer.api.dependencies import get_current_caller, get_lifecycle
from airport_transfer.api.middleware import limiter
from airport_transfer.api.schemas import (
    BookingResponse,
    DashboardStatsResponse,
    HealthResponse,
)
from airport_transfer.config import settings
from airport_transfer.domain.aggregation import ALL, filter_bookings, summarize
from airport_transfer.domain.entities import Caller
from airport_transfer.domain.lifecycle import BookingLifecycle

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/bookings",
    response_model=list[BookingResponse],
    summary="List all bookings, newest first",
)
@limiter.limit(settings.rate_limit)
async def list_bookings(
    request: Request,
    status: str = Query(ALL, description="all | pending | confirmed | completed | cancelled"),
    q: str = Query("", description="Case-insensitive match on id, pickup or drop"),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    caller: Optional[Caller] = Depends(get_current_caller),
):
    bookings = await lifecycle.list_all(caller)
    return filter_bookings(bookings, status_filter=status, search_term=q)


@router.get(
    "/stats",
    response_model=DashboardStatsResponse,
    summary="Revenue and volume figures",
)
@limiter.limit(settings.rate_limit)
async def get_stats(
    request: Request,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    caller: Optional[Caller] = Depends(get_current_caller),
):
    return summarize(await lifecycle.list_all(caller))


@router.delete(
    "/bookings/{booking_id}",
    status_code=204,
    summary="Permanently delete a booking",
)
@limiter.limit(settings.rate_limit)
async def delete_booking(
    request: Request,
    booking_id: str,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    caller: Optional[Caller] = Depends(get_current_caller),
):
    await lifecycle.delete(booking_id, caller)
    return Response(status_code=204)


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
