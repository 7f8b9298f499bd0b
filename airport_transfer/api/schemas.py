"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from airport_transfer.domain.enums import BookingStatus, Role, VehicleClass


# ── Requests ──────────────────────────────────────────────────────────


class SignUpRequest(BaseModel):
    email: str
    password: str
    display_name: Optional[str] = Field(None, max_length=120)
    contact_phone: Optional[str] = Field(None, max_length=32)


class LoginRequest(BaseModel):
    email: str
    password: str


class PhoneCodeRequest(BaseModel):
    phone_number: str = Field(..., examples=["+919876543210"])


class PhoneConfirmRequest(BaseModel):
    phone_number: str
    code: str


class BookingCreateRequest(BaseModel):
    # Trip fields are validated by the lifecycle engine so that the API and
    # any other caller get the same error messages.
    pickup: Optional[str] = None
    drop: Optional[str] = None
    scheduled_at: Optional[str] = Field(
        None,
        description="ISO date-time; naive values are service local time.",
        examples=["2026-11-02T06:30"],
    )
    date: Optional[str] = Field(None, examples=["2026-11-02"])
    time: Optional[str] = Field(None, examples=["06:30"])
    vehicle_class: str = VehicleClass.STANDARD.value
    idempotency_key: Optional[str] = Field(
        None,
        max_length=64,
        description="Client-generated UUID to prevent double-booking on retries.",
    )


class StatusChangeRequest(BaseModel):
    status: str


# ── Responses ─────────────────────────────────────────────────────────


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: Role


class CallerResponse(BaseModel):
    id: str
    role: Role

    model_config = {"from_attributes": True}


class FareQuoteResponse(BaseModel):
    vehicle_class: VehicleClass
    label: str
    seats: int
    fare: int

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: str
    owner_id: str
    pickup: str
    drop: str
    scheduled_at: datetime
    vehicle_class: VehicleClass
    fare: int
    status: BookingStatus
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DashboardStatsResponse(BaseModel):
    total_revenue: int
    pending_count: int
    total_volume: int
    by_status: dict[str, int] = {}

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
    error: str
