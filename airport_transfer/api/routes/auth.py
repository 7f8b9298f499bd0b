"""
Authentication endpoints
========================

POST /api/v1/auth/signup         -- create an account, returns a bearer token
POST /api/v1/auth/login          -- e-mail + password sign-in
POST /api/v1/auth/phone/request  -- send a one-time code to a phone number
POST /api/v1/auth/phone/confirm  -- exchange the code for a bearer token
GET  /api/v1/auth/me             -- who am I (id + role)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from airport_transfer.api.dependencies import (
    get_auth_provider,
    get_current_caller,
    get_profile_store,
)
from airport_transfer.api.middleware import limiter
from airport_transfer.api.schemas import (
    CallerResponse,
    LoginRequest,
    PhoneCodeRequest,
    PhoneConfirmRequest,
    SignUpRequest,
    TokenResponse,
)
from airport_transfer.config import settings
from airport_transfer.domain.entities import Caller, Identity
from airport_transfer.domain.errors import AuthenticationRequired
from airport_transfer.domain.session import resolve_role
from airport_transfer.infrastructure.auth import LocalAuthProvider
from airport_transfer.infrastructure.repositories import ProfileRepository
from airport_transfer.infrastructure.security import create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])


async def _token_for(identity: Identity, profiles: ProfileRepository) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(identity.id),
        user_id=identity.id,
        role=await resolve_role(profiles, identity.id),
    )


@router.post(
    "/signup",
    status_code=201,
    response_model=TokenResponse,
    summary="Create a customer account",
)
@limiter.limit(settings.rate_limit)
async def sign_up(
    request: Request,
    body: SignUpRequest,
    auth: LocalAuthProvider = Depends(get_auth_provider),
    profiles: ProfileRepository = Depends(get_profile_store),
):
    identity = await auth.sign_up(
        body.email,
        body.password,
        {"display_name": body.display_name, "contact_phone": body.contact_phone},
    )
    return await _token_for(identity, profiles)


@router.post("/login", response_model=TokenResponse, summary="Sign in with e-mail")
@limiter.limit(settings.rate_limit)
async def log_in(
    request: Request,
    body: LoginRequest,
    auth: LocalAuthProvider = Depends(get_auth_provider),
    profiles: ProfileRepository = Depends(get_profile_store),
):
    identity = await auth.log_in(body.email, body.password)
    return await _token_for(identity, profiles)


@router.post(
    "/phone/request",
    status_code=202,
    summary="Send a verification code to a phone number",
)
@limiter.limit(settings.rate_limit)
async def request_phone_code(
    request: Request,
    body: PhoneCodeRequest,
    auth: LocalAuthProvider = Depends(get_auth_provider),
):
    await auth.request_code(body.phone_number)
    return {"status": "sent"}


@router.post(
    "/phone/confirm",
    response_model=TokenResponse,
    summary="Sign in with a phone verification code",
)
@limiter.limit(settings.rate_limit)
async def confirm_phone_code(
    request: Request,
    body: PhoneConfirmRequest,
    auth: LocalAuthProvider = Depends(get_auth_provider),
    profiles: ProfileRepository = Depends(get_profile_store),
):
    identity = await auth.confirm_code(body.code, phone_number=body.phone_number)
    return await _token_for(identity, profiles)


@router.get("/me", response_model=CallerResponse, summary="Current caller")
async def me(caller: Optional[Caller] = Depends(get_current_caller)):
    if caller is None:
        raise AuthenticationRequired("Please login to continue")
    return caller
