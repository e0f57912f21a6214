"""
Rider endpoints
===============

POST /api/v1/registration      -- send a phone code
POST /api/v1/verify-otp        -- check phone code, log in or sign up
POST /api/v1/email-otp-request -- send an email code, return signed envelope
PUT  /api/v1/email-otp-verify  -- check email code, finalise rider profile
GET  /api/v1/me                -- logged-in rider
GET  /api/v1/get-rides         -- rider's rides with driver details
POST /api/v1/ride-price        -- fare quote
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import (
    get_current_rider,
    get_db,
    get_fare_estimator,
    get_verification_flow,
)
from src.api.middleware import limiter
from src.api.schemas import (
    EmailOtpRequest,
    EnvelopeOtpRequest,
    ErrorResponse,
    EnvelopeResponse,
    MessageResponse,
    PhoneOtpRequest,
    PhoneRequest,
    RideDetailResponse,
    RideListResponse,
    RidePriceRequest,
    RidePriceResponse,
    RiderEnvelope,
    RiderResponse,
    RiderSessionResponse,
)
from src.config import settings
from src.domain.entities import Location
from src.domain.pricing import FareEstimator
from src.domain.profiles import PendingRiderProfile
from src.infrastructure.models import UserModel
from src.infrastructure.notifier import NotificationError
from src.infrastructure.repositories import RideRepository, RiderRepository
from src.infrastructure.tokens import InvalidEnvelope, SessionTokens, get_session_tokens
from src.services.verification import InvalidVerificationCode, VerificationFlow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["riders"])


def _session(user: UserModel, tokens: SessionTokens) -> RiderSessionResponse:
    return RiderSessionResponse(
        access_token=tokens.issue(user.id, "rider"),
        user=RiderResponse.model_validate(user),
    )


@router.post(
    "/registration",
    status_code=201,
    response_model=MessageResponse,
    summary="Send a verification code to the rider's phone",
)
@limiter.limit(settings.rate_limit)
async def register_rider(
    request: Request,
    body: PhoneRequest,
    flow: VerificationFlow = Depends(get_verification_flow),
):
    try:
        await flow.send_phone_code(body.phone_number)
    except NotificationError:
        logger.exception("Phone code delivery failed")
        raise HTTPException(status_code=400, detail="Failed to send OTP")
    return MessageResponse(message="OTP sent to phone")


@router.post(
    "/verify-otp",
    response_model=RiderSessionResponse,
    summary="Verify the phone code; log in or create the rider",
)
@limiter.limit(settings.rate_limit)
async def verify_rider_otp(
    request: Request,
    body: PhoneOtpRequest,
    flow: VerificationFlow = Depends(get_verification_flow),
    tokens: SessionTokens = Depends(get_session_tokens),
    db: AsyncSession = Depends(get_db),
):
    try:
        await flow.check_phone_code(body.phone_number, body.otp)
    except InvalidVerificationCode:
        raise HTTPException(status_code=400, detail="Invalid or expired OTP")

    repo = RiderRepository(db)
    user = await repo.get_by_phone(body.phone_number)
    if not user:
        user = await repo.create(phone_number=body.phone_number)
        logger.info("Rider %d created", user.id)
    return _session(user, tokens)


@router.post(
    "/email-otp-request",
    status_code=201,
    response_model=EnvelopeResponse,
    summary="Send an email code and return the signed envelope",
)
@limiter.limit(settings.rate_limit)
async def request_email_otp(
    request: Request,
    body: EmailOtpRequest,
    flow: VerificationFlow = Depends(get_verification_flow),
):
    profile = PendingRiderProfile(user_id=body.user_id, name=body.name, email=body.email)
    try:
        envelope = await flow.send_email_code(profile)
    except NotificationError:
        logger.exception("Email code delivery failed")
        raise HTTPException(status_code=400, detail="Failed to send email")
    return EnvelopeResponse(token=envelope)


@router.put(
    "/email-otp-verify",
    response_model=RiderSessionResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Verify the email code and finalise the rider profile",
)
@limiter.limit(settings.rate_limit)
async def verify_email_otp(
    request: Request,
    body: EnvelopeOtpRequest,
    flow: VerificationFlow = Depends(get_verification_flow),
    tokens: SessionTokens = Depends(get_session_tokens),
    db: AsyncSession = Depends(get_db),
):
    try:
        profile = await flow.check_email_code(body.token, body.otp)
    except InvalidEnvelope:
        raise HTTPException(status_code=400, detail="Your OTP is expired!")
    except InvalidVerificationCode:
        raise HTTPException(status_code=400, detail="OTP is not correct or expired!")
    if not isinstance(profile, PendingRiderProfile):
        raise HTTPException(status_code=400, detail="Envelope is not for a rider")

    repo = RiderRepository(db)
    user = await repo.get_by_id(profile.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    # a verified email is never replaced through this flow
    if user.email is not None:
        logger.warning("Rider %d already has an email; update refused", user.id)
        raise HTTPException(
            status_code=409, detail="Email already verified for this account"
        )
    user = await repo.update_profile(user, name=profile.name, email=profile.email)
    return _session(user, tokens)


@router.get("/me", response_model=RiderEnvelope, summary="Logged-in rider")
@limiter.limit(settings.rate_limit)
async def get_logged_in_rider(
    request: Request,
    user: UserModel = Depends(get_current_rider),
):
    return RiderEnvelope(user=RiderResponse.model_validate(user))


@router.get("/get-rides", response_model=RideListResponse, summary="Rider's rides")
@limiter.limit(settings.rate_limit)
async def get_rider_rides(
    request: Request,
    user: UserModel = Depends(get_current_rider),
    db: AsyncSession = Depends(get_db),
):
    rides = await RideRepository(db).get_rides_for_user(user.id)
    return RideListResponse(
        rides=[RideDetailResponse.model_validate(r) for r in rides]
    )


@router.post(
    "/ride-price",
    response_model=RidePriceResponse,
    summary="Quote a fare between two coordinates",
)
@limiter.limit(settings.rate_limit)
async def ride_price(
    request: Request,
    body: RidePriceRequest,
    user: UserModel = Depends(get_current_rider),
    estimator: FareEstimator = Depends(get_fare_estimator),
):
    price = estimator.estimate(
        Location(body.pickup.latitude, body.pickup.longitude),
        Location(body.destination.latitude, body.destination.longitude),
        body.surge_multiplier,
        body.factors(),
    )
    return RidePriceResponse(price=f"{price:.2f}")
