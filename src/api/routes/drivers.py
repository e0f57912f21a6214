"""
Driver endpoints
================

POST /api/v1/driver/send-otp             -- send a phone code
POST /api/v1/driver/login                -- check phone code, log in
POST /api/v1/driver/verify-otp           -- check phone code, start email leg
POST /api/v1/driver/registration-driver  -- check email code, create driver
GET  /api/v1/driver/me                   -- logged-in driver
GET  /api/v1/driver/get-drivers-data     -- drivers by ``?ids=1,2``
PUT  /api/v1/driver/update-status        -- go active / inactive
POST /api/v1/driver/new-ride             -- open a ride for a rider
PUT  /api/v1/driver/update-ride-status   -- move a ride through its lifecycle
GET  /api/v1/driver/get-rides            -- driver's rides
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_current_driver, get_db, get_verification_flow
from src.api.middleware import limiter
from src.api.schemas import (
    DriverEnvelope,
    DriverResponse,
    DriverSessionResponse,
    DriverSignupRequest,
    DriverStatusRequest,
    EnvelopeOtpRequest,
    ErrorResponse,
    EnvelopeResponse,
    MessageResponse,
    NewRideRequest,
    NewRideResponse,
    PhoneOtpRequest,
    PhoneRequest,
    RideDetailResponse,
    RideListResponse,
    RideResponse,
    RideStatusRequest,
    UpdatedRideResponse,
)
from src.config import settings
from src.domain.entities import InvalidStateTransition, check_transition, settle_ride
from src.domain.profiles import PendingDriverProfile
from src.infrastructure.models import DriverModel
from src.infrastructure.notifier import NotificationError
from src.infrastructure.repositories import (
    DriverRepository,
    RideRepository,
    RiderRepository,
)
from src.infrastructure.tokens import InvalidEnvelope, SessionTokens, get_session_tokens
from src.services.verification import InvalidVerificationCode, VerificationFlow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/driver", tags=["drivers"])


def _session(driver: DriverModel, tokens: SessionTokens) -> DriverSessionResponse:
    return DriverSessionResponse(
        access_token=tokens.issue(driver.id, "driver"),
        driver=DriverResponse.model_validate(driver),
    )


def _parse_ids(raw: str) -> list[int]:
    try:
        ids = [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid driver ids")
    if not ids:
        raise HTTPException(status_code=400, detail="No driver ids provided")
    return ids


# ── Onboarding ────────────────────────────────────────────────────────


@router.post(
    "/send-otp",
    status_code=201,
    response_model=MessageResponse,
    summary="Send a verification code to the driver's phone",
)
@limiter.limit(settings.rate_limit)
async def send_driver_otp(
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
    "/login",
    response_model=DriverSessionResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Verify the phone code and log the driver in",
)
@limiter.limit(settings.rate_limit)
async def login_driver(
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

    driver = await DriverRepository(db).get_by_phone(body.phone_number)
    if not driver:
        raise HTTPException(status_code=404, detail="Driver not found")
    return _session(driver, tokens)


@router.post(
    "/verify-otp",
    status_code=201,
    response_model=EnvelopeResponse,
    summary="Verify the phone code and send an email code",
    description=(
        "The driver profile is sealed into the returned envelope together "
        "with the email code; hand both back to /registration-driver."
    ),
)
@limiter.limit(settings.rate_limit)
async def verify_driver_phone(
    request: Request,
    body: DriverSignupRequest,
    flow: VerificationFlow = Depends(get_verification_flow),
):
    try:
        await flow.check_phone_code(body.phone_number, body.otp)
    except InvalidVerificationCode:
        raise HTTPException(status_code=400, detail="Invalid or expired OTP")

    profile = PendingDriverProfile(**body.model_dump(exclude={"otp"}))
    try:
        envelope = await flow.send_email_code(profile)
    except NotificationError:
        logger.exception("Email code delivery failed")
        raise HTTPException(status_code=400, detail="Failed to send email")
    return EnvelopeResponse(token=envelope)


@router.post(
    "/registration-driver",
    status_code=201,
    response_model=DriverSessionResponse,
    summary="Verify the email code and create the driver",
)
@limiter.limit(settings.rate_limit)
async def register_driver(
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
    if not isinstance(profile, PendingDriverProfile):
        raise HTTPException(status_code=400, detail="Envelope is not for a driver")

    driver = await DriverRepository(db).create(profile)
    logger.info("Driver %d registered", driver.id)
    return _session(driver, tokens)


# ── Account ───────────────────────────────────────────────────────────


@router.get("/me", response_model=DriverEnvelope, summary="Logged-in driver")
@limiter.limit(settings.rate_limit)
async def get_logged_in_driver(
    request: Request,
    driver: DriverModel = Depends(get_current_driver),
):
    return DriverEnvelope(driver=DriverResponse.model_validate(driver))


@router.get(
    "/get-drivers-data",
    response_model=list[DriverResponse],
    summary="Look up drivers by comma-separated ids",
)
@limiter.limit(settings.rate_limit)
async def get_drivers_data(
    request: Request,
    ids: str = Query(..., description="Comma-separated driver ids"),
    db: AsyncSession = Depends(get_db),
):
    drivers = await DriverRepository(db).get_many(_parse_ids(ids))
    return [DriverResponse.model_validate(d) for d in drivers]


@router.put(
    "/update-status",
    response_model=DriverEnvelope,
    summary="Set the driver active or inactive",
)
@limiter.limit(settings.rate_limit)
async def update_driver_status(
    request: Request,
    body: DriverStatusRequest,
    driver: DriverModel = Depends(get_current_driver),
):
    driver.status = body.status
    return DriverEnvelope(driver=DriverResponse.model_validate(driver))


# ── Rides ─────────────────────────────────────────────────────────────


@router.post(
    "/new-ride",
    status_code=201,
    response_model=NewRideResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Open a ride for a rider",
)
@limiter.limit(settings.rate_limit)
async def new_ride(
    request: Request,
    body: NewRideRequest,
    driver: DriverModel = Depends(get_current_driver),
    db: AsyncSession = Depends(get_db),
):
    if not await RiderRepository(db).get_by_id(body.user_id):
        raise HTTPException(status_code=404, detail="User not found")

    ride = await RideRepository(db).create_ride(
        user_id=body.user_id,
        driver_id=driver.id,
        charge=body.charge,
        current_location_name=body.current_location_name,
        destination_location_name=body.destination_location_name,
        distance=body.distance,
    )
    driver.pending_rides = (driver.pending_rides or 0) + 1
    return NewRideResponse(new_ride=RideResponse.model_validate(ride))


@router.put(
    "/update-ride-status",
    response_model=UpdatedRideResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Move a ride through its lifecycle",
    description=(
        "Processing -> Ongoing | Cancelled, Ongoing -> Completed. "
        "Completing a ride credits the charge to the driver."
    ),
)
@limiter.limit(settings.rate_limit)
async def update_ride_status(
    request: Request,
    body: RideStatusRequest,
    driver: DriverModel = Depends(get_current_driver),
    db: AsyncSession = Depends(get_db),
):
    ride = await RideRepository(db).get_by_id(body.ride_id)
    if not ride or ride.driver_id != driver.id:
        raise HTTPException(status_code=404, detail="Ride not found")

    try:
        check_transition(ride.status, body.ride_status)
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    rider = await RiderRepository(db).get_by_id(ride.user_id)
    settle_ride(driver, rider, body.ride_status, ride.charge)
    ride.status = body.ride_status
    return UpdatedRideResponse(updated_ride=RideResponse.model_validate(ride))


@router.get("/get-rides", response_model=RideListResponse, summary="Driver's rides")
@limiter.limit(settings.rate_limit)
async def get_driver_rides(
    request: Request,
    driver: DriverModel = Depends(get_current_driver),
    db: AsyncSession = Depends(get_db),
):
    rides = await RideRepository(db).get_rides_for_driver(driver.id)
    return RideListResponse(
        rides=[RideDetailResponse.model_validate(r) for r in rides]
    )
