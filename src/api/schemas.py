"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.domain.enums import DriverStatus, RideStatus, VehicleType
from src.domain.pricing import PricingFactors

OTP_PATTERN = r"^[0-9]{4}$"


# ── Requests ──────────────────────────────────────────────────────────


class PhoneRequest(BaseModel):
    phone_number: str = Field(..., min_length=5, max_length=20)


class PhoneOtpRequest(PhoneRequest):
    otp: str = Field(..., pattern=OTP_PATTERN)


class EmailOtpRequest(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=120)
    user_id: int = Field(..., alias="userId")

    model_config = ConfigDict(populate_by_name=True)


class EnvelopeOtpRequest(BaseModel):
    otp: str = Field(..., pattern=OTP_PATTERN)
    token: str = Field(..., min_length=1)


class DriverSignupRequest(PhoneOtpRequest):
    """Phone code plus the profile that rides along in the email envelope."""

    name: str = Field(..., min_length=1, max_length=120)
    country: str = Field(..., min_length=1, max_length=80)
    email: EmailStr
    vehicle_type: VehicleType
    registration_number: str = Field(..., min_length=1, max_length=40)
    registration_date: date
    driving_license: str = Field(..., min_length=1, max_length=40)
    vehicle_color: Optional[str] = Field(None, max_length=40)
    rate: float = Field(..., gt=0)


class Coordinate(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class RidePriceRequest(BaseModel):
    pickup: Coordinate
    destination: Coordinate
    surge_multiplier: float = Field(..., gt=0, alias="surgeMultiplier")
    traffic_factor: Optional[float] = Field(None, gt=0, alias="trafficFactor")
    weather_factor: Optional[float] = Field(None, gt=0, alias="weatherFactor")
    time_factor: Optional[float] = Field(None, gt=0, alias="timeFactor")

    model_config = ConfigDict(populate_by_name=True)

    def factors(self) -> PricingFactors:
        return PricingFactors(
            traffic_factor=self.traffic_factor or 1.0,
            weather_factor=self.weather_factor or 1.0,
            time_factor=self.time_factor or 1.0,
        )


class DriverStatusRequest(BaseModel):
    status: DriverStatus


class NewRideRequest(BaseModel):
    user_id: int = Field(..., alias="userId")
    charge: float = Field(..., ge=0)
    current_location_name: str = Field(..., min_length=1, alias="currentLocationName")
    destination_location_name: str = Field(
        ..., min_length=1, alias="destinationLocationName"
    )
    distance: float = Field(..., ge=0)

    model_config = ConfigDict(populate_by_name=True)


class RideStatusRequest(BaseModel):
    ride_id: int = Field(..., alias="rideId")
    ride_status: RideStatus = Field(..., alias="rideStatus")

    model_config = ConfigDict(populate_by_name=True)


# ── Responses ─────────────────────────────────────────────────────────


class RiderResponse(BaseModel):
    id: int
    name: Optional[str] = None
    phone_number: str
    email: Optional[str] = None
    ratings: float = 0.0
    total_rides: int = 0
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DriverResponse(BaseModel):
    id: int
    name: str
    country: str
    phone_number: str
    email: str
    vehicle_type: VehicleType
    registration_number: str
    registration_date: date
    driving_license: str
    vehicle_color: Optional[str] = None
    rate: float
    ratings: float = 0.0
    total_earning: float = 0.0
    total_rides: int = 0
    pending_rides: int = 0
    cancel_rides: int = 0
    status: DriverStatus
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RideResponse(BaseModel):
    id: int
    user_id: int
    driver_id: int
    charge: float
    current_location_name: str
    destination_location_name: str
    distance: float
    status: RideStatus
    rating: Optional[float] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RideDetailResponse(RideResponse):
    user: Optional[RiderResponse] = None
    driver: Optional[DriverResponse] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class EnvelopeResponse(BaseModel):
    success: bool = True
    token: str


class RiderSessionResponse(BaseModel):
    success: bool = True
    access_token: str = Field(..., alias="accessToken")
    user: RiderResponse

    model_config = ConfigDict(populate_by_name=True)


class DriverSessionResponse(BaseModel):
    success: bool = True
    access_token: str = Field(..., alias="accessToken")
    driver: DriverResponse

    model_config = ConfigDict(populate_by_name=True)


class RiderEnvelope(BaseModel):
    success: bool = True
    user: RiderResponse


class DriverEnvelope(BaseModel):
    success: bool = True
    driver: DriverResponse


class RideListResponse(BaseModel):
    rides: list[RideDetailResponse]


class NewRideResponse(BaseModel):
    success: bool = True
    new_ride: RideResponse = Field(..., alias="newRide")

    model_config = ConfigDict(populate_by_name=True)


class UpdatedRideResponse(BaseModel):
    success: bool = True
    updated_ride: RideResponse = Field(..., alias="updatedRide")

    model_config = ConfigDict(populate_by_name=True)


class RidePriceResponse(BaseModel):
    success: bool = True
    price: str


class ErrorResponse(BaseModel):
    detail: str
