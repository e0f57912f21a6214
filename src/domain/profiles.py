"""
Pending identity profiles carried inside the email-verification envelope.

The envelope travels between the two legs of the email flow, so whatever
the client submitted on the first leg comes back verbatim on the second.
``kind`` tags the union so the envelope decodes to the right model.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field

from .enums import VehicleType


class PendingRiderProfile(BaseModel):
    kind: Literal["rider"] = "rider"
    user_id: int
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr


class PendingDriverProfile(BaseModel):
    kind: Literal["driver"] = "driver"
    name: str = Field(..., min_length=1, max_length=120)
    country: str = Field(..., min_length=1, max_length=80)
    phone_number: str = Field(..., min_length=5, max_length=20)
    email: EmailStr
    vehicle_type: VehicleType
    registration_number: str = Field(..., min_length=1, max_length=40)
    registration_date: date
    driving_license: str = Field(..., min_length=1, max_length=40)
    vehicle_color: Optional[str] = Field(None, max_length=40)
    rate: float = Field(..., gt=0)


PendingProfile = Annotated[
    Union[PendingRiderProfile, PendingDriverProfile],
    Field(discriminator="kind"),
]
