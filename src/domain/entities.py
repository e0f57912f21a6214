"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Ride``: enforces valid lifecycle transitions
  (Processing -> Ongoing -> Completed, Processing -> Cancelled).
- ``settle_ride`` keeps the driver / rider counters in step with a
  ride's status change.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import RIDE_TRANSITIONS, RideStatus


class InvalidStateTransition(Exception):
    """Raised when a ride status change violates the state machine."""


def check_transition(current: RideStatus, new_status: RideStatus) -> None:
    allowed = RIDE_TRANSITIONS.get(RideStatus(current), set())
    if new_status not in allowed:
        raise InvalidStateTransition(
            f"Cannot transition from {RideStatus(current).value} to {new_status.value}"
        )


# ── Value Object ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Ride:
    id: Optional[int] = None
    user_id: int = 0
    driver_id: int = 0
    charge: float = 0.0
    current_location_name: str = ""
    destination_location_name: str = ""
    distance: float = 0.0
    status: RideStatus = RideStatus.PROCESSING
    rating: Optional[float] = None
    created_at: Optional[datetime] = None

    def transition_to(self, new_status: RideStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        check_transition(self.status, new_status)
        self.status = new_status


def settle_ride(driver, rider, new_status: RideStatus, charge: float) -> None:
    """
    Apply the counter side effects of a ride reaching *new_status*.

    ``driver`` and ``rider`` are any objects carrying the counter
    attributes (ORM rows in the API, plain objects in tests).  ``rider``
    may be ``None`` when the passenger record is gone.
    """
    if new_status == RideStatus.COMPLETED:
        driver.total_earning = (driver.total_earning or 0) + charge
        driver.total_rides = (driver.total_rides or 0) + 1
        driver.pending_rides = max(0, (driver.pending_rides or 0) - 1)
        if rider is not None:
            rider.total_rides = (rider.total_rides or 0) + 1
    elif new_status == RideStatus.CANCELLED:
        driver.cancel_rides = (driver.cancel_rides or 0) + 1
        driver.pending_rides = max(0, (driver.pending_rides or 0) - 1)
