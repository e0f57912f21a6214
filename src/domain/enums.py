"""Domain enumerations and state-transition rules."""

import enum


class RideStatus(str, enum.Enum):
    PROCESSING = "Processing"
    ONGOING = "Ongoing"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# State machine: maps current status -> set of valid next statuses
RIDE_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.PROCESSING: {RideStatus.ONGOING, RideStatus.CANCELLED},
    RideStatus.ONGOING: {RideStatus.COMPLETED},
    RideStatus.COMPLETED: set(),
    RideStatus.CANCELLED: set(),
}


class VehicleType(str, enum.Enum):
    CAR = "Car"
    MOTORCYCLE = "Motorcycle"
    CNG = "cng"


class DriverStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
