"""
SQLAlchemy ORM models  (maps to PostgreSQL).

Tables
------
* ``users``    -- riders, created on first phone verification
* ``drivers``  -- drivers, created once phone + email are both verified
* ``rides``    -- rides a driver opened for a rider

Indexes
-------
* **Unique** on phone / email / registration number (identity look-ups).
* **B-Tree** on ``rides.user_id``, ``rides.driver_id`` and ``rides.status``
  for the per-account ride listings.
"""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from src.domain.enums import DriverStatus, RideStatus, VehicleType


def _values(enum_cls):
    return [member.value for member in enum_cls]


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=True)
    phone_number = Column(String(20), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=True)
    notification_token = Column(String(255), nullable=True)
    ratings = Column(Float, default=0.0, nullable=False)
    total_rides = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    rides = relationship("RideModel", back_populates="user")


class DriverModel(Base):
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    country = Column(String(80), nullable=False)
    phone_number = Column(String(20), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    vehicle_type = Column(
        Enum(VehicleType, values_callable=_values), nullable=False
    )
    registration_number = Column(String(40), unique=True, nullable=False)
    registration_date = Column(Date, nullable=False)
    driving_license = Column(String(40), nullable=False)
    vehicle_color = Column(String(40), nullable=True)
    rate = Column(Float, nullable=False)
    ratings = Column(Float, default=0.0, nullable=False)
    total_earning = Column(Float, default=0.0, nullable=False)
    total_rides = Column(Integer, default=0, nullable=False)
    pending_rides = Column(Integer, default=0, nullable=False)
    cancel_rides = Column(Integer, default=0, nullable=False)
    status = Column(
        Enum(DriverStatus, values_callable=_values),
        default=DriverStatus.INACTIVE,
        nullable=False,
    )
    notification_token = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    rides = relationship("RideModel", back_populates="driver")


class RideModel(Base):
    __tablename__ = "rides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=False)
    charge = Column(Float, nullable=False)
    current_location_name = Column(String(255), nullable=False)
    destination_location_name = Column(String(255), nullable=False)
    distance = Column(Float, nullable=False)
    status = Column(
        Enum(RideStatus, values_callable=_values),
        default=RideStatus.PROCESSING,
        nullable=False,
    )
    rating = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user = relationship("UserModel", back_populates="rides")
    driver = relationship("DriverModel", back_populates="rides")

    __table_args__ = (
        Index("idx_rides_user", "user_id"),
        Index("idx_rides_driver", "driver_id"),
        Index("idx_rides_status", "status"),
    )
