"""
Repository Pattern -- abstracts DB access so routes stay DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  Relationships are loaded eagerly where a
response nests them; lazy loads are not available under asyncio.
"""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .models import DriverModel, RideModel, UserModel
from src.domain.enums import DriverStatus, RideStatus
from src.domain.profiles import PendingDriverProfile


class RiderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)

    async def get_by_phone(self, phone_number: str) -> Optional[UserModel]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.phone_number == phone_number)
        )
        return result.scalar_one_or_none()

    async def create(self, *, phone_number: str) -> UserModel:
        user = UserModel(phone_number=phone_number, ratings=0.0, total_rides=0)
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update_profile(self, user: UserModel, *, name: str, email: str) -> UserModel:
        user.name = name
        user.email = email
        await self.session.flush()
        return user


class DriverRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, driver_id: int) -> Optional[DriverModel]:
        return await self.session.get(DriverModel, driver_id)

    async def get_by_phone(self, phone_number: str) -> Optional[DriverModel]:
        result = await self.session.execute(
            select(DriverModel).where(DriverModel.phone_number == phone_number)
        )
        return result.scalar_one_or_none()

    async def get_many(self, driver_ids: Sequence[int]) -> list[DriverModel]:
        result = await self.session.execute(
            select(DriverModel)
            .where(DriverModel.id.in_(list(driver_ids)))
            .order_by(DriverModel.id)
        )
        return list(result.scalars().all())

    async def create(self, profile: PendingDriverProfile) -> DriverModel:
        driver = DriverModel(
            **profile.model_dump(exclude={"kind"}),
            ratings=0.0,
            total_earning=0.0,
            total_rides=0,
            pending_rides=0,
            cancel_rides=0,
            status=DriverStatus.INACTIVE,
        )
        self.session.add(driver)
        await self.session.flush()
        await self.session.refresh(driver)
        return driver


class RideRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_ride(
        self,
        *,
        user_id: int,
        driver_id: int,
        charge: float,
        current_location_name: str,
        destination_location_name: str,
        distance: float,
        status: RideStatus = RideStatus.PROCESSING,
    ) -> RideModel:
        ride = RideModel(
            user_id=user_id,
            driver_id=driver_id,
            charge=charge,
            current_location_name=current_location_name,
            destination_location_name=destination_location_name,
            distance=distance,
            status=status,
        )
        self.session.add(ride)
        await self.session.flush()
        await self.session.refresh(ride)
        return ride

    async def get_by_id(self, ride_id: int) -> Optional[RideModel]:
        return await self.session.get(RideModel, ride_id)

    async def get_rides_for_user(self, user_id: int) -> list[RideModel]:
        result = await self.session.execute(
            select(RideModel)
            .where(RideModel.user_id == user_id)
            .options(selectinload(RideModel.driver), selectinload(RideModel.user))
            .order_by(RideModel.id)
        )
        return list(result.scalars().all())

    async def get_rides_for_driver(self, driver_id: int) -> list[RideModel]:
        result = await self.session.execute(
            select(RideModel)
            .where(RideModel.driver_id == driver_id)
            .options(selectinload(RideModel.driver), selectinload(RideModel.user))
            .order_by(RideModel.id)
        )
        return list(result.scalars().all())
