"""
Test doubles, the shared SQLite engine and account helpers.

Kept out of ``conftest.py`` so test modules import one copy of the engine
(``tests.helpers``) and see the same in-memory database as the fixtures.
"""

from datetime import date

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.domain.enums import DriverStatus, VehicleType
from src.infrastructure.models import DriverModel, UserModel
from src.infrastructure.notifier import Notifier
from src.infrastructure.tokens import get_session_tokens


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
TestSessionFactory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


# ── Test doubles ──────────────────────────────────────────────────────


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingNotifier(Notifier):
    """Keeps the last code sent to each phone / email."""

    def __init__(self):
        self.sms: dict[str, str] = {}
        self.emails: dict[str, str] = {}

    async def send_sms_code(self, phone_number: str, code: str) -> None:
        self.sms[phone_number] = code

    async def send_email_code(self, email: str, name: str, code: str) -> None:
        self.emails[email] = code


# ── Account helpers ───────────────────────────────────────────────────


async def create_rider(phone_number: str = "+8801711111111", **fields) -> UserModel:
    async with TestSessionFactory() as session:
        user = UserModel(phone_number=phone_number, ratings=0.0, total_rides=0, **fields)
        session.add(user)
        await session.commit()
        return user


async def create_driver(phone_number: str = "+8801811111111", **fields) -> DriverModel:
    values = dict(
        name="Karim Uddin",
        country="Bangladesh",
        email="karim@ridewave.app",
        vehicle_type=VehicleType.CAR,
        registration_number="DHA-11-2233",
        registration_date=date(2023, 1, 15),
        driving_license="DL-0001",
        vehicle_color="White",
        rate=2.0,
        ratings=0.0,
        total_earning=0.0,
        total_rides=0,
        pending_rides=0,
        cancel_rides=0,
        status=DriverStatus.INACTIVE,
    )
    values.update(fields)
    async with TestSessionFactory() as session:
        driver = DriverModel(phone_number=phone_number, **values)
        session.add(driver)
        await session.commit()
        return driver


async def get_driver(driver_id: int) -> DriverModel:
    async with TestSessionFactory() as session:
        return await session.get(DriverModel, driver_id)


async def get_rider(user_id: int) -> UserModel:
    async with TestSessionFactory() as session:
        return await session.get(UserModel, user_id)


def auth_header(subject_id: int, role: str) -> dict[str, str]:
    token = get_session_tokens().issue(subject_id, role)
    return {"Authorization": f"Bearer {token}"}
