"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 6 sample riders (phone verified, some with email)
  - 4 sample drivers (mix of active / inactive)
  - 6 sample rides (mix of Processing, Ongoing, Completed, Cancelled),
    charged with the same fare engine that backs ``/ride-price``
"""

import asyncio
from datetime import date

from sqlalchemy import text

from src.config import settings
from src.domain.distance import distance
from src.domain.entities import Location, settle_ride
from src.domain.enums import DriverStatus, RideStatus, VehicleType
from src.domain.pricing import FareEstimator
from src.infrastructure.database import async_session_factory, engine
from src.infrastructure.models import DriverModel, RideModel, UserModel

RIDERS = [
    {"name": "Aarav Sharma", "phone_number": "+8801700000001", "email": "aarav@ridewave.app"},
    {"name": "Priya Patel", "phone_number": "+8801700000002", "email": "priya@ridewave.app"},
    {"name": "Rohan Mehta", "phone_number": "+8801700000003", "email": "rohan@ridewave.app"},
    {"name": None, "phone_number": "+8801700000004", "email": None},
    {"name": "Sneha Gupta", "phone_number": "+8801700000005", "email": "sneha@ridewave.app"},
    {"name": None, "phone_number": "+8801700000006", "email": None},
]

DRIVERS = [
    {
        "name": "Karim Uddin", "country": "Bangladesh", "phone_number": "+8801800000001",
        "email": "karim@ridewave.app", "vehicle_type": VehicleType.CAR,
        "registration_number": "DHA-11-2233", "driving_license": "DL-0001",
        "vehicle_color": "White", "rate": 2.0, "status": DriverStatus.ACTIVE,
    },
    {
        "name": "Nadia Islam", "country": "Bangladesh", "phone_number": "+8801800000002",
        "email": "nadia@ridewave.app", "vehicle_type": VehicleType.MOTORCYCLE,
        "registration_number": "DHA-12-4455", "driving_license": "DL-0002",
        "vehicle_color": "Black", "rate": 1.5, "status": DriverStatus.ACTIVE,
    },
    {
        "name": "Tanvir Hasan", "country": "Bangladesh", "phone_number": "+8801800000003",
        "email": "tanvir@ridewave.app", "vehicle_type": VehicleType.CNG,
        "registration_number": "DHA-13-6677", "driving_license": "DL-0003",
        "vehicle_color": "Green", "rate": 1.2, "status": DriverStatus.INACTIVE,
    },
    {
        "name": "Farhana Akter", "country": "Bangladesh", "phone_number": "+8801800000004",
        "email": "farhana@ridewave.app", "vehicle_type": VehicleType.CAR,
        "registration_number": "DHA-14-8899", "driving_license": "DL-0004",
        "vehicle_color": None, "rate": 2.2, "status": DriverStatus.ACTIVE,
    },
]

# Dhaka landmarks
PLACES = {
    "Hazrat Shahjalal Airport": Location(23.8433, 90.3978),
    "Gulshan 2": Location(23.7925, 90.4078),
    "Dhanmondi 27": Location(23.7561, 90.3742),
    "Motijheel": Location(23.7330, 90.4172),
    "Uttara Sector 7": Location(23.8690, 90.3950),
    "Banani": Location(23.7937, 90.4066),
}

# (rider index, driver index, from, to, final status)
RIDES = [
    (0, 0, "Hazrat Shahjalal Airport", "Gulshan 2", RideStatus.COMPLETED),
    (1, 0, "Gulshan 2", "Dhanmondi 27", RideStatus.ONGOING),
    (2, 1, "Motijheel", "Banani", RideStatus.PROCESSING),
    (3, 1, "Uttara Sector 7", "Hazrat Shahjalal Airport", RideStatus.COMPLETED),
    (4, 3, "Dhanmondi 27", "Motijheel", RideStatus.CANCELLED),
    (5, 3, "Banani", "Uttara Sector 7", RideStatus.PROCESSING),
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM users"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Riders ────────────────────────────────────────────────────
        rider_models = [UserModel(ratings=0.0, total_rides=0, **r) for r in RIDERS]
        session.add_all(rider_models)
        await session.flush()
        print(f"  Created {len(rider_models)} riders")

        # ── Drivers ───────────────────────────────────────────────────
        driver_models = [
            DriverModel(
                registration_date=date(2023, 1, 15),
                ratings=0.0,
                total_earning=0.0,
                total_rides=0,
                pending_rides=0,
                cancel_rides=0,
                **d,
            )
            for d in DRIVERS
        ]
        session.add_all(driver_models)
        await session.flush()
        print(f"  Created {len(driver_models)} drivers")

        # ── Rides ─────────────────────────────────────────────────────
        estimator = FareEstimator(settings.base_fare, settings.rate_per_km)
        for rider_idx, driver_idx, origin, dest, final in RIDES:
            rider = rider_models[rider_idx]
            driver = driver_models[driver_idx]
            ride = RideModel(
                user_id=rider.id,
                driver_id=driver.id,
                charge=estimator.estimate(PLACES[origin], PLACES[dest]),
                current_location_name=origin,
                destination_location_name=dest,
                distance=round(distance(PLACES[origin], PLACES[dest]), 2),
                status=final,
            )
            session.add(ride)
            driver.pending_rides += 1
            settle_ride(driver, rider, final, ride.charge)
        await session.flush()
        print(f"  Created {len(RIDES)} rides")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
