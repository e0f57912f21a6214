"""
Integration tests for the rider REST endpoints.

Runs against an in-memory SQLite database.  Codes are read back from the
recording notifier, and expiry is driven by the fake clock behind the code
store.
"""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.helpers import auth_header, create_driver, create_rider, get_rider

PHONE = "+8801711111111"


async def _phone_login(client: AsyncClient, notifier, phone: str = PHONE):
    await client.post("/api/v1/registration", json={"phone_number": phone})
    return await client.post(
        "/api/v1/verify-otp",
        json={"phone_number": phone, "otp": notifier.sms[phone]},
    )


# ── Health ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/test")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "API is working"}


# ── Phone flow ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_registration_sends_code(client: AsyncClient, notifier):
    resp = await client.post("/api/v1/registration", json={"phone_number": PHONE})
    assert resp.status_code == 201
    assert resp.json()["success"] is True
    assert len(notifier.sms[PHONE]) == 4


@pytest.mark.asyncio
async def test_registration_requires_phone(client: AsyncClient):
    resp = await client.post("/api/v1/registration", json={})
    assert resp.status_code == 400
    assert "phone_number" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_verify_otp_creates_rider(client: AsyncClient, notifier):
    resp = await _phone_login(client, notifier)
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["accessToken"]
    assert data["user"]["phone_number"] == PHONE
    assert data["user"]["email"] is None


@pytest.mark.asyncio
async def test_verify_otp_logs_in_existing_rider(client: AsyncClient, notifier):
    rider = await create_rider(PHONE, name="Asha")
    resp = await _phone_login(client, notifier)
    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == rider.id
    assert resp.json()["user"]["name"] == "Asha"


@pytest.mark.asyncio
async def test_verify_otp_wrong_code(client: AsyncClient, notifier):
    await client.post("/api/v1/registration", json={"phone_number": PHONE})
    wrong = "1000" if notifier.sms[PHONE] != "1000" else "1001"
    resp = await client.post(
        "/api/v1/verify-otp", json={"phone_number": PHONE, "otp": wrong}
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid or expired OTP"


@pytest.mark.asyncio
async def test_verify_otp_expired_code(client: AsyncClient, notifier, clock):
    await client.post("/api/v1/registration", json={"phone_number": PHONE})
    clock.advance(301)
    resp = await client.post(
        "/api/v1/verify-otp",
        json={"phone_number": PHONE, "otp": notifier.sms[PHONE]},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_verify_otp_code_never_issued(client: AsyncClient):
    resp = await client.post(
        "/api/v1/verify-otp", json={"phone_number": PHONE, "otp": "1234"}
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_verify_otp_rejects_malformed_code(client: AsyncClient):
    resp = await client.post(
        "/api/v1/verify-otp", json={"phone_number": PHONE, "otp": "12ab"}
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("otp", ["١٢٣٤", "１２３４"])
async def test_verify_otp_rejects_non_ascii_digits(client: AsyncClient, otp):
    await client.post("/api/v1/registration", json={"phone_number": PHONE})
    resp = await client.post(
        "/api/v1/verify-otp", json={"phone_number": PHONE, "otp": otp}
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_email_verify_rejects_non_ascii_digits(client: AsyncClient):
    rider = await create_rider(PHONE)
    envelope = (
        await client.post(
            "/api/v1/email-otp-request",
            json={"email": "asha@ridewave.app", "name": "Asha", "userId": rider.id},
        )
    ).json()["token"]
    resp = await client.put(
        "/api/v1/email-otp-verify", json={"otp": "١٢٣٤", "token": envelope}
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_session_token_opens_me(client: AsyncClient, notifier):
    token = (await _phone_login(client, notifier)).json()["accessToken"]
    resp = await client.get(
        "/api/v1/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["phone_number"] == PHONE


# ── Email flow ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_email_flow_completes_profile(client: AsyncClient, notifier):
    rider = await create_rider(PHONE)
    email = "asha@ridewave.app"

    resp = await client.post(
        "/api/v1/email-otp-request",
        json={"email": email, "name": "Asha", "userId": rider.id},
    )
    assert resp.status_code == 201
    envelope = resp.json()["token"]

    resp = await client.put(
        "/api/v1/email-otp-verify",
        json={"otp": notifier.emails[email], "token": envelope},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["accessToken"]
    assert data["user"]["email"] == email
    assert data["user"]["name"] == "Asha"

    stored = await get_rider(rider.id)
    assert stored.email == email


@pytest.mark.asyncio
async def test_email_verify_wrong_code(client: AsyncClient, notifier):
    rider = await create_rider(PHONE)
    email = "asha@ridewave.app"
    envelope = (
        await client.post(
            "/api/v1/email-otp-request",
            json={"email": email, "name": "Asha", "userId": rider.id},
        )
    ).json()["token"]
    wrong = "1000" if notifier.emails[email] != "1000" else "1001"

    resp = await client.put(
        "/api/v1/email-otp-verify", json={"otp": wrong, "token": envelope}
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "OTP is not correct or expired!"


@pytest.mark.asyncio
async def test_email_verify_bad_envelope(client: AsyncClient):
    resp = await client.put(
        "/api/v1/email-otp-verify", json={"otp": "1234", "token": "garbage"}
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Your OTP is expired!"


@pytest.mark.asyncio
async def test_email_verify_unknown_rider(client: AsyncClient, notifier):
    email = "ghost@ridewave.app"
    envelope = (
        await client.post(
            "/api/v1/email-otp-request",
            json={"email": email, "name": "Ghost", "userId": 999},
        )
    ).json()["token"]
    resp = await client.put(
        "/api/v1/email-otp-verify",
        json={"otp": notifier.emails[email], "token": envelope},
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_email_verify_keeps_existing_email(client: AsyncClient, notifier):
    rider = await create_rider(PHONE, name="Asha", email="asha@ridewave.app")
    other = "someone@ridewave.app"
    envelope = (
        await client.post(
            "/api/v1/email-otp-request",
            json={"email": other, "name": "Someone", "userId": rider.id},
        )
    ).json()["token"]

    resp = await client.put(
        "/api/v1/email-otp-verify",
        json={"otp": notifier.emails[other], "token": envelope},
    )
    assert resp.status_code == 409
    assert "accessToken" not in resp.json()

    stored = await get_rider(rider.id)
    assert stored.email == "asha@ridewave.app"
    assert stored.name == "Asha"


@pytest.mark.asyncio
async def test_email_request_rejects_bad_email(client: AsyncClient):
    resp = await client.post(
        "/api/v1/email-otp-request",
        json={"email": "not-an-email", "name": "Asha", "userId": 1},
    )
    assert resp.status_code == 400


# ── Session guard ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_me_requires_token(client: AsyncClient):
    resp = await client.get("/api/v1/me")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_garbage_token(client: AsyncClient):
    resp = await client.get(
        "/api/v1/me", headers={"Authorization": "Bearer nonsense"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_driver_token(client: AsyncClient):
    driver = await create_driver()
    resp = await client.get("/api/v1/me", headers=auth_header(driver.id, "driver"))
    assert resp.status_code == 401


# ── Rides ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_get_rides_includes_driver(client: AsyncClient):
    rider = await create_rider(PHONE)
    driver = await create_driver()
    resp = await client.post(
        "/api/v1/driver/new-ride",
        headers=auth_header(driver.id, "driver"),
        json={
            "userId": rider.id,
            "charge": 16.5,
            "currentLocationName": "Hazrat Shahjalal Airport",
            "destinationLocationName": "Gulshan 2",
            "distance": 5.75,
        },
    )
    assert resp.status_code == 201

    resp = await client.get("/api/v1/get-rides", headers=auth_header(rider.id, "rider"))
    assert resp.status_code == 200
    rides = resp.json()["rides"]
    assert len(rides) == 1
    assert rides[0]["status"] == "Processing"
    assert rides[0]["driver"]["id"] == driver.id
    assert rides[0]["user"]["id"] == rider.id


@pytest.mark.asyncio
async def test_get_rides_empty(client: AsyncClient):
    rider = await create_rider(PHONE)
    resp = await client.get("/api/v1/get-rides", headers=auth_header(rider.id, "rider"))
    assert resp.status_code == 200
    assert resp.json() == {"rides": []}


# ── Ride price ────────────────────────────────────────────────────────

AIRPORT = {"latitude": 23.8433, "longitude": 90.3978}
GULSHAN = {"latitude": 23.7925, "longitude": 90.4078}


@pytest.mark.asyncio
async def test_ride_price_base_fare_for_zero_distance(client: AsyncClient):
    rider = await create_rider(PHONE)
    resp = await client.post(
        "/api/v1/ride-price",
        headers=auth_header(rider.id, "rider"),
        json={"pickup": AIRPORT, "destination": AIRPORT, "surgeMultiplier": 1},
    )
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "price": "5.00"}


@pytest.mark.asyncio
async def test_ride_price_applies_factors(client: AsyncClient):
    rider = await create_rider(PHONE)
    headers = auth_header(rider.id, "rider")
    plain = await client.post(
        "/api/v1/ride-price",
        headers=headers,
        json={"pickup": AIRPORT, "destination": GULSHAN, "surgeMultiplier": 1},
    )
    scaled = await client.post(
        "/api/v1/ride-price",
        headers=headers,
        json={
            "pickup": AIRPORT,
            "destination": GULSHAN,
            "surgeMultiplier": 2,
            "trafficFactor": 1.5,
            "weatherFactor": None,
        },
    )
    assert plain.status_code == scaled.status_code == 200
    base = float(plain.json()["price"])
    assert float(scaled.json()["price"]) == pytest.approx(base * 3, abs=0.02)
    assert len(scaled.json()["price"].split(".")[1]) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"destination": GULSHAN, "surgeMultiplier": 1},
        {"pickup": AIRPORT, "surgeMultiplier": 1},
        {"pickup": AIRPORT, "destination": GULSHAN},
        {"pickup": AIRPORT, "destination": GULSHAN, "surgeMultiplier": 0},
        {"pickup": AIRPORT, "destination": GULSHAN, "surgeMultiplier": 1, "timeFactor": -1},
        {"pickup": {"latitude": 91, "longitude": 0}, "destination": GULSHAN, "surgeMultiplier": 1},
    ],
)
async def test_ride_price_rejects_bad_body(client: AsyncClient, body):
    rider = await create_rider(PHONE)
    resp = await client.post(
        "/api/v1/ride-price", headers=auth_header(rider.id, "rider"), json=body
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]


@pytest.mark.asyncio
async def test_ride_price_requires_session(client: AsyncClient):
    resp = await client.post(
        "/api/v1/ride-price",
        json={"pickup": AIRPORT, "destination": GULSHAN, "surgeMultiplier": 1},
    )
    assert resp.status_code == 401
