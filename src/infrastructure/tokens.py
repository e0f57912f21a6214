"""
Signed tokens (PyJWT, HS256).

* ``SessionTokens``  -- long-lived session token handed out after a
  successful phone or email verification.
* ``EnvelopeSigner`` -- short-lived envelope carrying a pending profile and
  its verification code between the two legs of the email flow.

The two use separate secrets so an envelope can never pass as a session.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from pydantic import TypeAdapter, ValidationError

from src.config import settings
from src.domain.profiles import PendingProfile

ALGORITHM = "HS256"

_profile_adapter = TypeAdapter(PendingProfile)


class InvalidSessionToken(Exception):
    """Raised for a missing, malformed, expired or foreign session token."""


class InvalidEnvelope(Exception):
    """Raised when an envelope fails signature, expiry or shape checks."""


class SessionTokens:
    def __init__(self, secret: str, ttl_days: int = 30):
        if not secret:
            raise ValueError("Session token secret cannot be empty")
        self._secret = secret
        self._ttl = timedelta(days=ttl_days)

    def issue(self, subject_id: int, role: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {"id": subject_id, "role": role, "iat": now, "exp": now + self._ttl}
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def decode(self, token: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.InvalidTokenError as exc:
            raise InvalidSessionToken(str(exc)) from exc
        if "id" not in payload or "role" not in payload:
            raise InvalidSessionToken("Token is missing claims")
        return payload


@dataclass(frozen=True)
class Envelope:
    profile: PendingProfile
    code: str


class EnvelopeSigner:
    def __init__(self, secret: str, ttl_seconds: int = 300):
        if not secret:
            raise ValueError("Envelope secret cannot be empty")
        self._secret = secret
        self._ttl = timedelta(seconds=ttl_seconds)

    def seal(self, profile: PendingProfile, code: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "profile": profile.model_dump(mode="json"),
            "code": code,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def open(self, token: str) -> Envelope:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
            profile = _profile_adapter.validate_python(payload["profile"])
            return Envelope(profile=profile, code=str(payload["code"]))
        except (jwt.InvalidTokenError, ValidationError, KeyError) as exc:
            raise InvalidEnvelope(str(exc)) from exc


def get_session_tokens() -> SessionTokens:
    return SessionTokens(settings.access_token_secret, settings.access_token_ttl_days)


def get_envelope_signer() -> EnvelopeSigner:
    return EnvelopeSigner(settings.email_activation_secret, settings.envelope_ttl_seconds)
