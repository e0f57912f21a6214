"""
Verification-code stores.

A code is a 4-digit numeric string keyed by an identifier (phone number
or email).  Each identifier holds at most one live code: issuing again
overwrites the previous one.

Validation re-checks expiry on every read, so correctness never depends on
the background sweeper having run.  A successful validation does *not*
consume the code; it keeps validating until it expires.

Two backends share the same async interface:

* ``InMemoryCodeStore`` -- a dict guarded by a lock, clock injectable.
* ``RedisCodeStore``    -- ``SET ... PX`` and ``GET``; Redis handles expiry.

``InMemoryCodeStore.issue`` / ``validate`` never await anything; they stay
``async`` so callers can swap backends without changing call sites.

Codes are compared as bytes: ``hmac.compare_digest`` refuses non-ASCII
``str`` arguments, and ``validate`` must answer ``False`` rather than raise
on any candidate.
"""

from __future__ import annotations

import hmac
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

import redis.asyncio as aioredis

from src.config import settings
from src.infrastructure.redis_client import get_redis


def generate_code() -> str:
    """Uniform random code in 1000..9999."""
    return str(1000 + secrets.randbelow(9000))


@dataclass(frozen=True)
class VerificationCode:
    identifier: str
    code: str
    expires_at: float


class InMemoryCodeStore:
    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._codes: dict[str, VerificationCode] = {}
        self._lock = threading.Lock()

    async def issue(
        self, identifier: str, ttl_seconds: Optional[float] = None
    ) -> str:
        ttl = settings.otp_ttl_seconds if ttl_seconds is None else ttl_seconds
        code = generate_code()
        with self._lock:
            self._codes[identifier] = VerificationCode(
                identifier, code, self._clock() + ttl
            )
        return code

    async def validate(self, identifier: str, candidate: str) -> bool:
        with self._lock:
            entry = self._codes.get(identifier)
            if entry is None:
                return False
            if self._clock() > entry.expires_at:
                del self._codes[identifier]
                return False
        return hmac.compare_digest(entry.code.encode(), str(candidate).encode())

    def purge_expired(self) -> int:
        """Drop every expired entry.  Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, v in self._codes.items() if now > v.expires_at]
            for key in expired:
                del self._codes[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._codes)


class RedisCodeStore:
    def __init__(self, client: aioredis.Redis, prefix: str = "otp"):
        self.redis = client
        self.prefix = prefix

    def _key(self, identifier: str) -> str:
        return f"{self.prefix}:{identifier}"

    async def issue(
        self, identifier: str, ttl_seconds: Optional[float] = None
    ) -> str:
        ttl = settings.otp_ttl_seconds if ttl_seconds is None else ttl_seconds
        code = generate_code()
        await self.redis.set(self._key(identifier), code, px=int(ttl * 1000))
        return code

    async def validate(self, identifier: str, candidate: str) -> bool:
        stored = await self.redis.get(self._key(identifier))
        if stored is None:
            return False
        if isinstance(stored, bytes):
            stored = stored.decode()
        return hmac.compare_digest(stored.encode(), str(candidate).encode())


CodeStore = Union[InMemoryCodeStore, RedisCodeStore]

_memory_store = InMemoryCodeStore()


async def get_code_store() -> CodeStore:
    """Return the configured store (FastAPI dependency)."""
    if settings.verification_backend == "redis":
        return RedisCodeStore(await get_redis())
    return _memory_store
