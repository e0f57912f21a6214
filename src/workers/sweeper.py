"""
Expired-Code Sweeper
====================

Runs every ``OTP_SWEEP_INTERVAL_SECONDS`` (default 60 s).

Validation already rejects and drops expired codes on read, so the sweeper
only bounds memory: codes that are issued but never checked would otherwise
sit in the in-memory store forever.  With the Redis backend, Redis expires
keys itself and each cycle is a no-op.
"""

from __future__ import annotations

import asyncio
import logging

from src.config import settings
from src.infrastructure.code_store import InMemoryCodeStore, get_code_store

logger = logging.getLogger(__name__)

_task: asyncio.Task | None = None
_stop_event: asyncio.Event | None = None


# ── Public API ────────────────────────────────────────────────────────


async def start_sweep_loop() -> None:
    global _task, _stop_event
    _stop_event = asyncio.Event()
    _task = asyncio.create_task(_loop())
    logger.info(
        "Code sweeper started (interval=%ds)", settings.otp_sweep_interval_seconds
    )


async def stop_sweep_loop() -> None:
    if _stop_event:
        _stop_event.set()
    if _task:
        _task.cancel()
        try:
            await _task
        except asyncio.CancelledError:
            pass
    logger.info("Code sweeper stopped")


# ── Internals ─────────────────────────────────────────────────────────


async def _loop() -> None:
    """Periodic loop: run a sweep cycle then sleep."""
    assert _stop_event is not None
    while not _stop_event.is_set():
        try:
            await run_sweep_cycle()
        except Exception:
            logger.exception("Unhandled error in sweep cycle")
        try:
            await asyncio.wait_for(
                _stop_event.wait(), timeout=settings.otp_sweep_interval_seconds
            )
            break
        except asyncio.TimeoutError:
            pass  # next cycle


async def run_sweep_cycle() -> int:
    """Execute one sweep.  Returns the number of codes removed."""
    store = await get_code_store()
    if not isinstance(store, InMemoryCodeStore):
        return 0
    removed = store.purge_expired()
    if removed:
        logger.info("Sweep cycle: %d expired codes removed", removed)
    return removed
