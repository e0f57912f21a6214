"""
Phone / email verification orchestration.

Phone flow
----------
issue code for the phone -> deliver over SMS -> caller checks the code.

Email flow
----------
issue code for the email -> seal pending profile + code in a 5-minute
envelope -> deliver code by email -> return envelope.  On the second leg
the caller hands back envelope + code; the envelope is opened and the code
re-validated against the store before the pending profile is released.

Per identifier: NoCode -> CodeIssued -> {Validated | Expired}.  The store
keeps a validated code live until its TTL runs out.

Identity persistence and session issuance stay with the route handlers.
"""

from __future__ import annotations

import hmac
import logging

from src.domain.profiles import PendingProfile
from src.infrastructure.code_store import CodeStore
from src.infrastructure.notifier import Notifier
from src.infrastructure.tokens import EnvelopeSigner

logger = logging.getLogger(__name__)


class InvalidVerificationCode(Exception):
    """Raised when a code is wrong, expired or was never issued."""


class VerificationFlow:
    def __init__(self, codes: CodeStore, notifier: Notifier, signer: EnvelopeSigner):
        self.codes = codes
        self.notifier = notifier
        self.signer = signer

    async def send_phone_code(self, phone_number: str) -> None:
        code = await self.codes.issue(phone_number)
        await self.notifier.send_sms_code(phone_number, code)
        logger.info("Phone code issued for %s", phone_number)

    async def check_phone_code(self, phone_number: str, code: str) -> None:
        if not await self.codes.validate(phone_number, code):
            raise InvalidVerificationCode(phone_number)

    async def send_email_code(self, profile: PendingProfile) -> str:
        code = await self.codes.issue(profile.email)
        envelope = self.signer.seal(profile, code)
        await self.notifier.send_email_code(profile.email, profile.name, code)
        logger.info("Email code issued for %s", profile.email)
        return envelope

    async def check_email_code(self, envelope: str, code: str) -> PendingProfile:
        """Open *envelope* and check *code*; raises ``InvalidEnvelope`` or
        ``InvalidVerificationCode``."""
        opened = self.signer.open(envelope)
        if not hmac.compare_digest(opened.code.encode(), code.encode()):
            raise InvalidVerificationCode(opened.profile.email)
        if not await self.codes.validate(opened.profile.email, code):
            raise InvalidVerificationCode(opened.profile.email)
        return opened.profile
