"""
One-Time Code Service
Pre-registration email verification codes kept in a TTL store
"""

import asyncio
import logging
import secrets
import time
from typing import Any, Callable, Dict, Optional, Tuple

from fastapi import HTTPException, status

from app.config import settings
from app.services.email_service import email_service

logger = logging.getLogger(__name__)


class TTLStore:
    """Key-value store with per-entry expiry"""

    def get(self, key: str) -> Optional[Any]:
        """Value for key, or None if absent. Expired entries are still returned."""
        raise NotImplementedError

    def set(self, key: str, value: Any, ttl: float) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        """Remove key; a missing key is not an error"""
        raise NotImplementedError

    def purge_expired(self) -> int:
        raise NotImplementedError


class InMemoryTTLStore(TTLStore):
    """Process-local TTLStore. Suitable for a single API instance."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key):
        entry = self._entries.get(key)
        return entry[0] if entry else None

    def set(self, key, value, ttl):
        self._entries[key] = (value, self._clock() + ttl)

    def delete(self, key):
        self._entries.pop(key, None)

    def purge_expired(self):
        now = self._clock()
        expired = [k for k, (_, expires) in list(self._entries.items()) if expires <= now]
        for key in expired:
            self._entries.pop(key, None)
        return len(expired)

    def __len__(self):
        return len(self._entries)


class OTPService:
    """
    Issues and checks 6-digit codes bound to an email address

    Entries are dicts ``{code, created_at, expires_at}`` (epoch seconds).
    """

    def __init__(
        self,
        store: TTLStore,
        sender=None,
        clock: Callable[[], float] = time.time,
        ttl_seconds: int = None,
        resend_interval: int = None
    ):
        self.store = store
        self.sender = sender or email_service
        self.clock = clock
        self.ttl_seconds = ttl_seconds or settings.OTP_TTL_SECONDS
        self.resend_interval = resend_interval or settings.OTP_RESEND_INTERVAL_SECONDS

    @staticmethod
    def _normalize(email: str) -> str:
        return email.strip().lower()

    @staticmethod
    def generate_code() -> str:
        return str(100000 + secrets.randbelow(900000))

    async def send(self, email: str) -> dict:
        """
        Generate a code for ``email`` and try to mail it

        Raises:
            HTTPException: 429 if a live code was issued less than
                OTP_RESEND_INTERVAL_SECONDS ago
        """
        key = self._normalize(email)
        now = self.clock()

        existing = self.store.get(key)
        if existing and now < existing["expires_at"] and now - existing["created_at"] < self.resend_interval:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Please wait {self.resend_interval} seconds before requesting another code."
            )

        code = self.generate_code()
        self.store.set(
            key,
            {"code": code, "created_at": now, "expires_at": now + self.ttl_seconds},
            self.ttl_seconds
        )

        delivered = await self.sender.send_verification_code(email, code)
        if delivered:
            return {"message": f"Verification code sent to {email}. Check your inbox!"}

        logger.warning("Verification code for %s not delivered, returning fallback", email)
        return {
            "message": f"Verification code generated for {email}",
            "otp_fallback": code
        }

    def verify(self, email: str, code: str) -> dict:
        """
        Consume the code for ``email``

        Raises:
            HTTPException: 400 when there is no code, it expired, or it does not match
        """
        key = self._normalize(email)
        entry = self.store.get(key)

        if not entry:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No verification code found. Request a new one."
            )

        if self.clock() > entry["expires_at"]:
            self.store.delete(key)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Code expired. Request a new one."
            )

        if not secrets.compare_digest(entry["code"], (code or "").strip()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid code. Please try again."
            )

        self.store.delete(key)
        return {"message": "Email verified!", "verified": True}

    def sweep(self) -> int:
        removed = self.store.purge_expired()
        if removed:
            logger.debug("Purged %d expired verification codes", removed)
        return removed


async def run_sweeper(service: OTPService, interval: float = None):
    """Purge expired codes forever; cancelled on shutdown"""
    interval = interval or settings.OTP_SWEEP_INTERVAL_SECONDS
    while True:
        await asyncio.sleep(interval)
        try:
            service.sweep()
        except Exception:
            logger.exception("Verification code sweep failed")


# Process-wide instance used by the auth routes
otp_service = OTPService(InMemoryTTLStore())
