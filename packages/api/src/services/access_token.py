# This project was developed with assistance from AI tools.
"""Self-service access tokens.

A guarantor is invited to fill in their own data through a link carrying an
opaque bearer token. There is at most one live token per guarantor; issuing
a new one replaces the old. Validity is checked on every use and never
cached.
"""

import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from ..core.config import settings
from ..schemas.guarantor import Guarantor
from ..schemas.qualification import TokenGrant, TokenValidation
from .collaborators import GuarantorRepository
from .errors import GuarantorNotFoundError, TokenExpiredError, TokenInvalidError
from .profiles import profile_for

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def mask_token(token: str) -> str:
    return f"{token[:8]}..."


def generate_secure_token() -> str:
    """Random hex token, ``TOKEN_BYTES`` bytes of entropy."""
    return secrets.token_hex(settings.TOKEN_BYTES)


def calculate_expiry(expiry_days: int, now: datetime) -> datetime:
    """Absolute expiry ``expiry_days`` from ``now``, clamped to the allowed window."""
    # Clamp the day count first; timedelta overflows on very large values.
    expiry_days = max(0, min(expiry_days, settings.TOKEN_MAX_EXPIRY_DAYS))
    lifetime = timedelta(days=expiry_days)
    lifetime = max(lifetime, timedelta(hours=settings.TOKEN_MIN_EXPIRY_HOURS))
    lifetime = min(lifetime, timedelta(days=settings.TOKEN_MAX_EXPIRY_DAYS))
    return now + lifetime


def is_expired(expiry: datetime, now: datetime) -> bool:
    # A request at the exact expiry instant is still valid.
    return now > expiry


def remaining_hours(expiry: datetime, now: datetime) -> int:
    seconds = (expiry - now).total_seconds()
    return max(0, int(seconds // 3600))


def build_link(g: Guarantor, token: str) -> str:
    path = profile_for(g.guarantor_type).link_path
    return f"{settings.APP_BASE_URL.rstrip('/')}/actor/{path}/{token}"


class AccessTokenManager:
    """Issue, check, extend and revoke guarantor access tokens."""

    def __init__(
        self,
        repository: GuarantorRepository,
        now: Callable[[], datetime] = _utcnow,
    ):
        self._repository = repository
        self._now = now

    async def _require(self, guarantor_id: str) -> Guarantor:
        g = await self._repository.find_by_id(guarantor_id)
        if g is None:
            raise GuarantorNotFoundError(guarantor_id)
        return g

    async def generate(self, guarantor_id: str, expiry_days: int | None = None) -> TokenGrant:
        """Issue a fresh token, overwriting any previous one."""
        g = await self._require(guarantor_id)
        days = expiry_days if expiry_days is not None else settings.TOKEN_EXPIRY_DAYS
        token = generate_secure_token()
        expiry = calculate_expiry(days, self._now())
        await self._repository.set_token(guarantor_id, token, expiry)
        logger.info("Issued access token %s for guarantor %s", mask_token(token), guarantor_id)
        return TokenGrant(token=token, expiry=expiry, link=build_link(g, token))

    async def validate(self, token: str) -> TokenValidation:
        """Resolve a token to its guarantor.

        Raises:
            TokenInvalidError: No guarantor holds this token.
            TokenExpiredError: The token's expiry is in the past.
        """
        if not token:
            raise TokenInvalidError()
        g = await self._repository.find_by_token(token)
        if g is None or g.token_expiry is None:
            raise TokenInvalidError()
        now = self._now()
        if is_expired(g.token_expiry, now):
            logger.info("Rejected expired token %s", mask_token(token))
            raise TokenExpiredError()
        return TokenValidation(guarantor=g, remaining_hours=remaining_hours(g.token_expiry, now))

    async def refresh(self, guarantor_id: str, expiry_days: int | None = None) -> TokenGrant:
        """Extend the current token's expiry, counted from now."""
        g = await self._require(guarantor_id)
        if not g.access_token:
            raise TokenInvalidError("Guarantor has no access token to refresh")
        days = expiry_days if expiry_days is not None else settings.TOKEN_EXPIRY_DAYS
        expiry = calculate_expiry(days, self._now())
        await self._repository.set_token(guarantor_id, g.access_token, expiry)
        return TokenGrant(token=g.access_token, expiry=expiry, link=build_link(g, g.access_token))

    async def revoke(self, guarantor_id: str) -> None:
        await self._require(guarantor_id)
        await self._repository.clear_token(guarantor_id)
        logger.info("Revoked access token for guarantor %s", guarantor_id)
