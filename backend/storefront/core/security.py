# storefront/core/security.py
"""
Security module for authentication and authorization.
Handles password hashing, JWT token creation/validation, and role ranking.

Nothing here reads configuration on its own: both services receive the
process-wide `Settings` instance when they are constructed.
"""
import datetime as dt
import logging
from typing import Callable

import jwt  # PyJWT
from passlib.context import CryptContext
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from storefront.config import Settings
from storefront.core.errors import TokenExpired, TokenInvalid

logger = logging.getLogger(__name__)

# Role ranking used by the role gate: a claim satisfies a requirement
# when its rank is greater than or equal to the required rank.
ROLE_RANKS: dict[str, int] = {
    "user": 0,
    "admin": 1,
}


def role_satisfies(role: str | None, required: str) -> bool:
    """
    Check whether a role claim meets the required role.

    Unknown or missing roles never satisfy anything; an unknown required
    role can only be met by the exact same role name.
    """
    if not role:
        return False
    if role == required:
        return True
    have = ROLE_RANKS.get(role)
    need = ROLE_RANKS.get(required)
    if have is None or need is None:
        return False
    return have >= need


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class CredentialService:
    """
    One-way password hashing and verification.

    Argon2 embeds a random salt in every hash, so hashing the same password
    twice never yields the same string. Verification recomputes the digest
    over the full input and compares in constant time.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._ctx = CryptContext(
            schemes=["argon2"],  # Use Argon2 for password hashing
            deprecated="auto",   # Automatically handle deprecated schemes
            argon2__memory_cost=settings.argon2_memory_cost,
            argon2__time_cost=settings.argon2_time_cost,
        )

    def hash(self, plain: str) -> str:
        return self._ctx.hash(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        """
        Verify a plain text password against a stored hash.

        Returns False (instead of raising) when the stored hash is empty or
        not a recognised Argon2 string.
        """
        if not hashed:
            return False
        try:
            return self._ctx.verify(plain, hashed)
        except (ValueError, TypeError):
            return False

    async def hash_async(self, plain: str) -> str:
        return await run_in_threadpool(self.hash, plain)

    async def verify_async(self, plain: str, hashed: str) -> bool:
        return await run_in_threadpool(self.verify, plain, hashed)


class Claims(BaseModel):
    """Identity claims carried inside a session token."""
    username: str
    email: str
    user_id: str
    role: str | None = None


class TokenService:
    """
    Signs and verifies stateless session tokens (JWT, HMAC).

    Verification depends only on the token, the signing key and the current
    time; `clock` lets tests move "now" without sleeping.
    """

    def __init__(self, settings: Settings, clock: Callable[[], dt.datetime] = utc_now):
        self._secret = settings.jwt_secret
        self._alg = settings.jwt_algorithm
        self._ttl = dt.timedelta(minutes=settings.access_token_expire_minutes)
        self._clock = clock

    def issue(self, claims: Claims) -> str:
        """
        Create a signed token over the claims.

        Token payload includes the claims plus:
            - iat: Issued at timestamp
            - exp: Expiration timestamp (iat + configured TTL)
        """
        now = self._clock()
        payload = claims.model_dump(exclude_none=True)
        payload["iat"] = int(now.timestamp())
        payload["exp"] = int((now + self._ttl).timestamp())
        return jwt.encode(payload, self._secret, algorithm=self._alg)

    def verify(self, token: str) -> Claims:
        """
        Decode and validate a token.

        Raises:
            TokenInvalid: signature mismatch, malformed token or payload
            TokenExpired: current time is at or past `exp`
        """
        try:
            # Expiry is checked below against our own clock
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._alg],
                options={"verify_exp": False, "verify_iat": False, "require": ["exp"]},
            )
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid(str(exc)) from exc

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            raise TokenInvalid("exp claim must be a number")
        if self._clock().timestamp() >= exp:
            raise TokenExpired("token expired")

        try:
            return Claims(
                username=payload["username"],
                email=payload["email"],
                user_id=payload["user_id"],
                role=payload.get("role"),
            )
        except (KeyError, ValueError) as exc:
            raise TokenInvalid("missing identity claims") from exc
