"""
LinkUp Backend: Password Hashing & Session Tokens
===================================================

What:  Thin wrappers over passlib (bcrypt) and PyJWT.
Why:   Services depend on `PasswordHasher` / `TokenService` objects built from
       Settings, not on module-level secrets, so tests can build their own.
How:   bcrypt work is CPU-bound; the async helpers push it to Starlette's
       threadpool so one login doesn't stall every other request.

Token Payloads:
    register: {"sub": id, "user": {"id": id}, "iat", "exp"}
    login:    {"sub": id, "user": {<profile snapshot>}, "iat", "exp"}
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool

from linkup.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Salted bcrypt hashing with a configurable cost factor."""

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        return self._context.verify(password, password_hash)

    async def hash_async(self, password: str) -> str:
        return await run_in_threadpool(self.hash, password)

    async def verify_async(self, password: str, password_hash: Optional[str]) -> bool:
        """
        Verify `password` against `password_hash` off the event loop.

        With no hash (unknown account) a dummy verification still runs, so
        "no such email" and "wrong password" take the same time.
        """
        if password_hash is None:
            await run_in_threadpool(self._context.dummy_verify)
            return False
        return await run_in_threadpool(self.verify, password, password_hash)


class TokenService:
    """Signs and verifies HS256 session tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", expires_in: int = 3600):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_in = expires_in

    def create_token(self, subject: str, user: Dict[str, Any]) -> str:
        """
        Sign a token for `subject` embedding `user` under the "user" claim.

        `user` must already be JSON-serializable (ids and dates as strings).
        """
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": subject,
            "user": user,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=self.expires_in)).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Verify signature and expiry, returning the payload.

        Raises:
            AuthenticationError: expired, tampered or otherwise invalid token.
        """
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected token: %s", str(e))
            raise AuthenticationError("Invalid token")
