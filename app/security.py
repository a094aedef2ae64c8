# app/security.py
"""Token signing, admin credential checks and the bearer-token gate."""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
from fastapi import Request
from jose import JWTError, jwt

from .errors import InvalidToken, MalformedHeader, MissingToken

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
BCRYPT_ROUNDS = 12
# bcrypt only looks at the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


class TokenService:
    """Issues and verifies HS256 bearer tokens for the admin account."""

    def __init__(self, secret: str, expires_in: timedelta, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("A token signing secret must be provided")
        self._secret = secret
        self._expires_in = expires_in
        self._algorithm = algorithm

    def issue(self, username: str, role: str = ADMIN_ROLE) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "user": username,
            "role": role,
            "iat": now,
            "exp": now + self._expires_in,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """Return the token's claims, or raise :class:`InvalidToken`."""
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidToken() from exc


class AdminCredentials:
    """The single configured administrator: a username and a bcrypt hash."""

    def __init__(self, username: str, password_hash: str):
        self._username = username
        self._password_hash = password_hash.encode("utf-8")

    def verify(self, username: str, password: str) -> bool:
        # Both checks always run so a wrong username costs the same as a wrong password.
        username_ok = secrets.compare_digest(username.encode("utf-8"), self._username.encode("utf-8"))
        password_ok = bcrypt.checkpw(_password_bytes(password), self._password_hash)
        return username_ok and password_ok


class BearerAuth:
    """FastAPI dependency that only lets requests with a valid bearer token through."""

    def __init__(self, tokens: TokenService):
        self._tokens = tokens

    async def __call__(self, request: Request) -> Dict[str, Any]:
        header = request.headers.get("Authorization")
        if not header:
            logger.warning(f"Admin Service: Missing token on {request.method} {request.url.path}.")
            raise MissingToken()

        parts = header.split(" ")
        if len(parts) != 2 or parts[0] != "Bearer":
            logger.warning(f"Admin Service: Malformed authorization header on {request.method} {request.url.path}.")
            raise MalformedHeader()

        try:
            claims = self._tokens.verify(parts[1])
        except InvalidToken:
            logger.warning(f"Admin Service: Rejected invalid or expired token on {request.method} {request.url.path}.")
            raise

        request.state.user = claims
        return claims


__all__ = ["ADMIN_ROLE", "AdminCredentials", "BearerAuth", "TokenService", "hash_password"]
