"""
Adapters: password hashing (bcrypt) and session tokens (JWT).

bcrypt is CPU-bound, so hashing and verification run in a worker
thread to keep the event loop free.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from app.domain.shop.entities import Principal, User, UserRole
from app.domain.shop.ports import PasswordHasher, TokenService
from app.shared.errors.app_error import AppError
from app.shared.result import Result

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid or expired token"

# bcrypt only reads the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class BcryptPasswordHasher(PasswordHasher):
    """Salted bcrypt hashes with a configurable cost factor."""

    def __init__(self, rounds: int = 11) -> None:
        self._rounds = rounds

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hash_sync, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self._verify_sync, password, password_hash)

    def _hash_sync(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    @staticmethod
    def _verify_sync(password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash.
            logger.warning("Stored password hash could not be parsed")
            return False


class JwtTokenService(TokenService):
    """HS256-signed tokens carrying the user id, username and role."""

    ALGORITHM = "HS256"

    def __init__(
        self,
        secret: str,
        issuer: str,
        audience: str,
        expire_minutes: int = 60,
    ) -> None:
        self._secret = secret
        self._issuer = issuer
        self._audience = audience
        self._expire_minutes = expire_minutes

    def issue(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user.id),
            "username": user.username,
            "role": user.role.value,
            "iss": self._issuer,
            "aud": self._audience,
            "iat": now,
            "exp": now + timedelta(minutes=self._expire_minutes),
        }
        return jwt.encode(claims, self._secret, algorithm=self.ALGORITHM)

    def decode(self, token: str) -> Result[Principal, AppError]:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.ALGORITHM],
                audience=self._audience,
                issuer=self._issuer,
                options={"require": ["exp", "sub", "iss", "aud"]},
            )
            principal = Principal(
                user_id=int(claims["sub"]),
                username=claims.get("username", ""),
                role=UserRole(claims.get("role", UserRole.USER.value)),
            )
        except (jwt.PyJWTError, ValueError) as exc:
            logger.warning("Rejected session token: %s", type(exc).__name__)
            return Result.failure(AppError.unauthorized(INVALID_TOKEN_MESSAGE))
        return Result.success(principal)
