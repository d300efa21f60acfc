"""
Use cases: sign-up, sign-in and bearer-token authentication.

Input: RegisterCommand / LoginCommand / raw bearer token
Output: Result[AuthResponseDto | Principal, AppError]
Side effects: Persists new users through UserRepository.
Failure cases: Validation, Conflict (username checked before email),
Unauthorized (one generic message for unknown user and wrong password).

Usernames are stripped of line breaks before they reach a log sink.
Passwords, hashes and tokens are never logged.
"""

import asyncio
import logging

from app.application.shop.dtos import (
    AuthResponseDto,
    LoginCommand,
    RegisterCommand,
)
from app.application.shop.mappers import to_user_dto
from app.domain.shop.entities import Principal, User, UserRole
from app.domain.shop.ports import PasswordHasher, TokenService, UserRepository
from app.domain.shop.validation import validate_login, validate_registration
from app.shared.errors.app_error import AppError
from app.shared.logging import sanitize_log_value
from app.shared.result import Result, Unit

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"
MISSING_TOKEN_MESSAGE = "Authentication required"


class AuthService:
    """Registers and authenticates users."""

    def __init__(
        self,
        user_repo: UserRepository,
        password_hasher: PasswordHasher,
        token_service: TokenService,
    ) -> None:
        self._user_repo = user_repo
        self._password_hasher = password_hasher
        self._token_service = token_service

    async def sign_up(self, command: RegisterCommand) -> Result[AuthResponseDto, AppError]:
        """Register a user with the default role and return a session.

        Flow: validate → duplicate probes → hash → save → issue token.
        """
        username = sanitize_log_value(command.username)
        logger.info("SignUp request for username: %s", username)

        result = validate_registration(command.username, command.email, command.password)
        result = await result.bind_async(lambda _: self._check_duplicates(command))
        result = await result.map_async(lambda _: self._create_user(command))
        return result.map(self._auth_response).tap(
            lambda _: logger.info("User registered successfully: %s", username)
        )

    async def sign_in(self, command: LoginCommand) -> Result[AuthResponseDto, AppError]:
        """Verify credentials and return a session.

        Flow: validate → find by username → verify password → issue token.
        """
        username = sanitize_log_value(command.username)
        logger.info("SignIn request for username: %s", username)

        result = validate_login(command.username, command.password)
        result = await result.bind_async(lambda _: self._find_user(command.username))
        result = await result.bind_async(
            lambda user: self._verify_password(user, command.password)
        )
        return result.map(self._auth_response).tap(
            lambda _: logger.info("User signed in successfully: %s", username)
        )

    def authenticate(self, token: str | None) -> Result[Principal, AppError]:
        """Resolve a bearer token into the calling principal."""
        if not token:
            return Result.failure(AppError.unauthorized(MISSING_TOKEN_MESSAGE))
        return self._token_service.decode(token)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _check_duplicates(self, command: RegisterCommand) -> Result[Unit, AppError]:
        by_username, by_email = await asyncio.gather(
            self._user_repo.find_by_username(command.username),
            self._user_repo.find_by_email(command.email),
        )
        if by_username is not None:
            return Result.failure(AppError.conflict("Username already exists"))
        if by_email is not None:
            return Result.failure(AppError.conflict("Email already exists"))
        return Result.unit()

    async def _create_user(self, command: RegisterCommand) -> User:
        password_hash = await self._password_hasher.hash(command.password)
        user = User(
            username=command.username,
            email=command.email,
            password_hash=password_hash,
            role=UserRole.USER,
        )
        return await self._user_repo.save(user)

    async def _find_user(self, username: str) -> Result[User, AppError]:
        user = await self._user_repo.find_by_username(username)
        if user is None or user.is_deleted:
            logger.warning(
                "SignIn failed: user not found - %s", sanitize_log_value(username)
            )
            return Result.failure(AppError.unauthorized(INVALID_CREDENTIALS_MESSAGE))
        return Result.success(user)

    async def _verify_password(self, user: User, password: str) -> Result[User, AppError]:
        if not await self._password_hasher.verify(password, user.password_hash):
            logger.warning(
                "SignIn failed: invalid password - %s", sanitize_log_value(user.username)
            )
            return Result.failure(AppError.unauthorized(INVALID_CREDENTIALS_MESSAGE))
        return Result.success(user)

    def _auth_response(self, user: User) -> AuthResponseDto:
        return AuthResponseDto(
            token=self._token_service.issue(user),
            user=to_user_dto(user),
        )
