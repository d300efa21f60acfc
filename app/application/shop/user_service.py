"""
Use cases: user CRUD on the Result path.

Input: RegisterCommand / UserUpdateCommand / user id
Output: Result[UserDto | list[UserDto] | Unit, AppError]
Side effects: Writes through UserRepository. Deletes are soft.
Failure cases: Validation, Conflict (username or email taken),
NotFound (missing or soft-deleted user).
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from app.application.shop.dtos import RegisterCommand, UserDto, UserUpdateCommand
from app.application.shop.mappers import to_user_dto
from app.domain.shop.entities import User, UserRole
from app.domain.shop.ports import PasswordHasher, UserRepository
from app.domain.shop.validation import (
    check_email,
    validate_password,
    validate_registration,
)
from app.shared.errors.app_error import AppError
from app.shared.logging import sanitize_log_value
from app.shared.result import UNIT, Result, Unit

logger = logging.getLogger(__name__)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class UserService:
    """Orchestrates user reads and writes."""

    def __init__(self, user_repo: UserRepository, password_hasher: PasswordHasher) -> None:
        self._user_repo = user_repo
        self._password_hasher = password_hasher

    async def find_all(self) -> Result[list[UserDto], AppError]:
        """Return active users. Never fails."""
        logger.info("Finding all users")
        users = await self._user_repo.find_all()
        return Result.success([to_user_dto(u) for u in users if not u.is_deleted])

    async def find_by_id(self, user_id: int) -> Result[UserDto, AppError]:
        logger.info("Finding user with id: %s", user_id)
        result = await self._find_active(user_id)
        return result.map(to_user_dto)

    async def create(self, command: RegisterCommand) -> Result[UserDto, AppError]:
        logger.info("Creating user: %s", sanitize_log_value(command.username))

        result = validate_registration(command.username, command.email, command.password)
        result = await result.bind_async(
            lambda _: self._check_duplicates(command.username, command.email)
        )
        result = await result.map_async(lambda _: self._create_user(command))
        return result.tap(
            lambda saved: logger.info("User created with id: %s", saved.id)
        ).map(to_user_dto)

    async def update(
        self, user_id: int, command: UserUpdateCommand
    ) -> Result[UserDto, AppError]:
        """Change email and/or password. Blank fields are left unchanged."""
        logger.info("Updating user with id: %s", user_id)

        result = self._validate_update(command)
        result = await result.bind_async(lambda _: self._find_active(user_id))
        result = await result.bind_async(
            lambda user: self._ensure_email_available(user, command.email)
        )
        result = await result.map_async(lambda user: self._apply_update(user, command))
        return result.tap(
            lambda _: logger.info("User updated with id: %s", user_id)
        ).map(to_user_dto)

    async def delete(self, user_id: int) -> Result[Unit, AppError]:
        logger.info("Deleting user with id: %s", user_id)

        result = await self._find_active(user_id)
        result = await result.map_async(self._soft_delete)
        return result.tap(
            lambda _: logger.info("User soft deleted with id: %s", user_id)
        ).map(lambda _: UNIT)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_update(command: UserUpdateCommand) -> Result[Unit, AppError]:
        result: Result[Unit, AppError] = Result.unit()
        if not _is_blank(command.email):
            result = result.bind(lambda _: check_email(command.email))
        if not _is_blank(command.password):
            result = result.bind(lambda _: validate_password(command.password))
        return result

    async def _find_active(self, user_id: int) -> Result[User, AppError]:
        user = await self._user_repo.find_by_id(user_id)
        if user is None or user.is_deleted:
            logger.warning("User with id %s not found", user_id)
            return Result.failure(AppError.not_found(f"User with id {user_id} not found"))
        return Result.success(user)

    async def _check_duplicates(
        self,
        username: Optional[str],
        email: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> Result[Unit, AppError]:
        if not _is_blank(username):
            existing = await self._user_repo.find_by_username(username)
            if existing is not None and existing.id != exclude_id:
                return Result.failure(AppError.conflict("Username already exists"))
        if not _is_blank(email):
            existing = await self._user_repo.find_by_email(email)
            if existing is not None and existing.id != exclude_id:
                return Result.failure(AppError.conflict("Email already exists"))
        return Result.unit()

    async def _ensure_email_available(
        self, user: User, email: Optional[str]
    ) -> Result[User, AppError]:
        if _is_blank(email) or email == user.email:
            return Result.success(user)
        check = await self._check_duplicates(None, email, exclude_id=user.id)
        return check.map(lambda _: user)

    async def _create_user(self, command: RegisterCommand) -> User:
        password_hash = await self._password_hasher.hash(command.password)
        user = User(
            username=command.username,
            email=command.email,
            password_hash=password_hash,
            role=UserRole.USER,
        )
        return await self._user_repo.save(user)

    async def _apply_update(self, user: User, command: UserUpdateCommand) -> User:
        if not _is_blank(command.email):
            user.email = command.email
        if not _is_blank(command.password):
            user.password_hash = await self._password_hasher.hash(command.password)
        user.updated_at = datetime.now(timezone.utc)
        return await self._user_repo.update(user)

    async def _soft_delete(self, user: User) -> User:
        user.is_deleted = True
        user.updated_at = datetime.now(timezone.utc)
        return await self._user_repo.update(user)
