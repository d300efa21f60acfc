"""
Use cases: category CRUD on the Result path.

Input: CategoryCommand / category id
Output: Result[CategoryDto | list[CategoryDto] | Unit, AppError]
Side effects: Writes through CategoryRepository. Deletes are soft.
Failure cases: Validation (name rules), Conflict (duplicate name),
NotFound (missing or soft-deleted category).

Each operation is a chain of Result steps: validation runs in memory
before any IO, and the first failing step skips every later one, so no
partial write can happen.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from app.application.shop.dtos import CategoryCommand, CategoryDto
from app.application.shop.mappers import to_category_dto
from app.domain.shop.entities import Category
from app.domain.shop.ports import CategoryRepository
from app.domain.shop.validation import validate_category_name
from app.shared.errors.app_error import AppError
from app.shared.logging import sanitize_log_value
from app.shared.result import UNIT, Result, Unit

logger = logging.getLogger(__name__)


class CategoryService:
    """Orchestrates category reads and writes."""

    def __init__(self, repository: CategoryRepository) -> None:
        self._repository = repository

    async def find_all(self) -> Result[list[CategoryDto], AppError]:
        """Return every active category. An empty list is a success."""
        logger.info("Finding all categories")
        categories = await self._repository.find_all()
        return Result.success(
            [to_category_dto(c) for c in categories if not c.is_deleted]
        )

    async def find_by_id(self, category_id: int) -> Result[CategoryDto, AppError]:
        logger.info("Finding category with id: %s", category_id)
        result = await self._find_active(category_id)
        return result.map(to_category_dto)

    async def create(self, command: CategoryCommand) -> Result[CategoryDto, AppError]:
        """Validate, reject duplicates, then persist a new category."""
        logger.info("Creating category: %s", sanitize_log_value(command.name))

        result = validate_category_name(command.name)
        result = await result.bind_async(
            lambda _: self._check_duplicate_name(command.name)
        )
        result = await result.map_async(
            lambda _: self._repository.save(Category(name=command.name))
        )
        return result.tap(
            lambda saved: logger.info("Category created with id: %s", saved.id)
        ).map(to_category_dto)

    async def update(
        self, category_id: int, command: CategoryCommand
    ) -> Result[CategoryDto, AppError]:
        """Validate, find, reject duplicates (except itself), then rename."""
        logger.info("Updating category with id: %s", category_id)

        result = validate_category_name(command.name)
        result = await result.bind_async(lambda _: self._find_active(category_id))
        result = await result.bind_async(
            lambda category: self._ensure_name_available(category, command.name)
        )
        result = await result.map_async(
            lambda category: self._rename(category, command.name)
        )
        return result.tap(
            lambda _: logger.info("Category updated with id: %s", category_id)
        ).map(to_category_dto)

    async def delete(self, category_id: int) -> Result[Unit, AppError]:
        """Soft-delete a category. The row stays in storage."""
        logger.info("Deleting category with id: %s", category_id)

        result = await self._find_active(category_id)
        result = await result.map_async(self._soft_delete)
        return result.tap(
            lambda _: logger.info("Category soft deleted with id: %s", category_id)
        ).map(lambda _: UNIT)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _find_active(self, category_id: int) -> Result[Category, AppError]:
        category = await self._repository.find_by_id(category_id)
        if category is None or category.is_deleted:
            logger.warning("Category with id %s not found", category_id)
            return Result.failure(
                AppError.not_found(f"Category with id {category_id} not found")
            )
        return Result.success(category)

    async def _check_duplicate_name(
        self, name: str, exclude_id: Optional[int] = None
    ) -> Result[Unit, AppError]:
        existing = await self._repository.find_by_name(name)
        if existing is not None and not existing.is_deleted and existing.id != exclude_id:
            logger.warning("Duplicate category name: %s", sanitize_log_value(name))
            return Result.failure(
                AppError.conflict(f"A category named '{name}' already exists")
            )
        return Result.unit()

    async def _ensure_name_available(
        self, category: Category, name: str
    ) -> Result[Category, AppError]:
        check = await self._check_duplicate_name(name, exclude_id=category.id)
        return check.map(lambda _: category)

    async def _rename(self, category: Category, name: str) -> Category:
        category.name = name
        category.updated_at = datetime.now(timezone.utc)
        return await self._repository.update(category)

    async def _soft_delete(self, category: Category) -> Category:
        category.is_deleted = True
        category.updated_at = datetime.now(timezone.utc)
        return await self._repository.update(category)
