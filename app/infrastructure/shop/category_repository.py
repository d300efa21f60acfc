"""
Adapter: Category repository.

Implements CategoryRepository port on PostgreSQL.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncEngine

from app.domain.shop.entities import Category
from app.domain.shop.ports import CategoryRepository
from app.infrastructure.shop.database import categories


def _to_category(row: RowMapping) -> Category:
    return Category(
        id=row["id"],
        name=row["name"],
        is_deleted=row["is_deleted"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class CategoryRepositoryAdapter(CategoryRepository):
    """PostgreSQL implementation of the category repository."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def find_all(self) -> list[Category]:
        async with self._engine.connect() as conn:
            result = await conn.execute(select(categories).order_by(categories.c.id))
            return [_to_category(row) for row in result.mappings()]

    async def find_by_id(self, category_id: int) -> Optional[Category]:
        async with self._engine.connect() as conn:
            result = await conn.execute(
                select(categories).where(categories.c.id == category_id)
            )
            row = result.mappings().first()
        return _to_category(row) if row else None

    async def find_by_name(self, name: str) -> Optional[Category]:
        async with self._engine.connect() as conn:
            result = await conn.execute(
                select(categories).where(
                    categories.c.name == name,
                    categories.c.is_deleted.is_(False),
                )
            )
            row = result.mappings().first()
        return _to_category(row) if row else None

    async def save(self, category: Category) -> Category:
        async with self._engine.begin() as conn:
            result = await conn.execute(
                categories.insert()
                .values(
                    name=category.name,
                    is_deleted=category.is_deleted,
                    created_at=category.created_at,
                    updated_at=category.updated_at,
                )
                .returning(categories.c.id)
            )
            category.id = result.scalar_one()
        return category

    async def update(self, category: Category) -> Category:
        async with self._engine.begin() as conn:
            await conn.execute(
                categories.update()
                .where(categories.c.id == category.id)
                .values(
                    name=category.name,
                    is_deleted=category.is_deleted,
                    updated_at=category.updated_at,
                )
            )
        return category
