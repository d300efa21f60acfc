"""
Adapter: User repository.

Implements UserRepository port on PostgreSQL. Username and email
lookups include soft-deleted rows, since both columns stay unique
in storage.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncEngine

from app.domain.shop.entities import User, UserRole
from app.domain.shop.ports import UserRepository
from app.infrastructure.shop.database import users


def _to_user(row: RowMapping) -> User:
    return User(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=UserRole(row["role"]),
        is_deleted=row["is_deleted"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class UserRepositoryAdapter(UserRepository):
    """PostgreSQL implementation of the user repository."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def _find_one(self, *criteria) -> Optional[User]:
        async with self._engine.connect() as conn:
            result = await conn.execute(select(users).where(*criteria))
            row = result.mappings().first()
        return _to_user(row) if row else None

    async def find_all(self) -> list[User]:
        async with self._engine.connect() as conn:
            result = await conn.execute(select(users).order_by(users.c.id))
            return [_to_user(row) for row in result.mappings()]

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await self._find_one(users.c.id == user_id)

    async def find_by_username(self, username: str) -> Optional[User]:
        return await self._find_one(users.c.username == username)

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self._find_one(users.c.email == email)

    async def save(self, user: User) -> User:
        async with self._engine.begin() as conn:
            result = await conn.execute(
                users.insert()
                .values(
                    username=user.username,
                    email=user.email,
                    password_hash=user.password_hash,
                    role=user.role.value,
                    is_deleted=user.is_deleted,
                    created_at=user.created_at,
                    updated_at=user.updated_at,
                )
                .returning(users.c.id)
            )
            user.id = result.scalar_one()
        return user

    async def update(self, user: User) -> User:
        async with self._engine.begin() as conn:
            await conn.execute(
                users.update()
                .where(users.c.id == user.id)
                .values(
                    email=user.email,
                    password_hash=user.password_hash,
                    role=user.role.value,
                    is_deleted=user.is_deleted,
                    updated_at=user.updated_at,
                )
            )
        return user
