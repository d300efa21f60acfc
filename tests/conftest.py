"""
Shared fixtures for the shop test suite.

Repositories are replaced by in-memory fakes that honour the port
contracts. Notification and e-mail ports are replaced by recorders.
"""

from decimal import Decimal
from typing import Any, Optional

import pytest

from app.domain.shop.entities import (
    Category,
    EmailMessage,
    Order,
    Product,
    User,
    UserRole,
)
from app.domain.shop.ports import (
    CategoryRepository,
    EmailQueuePort,
    NotificationPort,
    OrderRepository,
    PasswordHasher,
    ProductRepository,
    UserRepository,
)
from app.infrastructure.shop.security import JwtTokenService

TEST_JWT_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


class _InMemoryRepository:
    """Dict-backed storage with sequential ids."""

    def __init__(self) -> None:
        self.rows: dict[int, Any] = {}
        self._next_id = 1
        self.saves = 0
        self.updates = 0

    async def find_all(self) -> list:
        return list(self.rows.values())

    async def find_by_id(self, entity_id: int):
        return self.rows.get(entity_id)

    async def save(self, entity):
        entity.id = self._next_id
        self._next_id += 1
        self.rows[entity.id] = entity
        self.saves += 1
        return entity

    async def update(self, entity):
        self.rows[entity.id] = entity
        self.updates += 1
        return entity


class InMemoryCategoryRepository(_InMemoryRepository, CategoryRepository):
    async def find_by_name(self, name: str) -> Optional[Category]:
        return next(
            (c for c in self.rows.values() if c.name == name and not c.is_deleted),
            None,
        )


class InMemoryUserRepository(_InMemoryRepository, UserRepository):
    async def find_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.rows.values() if u.username == username), None)

    async def find_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.rows.values() if u.email == email), None)


class InMemoryProductRepository(_InMemoryRepository, ProductRepository):
    pass


class InMemoryOrderRepository(_InMemoryRepository, OrderRepository):
    async def find_by_user_id(self, user_id: int) -> list[Order]:
        return [o for o in self.rows.values() if o.user_id == user_id]


class PlainPasswordHasher(PasswordHasher):
    """Reversible stand-in for bcrypt, fast enough for unit tests."""

    async def hash(self, password: str) -> str:
        return f"hashed:{password}"

    async def verify(self, password: str, password_hash: str) -> bool:
        return password_hash == f"hashed:{password}"


class RecordingNotifier(NotificationPort):
    def __init__(self, fail: bool = False) -> None:
        self.events: list[tuple[str, str, dict, Optional[int]]] = []
        self.fail = fail

    async def notify(self, channel, event, data, owner_id=None) -> int:
        if self.fail:
            raise ConnectionError("notifier offline")
        self.events.append((channel, event, data, owner_id))
        return 1


class RecordingEmailQueue(EmailQueuePort):
    def __init__(self, accept: bool = True) -> None:
        self.messages: list[EmailMessage] = []
        self.accept = accept

    def enqueue(self, message: EmailMessage) -> bool:
        if not self.accept:
            return False
        self.messages.append(message)
        return True


# ------------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------------


@pytest.fixture
def category_repo() -> InMemoryCategoryRepository:
    return InMemoryCategoryRepository()


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def product_repo() -> InMemoryProductRepository:
    return InMemoryProductRepository()


@pytest.fixture
def order_repo() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def hasher() -> PlainPasswordHasher:
    return PlainPasswordHasher()


@pytest.fixture
def token_service() -> JwtTokenService:
    return JwtTokenService(
        secret=TEST_JWT_SECRET,
        issuer="storefront-test",
        audience="storefront-test",
        expire_minutes=5,
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def email_queue() -> RecordingEmailQueue:
    return RecordingEmailQueue()


# ------------------------------------------------------------------
# Seed helpers (synchronous: write straight into the fake storage)
# ------------------------------------------------------------------


def seed(repo: _InMemoryRepository, entity):
    entity.id = repo._next_id
    repo._next_id += 1
    repo.rows[entity.id] = entity
    return entity


def make_user(
    username: str = "alice",
    email: Optional[str] = None,
    password: str = "secret1",
    role: UserRole = UserRole.USER,
) -> User:
    return User(
        username=username,
        email=email or f"{username}@shop.com",
        password_hash=f"hashed:{password}",
        role=role,
    )


def make_product(
    name: str = "Laptop",
    price: str = "999.99",
    stock: int = 10,
    category_id: int = 1,
) -> Product:
    return Product(name=name, price=Decimal(price), stock=stock, category_id=category_id)
