"""
Port interfaces (ABCs) for the shop bounded context.

Ports define the contracts that services require from the outside world.
Infrastructure adapters implement these interfaces.
All IO ports are asynchronous. Repository methods may raise lower-level
faults (lost connection, driver errors); services do not catch them.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from app.domain.shop.entities import (
    Category,
    EmailMessage,
    Order,
    Principal,
    Product,
    User,
)
from app.shared.errors.app_error import AppError
from app.shared.result import Result


class CategoryRepository(ABC):
    """Port for persisting and retrieving categories."""

    @abstractmethod
    async def find_all(self) -> list[Category]:
        """Return every stored category, soft-deleted ones included."""
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, category_id: int) -> Optional[Category]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_name(self, name: str) -> Optional[Category]:
        """Return the active category with this exact name, or None."""
        raise NotImplementedError

    @abstractmethod
    async def save(self, category: Category) -> Category:
        """Insert a category and return it with its assigned id."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, category: Category) -> Category:
        raise NotImplementedError


class UserRepository(ABC):
    """Port for persisting and retrieving users."""

    @abstractmethod
    async def find_all(self) -> list[User]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def save(self, user: User) -> User:
        raise NotImplementedError

    @abstractmethod
    async def update(self, user: User) -> User:
        raise NotImplementedError


class ProductRepository(ABC):
    """Port for persisting and retrieving products."""

    @abstractmethod
    async def find_all(self) -> list[Product]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, product_id: int) -> Optional[Product]:
        raise NotImplementedError

    @abstractmethod
    async def save(self, product: Product) -> Product:
        raise NotImplementedError

    @abstractmethod
    async def update(self, product: Product) -> Product:
        raise NotImplementedError


class OrderRepository(ABC):
    """Port for persisting and retrieving orders with their lines."""

    @abstractmethod
    async def find_all(self) -> list[Order]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, order_id: int) -> Optional[Order]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_user_id(self, user_id: int) -> list[Order]:
        raise NotImplementedError

    @abstractmethod
    async def save(self, order: Order) -> Order:
        raise NotImplementedError

    @abstractmethod
    async def update(self, order: Order) -> Order:
        raise NotImplementedError


class PasswordHasher(ABC):
    """Port for one-way, salted password hashing."""

    @abstractmethod
    async def hash(self, password: str) -> str:
        raise NotImplementedError

    @abstractmethod
    async def verify(self, password: str, password_hash: str) -> bool:
        raise NotImplementedError


class TokenService(ABC):
    """Port for issuing and reading signed session tokens."""

    @abstractmethod
    def issue(self, user: User) -> str:
        raise NotImplementedError

    @abstractmethod
    def decode(self, token: str) -> Result[Principal, AppError]:
        """Return the token's principal, or an Unauthorized failure."""
        raise NotImplementedError


class NotificationPort(ABC):
    """Port for pushing change events to subscribed clients."""

    @abstractmethod
    async def notify(
        self,
        channel: str,
        event: str,
        data: dict[str, Any],
        owner_id: Optional[int] = None,
    ) -> int:
        """Deliver an event and return the number of recipients.

        Args:
            channel: Subscription channel (``products``, ``orders``).
            event: Event name, e.g. ``order_created``.
            data: JSON-serializable payload.
            owner_id: When set, only that user and admins receive it.
        """
        raise NotImplementedError


class EmailQueuePort(ABC):
    """Port for handing e-mails to the background sender."""

    @abstractmethod
    def enqueue(self, message: EmailMessage) -> bool:
        """Queue a message without waiting. Returns False when dropped."""
        raise NotImplementedError
