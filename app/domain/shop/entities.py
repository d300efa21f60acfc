"""
Domain entities for the shop bounded context.

Entities represent core business objects with identity and lifecycle.
They are owned and mutated exclusively through their services and are
never returned across the interface boundary (see application mappers).
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(Enum):
    """Authorization role of a user."""

    USER = "USER"
    ADMIN = "ADMIN"


class OrderStatus(Enum):
    """Lifecycle state of an order."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    def can_transition_to(self, target: "OrderStatus") -> bool:
        return target in _ORDER_TRANSITIONS[self]


_ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


@dataclass
class User:
    """A registered account."""

    username: str
    email: str
    password_hash: str
    role: UserRole = UserRole.USER
    id: Optional[int] = None
    is_deleted: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Category:
    """A product category. Its name is unique among active categories."""

    name: str
    id: Optional[int] = None
    is_deleted: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Product:
    """A sellable item with stock."""

    name: str
    price: Decimal
    stock: int
    category_id: int
    description: str = ""
    id: Optional[int] = None
    is_deleted: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class OrderLine:
    """A product quantity at the unit price captured when ordering."""

    product_id: int
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class Order:
    """A customer order."""

    user_id: int
    lines: list[OrderLine]
    status: OrderStatus = OrderStatus.PENDING
    id: Optional[int] = None
    is_deleted: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as read from a session token."""

    user_id: int
    username: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN


@dataclass(frozen=True)
class EmailMessage:
    """An outbound e-mail handed to the e-mail queue."""

    to: str
    subject: str
    body: str
