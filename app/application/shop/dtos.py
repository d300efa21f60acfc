"""
Data Transfer Objects for the shop application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior. Command fields are
optional on purpose: presence and format are checked by the services,
which report problems as Validation failures.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


# ------------------------------------------------------------------
# Categories
# ------------------------------------------------------------------


@dataclass(frozen=True)
class CategoryCommand:
    """Input DTO for creating or renaming a category."""

    name: Optional[str]


@dataclass(frozen=True)
class CategoryDto:
    id: int
    name: str
    created_at: datetime
    updated_at: datetime


# ------------------------------------------------------------------
# Users and authentication
# ------------------------------------------------------------------


@dataclass(frozen=True)
class RegisterCommand:
    """Input DTO for sign-up and admin user creation."""

    username: Optional[str]
    email: Optional[str]
    password: Optional[str]


@dataclass(frozen=True)
class LoginCommand:
    username: Optional[str]
    password: Optional[str]


@dataclass(frozen=True)
class UserUpdateCommand:
    """Input DTO for updating a user. Blank fields are left unchanged."""

    email: Optional[str] = None
    password: Optional[str] = None


@dataclass(frozen=True)
class UserDto:
    """Public view of a user. Never carries the password hash."""

    id: int
    username: str
    email: str
    role: str
    created_at: datetime


@dataclass(frozen=True)
class AuthResponseDto:
    token: str
    user: UserDto


# ------------------------------------------------------------------
# Products
# ------------------------------------------------------------------


@dataclass(frozen=True)
class ProductCommand:
    name: Optional[str]
    price: Optional[Decimal]
    stock: Optional[int]
    category_id: int
    description: str = ""


@dataclass(frozen=True)
class ProductDto:
    id: int
    name: str
    description: str
    price: Decimal
    stock: int
    category_id: int
    created_at: datetime
    updated_at: datetime


# ------------------------------------------------------------------
# Orders
# ------------------------------------------------------------------


@dataclass(frozen=True)
class OrderLineCommand:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class CreateOrderCommand:
    lines: list[OrderLineCommand]


@dataclass(frozen=True)
class OrderLineDto:
    product_id: int
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


@dataclass(frozen=True)
class OrderDto:
    id: int
    user_id: int
    status: str
    lines: list[OrderLineDto]
    total: Decimal
    item_count: int
    created_at: datetime
    updated_at: datetime
