"""
Pydantic schemas for the shop API request/response contract.

Request fields are typed but left optional: presence, length and format
rules belong to the services, which report them as Validation failures
with readable messages. Pydantic only rejects values of the wrong type.
No business logic belongs here.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error body returned for every rejected request."""

    message: str
    errors: Optional[list[str]] = None


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str


class NotificationHealthResponse(BaseModel):
    status: str
    websocket: dict[str, int]
    email: dict[str, int]


# ------------------------------------------------------------------
# Categories
# ------------------------------------------------------------------


class CategoryRequest(BaseModel):
    name: Optional[str] = Field(None, description="Category name (3-100 characters)")


class CategoryResponse(BaseModel):
    id: int
    name: str
    created_at: datetime
    updated_at: datetime


# ------------------------------------------------------------------
# Users and authentication
# ------------------------------------------------------------------


class SignUpRequest(BaseModel):
    """Request schema for sign-up and admin user creation.

    Attributes:
        username: At least 3 characters.
        email: A syntactically valid address.
        password: At least 6 characters.
    """

    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class SignInRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UserUpdateRequest(BaseModel):
    """Only email and password can change. Omitted fields stay as they are."""

    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str
    created_at: datetime


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


# ------------------------------------------------------------------
# Products
# ------------------------------------------------------------------


class ProductRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, description="Unit price, greater than 0")
    stock: Optional[int] = Field(None, description="Units in stock, 0 or more")
    category_id: int


class ProductResponse(BaseModel):
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


class OrderLineRequest(BaseModel):
    product_id: int
    quantity: int


class CreateOrderRequest(BaseModel):
    lines: list[OrderLineRequest] = Field(default_factory=list)


class OrderStatusRequest(BaseModel):
    status: Optional[str] = Field(
        None, description="PENDING, PROCESSING, SHIPPED, DELIVERED or CANCELLED"
    )


class OrderLineResponse(BaseModel):
    product_id: int
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class OrderResponse(BaseModel):
    id: int
    user_id: int
    status: str
    lines: list[OrderLineResponse]
    total: Decimal
    item_count: int
    created_at: datetime
    updated_at: datetime
