"""
Explicit entity-to-DTO projections.

One hand-written function per entity/DTO pair, so every exposed field
is visible here and nothing leaks by accident (password hashes, the
soft-delete flag).
"""

from app.application.shop.dtos import (
    CategoryDto,
    OrderDto,
    OrderLineDto,
    ProductDto,
    UserDto,
)
from app.domain.shop.entities import Category, Order, OrderLine, Product, User


def to_category_dto(category: Category) -> CategoryDto:
    return CategoryDto(
        id=category.id,
        name=category.name,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


def to_user_dto(user: User) -> UserDto:
    return UserDto(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role.value,
        created_at=user.created_at,
    )


def to_product_dto(product: Product) -> ProductDto:
    return ProductDto(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        stock=product.stock,
        category_id=product.category_id,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def to_order_line_dto(line: OrderLine) -> OrderLineDto:
    return OrderLineDto(
        product_id=line.product_id,
        quantity=line.quantity,
        unit_price=line.unit_price,
        subtotal=line.subtotal,
    )


def to_order_dto(order: Order) -> OrderDto:
    return OrderDto(
        id=order.id,
        user_id=order.user_id,
        status=order.status.value,
        lines=[to_order_line_dto(line) for line in order.lines],
        total=order.total,
        item_count=order.item_count,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )
