"""
Adapter: Order repository.

Implements OrderRepository port on PostgreSQL. An order and its lines
are written in one transaction; lines are immutable once saved, so
updates only touch the order header.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from app.domain.shop.entities import Order, OrderLine, OrderStatus
from app.domain.shop.ports import OrderRepository
from app.infrastructure.shop.database import order_lines, orders


def _to_order(row: RowMapping, lines: list[OrderLine]) -> Order:
    return Order(
        id=row["id"],
        user_id=row["user_id"],
        lines=lines,
        status=OrderStatus(row["status"]),
        is_deleted=row["is_deleted"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


async def _load_orders(conn: AsyncConnection, *criteria) -> list[Order]:
    """Fetch order headers matching ``criteria`` and attach their lines."""
    result = await conn.execute(select(orders).where(*criteria).order_by(orders.c.id))
    headers = list(result.mappings())
    if not headers:
        return []

    lines_by_order: dict[int, list[OrderLine]] = defaultdict(list)
    line_result = await conn.execute(
        select(order_lines)
        .where(order_lines.c.order_id.in_([h["id"] for h in headers]))
        .order_by(order_lines.c.id)
    )
    for line in line_result.mappings():
        lines_by_order[line["order_id"]].append(
            OrderLine(
                product_id=line["product_id"],
                quantity=line["quantity"],
                unit_price=Decimal(line["unit_price"]),
            )
        )
    return [_to_order(h, lines_by_order[h["id"]]) for h in headers]


class OrderRepositoryAdapter(OrderRepository):
    """PostgreSQL implementation of the order repository."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def find_all(self) -> list[Order]:
        async with self._engine.connect() as conn:
            return await _load_orders(conn)

    async def find_by_id(self, order_id: int) -> Optional[Order]:
        async with self._engine.connect() as conn:
            found = await _load_orders(conn, orders.c.id == order_id)
        return found[0] if found else None

    async def find_by_user_id(self, user_id: int) -> list[Order]:
        async with self._engine.connect() as conn:
            return await _load_orders(conn, orders.c.user_id == user_id)

    async def save(self, order: Order) -> Order:
        async with self._engine.begin() as conn:
            result = await conn.execute(
                orders.insert()
                .values(
                    user_id=order.user_id,
                    status=order.status.value,
                    is_deleted=order.is_deleted,
                    created_at=order.created_at,
                    updated_at=order.updated_at,
                )
                .returning(orders.c.id)
            )
            order.id = result.scalar_one()
            await conn.execute(
                order_lines.insert(),
                [
                    {
                        "order_id": order.id,
                        "product_id": line.product_id,
                        "quantity": line.quantity,
                        "unit_price": line.unit_price,
                    }
                    for line in order.lines
                ],
            )
        return order

    async def update(self, order: Order) -> Order:
        async with self._engine.begin() as conn:
            await conn.execute(
                orders.update()
                .where(orders.c.id == order.id)
                .values(
                    status=order.status.value,
                    is_deleted=order.is_deleted,
                    updated_at=order.updated_at,
                )
            )
        return order
