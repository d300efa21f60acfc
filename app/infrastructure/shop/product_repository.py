"""
Adapter: Product repository.

Implements ProductRepository port on PostgreSQL.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncEngine

from app.domain.shop.entities import Product
from app.domain.shop.ports import ProductRepository
from app.infrastructure.shop.database import products


def _to_product(row: RowMapping) -> Product:
    return Product(
        id=row["id"],
        name=row["name"],
        description=row["description"] or "",
        price=Decimal(row["price"]),
        stock=row["stock"],
        category_id=row["category_id"],
        is_deleted=row["is_deleted"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class ProductRepositoryAdapter(ProductRepository):
    """PostgreSQL implementation of the product repository."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def find_all(self) -> list[Product]:
        async with self._engine.connect() as conn:
            result = await conn.execute(select(products).order_by(products.c.id))
            return [_to_product(row) for row in result.mappings()]

    async def find_by_id(self, product_id: int) -> Optional[Product]:
        async with self._engine.connect() as conn:
            result = await conn.execute(
                select(products).where(products.c.id == product_id)
            )
            row = result.mappings().first()
        return _to_product(row) if row else None

    async def save(self, product: Product) -> Product:
        async with self._engine.begin() as conn:
            result = await conn.execute(
                products.insert()
                .values(
                    name=product.name,
                    description=product.description,
                    price=product.price,
                    stock=product.stock,
                    category_id=product.category_id,
                    is_deleted=product.is_deleted,
                    created_at=product.created_at,
                    updated_at=product.updated_at,
                )
                .returning(products.c.id)
            )
            product.id = result.scalar_one()
        return product

    async def update(self, product: Product) -> Product:
        async with self._engine.begin() as conn:
            await conn.execute(
                products.update()
                .where(products.c.id == product.id)
                .values(
                    name=product.name,
                    description=product.description,
                    price=product.price,
                    stock=product.stock,
                    category_id=product.category_id,
                    is_deleted=product.is_deleted,
                    updated_at=product.updated_at,
                )
            )
        return product
