"""
Use cases: product CRUD on the raise-and-handle path.

Input: ProductCommand / product id
Output: ProductDto | list[ProductDto] | None
Side effects: Writes through ProductRepository; pushes ``products``
channel events after each successful write.
Failure cases (raised): ProductValidationError, ProductNotFoundError,
CategoryNotFoundError.

This resource family keeps the exception model on purpose. Its errors
are translated at the edge by ``app.shared.errors.handlers``, never by
the Result projector.
"""

import logging
from datetime import datetime, timezone

from app.application.shop.dtos import ProductCommand, ProductDto
from app.application.shop.mappers import to_product_dto
from app.domain.shop.entities import Product
from app.domain.shop.errors import (
    CategoryNotFoundError,
    ProductNotFoundError,
    ProductValidationError,
)
from app.domain.shop.ports import (
    CategoryRepository,
    NotificationPort,
    ProductRepository,
)
from app.domain.shop.validation import collect_product_errors
from app.shared.logging import sanitize_log_value

logger = logging.getLogger(__name__)

PRODUCTS_CHANNEL = "products"


class ProductService:
    """Orchestrates product reads and writes."""

    def __init__(
        self,
        product_repo: ProductRepository,
        category_repo: CategoryRepository,
        notifier: NotificationPort,
    ) -> None:
        self._product_repo = product_repo
        self._category_repo = category_repo
        self._notifier = notifier

    async def find_all(self) -> list[ProductDto]:
        logger.info("Finding all products")
        products = await self._product_repo.find_all()
        return [to_product_dto(p) for p in products if not p.is_deleted]

    async def find_by_id(self, product_id: int) -> ProductDto:
        """Return one product.

        Raises:
            ProductNotFoundError: If the product is missing or deleted.
        """
        return to_product_dto(await self._get_active(product_id))

    async def create(self, command: ProductCommand) -> ProductDto:
        """Validate and persist a new product.

        Raises:
            ProductValidationError: If any field rule is broken.
            CategoryNotFoundError: If the category does not exist.
        """
        logger.info("Creating product: %s", sanitize_log_value(command.name))
        self._validate(command)
        await self._ensure_category(command.category_id)

        saved = await self._product_repo.save(
            Product(
                name=command.name,
                description=command.description,
                price=command.price,
                stock=command.stock,
                category_id=command.category_id,
            )
        )
        logger.info("Product created with id: %s", saved.id)
        dto = to_product_dto(saved)
        await self._publish("product_created", dto)
        return dto

    async def update(self, product_id: int, command: ProductCommand) -> ProductDto:
        """Replace the editable fields of a product.

        Raises:
            ProductValidationError: If any field rule is broken.
            ProductNotFoundError: If the product is missing or deleted.
            CategoryNotFoundError: If the new category does not exist.
        """
        logger.info("Updating product with id: %s", product_id)
        self._validate(command)
        product = await self._get_active(product_id)
        await self._ensure_category(command.category_id)

        product.name = command.name
        product.description = command.description
        product.price = command.price
        product.stock = command.stock
        product.category_id = command.category_id
        product.updated_at = datetime.now(timezone.utc)

        dto = to_product_dto(await self._product_repo.update(product))
        await self._publish("product_updated", dto)
        return dto

    async def delete(self, product_id: int) -> None:
        """Soft-delete a product.

        Raises:
            ProductNotFoundError: If the product is missing or deleted.
        """
        logger.info("Deleting product with id: %s", product_id)
        product = await self._get_active(product_id)
        product.is_deleted = True
        product.updated_at = datetime.now(timezone.utc)
        await self._product_repo.update(product)
        await self._publish("product_deleted", {"id": product_id})

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(command: ProductCommand) -> None:
        errors = collect_product_errors(command.name, command.price, command.stock)
        if errors:
            raise ProductValidationError(errors)

    async def _get_active(self, product_id: int) -> Product:
        product = await self._product_repo.find_by_id(product_id)
        if product is None or product.is_deleted:
            raise ProductNotFoundError(product_id)
        return product

    async def _ensure_category(self, category_id: int) -> None:
        category = await self._category_repo.find_by_id(category_id)
        if category is None or category.is_deleted:
            raise CategoryNotFoundError(category_id)

    async def _publish(self, event: str, payload) -> None:
        data = payload if isinstance(payload, dict) else _product_event_data(payload)
        try:
            await self._notifier.notify(PRODUCTS_CHANNEL, event, data)
        except Exception:
            logger.exception("Failed to publish %s notification", event)


def _product_event_data(dto: ProductDto) -> dict:
    return {
        "id": dto.id,
        "name": dto.name,
        "price": str(dto.price),
        "stock": dto.stock,
        "category_id": dto.category_id,
    }
