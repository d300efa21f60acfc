"""
Tests for ProductService, the raise-and-handle resource family.
"""

from decimal import Decimal

import pytest

from app.application.shop.dtos import ProductCommand
from app.application.shop.product_service import PRODUCTS_CHANNEL, ProductService
from app.domain.shop.entities import Category
from app.domain.shop.errors import (
    CategoryNotFoundError,
    ProductNotFoundError,
    ProductValidationError,
)
from conftest import RecordingNotifier, make_product, seed


@pytest.fixture
def service(product_repo, category_repo, notifier) -> ProductService:
    seed(category_repo, Category(name="Electronics"))
    return ProductService(product_repo, category_repo, notifier)


def _command(**overrides) -> ProductCommand:
    fields = {
        "name": "Laptop",
        "price": Decimal("999.99"),
        "stock": 5,
        "category_id": 1,
    }
    fields.update(overrides)
    return ProductCommand(**fields)


class TestCreateProduct:
    """Tests for ProductService.create."""

    @pytest.mark.asyncio
    async def test_creates_and_notifies(self, service, notifier) -> None:
        dto = await service.create(_command())

        assert dto.id == 1
        assert dto.price == Decimal("999.99")
        channel, event, data, owner_id = notifier.events[0]
        assert (channel, event, owner_id) == (PRODUCTS_CHANNEL, "product_created", None)
        assert data["name"] == "Laptop"

    @pytest.mark.asyncio
    async def test_collects_every_field_error(self, service, product_repo) -> None:
        with pytest.raises(ProductValidationError) as exc_info:
            await service.create(_command(name="TV", price=Decimal("0"), stock=-1))

        assert exc_info.value.errors == [
            "Product name must be at least 3 characters",
            "Price must be greater than 0",
            "Stock cannot be negative",
        ]
        assert product_repo.saves == 0

    @pytest.mark.asyncio
    async def test_unknown_category(self, service) -> None:
        with pytest.raises(CategoryNotFoundError):
            await service.create(_command(category_id=99))

    @pytest.mark.asyncio
    async def test_notifier_failure_does_not_fail_create(
        self, product_repo, category_repo
    ) -> None:
        seed(category_repo, Category(name="Electronics"))
        service = ProductService(product_repo, category_repo, RecordingNotifier(fail=True))

        dto = await service.create(_command())

        assert dto.id == 1


class TestReadUpdateDelete:
    """Tests for the remaining product operations."""

    @pytest.mark.asyncio
    async def test_missing_product_raises(self, service) -> None:
        with pytest.raises(ProductNotFoundError):
            await service.find_by_id(123)

    @pytest.mark.asyncio
    async def test_update_replaces_fields(self, service, product_repo) -> None:
        product = seed(product_repo, make_product())

        dto = await service.update(product.id, _command(name="Gaming Laptop", stock=2))

        assert dto.name == "Gaming Laptop"
        assert product_repo.rows[product.id].stock == 2

    @pytest.mark.asyncio
    async def test_deleted_product_is_hidden(self, service, product_repo, notifier) -> None:
        product = seed(product_repo, make_product())

        await service.delete(product.id)

        assert await service.find_all() == []
        with pytest.raises(ProductNotFoundError):
            await service.find_by_id(product.id)
        assert notifier.events[-1][1] == "product_deleted"
