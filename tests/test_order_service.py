"""
Tests for OrderService.

Covers placement (validation, stock, notifications), access control,
status transitions and stock restoration on cancel.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.application.shop.dtos import CreateOrderCommand, OrderLineCommand
from app.application.shop.order_service import ORDERS_CHANNEL, OrderService
from app.domain.shop.entities import OrderStatus, Principal, UserRole
from app.shared.errors.app_error import ErrorType
from conftest import (
    RecordingEmailQueue,
    RecordingNotifier,
    make_product,
    make_user,
    seed,
)


@pytest.fixture
def service(order_repo, product_repo, user_repo, notifier, email_queue) -> OrderService:
    return OrderService(order_repo, product_repo, user_repo, notifier, email_queue)


def _order(*lines: tuple[int, int]) -> CreateOrderCommand:
    return CreateOrderCommand(
        lines=[OrderLineCommand(product_id=p, quantity=q) for p, q in lines]
    )


class TestCreateOrder:
    """Tests for OrderService.create."""

    @pytest.mark.asyncio
    async def test_places_order_and_decrements_stock(
        self, service, user_repo, product_repo, order_repo
    ) -> None:
        user = seed(user_repo, make_user())
        laptop = seed(product_repo, make_product("Laptop", "1000.00", stock=5))
        mouse = seed(product_repo, make_product("Mouse", "25.50", stock=10))

        result = await service.create(user.id, _order((laptop.id, 2), (mouse.id, 3)))

        dto = result.value
        assert dto.status == "PENDING"
        assert dto.total == Decimal("2076.50")
        assert dto.item_count == 5
        assert product_repo.rows[laptop.id].stock == 3
        assert product_repo.rows[mouse.id].stock == 7
        assert order_repo.saves == 1

    @pytest.mark.asyncio
    async def test_notifies_owner_and_queues_email(
        self, service, user_repo, product_repo, notifier, email_queue
    ) -> None:
        user = seed(user_repo, make_user("alice"))
        product = seed(product_repo, make_product())

        result = await service.create(user.id, _order((product.id, 1)))

        channel, event, data, owner_id = notifier.events[0]
        assert (channel, event, owner_id) == (ORDERS_CHANNEL, "order_created", user.id)
        assert data["id"] == result.value.id
        assert email_queue.messages[0].to == "alice@shop.com"
        assert f"#{result.value.id}" in email_queue.messages[0].subject

    @pytest.mark.asyncio
    async def test_collects_line_errors(self, service, order_repo) -> None:
        result = await service.create(1, _order((1, 0), (1, 2), (2, -1)))

        assert result.error.type is ErrorType.VALIDATION
        assert result.error.validation_errors == (
            "lines[0].quantity must be greater than 0",
            "lines[1].product_id 1 is repeated",
            "lines[2].quantity must be greater than 0",
        )
        assert order_repo.saves == 0

    @pytest.mark.asyncio
    async def test_empty_order_rejected(self, service) -> None:
        result = await service.create(1, CreateOrderCommand(lines=[]))
        assert result.error.type is ErrorType.VALIDATION

    @pytest.mark.asyncio
    async def test_unknown_user(self, service, product_repo) -> None:
        product = seed(product_repo, make_product())
        result = await service.create(404, _order((product.id, 1)))
        assert result.error.type is ErrorType.NOT_FOUND

    @pytest.mark.asyncio
    async def test_unknown_product(self, service, user_repo) -> None:
        user = seed(user_repo, make_user())
        result = await service.create(user.id, _order((77, 1)))

        assert result.error.type is ErrorType.NOT_FOUND
        assert "77" in result.error.message

    @pytest.mark.asyncio
    async def test_insufficient_stock_changes_nothing(
        self, service, user_repo, product_repo, order_repo, notifier, email_queue
    ) -> None:
        user = seed(user_repo, make_user())
        plenty = seed(product_repo, make_product("Mouse", stock=10))
        scarce = seed(product_repo, make_product("Laptop", stock=1))

        result = await service.create(user.id, _order((plenty.id, 2), (scarce.id, 2)))

        assert result.error.type is ErrorType.BUSINESS_RULE
        assert "Laptop" in result.error.message
        assert product_repo.rows[plenty.id].stock == 10
        assert product_repo.updates == 0
        assert order_repo.saves == 0
        assert notifier.events == []
        assert email_queue.messages == []

    @pytest.mark.asyncio
    async def test_side_effect_failures_keep_success(
        self, order_repo, product_repo, user_repo
    ) -> None:
        service = OrderService(
            order_repo,
            product_repo,
            user_repo,
            RecordingNotifier(fail=True),
            RecordingEmailQueue(accept=False),
        )
        user = seed(user_repo, make_user())
        product = seed(product_repo, make_product())

        result = await service.create(user.id, _order((product.id, 1)))

        assert result.is_success


class TestFindOrder:
    """Tests for order reads and access control."""

    @pytest.mark.asyncio
    async def test_owner_reads_own_order(self, service, user_repo, product_repo) -> None:
        alice = seed(user_repo, make_user("alice"))
        product = seed(product_repo, make_product())
        placed = (await service.create(alice.id, _order((product.id, 1)))).value

        result = await service.find_for_principal(
            placed.id, Principal(alice.id, "alice", UserRole.USER)
        )

        assert result.value.id == placed.id

    @pytest.mark.asyncio
    async def test_other_user_is_forbidden(self, service, user_repo, product_repo) -> None:
        alice = seed(user_repo, make_user("alice"))
        product = seed(product_repo, make_product())
        placed = (await service.create(alice.id, _order((product.id, 1)))).value

        result = await service.find_for_principal(
            placed.id, Principal(alice.id + 1, "bob", UserRole.USER)
        )

        assert result.error.type is ErrorType.FORBIDDEN

    @pytest.mark.asyncio
    async def test_admin_reads_any_order(self, service, user_repo, product_repo) -> None:
        alice = seed(user_repo, make_user("alice"))
        product = seed(product_repo, make_product())
        placed = (await service.create(alice.id, _order((product.id, 1)))).value

        result = await service.find_for_principal(
            placed.id, Principal(999, "root", UserRole.ADMIN)
        )

        assert result.is_success

    @pytest.mark.asyncio
    async def test_missing_order(self, service) -> None:
        result = await service.find_for_principal(5, Principal(1, "alice", UserRole.USER))
        assert result.error.type is ErrorType.NOT_FOUND

    @pytest.mark.asyncio
    async def test_lists_only_own_orders(self, service, user_repo, product_repo) -> None:
        alice = seed(user_repo, make_user("alice"))
        bob = seed(user_repo, make_user("bob"))
        product = seed(product_repo, make_product(stock=10))
        await service.create(alice.id, _order((product.id, 1)))
        await service.create(bob.id, _order((product.id, 1)))

        mine = (await service.find_by_user_id(alice.id)).value
        everyone = (await service.find_all()).value

        assert [o.user_id for o in mine] == [alice.id]
        assert len(everyone) == 2


class TestUpdateStatus:
    """Tests for OrderService.update_status."""

    async def _place(self, service, user_repo, product_repo, stock: int = 5):
        user = seed(user_repo, make_user())
        product = seed(product_repo, make_product(stock=stock))
        placed = (await service.create(user.id, _order((product.id, 2)))).value
        return placed, product

    @pytest.mark.asyncio
    async def test_legal_transition(self, service, user_repo, product_repo, notifier) -> None:
        placed, _ = await self._place(service, user_repo, product_repo)

        result = await service.update_status(placed.id, "processing")

        assert result.value.status == OrderStatus.PROCESSING.value
        assert notifier.events[-1][1] == "order_status_changed"

    @pytest.mark.asyncio
    async def test_illegal_transition(self, service, user_repo, product_repo) -> None:
        placed, _ = await self._place(service, user_repo, product_repo)

        result = await service.update_status(placed.id, "DELIVERED")

        assert result.error.type is ErrorType.BUSINESS_RULE
        assert "PENDING" in result.error.message

    @pytest.mark.asyncio
    async def test_unknown_status(self, service, user_repo, product_repo) -> None:
        placed, _ = await self._place(service, user_repo, product_repo)

        result = await service.update_status(placed.id, "LOST")

        assert result.error.type is ErrorType.VALIDATION

    @pytest.mark.asyncio
    async def test_unknown_status_checked_before_lookup(self, service) -> None:
        result = await service.update_status(12345, "LOST")
        assert result.error.type is ErrorType.VALIDATION

    @pytest.mark.asyncio
    async def test_missing_order(self, service) -> None:
        result = await service.update_status(12345, "SHIPPED")
        assert result.error.type is ErrorType.NOT_FOUND

    @pytest.mark.asyncio
    async def test_cancel_restores_stock(
        self, service, user_repo, product_repo, email_queue
    ) -> None:
        placed, product = await self._place(service, user_repo, product_repo, stock=5)
        assert product_repo.rows[product.id].stock == 3

        result = await service.update_status(placed.id, "CANCELLED")

        assert result.value.status == "CANCELLED"
        assert product_repo.rows[product.id].stock == 5
        assert "CANCELLED" in email_queue.messages[-1].subject

    @pytest.mark.asyncio
    async def test_cancel_touches_restocked_products(
        self, service, user_repo, product_repo
    ) -> None:
        placed, product = await self._place(service, user_repo, product_repo)
        stale = datetime(2000, 1, 1, tzinfo=timezone.utc)
        product_repo.rows[product.id].updated_at = stale

        await service.update_status(placed.id, "CANCELLED")

        assert product_repo.rows[product.id].updated_at > stale

    @pytest.mark.asyncio
    async def test_cancelled_order_is_final(self, service, user_repo, product_repo) -> None:
        placed, _ = await self._place(service, user_repo, product_repo)
        await service.update_status(placed.id, "CANCELLED")

        result = await service.update_status(placed.id, "PROCESSING")

        assert result.error.type is ErrorType.BUSINESS_RULE
