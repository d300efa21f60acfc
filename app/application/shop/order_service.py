"""
Use cases: order placement, lookup and status changes on the Result path.

Input: CreateOrderCommand / order id / status name / Principal
Output: Result[OrderDto | list[OrderDto], AppError]
Side effects: Adjusts product stock, persists orders, then pushes an
``orders`` channel event and queues a customer e-mail.
Failure cases: Validation (line rules, unknown status), NotFound (user,
product or order), BusinessRule (stock, illegal status transition),
Forbidden (reading another customer's order).

Notifications run only once the Result is already a success. They are
fire-and-forget: a failing notifier or a full e-mail queue is logged
and never changes the returned Result.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from app.application.shop.dtos import CreateOrderCommand, OrderDto
from app.application.shop.mappers import to_order_dto
from app.domain.shop.entities import (
    EmailMessage,
    Order,
    OrderLine,
    OrderStatus,
    Principal,
    Product,
    User,
)
from app.domain.shop.ports import (
    EmailQueuePort,
    NotificationPort,
    OrderRepository,
    ProductRepository,
    UserRepository,
)
from app.shared.errors.app_error import AppError
from app.shared.result import Result, Unit

logger = logging.getLogger(__name__)

ORDERS_CHANNEL = "orders"


@dataclass
class _OrderDraft:
    """An order with the customer and products it was built from."""

    customer: User
    order: Order
    products: list[Product]


class OrderService:
    """Orchestrates the order lifecycle."""

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        user_repo: UserRepository,
        notifier: NotificationPort,
        email_queue: EmailQueuePort,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._user_repo = user_repo
        self._notifier = notifier
        self._email_queue = email_queue

    async def create(
        self, user_id: int, command: CreateOrderCommand
    ) -> Result[OrderDto, AppError]:
        """Place an order for a customer.

        Flow: validate lines → find customer → load products and check
        stock → decrement stock and save → notify.
        """
        logger.info("Creating order for user: %s", user_id)

        result = self._validate_lines(command)
        result = await result.bind_async(lambda _: self._find_customer(user_id))
        result = await result.bind_async(
            lambda customer: self._draft(customer, command)
        )
        result = await result.map_async(self._place)
        result = await result.tap_async(self._announce_created)
        return result.map(lambda draft: to_order_dto(draft.order))

    async def find_all(self) -> Result[list[OrderDto], AppError]:
        logger.info("Finding all orders")
        orders = await self._order_repo.find_all()
        return Result.success([to_order_dto(o) for o in orders if not o.is_deleted])

    async def find_by_user_id(self, user_id: int) -> Result[list[OrderDto], AppError]:
        logger.info("Finding orders for user: %s", user_id)
        orders = await self._order_repo.find_by_user_id(user_id)
        return Result.success([to_order_dto(o) for o in orders if not o.is_deleted])

    async def find_for_principal(
        self, order_id: int, principal: Principal
    ) -> Result[OrderDto, AppError]:
        """Return an order its owner or an admin may read."""
        logger.info("Finding order %s for user %s", order_id, principal.user_id)
        result = await self._find_active(order_id)
        return result.bind(lambda order: self._authorize(order, principal)).map(
            to_order_dto
        )

    async def update_status(
        self, order_id: int, status: Optional[str]
    ) -> Result[OrderDto, AppError]:
        """Move an order to a new status. Cancelling restores stock."""
        logger.info("Updating status of order %s to %s", order_id, status)

        result = self._parse_status(status)
        result = await result.bind_async(
            lambda target: self._transition(order_id, target)
        )
        result = await result.tap_async(self._announce_status_change)
        return result.map(to_order_dto)

    # ------------------------------------------------------------------
    # Validation and lookups
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_lines(command: CreateOrderCommand) -> Result[Unit, AppError]:
        errors: list[str] = []
        if not command.lines:
            errors.append("An order must contain at least one line")
        seen: set[int] = set()
        for index, line in enumerate(command.lines):
            if line.quantity <= 0:
                errors.append(f"lines[{index}].quantity must be greater than 0")
            if line.product_id in seen:
                errors.append(
                    f"lines[{index}].product_id {line.product_id} is repeated"
                )
            seen.add(line.product_id)
        if errors:
            return Result.failure(AppError.validation("Invalid order data", errors))
        return Result.unit()

    @staticmethod
    def _parse_status(status: Optional[str]) -> Result[OrderStatus, AppError]:
        try:
            return Result.success(OrderStatus((status or "").strip().upper()))
        except ValueError:
            allowed = ", ".join(s.value for s in OrderStatus)
            return Result.failure(
                AppError.validation(
                    f"Unknown order status '{status}'. Allowed values: {allowed}"
                )
            )

    async def _find_customer(self, user_id: int) -> Result[User, AppError]:
        user = await self._user_repo.find_by_id(user_id)
        if user is None or user.is_deleted:
            return Result.failure(AppError.not_found(f"User with id {user_id} not found"))
        return Result.success(user)

    async def _find_active(self, order_id: int) -> Result[Order, AppError]:
        order = await self._order_repo.find_by_id(order_id)
        if order is None or order.is_deleted:
            logger.warning("Order with id %s not found", order_id)
            return Result.failure(AppError.not_found(f"Order with id {order_id} not found"))
        return Result.success(order)

    @staticmethod
    def _authorize(order: Order, principal: Principal) -> Result[Order, AppError]:
        if order.user_id != principal.user_id and not principal.is_admin:
            logger.warning(
                "User %s attempted to read order %s owned by user %s",
                principal.user_id,
                order.id,
                order.user_id,
            )
            return Result.failure(
                AppError.forbidden("You are not allowed to access this order")
            )
        return Result.success(order)

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    async def _draft(
        self, customer: User, command: CreateOrderCommand
    ) -> Result[_OrderDraft, AppError]:
        product_ids = [line.product_id for line in command.lines]
        products = await asyncio.gather(
            *(self._product_repo.find_by_id(pid) for pid in product_ids)
        )

        for product_id, product in zip(product_ids, products):
            if product is None or product.is_deleted:
                return Result.failure(
                    AppError.not_found(f"Product with id {product_id} not found")
                )

        for line, product in zip(command.lines, products):
            if product.stock < line.quantity:
                return Result.failure(
                    AppError.business_rule(
                        f"Insufficient stock for product '{product.name}': "
                        f"requested {line.quantity}, available {product.stock}"
                    )
                )

        order = Order(
            user_id=customer.id,
            lines=[
                OrderLine(
                    product_id=product.id,
                    quantity=line.quantity,
                    unit_price=product.price,
                )
                for line, product in zip(command.lines, products)
            ],
        )
        return Result.success(_OrderDraft(customer, order, list(products)))

    async def _place(self, draft: _OrderDraft) -> _OrderDraft:
        now = datetime.now(timezone.utc)
        for line, product in zip(draft.order.lines, draft.products):
            product.stock -= line.quantity
            product.updated_at = now
        await asyncio.gather(*(self._product_repo.update(p) for p in draft.products))
        draft.order = await self._order_repo.save(draft.order)
        logger.info("Order created with id: %s", draft.order.id)
        return draft

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    async def _transition(
        self, order_id: int, target: OrderStatus
    ) -> Result[Order, AppError]:
        found = await self._find_active(order_id)
        checked = found.bind(lambda order: self._check_transition(order, target))
        return await checked.map_async(lambda order: self._apply_status(order, target))

    @staticmethod
    def _check_transition(order: Order, target: OrderStatus) -> Result[Order, AppError]:
        if not order.status.can_transition_to(target):
            return Result.failure(
                AppError.business_rule(
                    f"Cannot change order status from {order.status.value} "
                    f"to {target.value}"
                )
            )
        return Result.success(order)

    async def _apply_status(self, order: Order, target: OrderStatus) -> Order:
        if target is OrderStatus.CANCELLED:
            await self._restore_stock(order)
        order.status = target
        order.updated_at = datetime.now(timezone.utc)
        return await self._order_repo.update(order)

    async def _restore_stock(self, order: Order) -> None:
        now = datetime.now(timezone.utc)
        products = await asyncio.gather(
            *(self._product_repo.find_by_id(line.product_id) for line in order.lines)
        )
        restocked = []
        for line, product in zip(order.lines, products):
            if product is None:
                continue
            product.stock += line.quantity
            product.updated_at = now
            restocked.append(product)
        await asyncio.gather(*(self._product_repo.update(p) for p in restocked))

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def _announce_created(self, draft: _OrderDraft) -> None:
        order = draft.order
        await self._publish("order_created", order)
        self._send_email(
            EmailMessage(
                to=draft.customer.email,
                subject=f"Order #{order.id} confirmed",
                body=(
                    f"Hello {draft.customer.username}, we received your order "
                    f"#{order.id} with {order.item_count} item(s). "
                    f"Total: {order.total}."
                ),
            )
        )

    async def _announce_status_change(self, order: Order) -> None:
        await self._publish("order_status_changed", order)
        try:
            customer = await self._user_repo.find_by_id(order.user_id)
        except Exception:
            logger.exception("Could not load customer for order %s", order.id)
            return
        if customer is None:
            return
        self._send_email(
            EmailMessage(
                to=customer.email,
                subject=f"Order #{order.id} is now {order.status.value}",
                body=(
                    f"Hello {customer.username}, the status of your order "
                    f"#{order.id} changed to {order.status.value}."
                ),
            )
        )

    async def _publish(self, event: str, order: Order) -> None:
        data = {
            "id": order.id,
            "user_id": order.user_id,
            "status": order.status.value,
            "total": str(order.total),
        }
        try:
            await self._notifier.notify(
                ORDERS_CHANNEL, event, data, owner_id=order.user_id
            )
        except Exception:
            logger.exception("Failed to publish %s for order %s", event, order.id)

    def _send_email(self, message: EmailMessage) -> None:
        try:
            if not self._email_queue.enqueue(message):
                logger.warning("E-mail for %s was dropped", message.subject)
        except Exception:
            logger.exception("Failed to queue e-mail: %s", message.subject)
