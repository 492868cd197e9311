# flowerdesk/app/services/orders.py
"""
Order service - order headers, their flower lines and the warehouse
reservations those lines represent.

While an order is not deleted, its lines are exactly the flowers taken from
the warehouse for it. Every operation here keeps that true:
- create debits every line;
- update debits/credits only the net difference per flower;
- delete (soft) credits every line back once.
Nothing is committed here; the caller commits or rolls back the whole request.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from flowerdesk.app.core.constants import (
    OrderStatus,
    PICKUP_ADDRESS,
    PICKUP_RECIPIENT,
    next_statuses,
)
from flowerdesk.app.core.exceptions import InsufficientStockError, ServiceError
from flowerdesk.app.core.logging import get_logger
from flowerdesk.app.core.metrics import orders_created_total, order_status_changes_total
from flowerdesk.app.models import Order, OrderItem
from flowerdesk.app.services.ledger import (
    InventoryLedger,
    LineItem,
    Shortage,
    check_quantity,
    summarize_items,
)
from flowerdesk.app.storage import Storage

logger = get_logger(__name__)

HEADER_FIELDS = (
    "sender",
    "recipient",
    "address",
    "scheduled_at",
    "time_from",
    "time_to",
    "notes",
    "is_pickup",
    "is_showcase",
)
# Fields an edit may clear by sending null
CLEARABLE_FIELDS = ("time_from", "time_to", "notes")


class OrderServiceError(ServiceError):
    """Base exception for order service errors."""


class OrderNotFoundError(OrderServiceError):
    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} not found", 404)


class OrderValidationError(OrderServiceError):
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}", 400)


class OrderDeletedError(OrderServiceError):
    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} is deleted", 400)


def order_to_dict(order: Order) -> Dict[str, Any]:
    status = OrderStatus.parse(order.status)
    return {
        "id": order.id,
        "from": order.sender,
        "to": order.recipient,
        "address": order.address,
        "dateTime": order.scheduled_at.isoformat() if order.scheduled_at else None,
        "timeFrom": order.time_from,
        "timeTo": order.time_to,
        "notes": order.notes,
        "status": status.value,
        "pickup": bool(order.is_pickup),
        "showcase": bool(order.is_showcase),
        "nextStatuses": [s.value for s in next_statuses(status, bool(order.is_pickup))],
    }


def order_item_to_dict(item: OrderItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "orderId": item.order_id,
        "flower": item.flower_name,
        "amount": item.quantity,
    }


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus.parse(value)
    except (ValueError, AttributeError):
        raise OrderValidationError("status", f"unknown status {value!r}")


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def validate_header(fields: Dict[str, Any]) -> None:
    """Check a complete order header (after pickup placeholders were applied)."""
    if _blank(fields.get("sender")):
        raise OrderValidationError("from", "sender is required")
    if not isinstance(fields.get("scheduled_at"), datetime):
        raise OrderValidationError("dateTime", "delivery date is required")
    is_pickup = bool(fields.get("is_pickup"))
    is_showcase = bool(fields.get("is_showcase"))
    if not is_pickup:
        if _blank(fields.get("recipient")):
            raise OrderValidationError("to", "recipient is required for delivery")
        if _blank(fields.get("address")):
            raise OrderValidationError("address", "address is required for delivery")
    time_from, time_to = fields.get("time_from"), fields.get("time_to")
    if not (is_pickup or is_showcase):
        if _blank(time_from):
            raise OrderValidationError("timeFrom", "delivery window start is required")
        if _blank(time_to):
            raise OrderValidationError("timeTo", "delivery window end is required")
    # "HH:MM" strings compare correctly as text
    if time_from and time_to and time_from > time_to:
        raise OrderValidationError("timeTo", "delivery window must end after it starts")


def apply_pickup(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Pickup orders always carry the shop placeholders instead of a recipient/address."""
    if fields.get("is_pickup"):
        fields["recipient"] = PICKUP_RECIPIENT
        fields["address"] = PICKUP_ADDRESS
    return fields


def _line_items(items: Iterable[Sequence]) -> List[LineItem]:
    result = []
    for flower, quantity in items:
        if _blank(flower):
            raise OrderValidationError("items", "flower name is required")
        check_quantity(quantity)
        result.append(LineItem(flower.strip(), quantity))
    return result


class OrderService:
    """Service class for order operations."""

    def __init__(self, storage: Storage, strict_stock: bool = False):
        self.storage = storage
        self.ledger = InventoryLedger(storage)
        self.strict_stock = strict_stock

    async def list_orders(self, statuses: Optional[Iterable[str]] = None) -> List[Order]:
        labels = [parse_status(s).value for s in statuses] if statuses else None
        return await self.storage.list_orders(labels)

    async def get_order(self, order_id: int) -> Order:
        order = await self.storage.get_order(order_id)
        if not order:
            raise OrderNotFoundError(order_id)
        return order

    async def get_items(self, order_id: int) -> List[OrderItem]:
        await self.get_order(order_id)
        return await self.storage.list_order_items(order_id)

    async def _ensure_stock(self, demand: Dict[str, int]) -> None:
        if not self.strict_stock:
            return
        shortages = await self.ledger.shortages(demand)
        if shortages:
            logger.info("Order rejected: not enough flowers", shortages=[s.to_dict() for s in shortages])
            raise InsufficientStockError(shortages)

    async def create_order(self, header: Dict[str, Any], items: Iterable[Sequence]) -> Order:
        """
        Create an order and reserve its flowers.

        Args:
            header: order fields (sender, recipient, address, scheduled_at,
                time_from, time_to, notes, status, is_pickup, is_showcase)
            items: (flower, quantity) pairs, at least one

        Raises:
            OrderValidationError: missing/invalid header fields or no items
            InsufficientStockError: strict stock mode and the warehouse is short
        """
        lines = _line_items(items)
        if not lines:
            raise OrderValidationError("items", "order needs at least one flower")

        fields = {key: header.get(key) for key in HEADER_FIELDS}
        fields["is_pickup"] = bool(fields["is_pickup"])
        fields["is_showcase"] = bool(fields["is_showcase"])
        apply_pickup(fields)
        validate_header(fields)
        status = parse_status(header.get("status") or OrderStatus.NEW)
        if status == OrderStatus.DELETED:
            raise OrderValidationError("status", "an order cannot be created deleted")

        await self._ensure_stock(summarize_items(lines))

        order = await self.storage.insert_order(status=status.value, **fields)
        for line in lines:
            await self.storage.insert_order_item(order.id, line.flower, line.quantity)
        await self.ledger.debit_all(summarize_items(lines))

        kind = "showcase" if order.is_showcase else ("pickup" if order.is_pickup else "delivery")
        orders_created_total.labels(kind=kind).inc()
        logger.info("Order created", order_id=order.id, kind=kind, lines=len(lines))
        return order

    async def update_order(
        self,
        order_id: int,
        header: Dict[str, Any],
        items: Optional[Iterable[Sequence]] = None,
    ) -> Order:
        """
        Edit an order. ``items``, when given, replaces the order lines and the
        warehouse is adjusted by the net difference per flower. ``None`` keeps
        the current lines.
        """
        order = await self.get_order(order_id)
        if order.status == OrderStatus.DELETED.value:
            raise OrderDeletedError(order_id)

        header = dict(header)
        new_status = header.pop("status", None)
        new_status = parse_status(new_status) if new_status else None

        fields = {
            key: value for key, value in header.items()
            if key in HEADER_FIELDS and (value is not None or key in CLEARABLE_FIELDS)
        }
        merged = {key: getattr(order, key) for key in HEADER_FIELDS}
        merged.update(fields)
        if order.is_pickup and not merged["is_pickup"]:
            # Leaving pickup drops the shop placeholders
            for key, placeholder in (("recipient", PICKUP_RECIPIENT), ("address", PICKUP_ADDRESS)):
                if merged[key] == placeholder:
                    merged[key] = None
        apply_pickup(merged)
        validate_header(merged)

        if items is not None:
            await self._replace_items(order, _line_items(items))

        changes = {key: merged[key] for key in HEADER_FIELDS if merged[key] != getattr(order, key)}
        if changes:
            order = await self.storage.update_order(order, **changes)

        if new_status == OrderStatus.DELETED:
            order = await self._soft_delete(order)
        elif new_status and new_status.value != order.status:
            order = await self.storage.update_order(order, status=new_status.value)
            order_status_changes_total.labels(status=new_status.name.lower()).inc()

        logger.info("Order updated", order_id=order_id, fields=sorted(changes), items_replaced=items is not None)
        return order

    async def _replace_items(self, order: Order, lines: List[LineItem]) -> None:
        current = await self.storage.list_order_items(order.id)
        before = summarize_items((i.flower_name, i.quantity) for i in current)
        after = summarize_items(lines)

        deltas: Dict[str, int] = {}
        for name in list(before) + [n for n in after if n not in before]:
            delta = after.get(name, 0) - before.get(name, 0)
            if delta:
                deltas[name] = delta

        await self._ensure_stock({name: d for name, d in deltas.items() if d > 0})

        # One pass in name order, same lock order as debit_all
        for name in sorted(deltas):
            if deltas[name] < 0:
                await self.ledger.credit(name, -deltas[name])
            else:
                await self.ledger.debit(name, deltas[name])

        await self.storage.delete_order_items(order.id)
        for name, quantity in after.items():
            await self.storage.insert_order_item(order.id, name, quantity)
        logger.info("Order items replaced", order_id=order.id, deltas=deltas)

    async def update_status(self, order_id: int, status: str) -> Order:
        """Set the status without checking the transition. ``Deleted`` returns the flowers."""
        order = await self.get_order(order_id)
        target = parse_status(status)
        if order.status == OrderStatus.DELETED.value:
            if target == OrderStatus.DELETED:
                return order
            raise OrderDeletedError(order_id)
        if target == OrderStatus.DELETED:
            return await self._soft_delete(order)
        if order.status != target.value:
            order = await self.storage.update_order(order, status=target.value)
            order_status_changes_total.labels(status=target.name.lower()).inc()
            logger.info("Order status changed", order_id=order_id, status=target.value)
        return order

    async def delete_order(self, order_id: int) -> Order:
        """Soft delete. Repeated calls are no-ops."""
        order = await self.get_order(order_id)
        return await self._soft_delete(order)

    async def _soft_delete(self, order: Order) -> Order:
        if order.status == OrderStatus.DELETED.value:
            return order
        items = await self.storage.list_order_items(order.id)
        await self.ledger.credit_all(summarize_items((i.flower_name, i.quantity) for i in items))
        await self.storage.delete_order_items(order.id)
        order = await self.storage.update_order(order, status=OrderStatus.DELETED.value)
        order_status_changes_total.labels(status=OrderStatus.DELETED.name.lower()).inc()
        logger.info("Order deleted, flowers returned", order_id=order.id, lines=len(items))
        return order

    async def check_stock(
        self,
        items: Iterable[Sequence],
        order_id: Optional[int] = None,
    ) -> List[Shortage]:
        """Projected shortages for ``items``; flowers already reserved by ``order_id`` count as available."""
        demand = summarize_items(_line_items(items))
        if order_id is not None:
            order = await self.get_order(order_id)
            if order.status != OrderStatus.DELETED.value:
                for item in await self.storage.list_order_items(order_id):
                    if item.flower_name in demand:
                        demand[item.flower_name] -= item.quantity
        return await self.ledger.shortages(demand)
