"""Shop-wide constants: order statuses and pickup placeholders."""
from enum import Enum
from typing import Optional


class OrderStatus(str, Enum):
    """Order lifecycle. Values are the labels stored in the database and shown to staff."""

    NEW = "Новый"
    ASSEMBLED = "Собран"
    SENT = "В доставке"
    FINISHED = "Доставлен"
    DELETED = "Удалён"

    @classmethod
    def parse(cls, value: str) -> "OrderStatus":
        """Accept either the stored label or the English name (``"sent"``, ``"Sent"``)."""
        if isinstance(value, cls):
            return value
        for status in cls:
            if value == status.value or value.strip().upper() == status.name:
                return status
        raise ValueError(f"Unknown order status: {value!r}")


# Pickup orders never travel, so recipient and address are fixed
PICKUP_RECIPIENT = "Самовывоз"
PICKUP_ADDRESS = "Магазин"


def next_statuses(status: OrderStatus, is_pickup: bool = False) -> list[OrderStatus]:
    """Transitions the UI should offer for an order in ``status``.

    The server does not enforce these; they only describe the expected flow.
    """
    if status == OrderStatus.NEW:
        forward: list[OrderStatus] = [OrderStatus.ASSEMBLED]
        if is_pickup:
            forward.append(OrderStatus.SENT)
        return forward + [OrderStatus.DELETED]
    if status == OrderStatus.ASSEMBLED:
        return [OrderStatus.SENT, OrderStatus.DELETED]
    if status == OrderStatus.SENT:
        return [OrderStatus.FINISHED, OrderStatus.DELETED]
    if status == OrderStatus.FINISHED:
        return [OrderStatus.DELETED]
    return []


def status_label(value: Optional[str]) -> Optional[str]:
    """Normalize a status coming from the API to its stored label."""
    if value is None:
        return None
    return OrderStatus.parse(value).value
