from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from flowerdesk.app.api.deps import get_storage, handle_service_error
from flowerdesk.app.core.exceptions import ServiceError
from flowerdesk.app.core.logging import get_logger
from flowerdesk.app.core.settings import get_settings
from flowerdesk.app.schemas import OrderCreate, OrderUpdate, StatusUpdate, StockCheckIn
from flowerdesk.app.services.orders import (
    OrderService,
    OrderServiceError,
    order_item_to_dict,
    order_to_dict,
)
from flowerdesk.app.storage import Storage

router = APIRouter()
logger = get_logger(__name__)


def _service(storage: Storage) -> OrderService:
    return OrderService(storage, strict_stock=get_settings().STRICT_STOCK_CHECK)


def _pairs(items) -> list:
    return [(i.flower, i.amount) for i in items]


@router.get("")
async def list_orders(
    status: Optional[List[str]] = Query(None, description="Фильтр по статусу, можно несколько"),
    storage: Storage = Depends(get_storage),
):
    try:
        orders = await _service(storage).list_orders(status)
    except OrderServiceError as e:
        handle_service_error(e)
    return [order_to_dict(o) for o in orders]


@router.post("/check-stock")
async def check_stock(data: StockCheckIn, storage: Storage = Depends(get_storage)):
    """Хватит ли цветов на складе под этот состав (с учетом уже зарезервированного заказом)."""
    try:
        shortages = await _service(storage).check_stock(_pairs(data.items), order_id=data.order_id)
    except ServiceError as e:
        handle_service_error(e)
    return {"ok": not shortages, "shortages": [s.to_dict() for s in shortages]}


@router.get("/{order_id}")
async def get_order(order_id: int, storage: Storage = Depends(get_storage)):
    try:
        order = await _service(storage).get_order(order_id)
    except OrderServiceError as e:
        handle_service_error(e)
    return order_to_dict(order)


@router.get("/{order_id}/items")
async def get_order_items(order_id: int, storage: Storage = Depends(get_storage)):
    try:
        items = await _service(storage).get_items(order_id)
    except OrderServiceError as e:
        handle_service_error(e)
    return [order_item_to_dict(i) for i in items]


# --- СОЗДАНИЕ ЗАКАЗА ---
@router.post("", status_code=201)
async def create_order(data: OrderCreate, storage: Storage = Depends(get_storage)):
    try:
        order = await _service(storage).create_order(data.order.model_dump(), _pairs(data.items))
        await storage.commit()
    except ServiceError as e:
        await storage.rollback()
        logger.warning("Order creation failed", error=e.message, error_code=e.status_code)
        handle_service_error(e)
    return order_to_dict(order)


# --- РЕДАКТИРОВАНИЕ ЗАКАЗА ---
@router.put("/{order_id}")
async def update_order(order_id: int, data: OrderUpdate, storage: Storage = Depends(get_storage)):
    """
    Частичное обновление шапки заказа. Если передан items, состав заменяется,
    а склад корректируется на разницу по каждому цветку.
    """
    items = _pairs(data.items) if data.items is not None else None
    try:
        order = await _service(storage).update_order(
            order_id,
            data.order.model_dump(exclude_unset=True),
            items,
        )
        await storage.commit()
    except ServiceError as e:
        await storage.rollback()
        logger.warning("Order update failed", order_id=order_id, error=e.message, error_code=e.status_code)
        handle_service_error(e)
    return order_to_dict(order)


@router.put("/{order_id}/status")
async def update_order_status(order_id: int, data: StatusUpdate, storage: Storage = Depends(get_storage)):
    try:
        order = await _service(storage).update_status(order_id, data.status)
        await storage.commit()
    except OrderServiceError as e:
        await storage.rollback()
        handle_service_error(e)
    return order_to_dict(order)


# --- УДАЛЕНИЕ (мягкое, цветы возвращаются на склад) ---
@router.delete("/{order_id}")
async def delete_order(order_id: int, storage: Storage = Depends(get_storage)):
    try:
        await _service(storage).delete_order(order_id)
        await storage.commit()
    except OrderServiceError as e:
        await storage.rollback()
        handle_service_error(e)
    return {"success": True}
