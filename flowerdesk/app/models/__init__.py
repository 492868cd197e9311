"""Import every model so Base.metadata knows all tables."""
from flowerdesk.app.models.warehouse import FlowerStock, WriteOff
from flowerdesk.app.models.note import Note
from flowerdesk.app.models.order import Order, OrderItem
from flowerdesk.app.models.bouquet import Bouquet, BouquetItem

__all__ = [
    "FlowerStock",
    "WriteOff",
    "Note",
    "Order",
    "OrderItem",
    "Bouquet",
    "BouquetItem",
]
