# flowerdesk/app/services/__init__.py
"""
Services layer for business logic.
Keeps API endpoints thin and business logic testable against any Storage.
"""

from flowerdesk.app.services.ledger import (
    InventoryLedger,
    LedgerError,
    FlowerNotFoundError,
    FlowerExistsError,
    InvalidQuantityError,
    InvalidFlowerNameError,
    LineItem,
    Shortage,
    summarize_items,
)
from flowerdesk.app.services.writeoffs import WriteoffLog
from flowerdesk.app.services.notes import (
    NoteService,
    NoteServiceError,
    NoteNotFoundError,
    InvalidNoteError,
)
from flowerdesk.app.services.orders import (
    OrderService,
    OrderServiceError,
    OrderNotFoundError,
    OrderValidationError,
    OrderDeletedError,
)
from flowerdesk.app.services.bouquets import (
    BouquetService,
    BouquetServiceError,
    BouquetNotFoundError,
    EmptyBouquetError,
    InvalidPhotoError,
)

__all__ = [
    # Ledger
    "InventoryLedger",
    "LedgerError",
    "FlowerNotFoundError",
    "FlowerExistsError",
    "InvalidQuantityError",
    "InvalidFlowerNameError",
    "LineItem",
    "Shortage",
    "summarize_items",
    # Write-offs
    "WriteoffLog",
    # Notes
    "NoteService",
    "NoteServiceError",
    "NoteNotFoundError",
    "InvalidNoteError",
    # Orders
    "OrderService",
    "OrderServiceError",
    "OrderNotFoundError",
    "OrderValidationError",
    "OrderDeletedError",
    # Bouquets
    "BouquetService",
    "BouquetServiceError",
    "BouquetNotFoundError",
    "EmptyBouquetError",
    "InvalidPhotoError",
]
