"""
Storage layer: an abstract interface plus interchangeable implementations.
"""

from flowerdesk.app.storage.base import Storage
from flowerdesk.app.storage.database import DatabaseStorage
from flowerdesk.app.storage.memory import MemoryStorage

__all__ = [
    "Storage",
    "DatabaseStorage",
    "MemoryStorage",
]
