"""Sample data for a fresh database (enabled with SEED_ON_STARTUP)."""
from flowerdesk.app.core.logging import get_logger
from flowerdesk.app.storage import Storage

logger = get_logger(__name__)

SAMPLE_FLOWERS = [
    ("Red Roses", 24),
    ("White Lilies", 18),
    ("Pink Carnations", 30),
    ("Yellow Tulips", 15),
]

SAMPLE_NOTES = [
    (
        "Weekly Supplier Meeting",
        "Meeting with rose supplier scheduled for Friday at 2pm. "
        "Need to discuss increased orders for upcoming wedding season.",
    ),
    (
        "Store Closing Early",
        "The store will be closing at 4pm next Monday for staff training. "
        "Ensure all deliveries are scheduled before 3pm.",
    ),
]


async def seed_database(storage: Storage) -> bool:
    """Insert sample flowers and notes when the warehouse is empty. Returns True if seeded."""
    if await storage.list_flowers():
        return False
    for name, quantity in SAMPLE_FLOWERS:
        await storage.insert_flower(name, quantity)
    for title, content in SAMPLE_NOTES:
        await storage.insert_note(title, content)
    await storage.commit()
    logger.info("Database seeded with sample data", flowers=len(SAMPLE_FLOWERS), notes=len(SAMPLE_NOTES))
    return True
