from typing import AsyncGenerator, NoReturn

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from flowerdesk.app.core.database import async_session
from flowerdesk.app.core.exceptions import ServiceError
from flowerdesk.app.storage import DatabaseStorage, Storage


# One session per request; whatever is not committed is rolled back on close
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


async def get_storage(session: AsyncSession = Depends(get_session)) -> Storage:
    return DatabaseStorage(session)


def handle_service_error(e: ServiceError) -> NoReturn:
    """Convert service exceptions to HTTP exceptions."""
    raise HTTPException(status_code=e.status_code, detail=e.message)
