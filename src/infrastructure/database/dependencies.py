"""FastAPI dependency providing one database session per request."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.session import get_async_session


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Yield a session that is committed once the route handler returns.

    Example:
        @router.get("/savings-goals")
        async def list_goals(db: DatabaseSession) -> ...:
            ...
    """
    async with get_async_session() as session:
        yield session


DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
