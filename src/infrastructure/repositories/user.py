"""PostgreSQL user store."""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFoundError
from src.core.types import UserId
from src.infrastructure.database.models import User
from src.infrastructure.database.repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Users, looked up by id or by their identity-provider subject."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get(self, user_id: UserId) -> User | None:
        return await self.get_by_id(user_id)

    async def get_for_update(self, user_id: UserId) -> User | None:
        return await self.get_by_id(user_id, for_update=True)

    async def find_by_external_id(self, external_id: str) -> User | None:
        stmt = select(User).where(User.external_id == external_id)
        async with self.translate_errors("find_by_external_id"):
            result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def set_tax_percentage(self, user_id: UserId, percentage: Decimal) -> User:
        user = await self.update(user_id, {"tax_percentage": percentage})
        if user is None:
            raise NotFoundError("User not found", context={"user_id": user_id})
        return user
