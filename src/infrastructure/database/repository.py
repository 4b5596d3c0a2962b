"""Generic async repository the savings stores are built on.

Subclasses bind a model class and add their own queries. Every statement
runs inside :meth:`BaseRepository.translate_errors` so callers only ever see
:class:`~src.core.exceptions.PersistenceError`, never a driver exception.
"""

from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from src.core.exceptions import PersistenceError
from src.infrastructure.database.base import BaseModel


class BaseRepository[T: BaseModel]:
    """CRUD operations for one model over a request-scoped session.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class UserRepository(BaseRepository[User]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, User)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    @asynccontextmanager
    async def translate_errors(self, operation: str) -> AsyncGenerator[None]:
        """Re-raise database failures as PersistenceError.

        Args:
            operation: Short description of what was being done, for the
                error context.
        """
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(
                "{} failed on {}: {}", operation, self.model_class.__name__, type(e).__name__
            )
            raise PersistenceError(
                f"Database operation failed: {operation}",
                context={"model": self.model_class.__name__, "operation": operation},
                cause=e,
            ) from e

    async def get_by_id(self, entity_id: int, *, for_update: bool = False) -> T | None:
        """Load an instance by primary key.

        Args:
            entity_id: The primary key to look up.
            for_update: Lock the row until the transaction ends.

        Returns:
            T | None: The instance if found, None otherwise.
        """
        stmt = select(self.model_class).where(self.model_class.id == entity_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        async with self.translate_errors("get_by_id"):
            result = await self.session.execute(stmt)
        instance = result.scalar_one_or_none()

        logger.debug(
            "{} {} {}",
            self.model_class.__name__,
            entity_id,
            "found" if instance is not None else "not found",
        )
        return instance

    async def create(self, obj: T) -> T:
        """Insert an instance and load its server-generated values.

        Returns:
            T: The instance with id and timestamps populated.
        """
        async with self.translate_errors("create"):
            self.session.add(obj)
            await self.session.flush()
            await self.session.refresh(obj)

        logger.info("Created {} with ID: {}", self.model_class.__name__, obj.id)
        return obj

    async def update(self, entity_id: int, data: Mapping[str, object]) -> T | None:
        """Apply partial data to an instance.

        Unknown field names are rejected rather than silently ignored.

        Returns:
            T | None: The refreshed instance, or None if it doesn't exist.

        Raises:
            ValueError: If a key isn't a column of the model.
        """
        unknown = [key for key in data if not hasattr(self.model_class, key)]
        if unknown:
            raise ValueError(f"{self.model_class.__name__} has no fields {unknown}")

        instance = await self.get_by_id(entity_id)
        if instance is None:
            return None

        async with self.translate_errors("update"):
            for key, value in data.items():
                setattr(instance, key, value)
            await self.session.flush()
            await self.session.refresh(instance)

        logger.info(
            "Updated {} ID {} - fields: {}",
            self.model_class.__name__,
            entity_id,
            list(data.keys()),
        )
        return instance

    async def count(self, **filters: object) -> int:
        """Number of instances matching all equality filters."""
        stmt = select(func.count()).select_from(self.model_class).filter_by(**filters)
        async with self.translate_errors("count"):
            result = await self.session.execute(stmt)
        return result.scalar() or 0

    @asynccontextmanager
    async def savepoint(self) -> AsyncGenerator[AsyncSessionTransaction]:
        """Nested transaction: everything inside is rolled back together."""
        async with (
            self.translate_errors("savepoint"),
            self.session.begin_nested() as transaction,
        ):
            yield transaction

    async def commit(self) -> None:
        """Commit the session's current transaction."""
        async with self.translate_errors("commit"):
            await self.session.commit()
