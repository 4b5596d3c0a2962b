"""Declarative base shared by the ``users`` and ``savings_goals`` tables.

Every table gets a BigInteger primary key plus ``created_at`` and
``updated_at`` columns filled in by PostgreSQL. Constraint names follow
``NAMING_CONVENTION`` so Alembic revisions stay predictable.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, MetaData, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.infrastructure.constants import NAMING_CONVENTION


class Base(DeclarativeBase):
    """Declarative base bound to the named-constraint metadata."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class BaseModel(Base):
    """Abstract model with an id and server-side timestamps."""

    __abstract__ = True

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Creation time; goals are allocated to oldest first",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        """Return the model class name and id."""
        return f"<{self.__class__.__name__}(id={self.id})>"
