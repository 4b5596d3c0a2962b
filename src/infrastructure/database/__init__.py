"""Async PostgreSQL access with SQLAlchemy 2 and asyncpg.

- **base**: Declarative base and common columns
- **models**: ``users`` and ``savings_goals`` tables
- **session**: Engine, session factory and health check
- **repository**: Generic repository the stores build on
- **dependencies**: FastAPI session dependency
"""

from src.infrastructure.database.base import Base, BaseModel
from src.infrastructure.database.dependencies import DatabaseSession, get_db
from src.infrastructure.database.models import SavingsGoal, User
from src.infrastructure.database.repository import BaseRepository
from src.infrastructure.database.session import (
    check_database_connection,
    close_database,
    create_database_engine,
    get_async_session,
    get_engine,
    get_session_factory,
)

__all__ = [
    "Base",
    "BaseModel",
    "BaseRepository",
    "DatabaseSession",
    "SavingsGoal",
    "User",
    "check_database_connection",
    "close_database",
    "create_database_engine",
    "get_async_session",
    "get_db",
    "get_engine",
    "get_session_factory",
]
