"""Store interfaces consumed by the allocation engine and tax vault manager.

The SQLAlchemy implementations live in ``src.infrastructure.repositories``;
unit tests provide in-memory ones. Implementations translate driver errors
into :class:`src.core.exceptions.PersistenceError`.
"""

from collections.abc import Mapping
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from src.core.types import GoalId, UserId
from src.domain.savings.types import GoalBalance


class Goal(Protocol):
    """Attributes of a stored savings goal the domain reads."""

    id: GoalId
    user_id: UserId
    title: str
    target_amount: Decimal
    current_amount: Decimal
    savings_percentage: Decimal
    is_tax_vault: bool
    is_active: bool
    status: str
    created_at: datetime


class User(Protocol):
    """Attributes of a stored user the domain reads."""

    id: UserId
    tax_percentage: Decimal


class GoalStore(Protocol):
    """Persistent savings goals."""

    async def find_active_goals(self, user_id: UserId) -> list[Goal]:
        """Active, in-progress goals: tax vault first, then oldest first."""
        ...

    async def find_tax_vault(self, user_id: UserId) -> Goal | None:
        """The user's tax vault regardless of its state."""
        ...

    async def lock_tax_vault(self, user_id: UserId) -> Goal | None:
        """The user's tax vault, locked for the rest of the transaction."""
        ...

    async def create_goal(self, **fields: object) -> Goal:
        """Create a goal from field values."""
        ...

    async def update_goal(self, goal_id: GoalId, fields: Mapping[str, object]) -> Goal:
        """Apply field values to an existing goal."""
        ...

    async def count_goals(self, user_id: UserId) -> int:
        """Number of goals the user owns, tax vault included."""
        ...

    async def increment_allocation(
        self, goal_id: GoalId, delta: Decimal
    ) -> GoalBalance | None:
        """Atomically add ``delta`` and settle completion in one write.

        Returns None when the goal is no longer active and in progress, in
        which case nothing was written.
        """
        ...

    async def upsert_tax_vault(
        self,
        user_id: UserId,
        *,
        percentage: Decimal,
        title: str,
        target_amount: Decimal,
    ) -> Goal:
        """Create the user's vault or reactivate it with a new percentage."""
        ...

    def savepoint(self) -> AbstractAsyncContextManager[object]:
        """Scope in which all writes succeed or are rolled back together."""
        ...

    async def commit(self) -> None:
        """Make every write so far durable."""
        ...


class UserStore(Protocol):
    """Persistent users, as far as the tax vault lifecycle needs them."""

    async def get(self, user_id: UserId) -> User | None:
        """Load a user."""
        ...

    async def get_for_update(self, user_id: UserId) -> User | None:
        """Load a user and lock the row for the rest of the transaction."""
        ...

    async def set_tax_percentage(self, user_id: UserId, percentage: Decimal) -> User:
        """Store the user's tax percentage."""
        ...
