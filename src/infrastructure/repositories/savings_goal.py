"""PostgreSQL goal store."""

from collections.abc import Mapping
from decimal import Decimal

from loguru import logger
from sqlalchemy import and_, case, false, func, not_, select, true, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFoundError
from src.core.types import GoalId, UserId
from src.domain.savings.types import GoalBalance, GoalStatus
from src.infrastructure.database.models import SavingsGoal
from src.infrastructure.database.repository import BaseRepository


class SavingsGoalRepository(BaseRepository[SavingsGoal]):
    """Savings goals of all users, tax vaults included.

    Balance changes never read a value and write it back: increments are a
    single ``UPDATE .. SET current_amount = current_amount + delta`` and the
    tax vault is created through ``INSERT .. ON CONFLICT``.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SavingsGoal)

    async def find_active_goals(self, user_id: UserId) -> list[SavingsGoal]:
        """Goals that accept allocations, in the order they receive them."""
        stmt = (
            select(SavingsGoal)
            .where(
                SavingsGoal.user_id == user_id,
                SavingsGoal.is_active.is_(True),
                SavingsGoal.status == GoalStatus.IN_PROGRESS.value,
            )
            .order_by(
                SavingsGoal.is_tax_vault.desc(),
                SavingsGoal.created_at.asc(),
                SavingsGoal.id.asc(),
            )
        )
        async with self.translate_errors("find_active_goals"):
            result = await self.session.execute(stmt)
        goals = list(result.scalars().all())
        logger.debug("User {} has {} active goals", user_id, len(goals))
        return goals

    async def list_goals(self, user_id: UserId) -> list[SavingsGoal]:
        """Every goal of the user, tax vault first then oldest first."""
        stmt = (
            select(SavingsGoal)
            .where(SavingsGoal.user_id == user_id)
            .order_by(
                SavingsGoal.is_tax_vault.desc(),
                SavingsGoal.created_at.asc(),
                SavingsGoal.id.asc(),
            )
        )
        async with self.translate_errors("list_goals"):
            result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_tax_vault(self, user_id: UserId) -> SavingsGoal | None:
        stmt = select(SavingsGoal).where(
            SavingsGoal.user_id == user_id, SavingsGoal.is_tax_vault.is_(True)
        )
        async with self.translate_errors("find_tax_vault"):
            result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def lock_tax_vault(self, user_id: UserId) -> SavingsGoal | None:
        stmt = (
            select(SavingsGoal)
            .where(SavingsGoal.user_id == user_id, SavingsGoal.is_tax_vault.is_(True))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        async with self.translate_errors("lock_tax_vault"):
            result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_goal(self, **fields: object) -> SavingsGoal:
        return await self.create(SavingsGoal(**fields))

    async def update_goal(self, goal_id: GoalId, fields: Mapping[str, object]) -> SavingsGoal:
        goal = await self.update(goal_id, fields)
        if goal is None:
            raise NotFoundError("Savings goal not found", context={"goal_id": goal_id})
        return goal

    async def count_goals(self, user_id: UserId) -> int:
        return await self.count(user_id=user_id)

    async def increment_allocation(
        self, goal_id: GoalId, delta: Decimal
    ) -> GoalBalance | None:
        """Add ``delta`` and settle completion in the same statement.

        PostgreSQL evaluates every SET expression against the row as it was
        before the update, so the completion test sees the old balance plus
        ``delta``. The guard on ``is_active`` and ``status`` makes completion
        happen at most once when allocations race.

        Returns:
            GoalBalance | None: The balance after the increment, or None when
                the goal had already been completed or deactivated.
        """
        new_total = SavingsGoal.current_amount + delta
        reaches_target = and_(
            not_(SavingsGoal.is_tax_vault), new_total >= SavingsGoal.target_amount
        )
        stmt = (
            update(SavingsGoal)
            .where(
                SavingsGoal.id == goal_id,
                SavingsGoal.is_active.is_(True),
                SavingsGoal.status == GoalStatus.IN_PROGRESS.value,
            )
            .values(
                current_amount=new_total,
                status=case(
                    (reaches_target, GoalStatus.COMPLETED.value), else_=SavingsGoal.status
                ),
                is_active=case((reaches_target, false()), else_=true()),
            )
            .returning(SavingsGoal)
            .execution_options(synchronize_session=False, populate_existing=True)
        )

        async with self.translate_errors("increment_allocation"):
            result = await self.session.execute(stmt)
        goal = result.scalar_one_or_none()
        if goal is None:
            return None

        logger.debug("Goal {} incremented by {} to {}", goal_id, delta, goal.current_amount)
        return GoalBalance(
            goal_id=goal.id,
            new_total=goal.current_amount,
            completed=goal.status == GoalStatus.COMPLETED.value,
        )

    async def upsert_tax_vault(
        self,
        user_id: UserId,
        *,
        percentage: Decimal,
        title: str,
        target_amount: Decimal,
    ) -> SavingsGoal:
        """Create the vault, or set its percentage and reactivate it.

        An existing vault keeps its title, target and balance.
        """
        stmt = insert(SavingsGoal).values(
            user_id=user_id,
            title=title,
            target_amount=target_amount,
            current_amount=Decimal(0),
            savings_percentage=percentage,
            is_tax_vault=True,
            is_active=True,
            status=GoalStatus.IN_PROGRESS.value,
        )
        stmt = (
            stmt.on_conflict_do_update(
                index_elements=[SavingsGoal.user_id],
                index_where=SavingsGoal.is_tax_vault,
                set_={
                    "savings_percentage": stmt.excluded.savings_percentage,
                    "is_active": True,
                    "status": GoalStatus.IN_PROGRESS.value,
                    "updated_at": func.now(),
                },
            )
            .returning(SavingsGoal)
            .execution_options(populate_existing=True)
        )

        async with self.translate_errors("upsert_tax_vault"):
            result = await self.session.execute(stmt)
        return result.scalar_one()
