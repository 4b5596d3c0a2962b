"""Allocation engine: splits a completed payment across savings goals.

Each active, in-progress goal takes ``savings_percentage`` percent of the
gross payment. Deductions are independent of each other: there is no shared
pool and no cap, so percentages adding up to more than 100 drive the main
balance negative. The tax vault, when the user has an active one, is always
processed first.
"""

from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from src.core.config import SavingsConfig
from src.core.constants import AMOUNT_QUANTUM, MAX_PAYMENT_AMOUNT, PERCENT_SCALE
from src.core.exceptions import PersistenceError, ValidationError
from src.core.observability import trace_operation
from src.core.types import GoalId, UserId
from src.domain.savings.ports import Goal, GoalStore
from src.domain.savings.types import AllocationResult, GoalUpdate

ZERO = Decimal(0)


class PlannedDeduction(BaseModel):
    """A deduction computed from the goals as they were loaded."""

    model_config = ConfigDict(frozen=True)

    goal_id: GoalId
    title: str
    is_tax_vault: bool
    deduction: Decimal
    tentative_total: Decimal
    completes: bool


class AllocationPlan(BaseModel):
    """Ordered deductions for one payment."""

    model_config = ConfigDict(frozen=True)

    payment_amount: Decimal
    deductions: list[PlannedDeduction] = Field(default_factory=list)


def order_goals(goals: Iterable[Goal]) -> list[Goal]:
    """Order goals the way allocations are applied.

    Tax vault first, then by creation time, then by id so that goals created
    in the same instant still have a stable order.
    """
    return sorted(goals, key=lambda goal: (not goal.is_tax_vault, goal.created_at, goal.id))


def compute_deduction(payment_amount: Decimal, percentage: Decimal) -> Decimal:
    """Share of the gross payment owed to a goal saving ``percentage`` percent.

    Quantized to the scale goal balances are stored with, so the amount
    reported as added is exactly what the balance grows by.
    """
    return (payment_amount * percentage / PERCENT_SCALE).quantize(
        AMOUNT_QUANTUM, rounding=ROUND_HALF_UP
    )


def plan_allocation(payment_amount: Decimal, goals: Sequence[Goal]) -> AllocationPlan:
    """Compute the deductions for a payment without touching any store.

    Args:
        payment_amount: The gross payment amount.
        goals: Candidate goals, already filtered to active and in progress.

    Returns:
        AllocationPlan: One deduction per goal in processing order.
    """
    deductions = []
    for goal in order_goals(goals):
        deduction = compute_deduction(payment_amount, Decimal(goal.savings_percentage))
        tentative_total = Decimal(goal.current_amount) + deduction
        deductions.append(
            PlannedDeduction(
                goal_id=goal.id,
                title=goal.title,
                is_tax_vault=goal.is_tax_vault,
                deduction=deduction,
                tentative_total=tentative_total,
                completes=not goal.is_tax_vault
                and tentative_total >= Decimal(goal.target_amount),
            )
        )
    return AllocationPlan(payment_amount=payment_amount, deductions=deductions)


def parse_amount(value: object) -> Decimal:
    """Validate a payment amount as a positive, finite decimal.

    Raises:
        ValidationError: If the value is missing, malformed, not finite,
            not strictly positive or too large to store.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError("Payment amount is required", context={"amount": value})

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(
            "Payment amount must be a decimal number",
            context={"amount": str(value)},
            cause=e,
        ) from e

    if not amount.is_finite():
        raise ValidationError("Payment amount must be finite", context={"amount": str(value)})
    if amount <= ZERO:
        raise ValidationError(
            "Payment amount must be greater than zero", context={"amount": str(amount)}
        )
    if amount >= MAX_PAYMENT_AMOUNT:
        raise ValidationError("Payment amount is too large", context={"amount": str(amount)})
    return amount


class AllocationEngine:
    """Applies allocation plans through a goal store.

    Args:
        goals: Store holding the user's savings goals.
        config: Savings settings (rounding and transaction mode).
    """

    def __init__(self, goals: GoalStore, config: SavingsConfig) -> None:
        self.goals = goals
        self.config = config

    async def allocate(self, user_id: UserId, payment_amount: object) -> AllocationResult:
        """Split a completed incoming payment across the user's goals.

        Args:
            user_id: Owner of the goals.
            payment_amount: Gross amount of the payment.

        Returns:
            AllocationResult: Totals and one update per goal that was credited.

        Raises:
            ValidationError: If the amount isn't a positive, finite decimal.
            PersistenceError: If a goal write fails. ``applied_goal_ids`` in
                its context lists the goals that stay credited.
        """
        amount = parse_amount(payment_amount)

        with trace_operation(
            "savings.allocate",
            user_id=user_id,
            amount=str(amount),
            mode=self.config.allocation_mode,
        ) as span:
            candidates = await self.goals.find_active_goals(user_id)
            plan = plan_allocation(amount, candidates)

            if not plan.deductions:
                logger.info(
                    "No active goals for user {}, payment of {} left in main balance",
                    user_id,
                    amount,
                )
                return AllocationResult(
                    processed=False,
                    total_saved=self._round(ZERO),
                    tax_vault_saved=self._round(ZERO),
                    main_balance=amount,
                )

            if self.config.allocation_mode == "atomic":
                async with self.goals.savepoint():
                    updates = await self._apply(user_id, plan, commit_each=False)
            else:
                updates = await self._apply(user_id, plan, commit_each=True)

            result = self._summarize(amount, updates)
            span.set_attribute("savings.goals_updated", len(updates))
            span.set_attribute("savings.total_saved", str(result.total_saved))

        logger.info(
            "Allocated payment of {} for user {}: saved {} ({} to tax vault) across {} goals, "
            "main balance {}",
            amount,
            user_id,
            result.total_saved,
            result.tax_vault_saved,
            len(updates),
            result.main_balance,
        )
        return result

    async def _apply(
        self, user_id: UserId, plan: AllocationPlan, *, commit_each: bool
    ) -> list[GoalUpdate]:
        applied: list[GoalId] = []
        updates: list[GoalUpdate] = []

        for planned in plan.deductions:
            try:
                balance = await self.goals.increment_allocation(
                    planned.goal_id, planned.deduction
                )
                if commit_each:
                    await self.goals.commit()
            except PersistenceError as e:
                durable = list(applied) if commit_each else []
                logger.error(
                    "Allocation for user {} failed at goal {}, durably applied: {}",
                    user_id,
                    planned.goal_id,
                    durable,
                )
                raise PersistenceError(
                    f"Failed to apply allocation to goal {planned.goal_id}",
                    context={
                        "user_id": user_id,
                        "failed_goal_id": planned.goal_id,
                        "applied_goal_ids": durable,
                        "allocation_mode": self.config.allocation_mode,
                    },
                    cause=e,
                ) from e

            if balance is None:
                # Completed or deactivated after the goals were loaded
                logger.warning(
                    "Goal {} no longer accepts allocations, skipping", planned.goal_id
                )
                continue

            applied.append(planned.goal_id)
            updates.append(
                GoalUpdate(
                    goal_id=planned.goal_id,
                    title=planned.title,
                    amount_added=planned.deduction,
                    new_total=balance.new_total,
                    completed=balance.completed,
                    is_tax_vault=planned.is_tax_vault,
                )
            )
            if balance.completed:
                logger.info("Goal {} reached its target and was completed", planned.goal_id)

        return updates

    def _summarize(self, amount: Decimal, updates: Sequence[GoalUpdate]) -> AllocationResult:
        total_saved = self._round(sum((update.amount_added for update in updates), ZERO))
        tax_vault_saved = self._round(
            sum((update.amount_added for update in updates if update.is_tax_vault), ZERO)
        )
        return AllocationResult(
            processed=True,
            total_saved=total_saved,
            tax_vault_saved=tax_vault_saved,
            main_balance=amount - total_saved,
            goal_updates=list(updates),
        )

    def _round(self, value: Decimal) -> Decimal:
        quantum = Decimal(1).scaleb(-self.config.summary_decimal_places)
        return value.quantize(quantum, rounding=ROUND_HALF_UP)
