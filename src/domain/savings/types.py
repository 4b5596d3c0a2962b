"""Value types produced by the allocation engine and the tax vault manager.

None of these are persisted as entities of their own; they describe what an
operation did to the stored savings goals.
"""

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from src.core.types import GoalId


class GoalStatus(StrEnum):
    """Lifecycle status of a savings goal."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class GoalBalance(BaseModel):
    """Balance of a goal right after an atomic increment."""

    model_config = ConfigDict(frozen=True)

    goal_id: GoalId
    new_total: Decimal
    completed: bool


class GoalUpdate(BaseModel):
    """What one allocation did to one goal."""

    model_config = ConfigDict(frozen=True)

    goal_id: GoalId
    title: str
    amount_added: Decimal
    new_total: Decimal
    completed: bool
    is_tax_vault: bool


class AllocationResult(BaseModel):
    """Outcome of splitting one payment across the user's goals.

    ``main_balance`` is the payment minus everything saved. It is negative
    when the user's percentages add up to more than 100.
    """

    model_config = ConfigDict(frozen=True)

    processed: bool
    total_saved: Decimal
    tax_vault_saved: Decimal
    main_balance: Decimal
    goal_updates: list[GoalUpdate] = Field(default_factory=list)


class TaxVaultSnapshot(BaseModel):
    """Externally visible state of a tax vault goal."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: GoalId
    current_amount: Decimal
    is_active: bool
    status: GoalStatus


class TaxVaultState(BaseModel):
    """The user's tax percentage together with their vault, if any."""

    model_config = ConfigDict(frozen=True)

    tax_percentage: Decimal
    tax_vault: TaxVaultSnapshot | None = None


class ReleaseResult(BaseModel):
    """Amount emptied out of the tax vault and the vault afterwards."""

    model_config = ConfigDict(frozen=True)

    released_amount: Decimal
    tax_vault: TaxVaultSnapshot
