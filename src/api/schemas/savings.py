"""Request and response bodies of the savings endpoints.

Allocation and tax vault responses reuse the domain result types directly.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.domain.savings.types import GoalStatus


class AllocationRequest(BaseModel):
    """A completed incoming payment to split across the user's goals."""

    amount: Decimal = Field(..., description="Gross payment amount", examples=["1000.00"])
    currency: str = Field(default="USDC", examples=["USDC"])


class TaxPercentageRequest(BaseModel):
    tax_percentage: Decimal = Field(
        ...,
        description="Percentage of every payment set aside for taxes, 0 to disable",
        examples=["25"],
    )


class SavingsGoalCreate(BaseModel):
    """A regular savings goal. Tax vaults are managed through /tax-vault."""

    title: str = Field(..., min_length=1, max_length=200)
    target_amount: Decimal = Field(..., gt=0, max_digits=20, decimal_places=2)
    savings_percentage: Decimal = Field(..., ge=0, le=100, decimal_places=2)


class SavingsGoalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    target_amount: Decimal
    current_amount: Decimal
    savings_percentage: Decimal
    is_tax_vault: bool
    is_active: bool
    status: GoalStatus
    created_at: datetime


class SavingsGoalList(BaseModel):
    goals: list[SavingsGoalResponse]
    count: int
