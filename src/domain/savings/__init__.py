"""Savings goals: payment allocation and the tax vault lifecycle."""

from src.domain.savings.allocation import AllocationEngine, plan_allocation
from src.domain.savings.tax_vault import TaxVaultManager
from src.domain.savings.types import (
    AllocationResult,
    GoalStatus,
    GoalUpdate,
    ReleaseResult,
    TaxVaultSnapshot,
    TaxVaultState,
)

__all__ = [
    "AllocationEngine",
    "AllocationResult",
    "GoalStatus",
    "GoalUpdate",
    "ReleaseResult",
    "TaxVaultManager",
    "TaxVaultSnapshot",
    "TaxVaultState",
    "plan_allocation",
]
