"""FastAPI dependencies: the authenticated user and the domain services."""

from src.api.dependencies.auth import CurrentUser, get_current_user
from src.api.dependencies.services import (
    Allocations,
    GoalRepository,
    TaxVaults,
    get_allocation_engine,
    get_goal_repository,
    get_tax_vault_manager,
)

__all__ = [
    "Allocations",
    "CurrentUser",
    "GoalRepository",
    "TaxVaults",
    "get_allocation_engine",
    "get_current_user",
    "get_goal_repository",
    "get_tax_vault_manager",
]
