"""Domain services wired to the request's database session."""

from typing import Annotated

from fastapi import Depends

from src.core.config import Settings, get_settings
from src.domain.savings.allocation import AllocationEngine
from src.domain.savings.tax_vault import TaxVaultManager
from src.infrastructure.database.dependencies import DatabaseSession
from src.infrastructure.repositories.savings_goal import SavingsGoalRepository
from src.infrastructure.repositories.user import UserRepository


def get_goal_repository(db: DatabaseSession) -> SavingsGoalRepository:
    return SavingsGoalRepository(db)


def get_allocation_engine(
    goals: Annotated[SavingsGoalRepository, Depends(get_goal_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AllocationEngine:
    return AllocationEngine(goals, settings.savings_config)


def get_tax_vault_manager(
    db: DatabaseSession,
    goals: Annotated[SavingsGoalRepository, Depends(get_goal_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TaxVaultManager:
    return TaxVaultManager(goals, UserRepository(db), settings.savings_config)


GoalRepository = Annotated[SavingsGoalRepository, Depends(get_goal_repository)]
Allocations = Annotated[AllocationEngine, Depends(get_allocation_engine)]
TaxVaults = Annotated[TaxVaultManager, Depends(get_tax_vault_manager)]
