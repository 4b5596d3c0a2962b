"""Savings goal listing and creation."""

from fastapi import APIRouter, status
from loguru import logger

from src.api.dependencies import CurrentUser, GoalRepository
from src.api.schemas.savings import SavingsGoalCreate, SavingsGoalList, SavingsGoalResponse
from src.domain.savings.types import GoalStatus

router = APIRouter(prefix="/savings-goals", tags=["savings-goals"])


@router.get("", response_model=SavingsGoalList)
async def list_savings_goals(user: CurrentUser, goals: GoalRepository) -> SavingsGoalList:
    """All goals of the current user, tax vault first."""
    user_goals = await goals.list_goals(user.id)
    return SavingsGoalList(
        goals=[SavingsGoalResponse.model_validate(goal) for goal in user_goals],
        count=await goals.count_goals(user.id),
    )


@router.post("", response_model=SavingsGoalResponse, status_code=status.HTTP_201_CREATED)
async def create_savings_goal(
    body: SavingsGoalCreate, user: CurrentUser, goals: GoalRepository
) -> SavingsGoalResponse:
    goal = await goals.create_goal(
        user_id=user.id,
        title=body.title,
        target_amount=body.target_amount,
        savings_percentage=body.savings_percentage,
        is_tax_vault=False,
        is_active=True,
        status=GoalStatus.IN_PROGRESS.value,
    )
    logger.info("User {} created savings goal {}", user.id, goal.id)
    return SavingsGoalResponse.model_validate(goal)
