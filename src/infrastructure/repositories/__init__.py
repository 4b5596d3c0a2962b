"""SQLAlchemy implementations of the savings goal and user stores."""

from src.infrastructure.repositories.savings_goal import SavingsGoalRepository
from src.infrastructure.repositories.user import UserRepository

__all__ = ["SavingsGoalRepository", "UserRepository"]
