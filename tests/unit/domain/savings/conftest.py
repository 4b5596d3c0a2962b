"""Fixtures for the allocation and tax vault tests."""

import pytest

from src.core.config import SavingsConfig
from tests.unit.stores import InMemoryGoalStore, InMemoryUserStore


@pytest.fixture
def goal_store() -> InMemoryGoalStore:
    return InMemoryGoalStore()


@pytest.fixture
def user_store() -> InMemoryUserStore:
    store = InMemoryUserStore()
    store.add(1)
    return store


@pytest.fixture
def savings_config() -> SavingsConfig:
    return SavingsConfig()


@pytest.fixture
def per_goal_config() -> SavingsConfig:
    return SavingsConfig(allocation_mode="per_goal")
