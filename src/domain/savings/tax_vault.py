"""Tax vault lifecycle: configure, release and query.

A user has at most one tax vault. It is created the first time a positive
tax percentage is configured, deactivated (never deleted) when the
percentage drops to zero, and reactivated when it goes back up. The vault's
balance survives deactivation until it is released.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from loguru import logger

from src.core.config import SavingsConfig
from src.core.constants import MAX_PERCENTAGE, MIN_PERCENTAGE
from src.core.exceptions import NotFoundError, ValidationError
from src.core.types import UserId
from src.domain.savings.ports import Goal, GoalStore, User, UserStore
from src.domain.savings.types import ReleaseResult, TaxVaultSnapshot, TaxVaultState

PERCENTAGE_QUANTUM = Decimal("0.01")


def parse_percentage(value: object) -> Decimal:
    """Validate a tax percentage and round it to two decimal places.

    Raises:
        ValidationError: If the value isn't a number between 0 and 100.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(
            "Tax percentage must be between 0 and 100", context={"tax_percentage": value}
        )
    try:
        percentage = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(
            "Tax percentage must be between 0 and 100",
            context={"tax_percentage": str(value)},
            cause=e,
        ) from e

    if not percentage.is_finite() or not MIN_PERCENTAGE <= percentage <= MAX_PERCENTAGE:
        raise ValidationError(
            "Tax percentage must be between 0 and 100",
            context={"tax_percentage": str(value)},
        )
    return percentage.quantize(PERCENTAGE_QUANTUM, rounding=ROUND_HALF_UP)


def snapshot(goal: Goal | None) -> TaxVaultSnapshot | None:
    """Externally visible view of a vault goal."""
    if goal is None:
        return None
    return TaxVaultSnapshot.model_validate(goal)


class TaxVaultManager:
    """Manages the user's tax vault through the goal and user stores.

    Configure and release lock the user row first, so two requests for the
    same user are applied one after the other.
    """

    def __init__(self, goals: GoalStore, users: UserStore, config: SavingsConfig) -> None:
        self.goals = goals
        self.users = users
        self.config = config

    async def configure(self, user_id: UserId, tax_percentage: object) -> TaxVaultState:
        """Set the user's tax percentage and bring the vault in line with it.

        Raises:
            ValidationError: If the percentage is outside 0..100.
            NotFoundError: If the user doesn't exist.
        """
        percentage = parse_percentage(tax_percentage)
        await self._lock_user(user_id)
        await self.users.set_tax_percentage(user_id, percentage)

        vault: Goal | None
        if percentage > MIN_PERCENTAGE:
            vault = await self.goals.upsert_tax_vault(
                user_id,
                percentage=percentage,
                title=self.config.tax_vault_title,
                target_amount=self.config.tax_vault_target_amount,
            )
            logger.info("Tax vault {} for user {} active at {}%", vault.id, user_id, percentage)
        else:
            vault = await self.goals.find_tax_vault(user_id)
            if vault is not None and vault.is_active:
                vault = await self.goals.update_goal(vault.id, {"is_active": False})
                logger.info("Tax vault {} for user {} deactivated", vault.id, user_id)

        return TaxVaultState(tax_percentage=percentage, tax_vault=snapshot(vault))

    async def release(self, user_id: UserId) -> ReleaseResult:
        """Empty the vault and report how much was in it.

        The active flag and status stay as they were. Crediting the released
        amount to the spendable balance is up to the caller.

        Raises:
            NotFoundError: If the user or their vault doesn't exist.
        """
        await self._lock_user(user_id)
        vault = await self.goals.lock_tax_vault(user_id)
        if vault is None:
            raise NotFoundError("No tax vault found", context={"user_id": user_id})

        released = Decimal(vault.current_amount)
        vault = await self.goals.update_goal(vault.id, {"current_amount": Decimal(0)})
        logger.info("Released {} from tax vault {} of user {}", released, vault.id, user_id)

        return ReleaseResult(released_amount=released, tax_vault=TaxVaultSnapshot.model_validate(vault))

    async def query(self, user_id: UserId) -> TaxVaultState:
        """Read the user's tax percentage and vault."""
        user = await self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found", context={"user_id": user_id})
        vault = await self.goals.find_tax_vault(user_id)
        return TaxVaultState(
            tax_percentage=Decimal(user.tax_percentage), tax_vault=snapshot(vault)
        )

    async def _lock_user(self, user_id: UserId) -> User:
        user = await self.users.get_for_update(user_id)
        if user is None:
            raise NotFoundError("User not found", context={"user_id": user_id})
        return user
