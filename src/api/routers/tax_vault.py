"""Tax vault endpoints: read, configure and release."""

from fastapi import APIRouter

from src.api.dependencies import CurrentUser, TaxVaults
from src.api.schemas.savings import TaxPercentageRequest
from src.domain.savings.types import ReleaseResult, TaxVaultState

router = APIRouter(prefix="/tax-vault", tags=["tax-vault"])


@router.get("", response_model=TaxVaultState)
async def get_tax_vault(user: CurrentUser, vaults: TaxVaults) -> TaxVaultState:
    """Current tax percentage and vault of the user."""
    return await vaults.query(user.id)


@router.put("", response_model=TaxVaultState)
async def configure_tax_vault(
    body: TaxPercentageRequest, user: CurrentUser, vaults: TaxVaults
) -> TaxVaultState:
    """Set the tax percentage; 0 deactivates the vault without emptying it."""
    return await vaults.configure(user.id, body.tax_percentage)


@router.delete("", response_model=ReleaseResult)
async def release_tax_vault(user: CurrentUser, vaults: TaxVaults) -> ReleaseResult:
    """Empty the vault and return the released amount."""
    return await vaults.release(user.id)
