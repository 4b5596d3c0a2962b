"""Payment allocation endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.api.dependencies import Allocations, CurrentUser
from src.api.schemas.savings import AllocationRequest
from src.core.config import Settings, get_settings
from src.core.exceptions import ValidationError
from src.domain.savings.types import AllocationResult

router = APIRouter(prefix="/allocations", tags=["allocations"])


@router.post("", response_model=AllocationResult, status_code=status.HTTP_200_OK)
async def allocate_payment(
    body: AllocationRequest,
    user: CurrentUser,
    engine: Allocations,
    settings: Annotated[Settings, Depends(get_settings)],
) -> AllocationResult:
    """Split a completed payment across the current user's savings goals."""
    expected_currency = settings.savings_config.currency
    if body.currency.upper() != expected_currency:
        raise ValidationError(
            f"Only {expected_currency} payments can be allocated",
            context={"currency": body.currency},
        )
    return await engine.allocate(user.id, body.amount)
