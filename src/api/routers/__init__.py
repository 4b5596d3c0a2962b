"""Versioned API routers."""

from fastapi import APIRouter

from src.api.routers import allocations, savings_goals, tax_vault

api_router = APIRouter()
api_router.include_router(allocations.router)
api_router.include_router(tax_vault.router)
api_router.include_router(savings_goals.router)

__all__ = ["api_router"]
