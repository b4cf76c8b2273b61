from fastapi import APIRouter

from catalog.api.v1 import health, portfolio_items, portfolios


def build_api_router() -> APIRouter:
    api_router = APIRouter()
    api_router.include_router(health.router)
    api_router.include_router(portfolios.router)
    api_router.include_router(portfolio_items.router)
    return api_router
