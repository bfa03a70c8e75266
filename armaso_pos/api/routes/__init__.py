"""API routes."""

from fastapi import APIRouter

from armaso_pos.api.routes import analytics, auth, menu, orders, vouchers

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(menu.router, prefix="/menu", tags=["menu"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders", "kitchen"])
api_router.include_router(vouchers.router, prefix="/vouchers", tags=["vouchers"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
