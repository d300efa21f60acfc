"""
Aggregate router for the shop bounded context.

Mounted by ``app.main`` under ``/api/v1``.
"""

from fastapi import APIRouter

from app.interfaces.shop.auth import router as auth_router
from app.interfaces.shop.categories import router as categories_router
from app.interfaces.shop.orders import router as orders_router
from app.interfaces.shop.products import router as products_router
from app.interfaces.shop.users import router as users_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(categories_router)
router.include_router(products_router)
router.include_router(users_router)
router.include_router(orders_router)
