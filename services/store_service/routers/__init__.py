"""Store service routers package."""

from services.store_service.routers.admin_catalog import router as admin_catalog_router
from services.store_service.routers.admin_diet_plans import router as admin_diet_plans_router
from services.store_service.routers.admin_orders import router as admin_orders_router
from services.store_service.routers.cart import router as cart_router
from services.store_service.routers.catalog import router as catalog_router
from services.store_service.routers.diet_plans import router as diet_plans_router
from services.store_service.routers.orders import router as orders_router
from services.store_service.routers.subscriptions import router as subscriptions_router

__all__ = [
    "admin_catalog_router",
    "admin_diet_plans_router",
    "admin_orders_router",
    "cart_router",
    "catalog_router",
    "diet_plans_router",
    "orders_router",
    "subscriptions_router",
]
