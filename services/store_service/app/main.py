"""FastAPI application for the Store Service."""

from fastapi import FastAPI
from libs.common.middleware import add_observability_middleware
from services.store_service.routers import (
    admin_catalog_router,
    admin_diet_plans_router,
    admin_orders_router,
    cart_router,
    catalog_router,
    diet_plans_router,
    orders_router,
    subscriptions_router,
)


def create_app() -> FastAPI:
    """Create and configure the Store Service FastAPI app."""
    app = FastAPI(
        title="NutriCart Store Service",
        version="0.1.0",
        description="Nutrition storefront - catalog, cart, checkout, orders, subscriptions, diet plans.",
    )

    add_observability_middleware(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store"}

    # Public store routes
    app.include_router(catalog_router, prefix="/store")
    app.include_router(cart_router, prefix="/store")
    app.include_router(orders_router, prefix="/store")
    app.include_router(subscriptions_router, prefix="/store")
    app.include_router(diet_plans_router, prefix="/store")

    # Admin routes
    app.include_router(admin_catalog_router, prefix="/admin/store")
    app.include_router(admin_orders_router, prefix="/admin/store")
    app.include_router(admin_diet_plans_router, prefix="/admin/store")

    return app


app = create_app()
