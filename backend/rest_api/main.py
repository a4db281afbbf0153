"""
REST API main application.
Entry point for the FastAPI floor server.
"""

from fastapi import FastAPI

from rest_api.core.cors import configure_cors
from rest_api.core.errors import register_exception_handlers
from rest_api.core.lifespan import lifespan
from rest_api.core.middlewares import register_middlewares
from rest_api.routers import bills_router, health_router, orders_router, tables_router
from shared.config.settings import settings


def create_app() -> FastAPI:
    app = FastAPI(
        title="Floor Ops API",
        description="Restaurant order-to-bill engine",
        version="0.1.0",
        lifespan=lifespan,
    )

    register_middlewares(app)
    configure_cors(app)
    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(orders_router)
    app.include_router(tables_router)
    app.include_router(bills_router)
    return app


app = create_app()


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=True,
    )
