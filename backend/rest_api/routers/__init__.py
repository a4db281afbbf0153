"""
HTTP routers. Thin controllers: parse the request, call one domain service
method, return its output.
"""

from rest_api.routers.bills import router as bills_router
from rest_api.routers.health import router as health_router
from rest_api.routers.orders import router as orders_router
from rest_api.routers.tables import router as tables_router

__all__ = ["bills_router", "health_router", "orders_router", "tables_router"]
