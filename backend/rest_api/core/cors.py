"""
CORS for the staff tablet and kitchen display front ends.

The API carries no cookies or auth headers, so credentials are not allowed.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config.settings import Settings, settings


# Vite dev servers of the staff tablet (5173) and kitchen display (5174)
DEV_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:5174",
]


def cors_origins(config: Settings) -> list[str]:
    """ALLOWED_ORIGINS when set (production requires it), the dev servers otherwise."""
    origins = [o.strip() for o in config.allowed_origins.split(",") if o.strip()]
    return origins or DEV_ORIGINS


def configure_cors(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(settings),
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
