"""
HTTP middlewares for the FastAPI application.
Content-type validation, response headers and request correlation.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from shared.infrastructure.correlation import CorrelationIdMiddleware


class ResponseHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add hardening headers to every response.

    Headers added:
    - X-Content-Type-Options: nosniff
    - X-Frame-Options: DENY
    - Cache-Control: no-store (floor state changes on every request)
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers.setdefault("Cache-Control", "no-store")
        if "server" in response.headers:
            del response.headers["server"]
        return response


class ContentTypeValidationMiddleware(BaseHTTPMiddleware):
    """
    Validate Content-Type for requests with body.

    POST/PATCH requests that send a body must use application/json.
    Returns 415 Unsupported Media Type otherwise.
    """

    METHODS_WITH_BODY = {"POST", "PUT", "PATCH"}
    EXEMPT_PATHS = {"/api/health"}

    async def dispatch(self, request: Request, call_next):
        if request.method in self.METHODS_WITH_BODY:
            if not any(request.url.path.startswith(p) for p in self.EXEMPT_PATHS):
                content_type = request.headers.get("content-type", "")
                if content_type and not content_type.startswith("application/json"):
                    return JSONResponse(
                        status_code=415,
                        content={
                            "detail": "Unsupported Media Type. Use application/json",
                            "code": "UNSUPPORTED_MEDIA_TYPE",
                        },
                    )
        return await call_next(request)


def register_middlewares(app: FastAPI) -> None:
    """
    Register the HTTP middlewares on the FastAPI application.

    Middlewares run in reverse order of registration: the correlation id is
    bound first so every later log line of the request carries it.
    """
    app.add_middleware(ResponseHeadersMiddleware)
    app.add_middleware(ContentTypeValidationMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
