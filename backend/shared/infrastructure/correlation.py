"""
Request correlation ids.

Every log line written while serving a request carries that request's id, so
an order placement can be followed from the router through the bill update
to the notification publish.
"""

import uuid
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Take the caller's X-Request-ID (or mint a UUID when it is missing or
    longer than MAX_REQUEST_ID_LENGTH) and echo it on the response.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER, "")
        if not request_id or len(request_id) > MAX_REQUEST_ID_LENGTH:
            request_id = str(uuid.uuid4())

        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)


class CorrelationIdFilter:
    """Logging filter stamping ``record.request_id`` ("-" outside a request)."""

    def filter(self, record) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True
