"""
SchoolMap Backend - Request ID Middleware
=========================================

What:  Assigns a correlation id to every request and echoes it back in the
       X-Request-ID response header.
How:   A client-sent X-Request-ID is reused; otherwise a short uuid4 prefix
       is generated. The id lives in a ContextVar, so the exception handlers
       and loggers of the same request can read it without passing it around.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
