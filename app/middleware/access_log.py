"""Access-log middleware: one log line per state-changing request.

Business transitions are audited inside the services (see AuditEntry); this
only records who hit which write endpoint, the outcome and how long it took.
"""


import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app.access")

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS:
            actor_id = request.headers.get("x-actor-id") or "anonymous"
            level = logging.WARNING if response.status_code >= 500 else logging.INFO
            logger.log(
                level,
                "%s %s -> %d (%dms) actor=%s",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                actor_id,
            )

        return response
