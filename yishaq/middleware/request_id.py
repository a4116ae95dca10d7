"""Request id propagation.

Every request gets an id, taken from the incoming ``X-Request-ID`` header
when the client sends one and minted as a UUID4 otherwise. The id is kept in
``REQUEST_ID_CTX`` so log records can pick it up without threading the
request object around, and it is echoed back on the response.
"""

import uuid
import logging
import contextvars

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_CTX = contextvars.ContextVar("request_id", default="-")
RESPONSE_HEADER = "X-Request-ID"

logger = logging.getLogger("yishaq.http")


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get(RESPONSE_HEADER) or str(uuid.uuid4())
        request.state.request_id = rid
        token = REQUEST_ID_CTX.set(rid)
        try:
            response = await call_next(request)
            logger.info(
                "request handled",
                extra={"path": request.url.path, "method": request.method, "status": response.status_code},
            )
        finally:
            REQUEST_ID_CTX.reset(token)
        response.headers[RESPONSE_HEADER] = rid
        return response
