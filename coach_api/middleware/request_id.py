import json
import logging
import time
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .routes import route_label


access_logger = logging.getLogger("speech_coach.api.access")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tags each request with an X-Request-Id and writes one JSON access line.

    The id is taken from the incoming header or generated, kept on
    request.state for handlers (and forwarded to the chat provider), and echoed
    back. The access line carries the matched route template and the session
    id when the route has one; 5xx responses are logged at error level.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable):
        t0 = time.perf_counter()
        req_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        request.state.request_id = req_id

        response = await call_next(request)
        response.headers["X-Request-Id"] = req_id

        path_params = request.scope.get("path_params") or {}
        entry = {
            "event": "http_request",
            "requestId": req_id,
            "method": request.method,
            "route": route_label(request.scope),
            "path": request.url.path,
            "sessionId": path_params.get("session_id"),
            "status": response.status_code,
            "contentLength": request.headers.get("content-length"),
            "latency_ms": int((time.perf_counter() - t0) * 1000),
        }
        level = logging.ERROR if response.status_code >= 500 else logging.INFO
        access_logger.log(level, json.dumps(entry))

        return response
