import asyncio
import logging
import time
from typing import Optional

from starlette.responses import JSONResponse

import config
import metrics


logger = logging.getLogger(__name__)


class TimeoutMiddleware:
    """
    Bounds every HTTP request by `timeout` seconds, REQUEST_TIMEOUT_MS when not given.
    On expiry the handler is cancelled, which rolls back any open
    transaction, and the client gets 504 unless a response already started.
    """

    def __init__(self, app, timeout: Optional[float] = None):
        self.app = app
        self.timeout = timeout

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        timeout = self.timeout
        if timeout is None:
            timeout = config.REQUEST_TIMEOUT_MS / 1000

        response_started = False

        async def send_wrapper(message):
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("%s %s timed out after %.3fs", scope["method"], scope["path"], timeout)
            if response_started:
                return
            response = JSONResponse(
                status_code=504,
                content={"error": {"code": "TIMEOUT", "message": "request timed out"}}
            )
            await response(scope, receive, send)


class MetricsMiddleware:
    """Counts requests and observes their duration by method, route and status"""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        start = time.perf_counter()
        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration = time.perf_counter() - start
            # route template keeps label cardinality bounded
            route = scope.get("route")
            path = getattr(route, "path", scope["path"])
            labels = (scope["method"], path, str(status_code))
            metrics.HTTP_REQUESTS.labels(*labels).inc()
            metrics.HTTP_REQUEST_DURATION.labels(*labels).observe(duration)
            logger.debug("%s %s %s - %.3fs", scope["method"], scope["path"], status_code, duration)
