"""
BugLab Backend — Request Timeout Middleware
============================================

What:  Cancels requests that run longer than `request_timeout_seconds`.
How:   Plain ASGI middleware around `asyncio.wait_for`. Cancellation reaches
       the handler's open transaction, which rolls back before its session
       closes; the client gets 504 with the usual error body.

If the handler already started streaming a response, the connection is
closed as-is instead of sending a second response start.
"""

import asyncio
import logging

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from buglab.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RequestTimeoutMiddleware:
    def __init__(self, app: ASGIApp, timeout_seconds: float = 30.0):
        self.app = app
        self.timeout_seconds = timeout_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(
                self.app(scope, receive, send_wrapper),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "[%s] %s %s timed out after %.1fs",
                request_id_var.get(""),
                scope.get("method", ""),
                scope.get("path", ""),
                self.timeout_seconds,
            )
            if response_started:
                return
            response = JSONResponse(status_code=504, content={"error": "Request timed out"})
            await response(scope, receive, send)
