"""
BugLab Backend — Middleware Tests
==================================

Each middleware is mounted on a bare FastAPI app so its behaviour is
observed without services or a database.
"""

import asyncio

import pytest
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from httpx import ASGITransport, AsyncClient

from buglab.middleware.request_id import RequestIDMiddleware, request_id_var
from buglab.middleware.security_headers import SecurityHeadersMiddleware
from buglab.middleware.timeout import RequestTimeoutMiddleware


def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestRequestTimeout:
    def setup_method(self):
        self.cancelled = asyncio.Event()
        app = FastAPI()

        @app.get("/slow")
        async def slow():
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                self.cancelled.set()
                raise
            return {"done": True}

        @app.get("/fast")
        async def fast():
            return {"done": True}

        app.add_middleware(RequestTimeoutMiddleware, timeout_seconds=0.05)
        self.app = app

    @pytest.mark.asyncio
    async def test_slow_request_gets_504_and_handler_is_cancelled(self):
        async with _client(self.app) as client:
            response = await client.get("/slow")

        assert response.status_code == 504
        assert response.json() == {"error": "Request timed out"}
        assert self.cancelled.is_set()

    @pytest.mark.asyncio
    async def test_fast_request_passes_through(self):
        async with _client(self.app) as client:
            response = await client.get("/fast")

        assert response.status_code == 200
        assert response.json() == {"done": True}


class TestSecurityHeaders:
    @pytest.mark.asyncio
    async def test_headers_added_without_overriding_route_values(self):
        app = FastAPI()

        @app.get("/framed")
        async def framed():
            return JSONResponse({"ok": True}, headers={"X-Frame-Options": "SAMEORIGIN"})

        app.add_middleware(SecurityHeadersMiddleware, hsts=True)

        async with _client(app) as client:
            response = await client.get("/framed")

        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["Strict-Transport-Security"].startswith("max-age=")

    @pytest.mark.asyncio
    async def test_no_hsts_by_default(self):
        app = FastAPI()

        @app.get("/plain")
        async def plain():
            return {"ok": True}

        app.add_middleware(SecurityHeadersMiddleware)

        async with _client(app) as client:
            response = await client.get("/plain")

        assert "Strict-Transport-Security" not in response.headers


class TestRequestID:
    @pytest.mark.asyncio
    async def test_generated_id_is_visible_to_handlers(self):
        app = FastAPI()

        @app.get("/rid")
        async def rid():
            return {"rid": request_id_var.get("")}

        app.add_middleware(RequestIDMiddleware)

        async with _client(app) as client:
            response = await client.get("/rid")

        assert response.headers["X-Request-ID"] == response.json()["rid"]
        assert len(response.json()["rid"]) == 8
