"""Fixtures for route tests: a bare app per router and a seeded database."""

from __future__ import annotations

import httpx
import pytest_asyncio
from fastapi import FastAPI

from craftshare.web.errors import register_error_handlers


def build_app(*routers) -> FastAPI:
    """Create a test FastAPI app with the given routers and error handlers."""
    test_app = FastAPI()
    register_error_handlers(test_app)
    for router in routers:
        test_app.include_router(router)
    return test_app


@pytest_asyncio.fixture()
async def make_client():
    """Factory for AsyncClients bound to a router app."""
    clients: list[httpx.AsyncClient] = []

    def _make(*routers) -> httpx.AsyncClient:
        client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=build_app(*routers)),
            base_url="http://testserver",
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.aclose()
