"""
Pytest fixtures for the explorer gateway.

Upstream services (Horizon, Soroban RPC, StellarExpert) are faked with an
httpx.MockTransport injected through the get_http_client dependency override.
Any request the test did not register fails as a connection error.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import httpx
import pytest

MAINNET_HORIZON = "https://horizon.example.test"
TESTNET_HORIZON = "https://horizon-testnet.example.test"
MAINNET_RPC = "https://rpc-mainnet.example.test"
TESTNET_RPC = "https://rpc-testnet.example.test"
EXPERT_API = "https://expert.example.test/explorer"


def _url_of(request: httpx.Request) -> str:
    """Scheme, host and path without query string or trailing slash."""
    return f"{request.url.scheme}://{request.url.host}{request.url.path}".rstrip("/")


class FakeUpstream:
    """Registry of canned upstream responses keyed by URL (and JSON-RPC method)."""

    def __init__(self) -> None:
        self._routes: dict[str, dict[str, Any]] = {}
        self._rpc: dict[tuple[str, str], dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.rpc_calls: list[dict[str, Any]] = []

    def get(self, url: str, json_body: Any = None, *, status: int = 200, exc: type | None = None) -> None:
        self._routes[url] = {"json": json_body, "status": status, "exc": exc}

    def rpc(
        self,
        url: str,
        method: str,
        result: Any = None,
        *,
        error: dict[str, Any] | None = None,
        exc: type | None = None,
    ) -> None:
        self._rpc[(url, method)] = {"result": result, "error": error, "exc": exc}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = _url_of(request)
        if request.method == "POST":
            body = json.loads(request.content)
            self.rpc_calls.append({"url": url, **body})
            canned = self._rpc.get((url, body.get("method")))
            if canned is None:
                raise httpx.ConnectError(f"unregistered rpc {body.get('method')} at {url}", request=request)
            if canned["exc"] is not None:
                raise canned["exc"]("simulated failure", request=request)
            envelope: dict[str, Any] = {"jsonrpc": "2.0", "id": body.get("id")}
            if canned["error"] is not None:
                envelope["error"] = canned["error"]
            elif callable(canned["result"]):
                envelope["result"] = canned["result"](body.get("params"))
            else:
                envelope["result"] = canned["result"]
            return httpx.Response(200, json=envelope)

        canned = self._routes.get(url)
        if canned is None:
            raise httpx.ConnectError(f"unregistered url {url}", request=request)
        if canned["exc"] is not None:
            raise canned["exc"]("simulated failure", request=request)
        return httpx.Response(canned["status"], json=canned["json"])

    def params_for(self, url: str) -> dict[str, str]:
        """Query params of the last request made to url."""
        for request in reversed(self.requests):
            if _url_of(request) == url:
                return dict(request.url.params)
        raise AssertionError(f"no request made to {url}")


@pytest.fixture
def settings(tmp_path):
    from stellar_explorer.config import Settings

    return Settings(
        horizon_mainnet_url=MAINNET_HORIZON,
        horizon_testnet_url=TESTNET_HORIZON,
        soroban_rpc_mainnet_url=MAINNET_RPC,
        soroban_rpc_testnet_url=TESTNET_RPC,
        expert_api_url=EXPERT_API,
        projects_root=Path(tmp_path / "projects"),
        upstream_timeout_sec=5.0,
        api_host="127.0.0.1",
        api_port=3001,
        cors_origins=("*",),
    )


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def http_client(upstream):
    """AsyncClient whose transport answers from the FakeUpstream registry."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    yield client
    asyncio.run(client.aclose())


@pytest.fixture
def app(settings, http_client):
    from stellar_explorer.api_server.dependencies import get_http_client
    from stellar_explorer.api_server.server import create_app

    application = create_app(settings)
    application.dependency_overrides[get_http_client] = lambda: http_client
    return application


@pytest.fixture
def client(app):
    """FastAPI TestClient over the gateway with faked upstreams."""
    from fastapi.testclient import TestClient

    return TestClient(app)
