"""
Upstream HTTP helpers over a shared httpx.AsyncClient.

Maps transport and status outcomes onto the gateway error taxonomy so every
upstream client fails the same way:

- transport failure (DNS, refused, reset, timeout) -> UpstreamUnavailableError (503)
- 404 -> NotFoundError
- 5xx -> UpstreamError (500)
- other 4xx -> UpstreamError carrying that status
- non-JSON body -> UpstreamError
"""

from __future__ import annotations

import time
from typing import Any

import httpx

from stellar_explorer.core.exceptions import (
    NotFoundError,
    UpstreamError,
    UpstreamUnavailableError,
)
from stellar_explorer.explorer_logging import get_logger

logger = get_logger(__name__)

DEFAULT_HEADERS = {"Accept": "application/json", "User-Agent": "stellar-explorer-gateway/0.1"}


def build_http_client(timeout_sec: float) -> httpx.AsyncClient:
    """Shared async client with an explicit timeout (expiry is treated as unavailability)."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_sec),
        headers=DEFAULT_HEADERS,
        follow_redirects=True,
    )


def _raise_for_status(response: httpx.Response, service: str, url: str) -> None:
    status = response.status_code
    if status < 400:
        return
    detail = response.text[:300] if response.content else ""
    if status == 404:
        raise NotFoundError(f"{service} returned 404", upstream_status=status)
    if status >= 500:
        raise UpstreamError(f"{service} returned {status}", upstream_status=status)
    raise UpstreamError(
        f"{service} rejected the request ({status}): {detail}".rstrip(": "),
        status_code=status,
        upstream_status=status,
    )


async def request_json(
    http: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    service: str,
    params: dict[str, Any] | None = None,
    json: Any = None,
) -> Any:
    """Issue one upstream request and return the decoded JSON body."""
    t0 = time.perf_counter()
    try:
        response = await http.request(method, url, params=params, json=json)
    except httpx.TimeoutException as e:
        logger.warning("upstream_timeout", service=service, url=url, error=str(e))
        raise UpstreamUnavailableError(f"{service} timed out", service=service) from e
    except httpx.TransportError as e:
        logger.warning("upstream_unreachable", service=service, url=url, error=str(e))
        raise UpstreamUnavailableError(f"{service} is unreachable", service=service) from e
    elapsed_ms = round((time.perf_counter() - t0) * 1000, 2)
    logger.debug(
        "upstream_response",
        service=service,
        method=method,
        url=url,
        status=response.status_code,
        elapsed_ms=elapsed_ms,
    )
    _raise_for_status(response, service, url)
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(f"{service} returned a non-JSON body", service=service) from e


async def get_json(
    http: httpx.AsyncClient,
    url: str,
    *,
    service: str,
    params: dict[str, Any] | None = None,
) -> Any:
    return await request_json(http, "GET", url, service=service, params=params)


async def post_json(
    http: httpx.AsyncClient,
    url: str,
    body: Any,
    *,
    service: str,
) -> Any:
    return await request_json(http, "POST", url, service=service, json=body)
