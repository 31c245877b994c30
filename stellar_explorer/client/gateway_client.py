"""
Synchronous client for the explorer gateway (requests.Session).

Every call carries the configured network. Search terms are classified
locally first, so an unrecognized term never reaches the gateway.
"""

from __future__ import annotations

from typing import Any

import requests

from stellar_explorer.core.identifiers import (
    SEARCH_TYPE_ACCOUNT,
    SEARCH_TYPE_CONTRACT,
    SEARCH_TYPE_LEDGER,
    SEARCH_TYPE_TRANSACTION,
    classify_search_term,
)
from stellar_explorer.explorer_logging import get_logger

logger = get_logger(__name__)

DEFAULT_GATEWAY_URL = "http://localhost:3001"
DEFAULT_TIMEOUT_SEC = 30.0

_ROUTE_PREFIXES = {
    SEARCH_TYPE_ACCOUNT: "/account/",
    SEARCH_TYPE_CONTRACT: "/contract/",
    SEARCH_TYPE_TRANSACTION: "/tx/",
    SEARCH_TYPE_LEDGER: "/ledger/",
}


class GatewayClientError(Exception):
    """Non-2xx gateway response (or unreachable gateway, status 0)."""

    def __init__(self, status: int, payload: Any) -> None:
        message = payload.get("message") if isinstance(payload, dict) else None
        super().__init__(f"gateway returned {status}: {message or payload}")
        self.status = status
        self.payload = payload


def route_search(term: str) -> str | None:
    """Detail-page route for a search term, or None when it is not recognized."""
    result = classify_search_term(term)
    if result is None:
        return None
    return _ROUTE_PREFIXES[result.type] + result.value


class GatewayClient:
    def __init__(
        self,
        base_url: str = DEFAULT_GATEWAY_URL,
        network: str = "mainnet",
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SEC,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.network = network
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, path: str, **params: Any) -> Any:
        query = {k: v for k, v in params.items() if v is not None}
        query["network"] = self.network
        url = f"{self.base_url}/api{path}"
        try:
            r = self.session.get(url, params=query, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("gateway_unreachable", url=url, error=str(e))
            raise GatewayClientError(0, {"message": str(e)}) from e
        try:
            payload = r.json()
        except ValueError:
            payload = {"message": r.text}
        if not r.ok:
            logger.info("gateway_error", url=url, status=r.status_code)
            raise GatewayClientError(r.status_code, payload)
        return payload

    def health(self) -> dict[str, Any]:
        return self._get("/health")

    def network_stats(self) -> dict[str, Any]:
        return self._get("/network-stats")

    def recent_ledgers(self, limit: int = 20) -> list[dict[str, Any]]:
        return self._get("/ledgers", limit=limit)

    def recent_transactions(self, limit: int = 20) -> list[dict[str, Any]]:
        return self._get("/transactions", limit=limit)

    def recent_operations(self, limit: int = 20) -> list[dict[str, Any]]:
        return self._get("/operations", limit=limit)

    def ledger(self, sequence: int | str) -> dict[str, Any]:
        return self._get(f"/ledgers/{sequence}")

    def transaction(self, tx_hash: str) -> dict[str, Any]:
        return self._get(f"/transactions/{tx_hash}")

    def account(self, account_id: str) -> dict[str, Any]:
        return self._get(f"/accounts/{account_id}")

    def account_transactions(self, account_id: str, limit: int | None = None) -> list[dict[str, Any]]:
        return self._get(f"/accounts/{account_id}/transactions", limit=limit)

    def transaction_operations(self, tx_hash: str) -> list[dict[str, Any]]:
        return self._get(f"/transactions/{tx_hash}/operations")

    def ledger_transactions(self, sequence: int | str, limit: int | None = None) -> list[dict[str, Any]]:
        return self._get(f"/ledgers/{sequence}/transactions", limit=limit)

    def contract(self, contract_id: str) -> dict[str, Any]:
        return self._get(f"/contracts/{contract_id}")

    def contract_events(
        self,
        contract_id: str,
        *,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> dict[str, Any]:
        return self._get(f"/contracts/{contract_id}/events", limit=limit, cursor=cursor)

    def search(self, term: str) -> dict[str, Any]:
        return self._get(f"/search/{term}")
