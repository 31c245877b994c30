"""
Horizon REST client.

Thin async wrapper over the Horizon endpoints the explorer needs. Returns raw
upstream documents; normalization happens in horizon.models. Errors follow the
gateway taxonomy from core.http.
"""

from __future__ import annotations

from typing import Any

import httpx

from stellar_explorer.core.exceptions import UpstreamError
from stellar_explorer.core.http import get_json

SERVICE = "Horizon"


class HorizonClient:
    """Async Horizon client bound to one base URL (one network)."""

    def __init__(self, http: httpx.AsyncClient, base_url: str) -> None:
        if not base_url.strip():
            raise ValueError("base_url must be non-empty")
        self._http = http
        self._base_url = base_url.rstrip("/")

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        data = await get_json(self._http, f"{self._base_url}{path}", service=SERVICE, params=params)
        if not isinstance(data, dict):
            raise UpstreamError(f"{SERVICE} returned an unexpected document for {path}")
        return data

    async def _records(self, path: str, limit: int, order: str = "desc") -> list[dict[str, Any]]:
        data = await self._get(path, {"order": order, "limit": limit})
        records = (data.get("_embedded") or {}).get("records") or []
        return [r for r in records if isinstance(r, dict)][:limit]

    async def list_ledgers(self, limit: int) -> list[dict[str, Any]]:
        return await self._records("/ledgers", limit)

    async def list_transactions(self, limit: int) -> list[dict[str, Any]]:
        return await self._records("/transactions", limit)

    async def list_operations(self, limit: int) -> list[dict[str, Any]]:
        return await self._records("/operations", limit)

    async def get_ledger(self, sequence: int | str) -> dict[str, Any]:
        return await self._get(f"/ledgers/{sequence}")

    async def get_transaction(self, tx_hash: str) -> dict[str, Any]:
        return await self._get(f"/transactions/{tx_hash}")

    async def get_account(self, account_id: str) -> dict[str, Any]:
        return await self._get(f"/accounts/{account_id}")

    async def list_account_transactions(self, account_id: str, limit: int) -> list[dict[str, Any]]:
        return await self._records(f"/accounts/{account_id}/transactions", limit)

    async def list_transaction_operations(self, tx_hash: str, limit: int) -> list[dict[str, Any]]:
        """Operations in application order (ascending)."""
        return await self._records(f"/transactions/{tx_hash}/operations", limit, order="asc")

    async def list_ledger_transactions(self, sequence: int | str, limit: int) -> list[dict[str, Any]]:
        return await self._records(f"/ledgers/{sequence}/transactions", limit)
