"""
StellarExpert indexer client.

The RPC only keeps a retention window of ledgers; creation time, creator and
lifetime invocation counts come from this indexer. Every use is optional:
callers treat failures as "no data".
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx

from stellar_explorer.config import NetworkConfig
from stellar_explorer.core.exceptions import NotFoundError
from stellar_explorer.core.http import get_json

SERVICE = "StellarExpert"


class StellarExpertClient:
    """Async StellarExpert explorer API client for one network."""

    def __init__(self, http: httpx.AsyncClient, base_url: str, network_segment: str) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._segment = network_segment

    @classmethod
    def for_network(cls, http: httpx.AsyncClient, config: NetworkConfig) -> "StellarExpertClient":
        return cls(http, config.expert_url, config.expert_network)

    async def get_contract(self, contract_id: str) -> dict[str, Any] | None:
        """Contract document, or None when the indexer does not know the contract."""
        url = f"{self._base_url}/{self._segment}/contract/{contract_id}"
        try:
            data = await get_json(self._http, url, service=SERVICE)
        except NotFoundError:
            return None
        if not isinstance(data, dict) or not data.get("contract"):
            return None
        return data


def _unix_to_iso(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        ts = float(value)
    except (TypeError, ValueError):
        return None
    if ts <= 0:
        return None
    return (
        datetime.fromtimestamp(ts, tz=timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _validation_status(data: dict[str, Any]) -> str | None:
    validation = data.get("validation")
    if isinstance(validation, dict):
        status = validation.get("status")
        return str(status) if status else None
    if isinstance(validation, str) and validation:
        return validation
    return None


def _count(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def expert_metrics(data: dict[str, Any]) -> dict[str, Any]:
    """Indexer-provided lifecycle metadata in ContractSummary field names."""
    return {
        "createdAt": _unix_to_iso(data.get("created")),
        "creator": data.get("creator") or None,
        "invocations": _count(data.get("invocations")),
        "subinvocations": _count(data.get("subinvocations")),
        "eventsCount": _count(data.get("events")),
        "errorsCount": _count(data.get("errors")),
        "storageEntries": _count(data.get("storage_entries")),
        "validationStatus": _validation_status(data),
    }
