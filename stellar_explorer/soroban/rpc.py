"""
Soroban JSON-RPC client.

Builds JSON-RPC 2.0 envelopes and posts them over the shared httpx client.
Error envelopes become RpcError; transport failures become
UpstreamUnavailableError (see core.http).
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any

import httpx
from stellar_sdk import Address
from stellar_sdk import xdr as stellar_xdr

from stellar_explorer.core.exceptions import RpcError
from stellar_explorer.core.http import post_json
from stellar_explorer.explorer_logging import get_logger

logger = get_logger(__name__)

SERVICE = "Soroban RPC"

_request_ids = itertools.count(1)


def _build_rpc_body(method: str, params: dict[str, Any] | None) -> dict[str, Any]:
    body: dict[str, Any] = {"jsonrpc": "2.0", "id": next(_request_ids), "method": method}
    if params is not None:
        body["params"] = params
    return body


def contract_instance_key(contract_id: str) -> str:
    """Base64 LedgerKey XDR for a contract's persistent instance entry."""
    key = stellar_xdr.LedgerKey(
        type=stellar_xdr.LedgerEntryType.CONTRACT_DATA,
        contract_data=stellar_xdr.LedgerKeyContractData(
            contract=Address(contract_id).to_xdr_sc_address(),
            key=stellar_xdr.SCVal(type=stellar_xdr.SCValType.SCV_LEDGER_KEY_CONTRACT_INSTANCE),
            durability=stellar_xdr.ContractDataDurability.PERSISTENT,
        ),
    )
    return key.to_xdr()


def contract_code_key(wasm_hash: str) -> str:
    """Base64 LedgerKey XDR for the contract-code entry with the given hex wasm hash."""
    key = stellar_xdr.LedgerKey(
        type=stellar_xdr.LedgerEntryType.CONTRACT_CODE,
        contract_code=stellar_xdr.LedgerKeyContractCode(
            hash=stellar_xdr.Hash(bytes.fromhex(wasm_hash)),
        ),
    )
    return key.to_xdr()


@dataclass(frozen=True)
class RpcHealth:
    """getHealth result: status plus the ledger range the RPC currently retains."""

    status: str
    latest_ledger: int
    oldest_ledger: int
    ledger_retention_window: int

    @classmethod
    def from_result(cls, result: dict[str, Any]) -> "RpcHealth":
        latest = int(result.get("latestLedger") or 0)
        oldest = int(result.get("oldestLedger") or 0)
        window = int(result.get("ledgerRetentionWindow") or 0)
        if not window and latest and oldest:
            window = latest - oldest + 1
        if not oldest and latest and window:
            oldest = max(latest - window + 1, 1)
        return cls(
            status=str(result.get("status") or "unknown"),
            latest_ledger=latest,
            oldest_ledger=oldest,
            ledger_retention_window=window,
        )


class SorobanRpcClient:
    """Async Soroban RPC client bound to one endpoint (one network)."""

    def __init__(self, http: httpx.AsyncClient, url: str) -> None:
        if not url.strip():
            raise ValueError("url must be non-empty")
        self._http = http
        self._url = url.strip()

    @property
    def url(self) -> str:
        return self._url

    async def call(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Invoke one JSON-RPC method and return its `result`."""
        data = await post_json(self._http, self._url, _build_rpc_body(method, params), service=SERVICE)
        if not isinstance(data, dict):
            raise RpcError(f"{SERVICE} returned an unexpected document for {method}", method=method)
        err = data.get("error")
        if err:
            message = err.get("message") if isinstance(err, dict) else str(err)
            code = err.get("code") if isinstance(err, dict) else None
            logger.warning("rpc_error", method=method, code=code, error=message)
            raise RpcError(f"{SERVICE} error in {method}: {message}", code=code, method=method)
        return data.get("result")

    async def get_health(self) -> RpcHealth:
        result = await self.call("getHealth")
        return RpcHealth.from_result(result if isinstance(result, dict) else {})

    async def get_latest_ledger(self) -> int:
        result = await self.call("getLatestLedger")
        if not isinstance(result, dict):
            return 0
        return int(result.get("sequence") or 0)

    async def get_ledger_entries(self, keys: list[str]) -> dict[str, Any]:
        """Fetch ledger entries; result has `entries` (possibly empty) and `latestLedger`."""
        result = await self.call("getLedgerEntries", {"keys": keys})
        if not isinstance(result, dict):
            return {"entries": [], "latestLedger": None}
        result.setdefault("entries", [])
        if result["entries"] is None:
            result["entries"] = []
        return result

    async def get_events(
        self,
        contract_id: str,
        *,
        limit: int,
        cursor: str | None = None,
        start_ledger: int | None = None,
        end_ledger: int | None = None,
    ) -> dict[str, Any]:
        """
        Fetch contract events. A cursor takes precedence over the ledger range:
        when given, startLedger/endLedger are not sent.
        """
        params: dict[str, Any] = {
            "filters": [{"type": "contract", "contractIds": [contract_id]}],
            "pagination": {"limit": limit},
        }
        if cursor:
            params["pagination"]["cursor"] = cursor
        else:
            if start_ledger is not None:
                params["startLedger"] = start_ledger
            if end_ledger is not None:
                params["endLedger"] = end_ledger
        result = await self.call("getEvents", params)
        return result if isinstance(result, dict) else {}
