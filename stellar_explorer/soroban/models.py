"""
Typed Soroban records: contract summary, events and invocations.

Field names are the camelCase keys the explorer frontend reads.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from stellar_explorer.soroban.expert import expert_metrics
from stellar_explorer.soroban.scval import decode_scval_xdr

SOURCE_RPC = "soroban-rpc"
SOURCE_RPC_AND_EXPERT = "soroban-rpc+stellar-expert"
SOURCE_EXPERT = "stellar-expert"


class StorageEntry(BaseModel):
    key: str
    value: Any = None


class ContractSummary(BaseModel):
    """GET /api/contracts/{contractId} response."""

    contractId: str
    network: str
    status: str = "active"
    executableType: str | None = None
    wasmHash: str | None = None
    codeHash: str | None = None
    codeSize: int | None = Field(None, description="Byte length of the decoded wasm code")
    createdLedger: int | None = None
    createdAt: str | None = None
    creator: str | None = None
    lastModifiedLedger: int | None = None
    liveUntilLedger: int | None = None
    latestLedger: int | None = None
    oldestLedger: int | None = None
    ledgerRetentionWindow: int | None = None
    storageCount: int | None = Field(None, description="Number of decoded instance storage entries")
    storage: list[StorageEntry] = Field(default_factory=list)
    admin: Any = None
    owner: Any = None
    invocations: int | None = None
    subinvocations: int | None = None
    eventsCount: int | None = None
    errorsCount: int | None = None
    storageEntries: int | None = Field(None, description="Indexer-reported storage entry count")
    validationStatus: str | None = None
    source: str = SOURCE_RPC
    warning: str | None = None


class ContractEvent(BaseModel):
    id: str = ""
    type: str = ""
    ledger: int = 0
    ledgerClosedAt: str | None = None
    contractId: str | None = None
    txHash: str | None = None
    inSuccessfulContractCall: bool | None = None
    topic: list[str] = Field(default_factory=list)
    value: str | None = None
    topicJson: list[Any] = Field(default_factory=list)
    valueJson: Any = None


class ContractInvocation(BaseModel):
    txHash: str
    ledger: int = 0
    ledgerClosedAt: str | None = None
    success: bool | None = None


class ContractEventsPage(BaseModel):
    """GET /api/contracts/{contractId}/events response."""

    contractId: str
    network: str
    events: list[ContractEvent] = Field(default_factory=list)
    invocations: list[ContractInvocation] = Field(default_factory=list)
    cursor: str | None = None
    latestLedger: int | None = None
    oldestLedger: int | None = None
    startLedger: int | None = None
    endLedger: int | None = None
    ledgerRetentionWindow: int | None = None
    warning: str | None = None


def _int_or_none(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _xdr_of(value: Any) -> str | None:
    """Event payloads are base64 strings; older RPC versions wrap them as {"xdr": ...}."""
    if isinstance(value, dict):
        value = value.get("xdr")
    return value if isinstance(value, str) and value else None


def normalize_event(raw: dict[str, Any]) -> ContractEvent:
    """Map one getEvents item to a ContractEvent with decoded topics and value."""
    topics = [t for t in (_xdr_of(t) for t in raw.get("topic") or []) if t]
    value = _xdr_of(raw.get("value"))
    success = raw.get("inSuccessfulContractCall")
    return ContractEvent(
        id=str(raw.get("id") or raw.get("pagingToken") or ""),
        type=str(raw.get("type") or ""),
        ledger=_int_or_none(raw.get("ledger")) or 0,
        ledgerClosedAt=raw.get("ledgerClosedAt") or None,
        contractId=raw.get("contractId") or None,
        txHash=raw.get("txHash") or None,
        inSuccessfulContractCall=success if isinstance(success, bool) else None,
        topic=topics,
        value=value,
        topicJson=[decode_scval_xdr(t) for t in topics],
        valueJson=decode_scval_xdr(value),
    )


def build_invocations(events: list[ContractEvent]) -> list[ContractInvocation]:
    """One invocation per distinct transaction hash, in first-seen order."""
    seen: set[str] = set()
    invocations: list[ContractInvocation] = []
    for event in events:
        if not event.txHash or event.txHash in seen:
            continue
        seen.add(event.txHash)
        invocations.append(
            ContractInvocation(
                txHash=event.txHash,
                ledger=event.ledger,
                ledgerClosedAt=event.ledgerClosedAt,
                success=event.inSuccessfulContractCall,
            )
        )
    return invocations


def summary_from_expert(
    contract_id: str,
    network: str,
    data: dict[str, Any],
    *,
    warning: str | None = None,
) -> ContractSummary:
    """Reduced-fidelity summary built only from the indexer document."""
    wasm = data.get("wasm") or None
    return ContractSummary(
        contractId=str(data.get("contract") or contract_id),
        network=network,
        status="active",
        executableType="wasm" if wasm else None,
        wasmHash=wasm,
        codeHash=wasm,
        storageCount=None,
        storage=[],
        source=SOURCE_EXPERT,
        warning=warning,
        **expert_metrics(data),
    )
