"""
Contract detail lookup: Soroban RPC first, StellarExpert indexer as fallback.

Flow for a validated contract id:

1. getHealth and getLedgerEntries(instance key) run concurrently; health only
   feeds retention-window metadata and may fail without consequence.
2. RPC failure -> indexer summary flagged with a warning; if the indexer has
   nothing either, the RPC error is raised.
3. Instance absent -> indexer summary; if the indexer has nothing, 404.
4. Instance present -> decode executable and storage, fetch wasm code size
   (non-fatal), scan storage for admin/owner, merge indexer metadata when
   available.
"""

from __future__ import annotations

import asyncio
from typing import Any

from stellar_sdk import StrKey
from stellar_sdk import xdr as stellar_xdr

from stellar_explorer.config import NetworkConfig
from stellar_explorer.core.exceptions import (
    ExplorerError,
    InvalidIdentifierError,
    NotFoundError,
    UpstreamError,
)
from stellar_explorer.core.identifiers import is_valid_contract_id
from stellar_explorer.explorer_logging import get_logger
from stellar_explorer.soroban.expert import StellarExpertClient, expert_metrics
from stellar_explorer.soroban.models import (
    SOURCE_RPC,
    SOURCE_RPC_AND_EXPERT,
    ContractSummary,
    StorageEntry,
    summary_from_expert,
)
from stellar_explorer.soroban.rpc import (
    RpcHealth,
    SorobanRpcClient,
    contract_code_key,
    contract_instance_key,
)
from stellar_explorer.soroban.scval import (
    ADMIN_KEYS,
    OWNER_KEYS,
    decode_storage,
    describe_executable,
    find_governance_field,
)

logger = get_logger(__name__)

CONTRACT_ID_FORMAT = 'must start with "C" and be 56 characters long'

WARNING_RPC_UNAVAILABLE = (
    "Soroban RPC is unavailable; showing reduced data from the StellarExpert indexer."
)
WARNING_INSTANCE_MISSING = (
    "Contract instance not returned by Soroban RPC; showing data from the StellarExpert indexer."
)


def validate_contract_id(contract_id: str | None) -> str:
    """Return the canonical (upper-case) contract id or raise InvalidIdentifierError."""
    value = (contract_id or "").strip()
    if not is_valid_contract_id(value):
        raise InvalidIdentifierError(
            f"Invalid contract ID. It {CONTRACT_ID_FORMAT}.",
            provided=contract_id,
        )
    value = value.upper()
    if not StrKey.is_valid_contract(value):
        raise InvalidIdentifierError(
            "Invalid contract ID: checksum does not match.",
            provided=contract_id,
        )
    return value


async def _expert_summary(
    expert: StellarExpertClient,
    contract_id: str,
    network: str,
    warning: str,
) -> ContractSummary | None:
    try:
        data = await expert.get_contract(contract_id)
    except ExplorerError as e:
        logger.warning("expert_lookup_failed", contract_id=contract_id, error=str(e))
        return None
    if data is None:
        return None
    logger.info("contract_summary_from_expert", contract_id=contract_id, network=network)
    return summary_from_expert(contract_id, network, data, warning=warning)


async def _optional_expert(expert: StellarExpertClient, contract_id: str) -> dict[str, Any] | None:
    try:
        return await expert.get_contract(contract_id)
    except ExplorerError as e:
        logger.info("expert_metadata_skipped", contract_id=contract_id, error=str(e))
        return None


async def _code_details(rpc: SorobanRpcClient, wasm_hash: str | None) -> tuple[int | None, str | None]:
    """(code size in bytes, code hash hex) for a wasm hash; (None, None) on any failure."""
    if not wasm_hash:
        return None, None
    try:
        result = await rpc.get_ledger_entries([contract_code_key(wasm_hash)])
        entries = result.get("entries") or []
        if not entries:
            logger.info("contract_code_missing", wasm_hash=wasm_hash)
            return None, None
        data = stellar_xdr.LedgerEntryData.from_xdr(entries[0]["xdr"])
        code_entry = data.contract_code
        return len(code_entry.code), code_entry.hash.hash.hex()
    except Exception as e:
        logger.warning("contract_code_fetch_failed", wasm_hash=wasm_hash, error=str(e))
        return None, None


def _decode_instance(entry: dict[str, Any]) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    """(executable description, storage entries) from a getLedgerEntries instance entry."""
    try:
        data = stellar_xdr.LedgerEntryData.from_xdr(entry["xdr"])
        instance = data.contract_data.val.instance
        if instance is None:
            raise ValueError("ledger entry is not a contract instance")
        return describe_executable(instance.executable), decode_storage(instance.storage)
    except Exception as e:
        logger.warning("contract_instance_decode_failed", error=str(e))
        raise UpstreamError("Could not decode the contract instance returned by Soroban RPC.") from e


def _int_or_none(value: Any) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


async def get_contract_summary(
    contract_id: str,
    config: NetworkConfig,
    rpc: SorobanRpcClient,
    expert: StellarExpertClient,
) -> ContractSummary:
    """Build the contract summary for one network; see module docstring for the fallback rules."""
    contract_id = validate_contract_id(contract_id)
    network = config.network.value
    instance_key = contract_instance_key(contract_id)

    health_result, entries_result = await asyncio.gather(
        rpc.get_health(),
        rpc.get_ledger_entries([instance_key]),
        return_exceptions=True,
    )
    health: RpcHealth | None = None
    if isinstance(health_result, RpcHealth):
        health = health_result
    elif isinstance(health_result, BaseException):
        if not isinstance(health_result, Exception):
            raise health_result
        logger.info("contract_health_unavailable", contract_id=contract_id, error=str(health_result))

    if isinstance(entries_result, BaseException):
        if not isinstance(entries_result, ExplorerError):
            raise entries_result
        logger.warning("contract_rpc_failed", contract_id=contract_id, error=str(entries_result))
        summary = await _expert_summary(expert, contract_id, network, WARNING_RPC_UNAVAILABLE)
        if summary is None:
            raise entries_result
        return summary

    entries = entries_result.get("entries") or []
    if not entries:
        summary = await _expert_summary(expert, contract_id, network, WARNING_INSTANCE_MISSING)
        if summary is None:
            raise NotFoundError(
                "Contract not found on this network.",
                contractId=contract_id,
                network=network,
            )
        return summary

    entry = entries[0]
    executable, storage = _decode_instance(entry)
    wasm_hash = executable.get("wasmHash")

    (code_size, code_hash), expert_data = await asyncio.gather(
        _code_details(rpc, wasm_hash),
        _optional_expert(expert, contract_id),
    )

    latest_ledger = _int_or_none(entries_result.get("latestLedger"))
    summary = ContractSummary(
        contractId=contract_id,
        network=network,
        status="active",
        executableType=executable.get("type"),
        wasmHash=wasm_hash,
        codeHash=code_hash,
        codeSize=code_size,
        lastModifiedLedger=_int_or_none(entry.get("lastModifiedLedgerSeq")),
        liveUntilLedger=_int_or_none(entry.get("liveUntilLedgerSeq")),
        latestLedger=health.latest_ledger if health and health.latest_ledger else latest_ledger,
        oldestLedger=health.oldest_ledger if health else None,
        ledgerRetentionWindow=health.ledger_retention_window if health else None,
        storageCount=len(storage),
        storage=[StorageEntry(**item) for item in storage],
        admin=find_governance_field(storage, ADMIN_KEYS),
        owner=find_governance_field(storage, OWNER_KEYS),
        source=SOURCE_RPC,
    )

    if expert_data:
        for field, value in expert_metrics(expert_data).items():
            if value is not None and getattr(summary, field) is None:
                setattr(summary, field, value)
        summary.source = SOURCE_RPC_AND_EXPERT

    logger.info(
        "contract_summary_ok",
        contract_id=contract_id,
        network=network,
        executable=summary.executableType,
        storage_count=summary.storageCount,
        source=summary.source,
    )
    return summary
