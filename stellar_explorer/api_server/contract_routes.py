"""
FastAPI router: Soroban contract detail and contract events.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from stellar_explorer.config import NetworkConfig
from stellar_explorer.soroban.contracts import get_contract_summary
from stellar_explorer.soroban.events import get_contract_events
from stellar_explorer.soroban.expert import StellarExpertClient
from stellar_explorer.soroban.rpc import SorobanRpcClient
from stellar_explorer.api_server.dependencies import (
    get_expert,
    get_network_config,
    get_soroban_rpc,
)

router = APIRouter(prefix="/contracts", tags=["contracts"])


@router.get("/{contract_id}")
async def contract_detail(
    contract_id: str,
    config: NetworkConfig = Depends(get_network_config),
    rpc: SorobanRpcClient = Depends(get_soroban_rpc),
    expert: StellarExpertClient = Depends(get_expert),
) -> dict[str, Any]:
    summary = await get_contract_summary(contract_id, config, rpc, expert)
    return summary.model_dump()


@router.get("/{contract_id}/events")
async def contract_events(
    contract_id: str,
    limit: int | None = Query(None, description="Events per page, 1..200 (default 20)"),
    cursor: str | None = Query(None, description="Opaque cursor from a previous page"),
    startLedger: int | None = Query(None, description="Clamped into the retained ledger range"),
    endLedger: int | None = Query(None, description="Capped at the latest ledger"),
    config: NetworkConfig = Depends(get_network_config),
    rpc: SorobanRpcClient = Depends(get_soroban_rpc),
) -> dict[str, Any]:
    """Recent events plus derived invocations; RPC failures yield an empty page with a warning."""
    page = await get_contract_events(
        contract_id,
        config,
        rpc,
        limit=limit,
        cursor=cursor,
        start_ledger=startLedger,
        end_ledger=endLedger,
    )
    return page.model_dump()
