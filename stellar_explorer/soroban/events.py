"""
Contract events and invocations from Soroban RPC.

Events are best-effort telemetry: after input validation, any RPC failure
yields an empty page with a warning instead of an error status.
"""

from __future__ import annotations

from typing import Any

from stellar_explorer.config import NetworkConfig
from stellar_explorer.core.exceptions import InvalidIdentifierError
from stellar_explorer.explorer_logging import get_logger
from stellar_explorer.soroban.contracts import validate_contract_id
from stellar_explorer.soroban.models import (
    ContractEventsPage,
    build_invocations,
    normalize_event,
)
from stellar_explorer.soroban.rpc import RpcHealth, SorobanRpcClient

logger = get_logger(__name__)

DEFAULT_EVENTS_LIMIT = 20
MAX_EVENTS_LIMIT = 200

WARNING_EVENTS_UNAVAILABLE = (
    "Events are temporarily unavailable: Soroban RPC did not respond. Try again shortly."
)


def validate_events_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_EVENTS_LIMIT
    if limit < 1 or limit > MAX_EVENTS_LIMIT:
        raise InvalidIdentifierError(
            f"Invalid limit. It must be between 1 and {MAX_EVENTS_LIMIT}.",
            provided=limit,
        )
    return limit


def resolve_ledger_range(
    health: RpcHealth,
    start_ledger: int | None,
    end_ledger: int | None,
) -> tuple[int, int | None]:
    """
    Start/end ledgers for an events scan inside the RPC's retained range.

    Default start is max(latest - window + 1, oldest), or latest when the RPC
    reports no range at all. An explicit start outside
    [oldest, latest] is clamped into it. An explicit end is capped at latest and
    dropped when it falls before start.
    """
    latest = health.latest_ledger
    oldest = health.oldest_ledger
    window = health.ledger_retention_window

    candidates = [oldest] if oldest > 0 else []
    if window > 0 and latest > 0:
        candidates.append(latest - window + 1)
    if not candidates and latest > 0:
        # range unknown: start at the tip
        candidates.append(latest)
    default_start = max(max(candidates, default=1), 1)
    if latest > 0:
        default_start = min(default_start, latest)

    if start_ledger is None:
        start = default_start
    else:
        low = max(oldest, 1)
        high = latest if latest > 0 else start_ledger
        start = min(max(start_ledger, low), max(high, low))

    end: int | None = None
    if end_ledger is not None:
        end = min(end_ledger, latest) if latest > 0 else end_ledger
        if end < start:
            end = None
    return start, end


async def get_contract_events(
    contract_id: str,
    config: NetworkConfig,
    rpc: SorobanRpcClient,
    *,
    limit: int | None = None,
    cursor: str | None = None,
    start_ledger: int | None = None,
    end_ledger: int | None = None,
) -> ContractEventsPage:
    """Fetch one page of contract events plus the invocations derived from them."""
    contract_id = validate_contract_id(contract_id)
    limit = validate_events_limit(limit)
    cursor = (cursor or "").strip() or None
    network = config.network.value
    page: dict[str, Any] = {"contractId": contract_id, "network": network}

    try:
        health = await rpc.get_health()
        if not health.latest_ledger:
            # older RPC builds omit the range from getHealth
            latest = await rpc.get_latest_ledger()
            health = RpcHealth.from_result(
                {
                    "status": health.status,
                    "latestLedger": latest,
                    "oldestLedger": health.oldest_ledger,
                    "ledgerRetentionWindow": health.ledger_retention_window,
                }
            )
    except Exception as e:
        logger.warning("contract_events_health_failed", contract_id=contract_id, error=str(e))
        return ContractEventsPage(**page, warning=WARNING_EVENTS_UNAVAILABLE)

    start, end = resolve_ledger_range(health, start_ledger, end_ledger)
    page.update(
        latestLedger=health.latest_ledger or None,
        oldestLedger=health.oldest_ledger or None,
        ledgerRetentionWindow=health.ledger_retention_window or None,
        startLedger=None if cursor else start,
        endLedger=None if cursor else end,
    )

    try:
        result = await rpc.get_events(
            contract_id,
            limit=limit,
            cursor=cursor,
            start_ledger=start,
            end_ledger=end,
        )
        events = [normalize_event(r) for r in result.get("events") or [] if isinstance(r, dict)]
        if result.get("latestLedger"):
            page["latestLedger"] = int(result["latestLedger"])
    except Exception as e:
        logger.warning("contract_events_fetch_failed", contract_id=contract_id, error=str(e))
        return ContractEventsPage(**page, warning=WARNING_EVENTS_UNAVAILABLE)

    next_cursor = result.get("cursor") or None
    if next_cursor is None and len(events) >= limit and events:
        next_cursor = events[-1].id or None

    logger.info(
        "contract_events_ok",
        contract_id=contract_id,
        network=network,
        events=len(events),
        cursor=bool(cursor),
    )
    return ContractEventsPage(
        **page,
        events=events,
        invocations=build_invocations(events),
        cursor=next_cursor,
    )
