"""
Network statistics over recent ledgers and transactions.

fetch_network_stats() pulls the 50 most recent ledgers and 200 most recent
transactions concurrently. Either source may fail alone; the document then
degrades with a warning. The compute_* functions are pure and operate on
normalized records so they can be tested without a network.

Activity labels are the values the explorer frontend displays verbatim.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from stellar_explorer.core.exceptions import ExplorerError
from stellar_explorer.explorer_logging import get_logger
from stellar_explorer.horizon.amounts import format_xlm, parse_stroops, stroops_to_xlm
from stellar_explorer.horizon.client import HorizonClient
from stellar_explorer.horizon.models import (
    LedgerRecord,
    TransactionRecord,
    normalize_ledger,
    normalize_transaction,
    parse_timestamp,
)

logger = get_logger(__name__)

STATS_LEDGER_LIMIT = 50
STATS_TRANSACTION_LIMIT = 200

TPS_MIN_LEDGERS = 10
TPS_WINDOW_LEDGERS = 20
INTERVAL_MIN_LEDGERS = 5
INTERVAL_MAX_PAIRS = 10
DEFAULT_LEDGER_INTERVAL_SEC = 5.0
RECENT_LEDGER_WINDOW = 10
RECENT_TRANSACTIONS_SHOWN = 15

ACTIVITY_HIGH = "Alta Atividade"
ACTIVITY_MODERATE = "Atividade Moderada"
ACTIVITY_LOW = "Atividade Baixa"
ACTIVITY_STANDBY = "Rede em Standby"
ACTIVITY_DEFAULT = "Baixa Atividade"


@dataclass(frozen=True)
class FeeStats:
    average: float
    minimum: float
    maximum: float
    count: int


def activity_label(tps: float) -> str:
    if tps > 5:
        return ACTIVITY_HIGH
    if tps > 1:
        return ACTIVITY_MODERATE
    if tps > 0.1:
        return ACTIVITY_LOW
    return ACTIVITY_STANDBY


def compute_throughput(ledgers: list[LedgerRecord]) -> tuple[float, str]:
    """
    Transactions per second over the most recent ledgers (newest first).

    Needs at least 10 ledgers; uses up to 20. Returns (0.0, default label) when
    there are too few ledgers or the time window is not positive.
    """
    if len(ledgers) < TPS_MIN_LEDGERS:
        return 0.0, ACTIVITY_DEFAULT
    window = ledgers[:TPS_WINDOW_LEDGERS]
    total_tx = sum(ledger.transaction_count for ledger in window)
    newest = parse_timestamp(window[0].closed_at)
    oldest = parse_timestamp(window[-1].closed_at)
    if newest is None or oldest is None:
        return 0.0, ACTIVITY_DEFAULT
    span_sec = (newest - oldest).total_seconds()
    if span_sec <= 0:
        return 0.0, ACTIVITY_DEFAULT
    tps = total_tx / span_sec
    logger.debug("tps_computed", tps=tps, transactions=total_tx, span_sec=span_sec)
    return tps, activity_label(tps)


def compute_fee_stats(transactions: list[TransactionRecord]) -> FeeStats:
    """Average/min/max fee in XLM over transactions with a strictly positive fee."""
    fees: list[float] = []
    for tx in transactions:
        stroops = parse_stroops(tx.fee_paid)
        if stroops is None or stroops <= 0:
            continue
        fees.append(stroops_to_xlm(stroops))
    if not fees:
        return FeeStats(0.0, 0.0, 0.0, 0)
    return FeeStats(sum(fees) / len(fees), min(fees), max(fees), len(fees))


def compute_average_ledger_interval(ledgers: list[LedgerRecord]) -> float:
    """Mean positive close-time delta over up to 10 consecutive pairs; 5.0 fallback."""
    if len(ledgers) < INTERVAL_MIN_LEDGERS:
        return DEFAULT_LEDGER_INTERVAL_SEC
    deltas: list[float] = []
    for newer, older in zip(ledgers, ledgers[1:]):
        if len(deltas) >= INTERVAL_MAX_PAIRS:
            break
        t_newer = parse_timestamp(newer.closed_at)
        t_older = parse_timestamp(older.closed_at)
        if t_newer is None or t_older is None:
            continue
        diff = (t_newer - t_older).total_seconds()
        if diff > 0:
            deltas.append(diff)
    if not deltas:
        return DEFAULT_LEDGER_INTERVAL_SEC
    return sum(deltas) / len(deltas)


def compute_network_stats(
    ledgers: list[LedgerRecord],
    transactions: list[TransactionRecord],
) -> dict[str, Any]:
    """Build the /api/network-stats document from normalized records (newest first)."""
    latest = ledgers[0] if ledgers else LedgerRecord()
    tps, liveness = compute_throughput(ledgers)
    fees = compute_fee_stats(transactions)
    avg_interval = compute_average_ledger_interval(ledgers)

    recent = ledgers[:RECENT_LEDGER_WINDOW]
    recent_tx = sum(ledger.transaction_count for ledger in recent)
    recent_ops = sum(ledger.operation_count for ledger in recent)

    return {
        "latestLedger": {
            "sequence": latest.sequence,
            "hash": latest.hash,
            "transactionCount": latest.transaction_count,
            "operationCount": latest.operation_count,
            "closedAt": latest.closed_at,
            "totalCoins": latest.total_coins,
            "feePool": latest.fee_pool,
        },
        "networkStats": {
            "averageFee": format_xlm(fees.average),
            "minFee": format_xlm(fees.minimum),
            "maxFee": format_xlm(fees.maximum),
            "transactionsPerSecond": f"{tps:.3f}",
            "totalLumens": latest.total_coins,
            "feePool": latest.fee_pool,
            "baseFee": format_xlm(stroops_to_xlm(latest.base_fee_in_stroops)),
            "baseReserve": format_xlm(stroops_to_xlm(latest.base_reserve_in_stroops)),
            "averageLedgerTime": f"{avg_interval:.1f}",
            "networkLiveness": liveness,
            "transactionsAnalyzed": fees.count,
        },
        "recentTransactions": [
            {
                "id": tx.id,
                "hash": tx.hash,
                "ledger": tx.ledger_attr,
                "sourceAccount": tx.source_account,
                "feePaid": format_xlm(stroops_to_xlm(tx.fee_paid)),
                "operationCount": tx.operation_count,
                "createdAt": tx.created_at,
            }
            for tx in transactions[:RECENT_TRANSACTIONS_SHOWN]
        ],
        "additionalMetrics": {
            "totalLedgers": latest.sequence,
            "recentTransactionCount": recent_tx,
            "recentOperationCount": recent_ops,
            "averageOperationsPerTransaction": (
                f"{recent_ops / recent_tx:.1f}" if recent_tx > 0 else "0"
            ),
            "ledgersAnalyzed": len(recent),
        },
    }


async def fetch_network_stats(horizon: HorizonClient) -> dict[str, Any]:
    """
    Fetch recent ledgers and transactions concurrently and compute network stats.

    One failed source degrades the document: its side is computed from an empty
    list and a ``warning`` names it. When both fail the ledgers error is raised.
    """
    raw_ledgers, raw_transactions = await asyncio.gather(
        horizon.list_ledgers(STATS_LEDGER_LIMIT),
        horizon.list_transactions(STATS_TRANSACTION_LIMIT),
        return_exceptions=True,
    )
    failed: list[str] = []
    for source, result in (("ledgers", raw_ledgers), ("transactions", raw_transactions)):
        if isinstance(result, BaseException):
            if not isinstance(result, ExplorerError):
                raise result
            logger.warning("network_stats_source_failed", source=source, error=result.message)
            failed.append(source)
    if len(failed) == 2:
        raise raw_ledgers

    ledgers = [] if "ledgers" in failed else [normalize_ledger(r) for r in raw_ledgers]
    transactions = [] if "transactions" in failed else [normalize_transaction(r) for r in raw_transactions]
    stats = compute_network_stats(ledgers, transactions)
    if failed:
        stats["warning"] = f"Partial data: could not fetch recent {failed[0]} from Horizon."
    logger.info(
        "network_stats_computed",
        ledgers=len(ledgers),
        transactions=len(transactions),
        tps=stats["networkStats"]["transactionsPerSecond"],
        liveness=stats["networkStats"]["networkLiveness"],
        degraded=bool(failed),
    )
    return stats
