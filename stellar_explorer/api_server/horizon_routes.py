"""
FastAPI router: network stats, recent listings, item lookups and search over Horizon.

Identifiers are validated before any upstream call. Single-item lookups
surface upstream failures as 404 / 500 / 503 with route-specific context;
transaction lookups fall back from mainnet to testnet and always report the
mainnet error when both fail.
"""

from __future__ import annotations

from typing import Any

import httpx
from fastapi import APIRouter, Depends, Path, Query

from stellar_explorer.config import Network, Settings
from stellar_explorer.core.exceptions import (
    ExplorerError,
    InvalidIdentifierError,
    NotFoundError,
    UpstreamError,
    UpstreamUnavailableError,
)
from stellar_explorer.core.fallback import first_success
from stellar_explorer.core.identifiers import (
    SEARCH_SUGGESTIONS,
    classify_search_term,
    is_valid_account_id,
    is_valid_ledger_sequence,
    is_valid_transaction_hash,
)
from stellar_explorer.explorer_logging import get_logger
from stellar_explorer.horizon.client import HorizonClient
from stellar_explorer.horizon.models import (
    flatten,
    normalize_ledger,
    normalize_operation,
    normalize_transaction,
    utc_now_iso,
)
from stellar_explorer.horizon.stats import fetch_network_stats
from stellar_explorer.api_server.dependencies import (
    get_app_settings,
    get_horizon,
    get_http_client,
)

logger = get_logger(__name__)

router = APIRouter(tags=["horizon"])

DEFAULT_LIST_LIMIT = 20
MAX_LIST_LIMIT = 200

RETRY_HINT = "Stellar API internal error. Try again in a few moments."
UNAVAILABLE_HINT = "Service temporarily unavailable. Try again."

TRANSACTION_NOT_FOUND_SUGGESTIONS = [
    "Check that the hash is correct",
    "The transaction may be too old for this Horizon instance",
    "Try the recent transactions on the home page",
]
LEDGER_NOT_FOUND_SUGGESTIONS = [
    "Check that the number is correct",
    "Very old ledgers may not be available",
    "Try a more recent ledger number",
]

ACCOUNT_TRANSACTIONS_LIMIT = 20
LEDGER_TRANSACTIONS_LIMIT = 50
TRANSACTION_OPERATIONS_LIMIT = 100


def lookup_error(
    exc: ExplorerError,
    *,
    resource: str,
    not_found_message: str,
    not_found_extra: dict[str, Any] | None = None,
    **context: Any,
) -> ExplorerError:
    """Translate an upstream failure of a single-item lookup into the response error."""
    if isinstance(exc, NotFoundError):
        return NotFoundError(not_found_message, **context, **(not_found_extra or {}))
    if isinstance(exc, UpstreamUnavailableError):
        return UpstreamUnavailableError(UNAVAILABLE_HINT, **context)
    if exc.status_code >= 500:
        return UpstreamError(RETRY_HINT, **context)
    return UpstreamError(
        f"Error fetching {resource}: {exc.message}",
        status_code=exc.status_code,
        **context,
    )


# -----------------------------------------------------------------------------
# Aggregates and listings
# -----------------------------------------------------------------------------


@router.get("/network-stats")
async def network_stats(horizon: HorizonClient = Depends(get_horizon)) -> dict[str, Any]:
    """Aggregated network metrics over the latest 50 ledgers and 200 transactions."""
    try:
        return await fetch_network_stats(horizon)
    except ExplorerError as e:
        logger.error("network_stats_failed", error=e.message)
        raise UpstreamError("Error fetching network statistics.", error=e.message) from e


async def _listing(kind: str, fetch, normalize, limit: int) -> list[dict[str, Any]]:
    try:
        records = await fetch(limit)
    except ExplorerError as e:
        logger.error("listing_failed", kind=kind, limit=limit, error=e.message)
        raise UpstreamError(f"Error fetching {kind}.", error=e.message) from e
    logger.info("listing_ok", kind=kind, limit=limit, count=len(records))
    return [flatten(r, normalize(r)) for r in records[:limit]]


@router.get("/ledgers")
async def recent_ledgers(
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT),
    horizon: HorizonClient = Depends(get_horizon),
) -> list[dict[str, Any]]:
    return await _listing("ledgers", horizon.list_ledgers, normalize_ledger, limit)


@router.get("/transactions")
async def recent_transactions(
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT),
    horizon: HorizonClient = Depends(get_horizon),
) -> list[dict[str, Any]]:
    return await _listing("transactions", horizon.list_transactions, normalize_transaction, limit)


@router.get("/operations")
async def recent_operations(
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT),
    horizon: HorizonClient = Depends(get_horizon),
) -> list[dict[str, Any]]:
    return await _listing("operations", horizon.list_operations, normalize_operation, limit)


# -----------------------------------------------------------------------------
# Item lookups
# -----------------------------------------------------------------------------


def _check_transaction_hash(tx_hash: str) -> None:
    if not is_valid_transaction_hash(tx_hash):
        raise InvalidIdentifierError(
            "Invalid hash. It must be 64 hexadecimal characters.",
            provided=tx_hash,
            expected="64-character hexadecimal string",
        )


def _check_account_id(account_id: str) -> None:
    if not is_valid_account_id(account_id):
        raise InvalidIdentifierError(
            'Invalid account ID. It must start with "G" and be 56 characters long.',
            provided=account_id,
        )


def _check_ledger_sequence(sequence: str) -> None:
    if not is_valid_ledger_sequence(sequence):
        raise InvalidIdentifierError(
            "Invalid ledger number. It must be a positive integer.",
            provided=sequence,
        )


@router.get("/transactions/{tx_hash}")
async def transaction_detail(
    tx_hash: str = Path(..., description="64-character hex transaction hash"),
    settings: Settings = Depends(get_app_settings),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> dict[str, Any]:
    """
    Transaction by hash. Tries mainnet, then testnet; on total failure the
    mainnet error decides the response.
    """
    _check_transaction_hash(tx_hash)
    providers = []
    for network in (Network.MAINNET, Network.TESTNET):
        client = HorizonClient(http, settings.network_config(network).horizon_url)
        providers.append((network.value, lambda c=client: c.get_transaction(tx_hash)))

    try:
        source, data = await first_success(providers, label="transaction_lookup")
    except ExplorerError as e:
        logger.warning("transaction_lookup_failed", hash=tx_hash, status=e.status_code)
        raise lookup_error(
            e,
            resource="transaction",
            not_found_message="Transaction not found.",
            not_found_extra={"suggestions": TRANSACTION_NOT_FOUND_SUGGESTIONS},
            hash=tx_hash,
        ) from e

    logger.info("transaction_lookup_ok", hash=tx_hash, source=source)
    return {
        **flatten(data, normalize_transaction(data)),
        "_source": source,
        "_processed_at": utc_now_iso(),
    }


@router.get("/accounts/{account_id}")
async def account_detail(
    account_id: str,
    horizon: HorizonClient = Depends(get_horizon),
) -> dict[str, Any]:
    """Live account document (balances, signers, sequence). Never cached."""
    _check_account_id(account_id)
    try:
        data = await horizon.get_account(account_id)
    except ExplorerError as e:
        logger.warning("account_lookup_failed", account_id=account_id, status=e.status_code)
        raise lookup_error(
            e,
            resource="account",
            not_found_message="Account not found.",
            account_id=account_id,
        ) from e
    logger.info("account_lookup_ok", account_id=account_id)
    return data


@router.get("/ledgers/{sequence}")
async def ledger_detail(
    sequence: str,
    horizon: HorizonClient = Depends(get_horizon),
) -> dict[str, Any]:
    _check_ledger_sequence(sequence)
    try:
        data = await horizon.get_ledger(int(sequence))
    except ExplorerError as e:
        logger.warning("ledger_lookup_failed", sequence=sequence, status=e.status_code)
        raise lookup_error(
            e,
            resource="ledger",
            not_found_message=f"Ledger {sequence} not found.",
            not_found_extra={"suggestions": LEDGER_NOT_FOUND_SUGGESTIONS},
            sequence=sequence,
        ) from e
    logger.info("ledger_lookup_ok", sequence=sequence)
    return flatten(data, normalize_ledger(data))


# -----------------------------------------------------------------------------
# Related lists on detail pages
# -----------------------------------------------------------------------------


async def _related_listing(
    kind: str,
    fetch,
    normalize,
    *,
    resource: str,
    not_found_message: str,
    **context: Any,
) -> list[dict[str, Any]]:
    try:
        records = await fetch()
    except ExplorerError as e:
        logger.warning("related_listing_failed", kind=kind, status=e.status_code, **context)
        raise lookup_error(e, resource=resource, not_found_message=not_found_message, **context) from e
    logger.info("related_listing_ok", kind=kind, count=len(records), **context)
    return [flatten(r, normalize(r)) for r in records]


@router.get("/accounts/{account_id}/transactions")
async def account_transactions(
    account_id: str,
    limit: int = Query(ACCOUNT_TRANSACTIONS_LIMIT, ge=1, le=MAX_LIST_LIMIT),
    horizon: HorizonClient = Depends(get_horizon),
) -> list[dict[str, Any]]:
    """Most recent transactions the account took part in, newest first."""
    _check_account_id(account_id)
    return await _related_listing(
        "account_transactions",
        lambda: horizon.list_account_transactions(account_id, limit),
        normalize_transaction,
        resource="account transactions",
        not_found_message="Account not found.",
        account_id=account_id,
    )


@router.get("/transactions/{tx_hash}/operations")
async def transaction_operations(
    tx_hash: str,
    horizon: HorizonClient = Depends(get_horizon),
) -> list[dict[str, Any]]:
    """Operations of a transaction on the selected network, in application order."""
    _check_transaction_hash(tx_hash)
    return await _related_listing(
        "transaction_operations",
        lambda: horizon.list_transaction_operations(tx_hash, TRANSACTION_OPERATIONS_LIMIT),
        normalize_operation,
        resource="transaction operations",
        not_found_message="Transaction not found.",
        hash=tx_hash,
    )


@router.get("/ledgers/{sequence}/transactions")
async def ledger_transactions(
    sequence: str,
    limit: int = Query(LEDGER_TRANSACTIONS_LIMIT, ge=1, le=MAX_LIST_LIMIT),
    horizon: HorizonClient = Depends(get_horizon),
) -> list[dict[str, Any]]:
    _check_ledger_sequence(sequence)
    return await _related_listing(
        "ledger_transactions",
        lambda: horizon.list_ledger_transactions(int(sequence), limit),
        normalize_transaction,
        resource="ledger transactions",
        not_found_message=f"Ledger {sequence} not found.",
        sequence=sequence,
    )


# -----------------------------------------------------------------------------
# Search
# -----------------------------------------------------------------------------


@router.get("/search/{term}")
async def search(term: str) -> dict[str, str]:
    """Classify a free-text term; no upstream call is made."""
    result = classify_search_term(term)
    if result is None:
        logger.info("search_unrecognized", term=term[:80])
        raise NotFoundError(
            "Invalid or unrecognized search format.",
            suggestions=SEARCH_SUGGESTIONS,
        )
    logger.info("search_classified", type=result.type)
    return result.to_dict()
