"""
Typed Horizon records and their normalizers.

Horizon payloads are loosely shaped: fields get renamed between versions
(fee_paid -> fee_charged, transaction_count -> successful/failed counts) or
are simply missing. Each entity has one strict record and one normalize_*
function; call sites never fill defaults ad hoc.

Normalized output is `{**raw, **record}`: every upstream field survives, and
the documented fields are guaranteed present with a deterministic default.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_BASE_FEE_STROOPS = 100
DEFAULT_BASE_RESERVE_STROOPS = 5_000_000


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision and Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a Horizon ISO timestamp; None when absent or malformed."""
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _present(value: Any) -> bool:
    return value is not None and value != ""


def _pick(raw: dict[str, Any], *keys: str) -> Any:
    """First present (non-None, non-empty) value among keys, else None."""
    for key in keys:
        value = raw.get(key)
        if _present(value):
            return value
    return None


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return default


def _as_str(value: Any, default: str = "") -> str:
    return str(value) if _present(value) else default


def _as_timestamp(value: Any) -> str:
    return value if parse_timestamp(value) is not None else utc_now_iso()


# -----------------------------------------------------------------------------
# Records
# -----------------------------------------------------------------------------


class LedgerRecord(BaseModel):
    """A closed ledger."""

    sequence: int = Field(0, description="Ledger sequence number")
    hash: str = ""
    prev_hash: str = ""
    transaction_count: int = 0
    operation_count: int = 0
    closed_at: str = Field(default_factory=utc_now_iso)
    total_coins: str = "0"
    fee_pool: str = "0"
    base_fee_in_stroops: int = DEFAULT_BASE_FEE_STROOPS
    base_reserve_in_stroops: int = DEFAULT_BASE_RESERVE_STROOPS


class TransactionRecord(BaseModel):
    """A transaction included in a ledger."""

    id: str = ""
    hash: str = ""
    ledger_attr: int = 0
    source_account: str = ""
    source_account_sequence: str = ""
    fee_account: str = ""
    fee_paid: int = 0
    fee_charged: int = 0
    max_fee: int = 0
    operation_count: int = 0
    created_at: str = Field(default_factory=utc_now_iso)
    successful: bool = True
    memo: str | None = None
    memo_type: str | None = None
    time_bounds: dict[str, Any] | None = None


class OperationRecord(BaseModel):
    """A single operation."""

    id: str = ""
    type: str = ""
    type_i: int = 0
    source_account: str = ""
    transaction_hash: str = ""
    created_at: str = Field(default_factory=utc_now_iso)
    transaction_successful: bool = True


# -----------------------------------------------------------------------------
# Normalizers
# -----------------------------------------------------------------------------


def _ledger_transaction_count(raw: dict[str, Any]) -> int:
    if _present(raw.get("transaction_count")):
        return _as_int(raw.get("transaction_count"))
    successful = raw.get("successful_transaction_count")
    failed = raw.get("failed_transaction_count")
    if _present(successful) or _present(failed):
        return _as_int(successful) + _as_int(failed)
    return 0


def normalize_ledger(raw: dict[str, Any] | None) -> LedgerRecord:
    raw = raw or {}
    return LedgerRecord(
        sequence=_as_int(raw.get("sequence")),
        hash=_as_str(raw.get("hash")),
        prev_hash=_as_str(raw.get("prev_hash")),
        transaction_count=_ledger_transaction_count(raw),
        operation_count=_as_int(raw.get("operation_count")),
        closed_at=_as_timestamp(raw.get("closed_at")),
        total_coins=_as_str(raw.get("total_coins"), "0"),
        fee_pool=_as_str(raw.get("fee_pool"), "0"),
        base_fee_in_stroops=_as_int(raw.get("base_fee_in_stroops")) or DEFAULT_BASE_FEE_STROOPS,
        base_reserve_in_stroops=(
            _as_int(raw.get("base_reserve_in_stroops")) or DEFAULT_BASE_RESERVE_STROOPS
        ),
    )


def normalize_transaction(raw: dict[str, Any] | None) -> TransactionRecord:
    raw = raw or {}
    time_bounds = raw.get("time_bounds")
    memo = raw.get("memo")
    return TransactionRecord(
        id=_as_str(_pick(raw, "id", "hash")),
        hash=_as_str(_pick(raw, "hash", "id")),
        ledger_attr=_as_int(_pick(raw, "ledger_attr", "ledger")),
        source_account=_as_str(raw.get("source_account")),
        source_account_sequence=_as_str(raw.get("source_account_sequence")),
        fee_account=_as_str(_pick(raw, "fee_account", "source_account")),
        fee_paid=_as_int(_pick(raw, "fee_paid", "fee_charged")),
        fee_charged=_as_int(_pick(raw, "fee_charged", "fee_paid")),
        max_fee=_as_int(raw.get("max_fee")),
        operation_count=_as_int(raw.get("operation_count")),
        created_at=_as_timestamp(raw.get("created_at")),
        successful=raw.get("successful") is not False,
        memo=str(memo) if _present(memo) else None,
        memo_type=_as_str(raw.get("memo_type")) or None,
        time_bounds=time_bounds if isinstance(time_bounds, dict) and time_bounds else None,
    )


def normalize_operation(raw: dict[str, Any] | None) -> OperationRecord:
    raw = raw or {}
    return OperationRecord(
        id=_as_str(raw.get("id")),
        type=_as_str(raw.get("type")),
        type_i=_as_int(raw.get("type_i")),
        source_account=_as_str(raw.get("source_account")),
        transaction_hash=_as_str(raw.get("transaction_hash")),
        created_at=_as_timestamp(raw.get("created_at")),
        transaction_successful=raw.get("transaction_successful") is not False,
    )


def flatten(raw: dict[str, Any] | None, record: BaseModel) -> dict[str, Any]:
    """Merge normalized fields over the raw upstream document."""
    return {**(raw or {}), **record.model_dump()}
