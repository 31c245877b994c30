"""
Identifier validation and free-text search classification.

Pure functions shared by the gateway (validation before any upstream call,
/api/search) and the terminal client (local search routing). The two must
classify identically, so both import from here.

Classification order is account -> contract -> transaction -> ledger. The
prefixes and lengths keep the categories disjoint: accounts and contracts are
56 characters with distinct leading letters, hashes are 64 hex characters,
and ledger sequences are digits only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

ACCOUNT_ID_PREFIX = "G"
CONTRACT_ID_PREFIX = "C"
STRKEY_LENGTH = 56
TRANSACTION_HASH_LENGTH = 64

_CONTRACT_ID_RE = re.compile(r"C[A-Z2-7]{55}", re.IGNORECASE)
_HEX_RE = re.compile(r"[0-9a-fA-F]+")
_DIGITS_RE = re.compile(r"[0-9]+")

SEARCH_TYPE_ACCOUNT = "account"
SEARCH_TYPE_CONTRACT = "contract"
SEARCH_TYPE_TRANSACTION = "transaction"
SEARCH_TYPE_LEDGER = "ledger"

SEARCH_SUGGESTIONS = [
    'Account ID: must start with "G" and be 56 characters long',
    'Contract ID: must start with "C" and be 56 characters long',
    "Transaction hash: must be 64 hexadecimal characters",
    "Ledger number: must contain only digits",
]


def is_valid_account_id(value: object) -> bool:
    return (
        isinstance(value, str)
        and value.startswith(ACCOUNT_ID_PREFIX)
        and len(value) == STRKEY_LENGTH
    )


def is_valid_contract_id(value: object) -> bool:
    return isinstance(value, str) and bool(_CONTRACT_ID_RE.fullmatch(value))


def is_valid_transaction_hash(value: object) -> bool:
    return (
        isinstance(value, str)
        and len(value) == TRANSACTION_HASH_LENGTH
        and bool(_HEX_RE.fullmatch(value))
    )


def is_ledger_sequence_shape(value: object) -> bool:
    """All-digit string (search classification; zero allowed here)."""
    return isinstance(value, str) and bool(_DIGITS_RE.fullmatch(value))


def is_valid_ledger_sequence(value: object) -> bool:
    """All-digit string naming a positive ledger sequence."""
    return is_ledger_sequence_shape(value) and int(value) > 0  # type: ignore[arg-type]


@dataclass(frozen=True)
class SearchResult:
    """Outcome of classifying a search term."""

    type: str
    value: str

    def to_dict(self) -> dict[str, str]:
        key = {
            SEARCH_TYPE_ACCOUNT: "id",
            SEARCH_TYPE_CONTRACT: "id",
            SEARCH_TYPE_TRANSACTION: "hash",
            SEARCH_TYPE_LEDGER: "sequence",
        }[self.type]
        return {"type": self.type, key: self.value}


def classify_search_term(term: str | None) -> SearchResult | None:
    """
    Classify a free-text term as account, contract, transaction or ledger.

    Returns None when the term matches no known identifier shape. Surrounding
    whitespace is ignored.
    """
    if term is None:
        return None
    term = term.strip()
    if not term:
        return None
    if is_valid_account_id(term):
        return SearchResult(SEARCH_TYPE_ACCOUNT, term)
    if is_valid_contract_id(term):
        return SearchResult(SEARCH_TYPE_CONTRACT, term)
    if is_valid_transaction_hash(term):
        return SearchResult(SEARCH_TYPE_TRANSACTION, term)
    if is_ledger_sequence_shape(term):
        return SearchResult(SEARCH_TYPE_LEDGER, term)
    return None
