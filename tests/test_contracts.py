"""
Tests for GET /api/contracts/{contractId}: RPC decoding, code size, indexer fallback and merge.
"""

from __future__ import annotations

import httpx
from stellar_sdk import Address, scval

from tests.conftest import EXPERT_API, MAINNET_RPC, TESTNET_RPC
from tests.soroban_fixtures import (
    ACCOUNT,
    CONTRACT,
    WASM_CODE,
    WASM_HASH,
    code_entry_xdr,
    instance_entry_xdr,
    ledger_entries_responder,
    storage_map,
)

HEALTH = {"status": "healthy", "latestLedger": 500, "oldestLedger": 381, "ledgerRetentionWindow": 120}

EXPERT_DOC = {
    "contract": CONTRACT,
    "wasm": WASM_HASH,
    "created": 1714564800,
    "creator": ACCOUNT,
    "invocations": 42,
    "subinvocations": 7,
    "events": 99,
    "errors": 1,
    "storage_entries": 12,
    "validation": {"status": "verified"},
}


def test_contract_summary_from_rpc(client, upstream):
    upstream.rpc(MAINNET_RPC, "getHealth", HEALTH)
    upstream.rpc(MAINNET_RPC, "getLedgerEntries", ledger_entries_responder(instance_entry_xdr(), code_entry_xdr()))
    upstream.get(f"{EXPERT_API}/public/contract/{CONTRACT}", {}, status=404)

    r = client.get(f"/api/contracts/{CONTRACT}")
    assert r.status_code == 200
    data = r.json()
    assert data["contractId"] == CONTRACT
    assert data["network"] == "mainnet"
    assert data["executableType"] == "wasm"
    assert data["wasmHash"] == WASM_HASH
    assert data["codeHash"] == WASM_HASH
    assert data["codeSize"] == len(WASM_CODE)
    assert data["storageCount"] == 2
    assert data["admin"] == ACCOUNT
    assert data["owner"] is None
    assert data["lastModifiedLedger"] == 100
    assert data["liveUntilLedger"] == 2_000_000
    assert data["latestLedger"] == 500
    assert data["oldestLedger"] == 381
    assert data["ledgerRetentionWindow"] == 120
    assert data["source"] == "soroban-rpc"
    assert data["warning"] is None


def test_admin_key_is_case_insensitive(client, upstream):
    storage = storage_map([(scval.to_symbol("ADMIN"), scval.to_address(Address(ACCOUNT)))])
    upstream.rpc(MAINNET_RPC, "getHealth", HEALTH)
    upstream.rpc(MAINNET_RPC, "getLedgerEntries", ledger_entries_responder(instance_entry_xdr(storage=storage)))

    data = client.get(f"/api/contracts/{CONTRACT}").json()
    assert data["admin"] == ACCOUNT
    assert data["codeSize"] is None  # code entry missing is not fatal


def test_indexer_metadata_is_merged(client, upstream):
    upstream.rpc(MAINNET_RPC, "getHealth", HEALTH)
    upstream.rpc(MAINNET_RPC, "getLedgerEntries", ledger_entries_responder(instance_entry_xdr(), code_entry_xdr()))
    upstream.get(f"{EXPERT_API}/public/contract/{CONTRACT}", EXPERT_DOC)

    data = client.get(f"/api/contracts/{CONTRACT}").json()
    assert data["source"] == "soroban-rpc+stellar-expert"
    assert data["invocations"] == 42
    assert data["storageEntries"] == 12
    assert data["storageCount"] == 2
    assert data["validationStatus"] == "verified"
    assert data["createdAt"] == "2024-05-01T12:00:00.000Z"
    assert data["creator"] == ACCOUNT


def test_stellar_asset_contract(client, upstream):
    upstream.rpc(MAINNET_RPC, "getHealth", HEALTH)
    upstream.rpc(MAINNET_RPC, "getLedgerEntries", ledger_entries_responder(instance_entry_xdr(wasm_hash=None)))

    data = client.get(f"/api/contracts/{CONTRACT}").json()
    assert data["executableType"] == "stellar_asset"
    assert data["wasmHash"] is None
    assert data["codeSize"] is None


def test_rpc_down_falls_back_to_indexer(client, upstream):
    upstream.rpc(MAINNET_RPC, "getLedgerEntries", exc=httpx.ConnectError)
    upstream.get(f"{EXPERT_API}/public/contract/{CONTRACT}", EXPERT_DOC)

    r = client.get(f"/api/contracts/{CONTRACT}")
    assert r.status_code == 200
    data = r.json()
    assert data["source"] == "stellar-expert"
    assert data["warning"]
    assert data["wasmHash"] == WASM_HASH
    assert data["storage"] == []


def test_rpc_down_and_indexer_empty_raises_rpc_error(client, upstream):
    upstream.rpc(MAINNET_RPC, "getLedgerEntries", exc=httpx.ConnectError)
    upstream.get(f"{EXPERT_API}/public/contract/{CONTRACT}", {}, status=404)

    r = client.get(f"/api/contracts/{CONTRACT}")
    assert r.status_code == 503


def test_rpc_error_envelope_is_500(client, upstream):
    upstream.rpc(MAINNET_RPC, "getLedgerEntries", error={"code": -32600, "message": "bad key"})
    upstream.get(f"{EXPERT_API}/public/contract/{CONTRACT}", {}, status=404)

    r = client.get(f"/api/contracts/{CONTRACT}")
    assert r.status_code == 500
    assert "bad key" in r.json()["message"]


def test_missing_instance_uses_indexer(client, upstream):
    upstream.rpc(MAINNET_RPC, "getHealth", HEALTH)
    upstream.rpc(MAINNET_RPC, "getLedgerEntries", ledger_entries_responder(None))
    upstream.get(f"{EXPERT_API}/public/contract/{CONTRACT}", EXPERT_DOC)

    data = client.get(f"/api/contracts/{CONTRACT}").json()
    assert data["source"] == "stellar-expert"
    assert data["warning"]


def test_missing_everywhere_is_404(client, upstream):
    upstream.rpc(TESTNET_RPC, "getHealth", HEALTH)
    upstream.rpc(TESTNET_RPC, "getLedgerEntries", ledger_entries_responder(None))
    upstream.get(f"{EXPERT_API}/testnet/contract/{CONTRACT}", {}, status=404)

    r = client.get(f"/api/contracts/{CONTRACT}", params={"network": "testnet"})
    assert r.status_code == 404
    body = r.json()
    assert body["contractId"] == CONTRACT
    assert body["network"] == "testnet"


def test_invalid_contract_id(client, upstream):
    r = client.get("/api/contracts/CNOTACONTRACT")
    assert r.status_code == 400
    assert r.json()["provided"] == "CNOTACONTRACT"
    assert upstream.requests == []


def test_bad_checksum_is_400(client, upstream):
    tampered = CONTRACT[:-1] + ("A" if CONTRACT[-1] != "A" else "B")
    r = client.get(f"/api/contracts/{tampered}")
    assert r.status_code == 400
    assert upstream.requests == []


def test_lowercase_id_is_canonicalized(client, upstream):
    upstream.rpc(MAINNET_RPC, "getHealth", HEALTH)
    upstream.rpc(MAINNET_RPC, "getLedgerEntries", ledger_entries_responder(instance_entry_xdr(), code_entry_xdr()))

    data = client.get(f"/api/contracts/{CONTRACT.lower()}").json()
    assert data["contractId"] == CONTRACT
