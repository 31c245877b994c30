"""
Tests for the ScVal decoder (soroban.scval).

Fixtures are built with stellar_sdk.scval / stellar_sdk.xdr so they match what
Soroban RPC returns on the wire.
"""

from __future__ import annotations

from stellar_sdk import Address, StrKey, scval
from stellar_sdk import xdr as stellar_xdr

from stellar_explorer.soroban.scval import (
    ADMIN_KEYS,
    OWNER_KEYS,
    decode_scval,
    decode_scval_xdr,
    decode_storage,
    describe_executable,
    find_governance_field,
)

ACCOUNT = StrKey.encode_ed25519_public_key(b"\x01" * 32)
CONTRACT = StrKey.encode_contract(b"\x07" * 32)


def sc_map(pairs):
    return stellar_xdr.SCMap([stellar_xdr.SCMapEntry(key=k, val=v) for k, v in pairs])


def test_scalars():
    assert decode_scval(scval.to_void()) is None
    assert decode_scval(scval.to_bool(True)) is True
    assert decode_scval(scval.to_uint32(7)) == 7
    assert decode_scval(scval.to_int32(-3)) == -3
    assert decode_scval(scval.to_symbol("transfer")) == "transfer"
    assert decode_scval(scval.to_string("hello")) == "hello"
    assert decode_scval(scval.to_bytes(b"\xde\xad")) == "dead"


def test_wide_integers_are_decimal_strings():
    big = 2**100 + 5
    assert decode_scval(scval.to_int128(big)) == str(big)
    assert decode_scval(scval.to_uint64(2**63)) == str(2**63)
    assert decode_scval(scval.to_int64(-42)) == "-42"
    assert decode_scval(scval.to_uint256(2**200)) == str(2**200)


def test_addresses_render_as_strkeys():
    assert decode_scval(scval.to_address(Address(ACCOUNT))) == ACCOUNT
    assert decode_scval(scval.to_address(Address(CONTRACT))) == CONTRACT


def test_vec_and_map_recursive():
    val = scval.to_vec([scval.to_uint32(1), scval.to_vec([scval.to_symbol("x")])])
    assert decode_scval(val) == [1, ["x"]]

    nested = stellar_xdr.SCVal(
        type=stellar_xdr.SCValType.SCV_MAP,
        map=sc_map(
            [
                (scval.to_symbol("name"), scval.to_string("token")),
                (scval.to_uint32(5), scval.to_bool(False)),
            ]
        ),
    )
    assert decode_scval(nested) == {"name": "token", "5": False}


def test_instance_key_and_xdr_roundtrip():
    key = stellar_xdr.SCVal(type=stellar_xdr.SCValType.SCV_LEDGER_KEY_CONTRACT_INSTANCE)
    assert decode_scval(key) == "LedgerKeyContractInstance"
    assert decode_scval_xdr(scval.to_symbol("mint").to_xdr()) == "mint"


def test_undecodable_xdr():
    assert decode_scval_xdr("not-base64-xdr!!") == {"type": "undecodable", "xdr": "not-base64-xdr!!"}
    assert decode_scval_xdr(None) is None


def test_storage_and_governance_scan():
    storage = decode_storage(
        sc_map(
            [
                (scval.to_symbol("Admin"), scval.to_address(Address(ACCOUNT))),
                (scval.to_vec([scval.to_symbol("Owner")]), scval.to_address(Address(CONTRACT))),
                (scval.to_symbol("Decimals"), scval.to_uint32(7)),
            ]
        )
    )
    assert storage[0] == {"key": "Admin", "value": ACCOUNT}
    assert storage[1]["key"] == '["Owner"]'
    assert find_governance_field(storage, ADMIN_KEYS) == ACCOUNT
    assert find_governance_field(storage, OWNER_KEYS) == CONTRACT
    assert find_governance_field([{"key": "ADMINISTRATOR", "value": "x"}], ADMIN_KEYS) == "x"
    assert find_governance_field([{"key": "supply", "value": "1"}], ADMIN_KEYS) is None


def test_describe_executable():
    wasm = stellar_xdr.ContractExecutable(
        type=stellar_xdr.ContractExecutableType.CONTRACT_EXECUTABLE_WASM,
        wasm_hash=stellar_xdr.Hash(b"\x11" * 32),
    )
    assert describe_executable(wasm) == {"type": "wasm", "wasmHash": "11" * 32}
    sac = stellar_xdr.ContractExecutable(
        type=stellar_xdr.ContractExecutableType.CONTRACT_EXECUTABLE_STELLAR_ASSET,
    )
    assert describe_executable(sac) == {"type": "stellar_asset", "wasmHash": None}
