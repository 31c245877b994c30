"""
ScVal -> JSON decoder.

Dispatches on SCValType; each variant has one decoder producing a JSON-safe
value:

- void -> None, bool -> bool, u32/i32 -> int
- 64-bit and wider integers (incl. timepoint/duration) -> decimal string
- bytes -> lowercase hex, string -> text (hex when not UTF-8), symbol -> text
- vec -> list, map -> dict with stringified keys (both recursive)
- address -> strkey, instance -> {"executable", "storage"}
- error -> {"error", "code"}

Variants without a decoder (or whose payload cannot be converted) become an
UnknownValue carrying the variant name and the raw base64 XDR.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable

from stellar_sdk import Address, scval
from stellar_sdk import xdr as stellar_xdr

from stellar_explorer.explorer_logging import get_logger

logger = get_logger(__name__)

ADMIN_KEYS = frozenset({"admin", "administrator"})
OWNER_KEYS = frozenset({"owner"})

UNDECODABLE = "undecodable"


@dataclass(frozen=True)
class UnknownValue:
    """A value the decoder has no mapping for; keeps the raw XDR for inspection."""

    type_name: str
    xdr: str

    def to_json(self) -> dict[str, str]:
        return {"type": self.type_name, "xdr": self.xdr}


def _type_name(val: stellar_xdr.SCVal) -> str:
    return getattr(val.type, "name", str(val.type))


def _unknown(val: stellar_xdr.SCVal) -> dict[str, str]:
    try:
        raw = val.to_xdr()
    except Exception:
        raw = ""
    return UnknownValue(_type_name(val), raw).to_json()


def _text(raw: bytes | str) -> str:
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.hex()


def key_to_text(decoded: Any) -> str:
    """Render a decoded map key as text; non-string keys are JSON-encoded."""
    if isinstance(decoded, str):
        return decoded
    return json.dumps(decoded, sort_keys=True, separators=(",", ":"))


def _decode_void(val: stellar_xdr.SCVal) -> Any:
    return None


def _decode_bool(val: stellar_xdr.SCVal) -> Any:
    return scval.from_bool(val)


def _decode_u32(val: stellar_xdr.SCVal) -> Any:
    return scval.from_uint32(val)


def _decode_i32(val: stellar_xdr.SCVal) -> Any:
    return scval.from_int32(val)


def _decode_u64(val: stellar_xdr.SCVal) -> Any:
    return str(scval.from_uint64(val))


def _decode_i64(val: stellar_xdr.SCVal) -> Any:
    return str(scval.from_int64(val))


def _decode_timepoint(val: stellar_xdr.SCVal) -> Any:
    return str(scval.from_timepoint(val))


def _decode_duration(val: stellar_xdr.SCVal) -> Any:
    return str(scval.from_duration(val))


def _decode_u128(val: stellar_xdr.SCVal) -> Any:
    return str(scval.from_uint128(val))


def _decode_i128(val: stellar_xdr.SCVal) -> Any:
    return str(scval.from_int128(val))


def _decode_u256(val: stellar_xdr.SCVal) -> Any:
    return str(scval.from_uint256(val))


def _decode_i256(val: stellar_xdr.SCVal) -> Any:
    return str(scval.from_int256(val))


def _decode_bytes(val: stellar_xdr.SCVal) -> Any:
    return scval.from_bytes(val).hex()


def _decode_string(val: stellar_xdr.SCVal) -> Any:
    return _text(scval.from_string(val))


def _decode_symbol(val: stellar_xdr.SCVal) -> Any:
    return scval.from_symbol(val)


def _decode_vec(val: stellar_xdr.SCVal) -> Any:
    if val.vec is None:
        return []
    return [decode_scval(item) for item in val.vec.sc_vec]


def _decode_map(val: stellar_xdr.SCVal) -> Any:
    return decode_map(val.map)


def _decode_address(val: stellar_xdr.SCVal) -> Any:
    return Address.from_xdr_sc_address(val.address).address


def _decode_error(val: stellar_xdr.SCVal) -> Any:
    error = val.error
    code = getattr(error, "contract_code", None)
    if code is not None:
        code = getattr(code, "uint32", code)
    else:
        error_code = getattr(error, "code", None)
        code = getattr(error_code, "name", None)
    return {"error": getattr(error.type, "name", str(error.type)), "code": code}


def _decode_instance(val: stellar_xdr.SCVal) -> Any:
    instance = val.instance
    return {
        "executable": describe_executable(instance.executable),
        "storage": decode_map(instance.storage),
    }


def _decode_instance_key(val: stellar_xdr.SCVal) -> Any:
    return "LedgerKeyContractInstance"


def _decode_nonce_key(val: stellar_xdr.SCVal) -> Any:
    nonce = val.nonce_key.nonce
    return {"nonce": str(getattr(nonce, "int64", nonce))}


_T = stellar_xdr.SCValType

_DECODERS: dict[Any, Callable[[stellar_xdr.SCVal], Any]] = {
    _T.SCV_VOID: _decode_void,
    _T.SCV_BOOL: _decode_bool,
    _T.SCV_U32: _decode_u32,
    _T.SCV_I32: _decode_i32,
    _T.SCV_U64: _decode_u64,
    _T.SCV_I64: _decode_i64,
    _T.SCV_TIMEPOINT: _decode_timepoint,
    _T.SCV_DURATION: _decode_duration,
    _T.SCV_U128: _decode_u128,
    _T.SCV_I128: _decode_i128,
    _T.SCV_U256: _decode_u256,
    _T.SCV_I256: _decode_i256,
    _T.SCV_BYTES: _decode_bytes,
    _T.SCV_STRING: _decode_string,
    _T.SCV_SYMBOL: _decode_symbol,
    _T.SCV_VEC: _decode_vec,
    _T.SCV_MAP: _decode_map,
    _T.SCV_ADDRESS: _decode_address,
    _T.SCV_ERROR: _decode_error,
    _T.SCV_CONTRACT_INSTANCE: _decode_instance,
    _T.SCV_LEDGER_KEY_CONTRACT_INSTANCE: _decode_instance_key,
    _T.SCV_LEDGER_KEY_NONCE: _decode_nonce_key,
}


def decode_scval(val: stellar_xdr.SCVal | None) -> Any:
    """Decode one ScVal into a JSON-safe Python value."""
    if val is None:
        return None
    decoder = _DECODERS.get(val.type)
    if decoder is None:
        return _unknown(val)
    try:
        return decoder(val)
    except Exception as e:
        logger.debug("scval_decode_fallback", type=_type_name(val), error=str(e))
        return _unknown(val)


def decode_scval_xdr(raw: str | None) -> Any:
    """Decode a base64 ScVal XDR string; undecodable input yields an UnknownValue payload."""
    if raw is None or raw == "":
        return None
    try:
        val = stellar_xdr.SCVal.from_xdr(raw)
    except Exception:
        return UnknownValue(UNDECODABLE, raw).to_json()
    return decode_scval(val)


def decode_map(sc_map: stellar_xdr.SCMap | None) -> dict[str, Any]:
    """Decode an SCMap into a dict keyed by stringified keys (first occurrence wins)."""
    out: dict[str, Any] = {}
    for key, value in decode_map_entries(sc_map):
        out.setdefault(key, value)
    return out


def decode_map_entries(sc_map: stellar_xdr.SCMap | None) -> list[tuple[str, Any]]:
    """Decode an SCMap into ordered (key_text, value) pairs."""
    if sc_map is None:
        return []
    return [
        (key_to_text(decode_scval(entry.key)), decode_scval(entry.val))
        for entry in sc_map.sc_map
    ]


def decode_storage(sc_map: stellar_xdr.SCMap | None) -> list[dict[str, Any]]:
    """Instance storage as an ordered list of {key, value} entries."""
    return [{"key": key, "value": value} for key, value in decode_map_entries(sc_map)]


def describe_executable(executable: stellar_xdr.ContractExecutable) -> dict[str, Any]:
    """Executable kind and wasm hash (hex) of a contract instance."""
    kind = stellar_xdr.ContractExecutableType
    if executable.type == kind.CONTRACT_EXECUTABLE_WASM:
        wasm_hash = executable.wasm_hash.hash.hex() if executable.wasm_hash else None
        return {"type": "wasm", "wasmHash": wasm_hash}
    if executable.type == kind.CONTRACT_EXECUTABLE_STELLAR_ASSET:
        return {"type": "stellar_asset", "wasmHash": None}
    return {"type": getattr(executable.type, "name", str(executable.type)).lower(), "wasmHash": None}


def _governance_name(key: str) -> str:
    """Bare key name: '["Admin"]' (enum-style DataKey::Admin) reads as 'Admin'."""
    if key.startswith("["):
        try:
            parsed = json.loads(key)
        except ValueError:
            return key
        if isinstance(parsed, list) and len(parsed) == 1 and isinstance(parsed[0], str):
            return parsed[0]
    return key


def find_governance_field(storage: list[dict[str, Any]], synonyms: frozenset[str]) -> Any:
    """Value of the first storage entry whose key matches a synonym (case-insensitive)."""
    for entry in storage:
        key = entry.get("key")
        if isinstance(key, str) and _governance_name(key).strip().lower() in synonyms:
            return entry.get("value")
    return None
