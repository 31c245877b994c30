"""
XDR builders for Soroban RPC responses used across the contract tests.
"""

from __future__ import annotations

from stellar_sdk import Address, StrKey, scval
from stellar_sdk import xdr as stellar_xdr

from stellar_explorer.soroban.rpc import contract_code_key

ACCOUNT = StrKey.encode_ed25519_public_key(b"\x01" * 32)
CONTRACT = StrKey.encode_contract(b"\x07" * 32)
WASM_HASH = "11" * 32
WASM_CODE = b"\x00asm" + b"\x01" * 96


def storage_map(pairs):
    return stellar_xdr.SCMap([stellar_xdr.SCMapEntry(key=k, val=v) for k, v in pairs])


def default_storage():
    return storage_map(
        [
            (scval.to_symbol("Admin"), scval.to_address(Address(ACCOUNT))),
            (scval.to_symbol("Name"), scval.to_string("Test Token")),
        ]
    )


def instance_entry_xdr(contract_id=CONTRACT, storage=None, wasm_hash=WASM_HASH) -> str:
    if wasm_hash:
        executable = stellar_xdr.ContractExecutable(
            type=stellar_xdr.ContractExecutableType.CONTRACT_EXECUTABLE_WASM,
            wasm_hash=stellar_xdr.Hash(bytes.fromhex(wasm_hash)),
        )
    else:
        executable = stellar_xdr.ContractExecutable(
            type=stellar_xdr.ContractExecutableType.CONTRACT_EXECUTABLE_STELLAR_ASSET,
        )
    instance = stellar_xdr.SCVal(
        type=stellar_xdr.SCValType.SCV_CONTRACT_INSTANCE,
        instance=stellar_xdr.SCContractInstance(
            executable=executable,
            storage=storage if storage is not None else default_storage(),
        ),
    )
    data = stellar_xdr.LedgerEntryData(
        type=stellar_xdr.LedgerEntryType.CONTRACT_DATA,
        contract_data=stellar_xdr.ContractDataEntry(
            ext=stellar_xdr.ExtensionPoint(0),
            contract=Address(contract_id).to_xdr_sc_address(),
            key=stellar_xdr.SCVal(type=stellar_xdr.SCValType.SCV_LEDGER_KEY_CONTRACT_INSTANCE),
            durability=stellar_xdr.ContractDataDurability.PERSISTENT,
            val=instance,
        ),
    )
    return data.to_xdr()


def code_entry_xdr(wasm_hash=WASM_HASH, code=WASM_CODE) -> str:
    data = stellar_xdr.LedgerEntryData(
        type=stellar_xdr.LedgerEntryType.CONTRACT_CODE,
        contract_code=stellar_xdr.ContractCodeEntry(
            ext=stellar_xdr.ContractCodeEntryExt(0),
            hash=stellar_xdr.Hash(bytes.fromhex(wasm_hash)),
            code=code,
        ),
    )
    return data.to_xdr()


def ledger_entries_responder(instance_xdr: str | None, code_xdr: str | None = None):
    """getLedgerEntries handler answering the instance key and the code key separately."""
    code_key = contract_code_key(WASM_HASH)

    def respond(params):
        keys = params["keys"]
        if keys == [code_key]:
            entries = [{"key": code_key, "xdr": code_xdr, "lastModifiedLedgerSeq": 90}] if code_xdr else []
        else:
            entries = (
                [
                    {
                        "key": keys[0],
                        "xdr": instance_xdr,
                        "lastModifiedLedgerSeq": 100,
                        "liveUntilLedgerSeq": 2_000_000,
                    }
                ]
                if instance_xdr
                else []
            )
        return {"entries": entries, "latestLedger": 500}

    return respond


def event(event_id, tx_hash, ledger=450, *, topic=("transfer",), value=None, success=True):
    return {
        "type": "contract",
        "ledger": ledger,
        "ledgerClosedAt": "2024-05-01T12:00:00Z",
        "contractId": CONTRACT,
        "id": event_id,
        "pagingToken": event_id,
        "topic": [scval.to_symbol(t).to_xdr() for t in topic],
        "value": (value if value is not None else scval.to_int128(1000)).to_xdr(),
        "inSuccessfulContractCall": success,
        "txHash": tx_hash,
    }
