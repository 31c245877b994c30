"""
Soroban package: JSON-RPC client, StellarExpert indexer client, ScVal decoding,
contract summaries and contract events.
"""
