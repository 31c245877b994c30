"""
Stellar Explorer: aggregation gateway over Horizon and Soroban RPC.

Proxies and reshapes ledger, transaction, account and contract data from
Stellar's public infrastructure into flat JSON documents for the explorer
frontend. Ships a small terminal client that mirrors the frontend's search
routing and network/theme preferences.
"""

__version__ = "0.1.0"
