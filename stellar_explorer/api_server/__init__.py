"""
API server package: the REST gateway in front of Horizon, Soroban RPC and StellarExpert.

Validates caller input, resolves the requested network, fans out to the
upstream clients and returns normalized JSON.
"""
