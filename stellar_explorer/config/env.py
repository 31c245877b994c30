"""
Environment variable loading for Stellar Explorer.

- STELLAR_HORIZON_URL: mainnet Horizon (default: https://horizon.stellar.org)
- STELLAR_HORIZON_TESTNET_URL: testnet Horizon, also the transaction-lookup fallback
- SOROBAN_RPC_MAINNET_URL / SOROBAN_RPC_TESTNET_URL: Soroban JSON-RPC endpoints
- STELLAR_EXPERT_API_URL: StellarExpert explorer API root (no network segment)
- PROJECTS_ROOT: directory holding published static sites
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is stellar_explorer/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

MAINNET_HORIZON_URL = "https://horizon.stellar.org"
TESTNET_HORIZON_URL = "https://horizon-testnet.stellar.org"
MAINNET_SOROBAN_RPC_URL = "https://mainnet.sorobanrpc.com"
TESTNET_SOROBAN_RPC_URL = "https://soroban-testnet.stellar.org"
STELLAR_EXPERT_API_URL = "https://api.stellar.expert/explorer"

DEFAULT_PORT = 3001
DEFAULT_UPSTREAM_TIMEOUT_SEC = 15.0


def load_explorer_env() -> None:
    """Load .env from project root. Existing environment variables win."""
    if _ENV_PATH.exists():
        load_dotenv(_ENV_PATH, override=False)


def env_str(name: str, default: str) -> str:
    """Return a stripped env value, or default when unset or blank."""
    return (os.getenv(name) or "").strip() or default


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default
