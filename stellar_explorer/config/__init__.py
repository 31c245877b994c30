"""
Configuration management for Stellar Explorer.

Loads settings from environment variables and an optional .env file, and
resolves per-request network configuration (Horizon, Soroban RPC, indexer).
"""

from stellar_explorer.config.settings import (  # noqa: F401
    Network,
    NetworkConfig,
    Settings,
    get_settings,
    load_settings,
)

__all__ = ["Network", "NetworkConfig", "Settings", "get_settings", "load_settings"]
