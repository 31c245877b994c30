"""
Application settings and per-request network configuration.

Settings are read once from the environment (and .env) and cached. Network
selection is never global: each request resolves a NetworkConfig from its
`network` parameter and passes it explicitly to the upstream clients.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from stellar_explorer.config.env import (
    DEFAULT_PORT,
    DEFAULT_UPSTREAM_TIMEOUT_SEC,
    MAINNET_HORIZON_URL,
    MAINNET_SOROBAN_RPC_URL,
    STELLAR_EXPERT_API_URL,
    TESTNET_HORIZON_URL,
    TESTNET_SOROBAN_RPC_URL,
    env_float,
    env_int,
    env_str,
    load_explorer_env,
)


class Network(str, Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"

    @classmethod
    def parse(cls, value: str | None) -> "Network":
        """Parse a network name; None or blank means mainnet. Raises ValueError on anything else."""
        raw = (value or "").strip().lower()
        if not raw:
            return cls.MAINNET
        if raw in ("public", "pubnet"):
            return cls.MAINNET
        return cls(raw)


@dataclass(frozen=True)
class NetworkConfig:
    """Upstream endpoints for one network. Built per request, never mutated."""

    network: Network
    horizon_url: str
    soroban_rpc_url: str
    expert_url: str

    @property
    def expert_network(self) -> str:
        """StellarExpert path segment for this network."""
        return "public" if self.network is Network.MAINNET else "testnet"


@dataclass(frozen=True)
class Settings:
    """Typed process-wide configuration (static after startup)."""

    horizon_mainnet_url: str
    horizon_testnet_url: str
    soroban_rpc_mainnet_url: str
    soroban_rpc_testnet_url: str
    expert_api_url: str
    projects_root: Path
    upstream_timeout_sec: float
    api_host: str
    api_port: int
    cors_origins: tuple[str, ...]

    def network_config(self, network: Network | str | None = None) -> NetworkConfig:
        """Resolve upstream URLs for the given network (default mainnet)."""
        net = network if isinstance(network, Network) else Network.parse(network)
        if net is Network.TESTNET:
            return NetworkConfig(
                network=net,
                horizon_url=self.horizon_testnet_url,
                soroban_rpc_url=self.soroban_rpc_testnet_url,
                expert_url=self.expert_api_url,
            )
        return NetworkConfig(
            network=net,
            horizon_url=self.horizon_mainnet_url,
            soroban_rpc_url=self.soroban_rpc_mainnet_url,
            expert_url=self.expert_api_url,
        )


def load_settings() -> Settings:
    """Build Settings from the current environment."""
    load_explorer_env()
    origins = env_str("CORS_ORIGINS", "*")
    return Settings(
        horizon_mainnet_url=env_str("STELLAR_HORIZON_URL", MAINNET_HORIZON_URL).rstrip("/"),
        horizon_testnet_url=env_str("STELLAR_HORIZON_TESTNET_URL", TESTNET_HORIZON_URL).rstrip("/"),
        soroban_rpc_mainnet_url=env_str("SOROBAN_RPC_MAINNET_URL", MAINNET_SOROBAN_RPC_URL),
        soroban_rpc_testnet_url=env_str("SOROBAN_RPC_TESTNET_URL", TESTNET_SOROBAN_RPC_URL),
        expert_api_url=env_str("STELLAR_EXPERT_API_URL", STELLAR_EXPERT_API_URL).rstrip("/"),
        projects_root=Path(env_str("PROJECTS_ROOT", "projects")),
        upstream_timeout_sec=env_float("UPSTREAM_TIMEOUT_SEC", DEFAULT_UPSTREAM_TIMEOUT_SEC),
        api_host=env_str("API_HOST", "0.0.0.0"),
        api_port=env_int("PORT", DEFAULT_PORT),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
    )


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached application settings."""
    return load_settings()
