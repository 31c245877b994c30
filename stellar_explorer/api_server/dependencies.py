"""
FastAPI dependencies: settings, shared HTTP client, per-request network and upstream clients.

The selected network is resolved for each request from its `network` query
parameter and handed to the clients explicitly; nothing network-specific is
stored on the app.
"""

from __future__ import annotations

import httpx
from fastapi import Depends, Query, Request

from stellar_explorer.config import NetworkConfig, Settings
from stellar_explorer.core.exceptions import InvalidIdentifierError
from stellar_explorer.horizon.client import HorizonClient
from stellar_explorer.soroban.expert import StellarExpertClient
from stellar_explorer.soroban.rpc import SorobanRpcClient


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared AsyncClient created in the app lifespan."""
    return request.app.state.http_client


def get_network_config(
    network: str | None = Query(None, description="mainnet (default) or testnet"),
    settings: Settings = Depends(get_app_settings),
) -> NetworkConfig:
    try:
        return settings.network_config(network)
    except ValueError:
        raise InvalidIdentifierError(
            'Invalid network. Use "mainnet" or "testnet".',
            provided=network,
        ) from None


def get_horizon(
    config: NetworkConfig = Depends(get_network_config),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> HorizonClient:
    return HorizonClient(http, config.horizon_url)


def get_soroban_rpc(
    config: NetworkConfig = Depends(get_network_config),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> SorobanRpcClient:
    return SorobanRpcClient(http, config.soroban_rpc_url)


def get_expert(
    config: NetworkConfig = Depends(get_network_config),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> StellarExpertClient:
    return StellarExpertClient.for_network(http, config)
