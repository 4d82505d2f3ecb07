"""Runtime configuration helpers for the pavilion services."""
from __future__ import annotations

import os
from typing import Optional

DEFAULT_SUI_RPC_URL = "https://fullnode.testnet.sui.io:443"
DEFAULT_WALRUS_AGGREGATOR = "https://aggregator.walrus-testnet.walrus.space"


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(name, default)


def get_env() -> Optional[str]:
    return _get_env("ENV") or _get_env("APP_ENV")


def get_pavilion_package_id() -> Optional[str]:
    return _get_env("PAVILION_PACKAGE_ID")


def get_sui_rpc_url() -> str:
    return _get_env("SUI_RPC_URL") or DEFAULT_SUI_RPC_URL


def get_walrus_aggregator_url() -> str:
    return _get_env("WALRUS_AGGREGATOR_URL") or DEFAULT_WALRUS_AGGREGATOR


def get_chain_timeout_seconds() -> float:
    raw = _get_env("CHAIN_TIMEOUT_SECONDS")
    try:
        return float(raw) if raw else 10.0
    except ValueError:
        return 10.0


def get_chain_max_attempts() -> int:
    raw = _get_env("CHAIN_MAX_ATTEMPTS")
    try:
        return max(1, int(raw)) if raw else 3
    except ValueError:
        return 3


def config_snapshot() -> dict:
    """Return a snapshot of relevant env-driven config."""
    return {
        "env": get_env(),
        "pavilion_package_id": get_pavilion_package_id(),
        "sui_rpc_url": get_sui_rpc_url(),
        "walrus_aggregator_url": get_walrus_aggregator_url(),
        "chain_timeout_seconds": get_chain_timeout_seconds(),
        "chain_max_attempts": get_chain_max_attempts(),
    }
