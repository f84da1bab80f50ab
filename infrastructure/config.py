from __future__ import annotations

import os
from typing import Optional

from domain.errors import ConfigurationError
from domain.models import NetworkConfig


DEFAULT_CONTRACT_NAME = "puzzle.testnet"


def get_config(env: str, contract_name: Optional[str] = None) -> NetworkConfig:
    """
    Network parameters for a named deployment environment.

    `contract_name` falls back to the `CONTRACT_NAME` environment variable.
    """

    contract = contract_name or os.environ.get("CONTRACT_NAME") or DEFAULT_CONTRACT_NAME

    if env in ("production", "mainnet"):
        return NetworkConfig(
            network_id="mainnet",
            node_url="https://rpc.mainnet.near.org",
            contract_name=contract,
            wallet_url="https://wallet.near.org",
            explorer_url="https://explorer.mainnet.near.org",
        )
    if env in ("development", "testnet"):
        return NetworkConfig(
            network_id="testnet",
            node_url="https://rpc.testnet.near.org",
            contract_name=contract,
            wallet_url="https://wallet.testnet.near.org",
            explorer_url="https://explorer.testnet.near.org",
        )
    if env == "betanet":
        return NetworkConfig(
            network_id="betanet",
            node_url="https://rpc.betanet.near.org",
            contract_name=contract,
            wallet_url="https://wallet.betanet.near.org",
            explorer_url="https://explorer.betanet.near.org",
        )
    if env == "local":
        return NetworkConfig(
            network_id="local",
            node_url="http://localhost:3030",
            contract_name=contract,
            wallet_url="http://localhost:4000/wallet",
        )
    if env in ("test", "ci"):
        return NetworkConfig(
            network_id="shared-test",
            node_url="https://rpc.ci-testnet.near.org",
            contract_name=contract,
        )

    raise ConfigurationError(
        f"Unconfigured environment '{env}'. Known: mainnet, testnet, betanet, local, test."
    )
