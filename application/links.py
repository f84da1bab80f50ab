from __future__ import annotations

from typing import Optional
from urllib.parse import parse_qs, urlsplit

from domain.models import NetworkConfig


def _explorer(config: NetworkConfig) -> str:
    return (config.explorer_url or f"https://explorer.{config.network_id}.near.org").rstrip("/")


def creation_transaction_link(config: NetworkConfig, location: str) -> Optional[str]:
    """
    Explorer link for the transaction the wallet just sent us back from.

    The wallet appends `transactionHashes` to the callback URL; returns None
    when the location has none.
    """

    hashes = parse_qs(urlsplit(location).query).get("transactionHashes")
    if not hashes:
        return None
    # Several transactions come back comma-separated; the last one is ours.
    tx_hash = hashes[0].split(",")[-1]
    return f"{_explorer(config)}/transactions/{tx_hash}"


def smart_contract_link(config: NetworkConfig) -> str:
    return f"{_explorer(config)}/accounts/{config.contract_name}"
