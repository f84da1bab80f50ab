from __future__ import annotations

from typing import Optional, Protocol

from .models import AuthData


class KeyStore(Protocol):
    """
    Persistent store of account access keys.

    Keys are kept in their string form (`ed25519:<base58 secret>`) so that
    implementations stay free of any crypto library. Implementations must
    survive process restarts; the wallet connection relies on a key written
    before the sign-in redirect still being there when the user comes back.
    """

    def set_key(self, network_id: str, account_id: str, secret_key: str) -> None:
        """Insert or replace the key for an account on a network."""

        ...

    def get_key(self, network_id: str, account_id: str) -> Optional[str]:
        """Return the stored key, or None if there is none."""

        ...

    def remove_key(self, network_id: str, account_id: str) -> None:
        ...


class AuthStore(Protocol):
    """
    Persistence for the wallet's authorization record, keyed by app key.
    """

    def get_auth_data(self, app_key: str) -> Optional[AuthData]:
        ...

    def set_auth_data(self, app_key: str, auth_data: AuthData) -> None:
        ...

    def clear_auth_data(self, app_key: str) -> None:
        """Remove the record. Must not fail when there is nothing to remove."""

        ...
