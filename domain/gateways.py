from __future__ import annotations

from typing import Any, Dict, Optional, Protocol


class Navigator(Protocol):
    """
    The user agent the gateway runs in.

    `location` is the current URL. `assign` navigates away (the wallet
    redirects), `replace` swaps the current location without keeping the
    old one around.
    """

    location: str

    def assign(self, url: str) -> None:
        ...

    def replace(self, url: str) -> None:
        ...


class LedgerAccount(Protocol):
    """
    The account calls are made on behalf of.

    For an unauthenticated session this is an account with an empty ID:
    views still work, change calls are rejected by the ledger.
    """

    account_id: str

    async def view_function(
        self,
        contract_id: str,
        method_name: str,
        args: Dict[str, Any],
    ) -> Any:
        """Run a read-only method and return its decoded JSON result."""

        ...

    async def function_call(
        self,
        contract_id: str,
        method_name: str,
        args: Dict[str, Any],
        gas: int,
        deposit: int,
    ) -> Any:
        """
        Submit a state-changing call and return its decoded result.

        `deposit` is the amount in yoctoNEAR attached to the transaction,
        separate from the method's `args`. Returns None when the call had to
        be handed to the wallet for signing (the user agent has navigated away).
        """

        ...

    async def get_account_balance(self) -> Dict[str, int]:
        """Return `total`, `state_staked`, `staked` and `available` in yoctoNEAR."""

        ...


class WalletConnection(Protocol):
    """Wallet-backed connection handle; opaque to everything but the session manager."""

    def get_account_id(self) -> str:
        """The signed-in account, or an empty string."""

        ...

    def is_signed_in(self) -> bool:
        ...

    async def request_sign_in(
        self,
        contract_id: str,
        success_url: Optional[str] = None,
        failure_url: Optional[str] = None,
    ) -> None:
        ...

    def sign_out(self) -> None:
        ...

    def account(self) -> LedgerAccount:
        ...

    async def aclose(self) -> None:
        ...
