from __future__ import annotations

from typing import Awaitable, Callable, Optional
from urllib.parse import urlsplit, urlunsplit

from domain.errors import BootError, SessionNotInitializedError
from domain.gateways import Navigator, WalletConnection
from domain.models import NetworkConfig, Session


Connector = Callable[[NetworkConfig], Awaitable[WalletConnection]]


def base_location(url: str) -> str:
    """Origin plus path of `url`, with query and fragment dropped."""

    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


class SessionManager:
    """
    Owns the wallet session: boot, sign-in, sign-out and identity reads.

    The manager is the only writer of its `Session`; other components get
    the same object passed in and read from it.
    """

    def __init__(
        self,
        config: NetworkConfig,
        connect: Connector,
        navigator: Navigator,
        session: Optional[Session] = None,
    ) -> None:
        self._config = config
        self._connect = connect
        self._navigator = navigator
        self.session = session if session is not None else Session()
        self._base_location = base_location(navigator.location)

    async def initialize(self) -> Session:
        """
        Connect to the network and resolve the signed-in account, if any.

        Any failure is raised as `BootError`; the application is not meant
        to continue without a session.
        """

        previous = self.session.connection
        self.session.connection = None
        self.session.clear()
        if previous is not None:
            await previous.aclose()
        self._base_location = base_location(self._navigator.location)

        try:
            connection = await self._connect(self._config)
            account_id = connection.get_account_id() or None
        except Exception as exc:
            raise BootError(
                f"Could not initialise the wallet session on {self._config.network_id}: {exc}"
            ) from exc

        self.session.connection = connection
        self.session.account_id = account_id
        self.session.signed_in = account_id is not None
        return self.session

    async def login(self) -> None:
        """Send the user agent to the wallet to authorise this contract."""

        await self._require_connection().request_sign_in(self._config.contract_name)

    def logout(self) -> None:
        """
        Forget the wallet authorisation and return to the app's base location.

        Safe to call repeatedly.
        """

        self._require_connection().sign_out()
        self.session.clear()
        self._navigator.replace(self._base_location)

    def is_signed_in(self) -> bool:
        return self.session.signed_in

    def get_account_id(self) -> Optional[str]:
        return self.session.account_id

    def _require_connection(self) -> WalletConnection:
        if self.session.connection is None:
            raise SessionNotInitializedError()
        return self.session.connection
