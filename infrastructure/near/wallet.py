from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import base58
import httpx

from domain.errors import ConfigurationError, ContractCallError
from domain.gateways import Navigator
from domain.models import AuthData, NetworkConfig
from domain.repositories import AuthStore, KeyStore

from .keys import KeyPair, PublicKey
from .provider import JsonRpcProvider
from .transactions import FunctionCall, Transaction, encode_args, sign_transaction


logger = logging.getLogger(__name__)

DEFAULT_APP_KEY_PREFIX = "my-app"
AUTH_DATA_KEY_SUFFIX = "_wallet_auth_key"
PENDING_ACCESS_KEY_PREFIX = "pending_key"
LOGIN_WALLET_URL_SUFFIX = "/login/"
SIGN_WALLET_URL_SUFFIX = "/sign"

# Query parameters the wallet adds when it sends the user back after sign-in.
SIGN_IN_RESULT_PARAMS = ("account_id", "public_key", "all_keys", "meta")


def _query_params(url: str) -> List[Tuple[str, str]]:
    return parse_qsl(urlsplit(url).query, keep_blank_values=True)


def _strip_params(url: str, names: Sequence[str]) -> str:
    parts = urlsplit(url)
    kept = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in names]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(kept), parts.fragment))


def _is_missing_key(exc: ContractCallError) -> bool:
    text = str(exc)
    return "UNKNOWN_ACCESS_KEY" in text or "does not exist" in text


class ConnectedWalletAccount:
    """
    The signed-in account (or an anonymous one) as seen through the wallet.

    Change calls are signed with the function-call key kept in the key
    store when that key is allowed to make them. Anything else (a deposit,
    a method the key does not cover) is sent to the wallet for signing.
    """

    def __init__(self, wallet: "WalletConnection", account_id: str) -> None:
        self._wallet = wallet
        self.account_id = account_id

    @property
    def _provider(self) -> JsonRpcProvider:
        return self._wallet.provider

    async def view_function(
        self,
        contract_id: str,
        method_name: str,
        args: Dict[str, Any],
    ) -> Any:
        return await self._provider.call_function(contract_id, method_name, args)

    async def function_call(
        self,
        contract_id: str,
        method_name: str,
        args: Dict[str, Any],
        gas: int,
        deposit: int,
    ) -> Any:
        action = FunctionCall(method_name, encode_args(args), gas, deposit)

        key_pair = self._wallet.local_key_pair(self.account_id)
        if key_pair is not None and deposit == 0:
            access_key = await self._local_access_key(key_pair, contract_id, method_name)
            if access_key is not None:
                transaction = Transaction(
                    signer_id=self.account_id,
                    public_key=key_pair.public_key,
                    nonce=int(access_key["nonce"]) + 1,
                    receiver_id=contract_id,
                    block_hash=base58.b58decode(access_key["block_hash"]),
                    actions=[action],
                )
                tx_hash, signed = sign_transaction(transaction, key_pair)
                logger.debug(
                    "sending %s to %s as %s",
                    method_name,
                    contract_id,
                    base58.b58encode(tx_hash).decode("ascii"),
                )
                return await self._provider.send_transaction(signed)

        public_key, nonce = await self._full_access_key(contract_id)
        block_hash = await self._provider.final_block_hash()
        transaction = Transaction(
            signer_id=self.account_id,
            public_key=PublicKey.from_string(public_key),
            nonce=nonce + 1,
            receiver_id=contract_id,
            block_hash=base58.b58decode(block_hash),
            actions=[action],
        )
        self._wallet.request_sign_transactions([transaction])
        return None

    async def get_account_balance(self) -> Dict[str, int]:
        config = await self._provider.protocol_config()
        cost_per_byte = int(config["runtime_config"]["storage_amount_per_byte"])
        state = await self._provider.view_account(self.account_id)

        state_staked = int(state["storage_usage"]) * cost_per_byte
        staked = int(state["locked"])
        total = int(state["amount"]) + staked
        return {
            "total": total,
            "state_staked": state_staked,
            "staked": staked,
            "available": total - max(staked, state_staked),
        }

    async def _local_access_key(
        self,
        key_pair: KeyPair,
        contract_id: str,
        method_name: str,
    ) -> Optional[Dict[str, Any]]:
        """The on-chain access key of `key_pair`, if it may sign this call."""

        try:
            access_key = await self._provider.view_access_key(
                self.account_id, str(key_pair.public_key)
            )
        except ContractCallError as exc:
            if _is_missing_key(exc):
                return None
            raise

        permission = access_key.get("permission")
        if permission == "FullAccess":
            return access_key
        function_call = permission.get("FunctionCall") if isinstance(permission, dict) else None
        if not function_call or function_call.get("receiver_id") != contract_id:
            return None
        method_names = function_call.get("method_names") or []
        if method_names and method_name not in method_names:
            return None
        return access_key

    async def _full_access_key(self, contract_id: str) -> Tuple[str, int]:
        wallet_keys = set(self._wallet.all_keys)
        for entry in await self._provider.view_access_key_list(self.account_id):
            access_key = entry.get("access_key", {})
            if entry.get("public_key") in wallet_keys and access_key.get("permission") == "FullAccess":
                return entry["public_key"], int(access_key.get("nonce", 0))
        raise ContractCallError(
            f"Cannot find matching key for transaction sent to {contract_id}"
        )


class WalletConnection:
    """
    Redirect-based wallet connection.

    Sign-in sends the user agent to the wallet with a freshly generated
    function-call key; when the wallet sends the user back, the account ID
    and key list arrive in the query string and are persisted through the
    auth store. The key itself stays in the key store.
    """

    def __init__(
        self,
        provider: JsonRpcProvider,
        config: NetworkConfig,
        key_store: KeyStore,
        auth_store: AuthStore,
        navigator: Navigator,
        app_key_prefix: str = DEFAULT_APP_KEY_PREFIX,
    ) -> None:
        self.provider = provider
        self._config = config
        self._key_store = key_store
        self._auth_store = auth_store
        self._navigator = navigator
        self._auth_data_key = f"{app_key_prefix}{AUTH_DATA_KEY_SUFFIX}"
        self._auth_data: Optional[AuthData] = auth_store.get_auth_data(self._auth_data_key)
        self._connected_account: Optional[ConnectedWalletAccount] = None

    @property
    def network_id(self) -> str:
        return self._config.network_id

    @property
    def all_keys(self) -> List[str]:
        return list(self._auth_data.all_keys) if self._auth_data else []

    def get_account_id(self) -> str:
        return self._auth_data.account_id if self._auth_data else ""

    def is_signed_in(self) -> bool:
        return bool(self.get_account_id())

    def complete_sign_in(self) -> None:
        """
        Pick up the wallet's answer from the current location, if there is one.
        """

        location = self._navigator.location
        params = dict(_query_params(location))
        account_id = params.get("account_id", "")
        public_key = params.get("public_key", "")

        if account_id:
            all_keys = [k for k in params.get("all_keys", "").split(",") if k]
            auth_data = AuthData(account_id=account_id, all_keys=all_keys)
            self._auth_store.set_auth_data(self._auth_data_key, auth_data)
            if public_key:
                self._move_key_from_pending(account_id, public_key)
            self._auth_data = auth_data
            self._connected_account = None

        if any(name in params for name in SIGN_IN_RESULT_PARAMS):
            self._navigator.replace(_strip_params(location, SIGN_IN_RESULT_PARAMS))

    async def request_sign_in(
        self,
        contract_id: str,
        success_url: Optional[str] = None,
        failure_url: Optional[str] = None,
        method_names: Sequence[str] = (),
    ) -> None:
        current = self._navigator.location
        params: List[Tuple[str, str]] = [
            ("success_url", success_url or current),
            ("failure_url", failure_url or current),
        ]
        if contract_id:
            # Fails with the node's error if the contract account does not exist.
            await self.provider.view_account(contract_id)
            key_pair = KeyPair.from_random()
            public_key = str(key_pair.public_key)
            params.append(("contract_id", contract_id))
            params.append(("public_key", public_key))
            self._key_store.set_key(
                self.network_id,
                PENDING_ACCESS_KEY_PREFIX + public_key,
                key_pair.secret_key,
            )
        params.extend(("methodNames", name) for name in method_names)

        url = f"{self._wallet_base_url()}{LOGIN_WALLET_URL_SUFFIX}?{urlencode(params)}"
        logger.info("redirecting to wallet sign-in for %s", contract_id or "full access")
        self._navigator.assign(url)

    def request_sign_transactions(
        self,
        transactions: Sequence[Transaction],
        callback_url: Optional[str] = None,
        meta: Optional[str] = None,
    ) -> None:
        encoded = ",".join(
            base64.b64encode(tx.serialize()).decode("ascii") for tx in transactions
        )
        params = [
            ("transactions", encoded),
            ("callbackUrl", callback_url or self._navigator.location),
        ]
        if meta:
            params.append(("meta", meta))

        url = f"{self._wallet_base_url()}{SIGN_WALLET_URL_SUFFIX}?{urlencode(params)}"
        logger.info("redirecting to wallet to sign %d transaction(s)", len(transactions))
        self._navigator.assign(url)

    def sign_out(self) -> None:
        self._auth_data = None
        self._connected_account = None
        self._auth_store.clear_auth_data(self._auth_data_key)

    async def aclose(self) -> None:
        """Release the node connection; the stored keys and auth data stay."""

        await self.provider.aclose()

    def account(self) -> ConnectedWalletAccount:
        account_id = self.get_account_id()
        if self._connected_account is None or self._connected_account.account_id != account_id:
            self._connected_account = ConnectedWalletAccount(self, account_id)
        return self._connected_account

    def local_key_pair(self, account_id: str) -> Optional[KeyPair]:
        if not account_id:
            return None
        secret_key = self._key_store.get_key(self.network_id, account_id)
        return KeyPair(secret_key) if secret_key else None

    def _move_key_from_pending(self, account_id: str, public_key: str) -> None:
        pending_name = PENDING_ACCESS_KEY_PREFIX + public_key
        secret_key = self._key_store.get_key(self.network_id, pending_name)
        if secret_key is None:
            logger.warning("no pending key for %s; calls will go through the wallet", public_key)
            return
        self._key_store.set_key(self.network_id, account_id, secret_key)
        self._key_store.remove_key(self.network_id, pending_name)

    def _wallet_base_url(self) -> str:
        if not self._config.wallet_url:
            raise ConfigurationError(f"No wallet configured for network {self.network_id}")
        return self._config.wallet_url.rstrip("/")


async def connect(
    config: NetworkConfig,
    key_store: KeyStore,
    auth_store: AuthStore,
    navigator: Navigator,
    app_key_prefix: str = DEFAULT_APP_KEY_PREFIX,
    client: Optional[httpx.AsyncClient] = None,
) -> WalletConnection:
    """
    Open the RPC provider, check the node answers, and build the wallet
    connection, completing a sign-in the wallet has just returned from.
    """

    provider = JsonRpcProvider(config.node_url, client=client)
    status = await provider.send_json_rpc("status", [])
    logger.info("connected to %s (chain %s)", config.node_url, status.get("chain_id"))

    wallet = WalletConnection(provider, config, key_store, auth_store, navigator, app_key_prefix)
    wallet.complete_sign_in()
    return wallet
