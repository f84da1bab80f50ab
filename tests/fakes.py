from __future__ import annotations

from typing import Any, Dict, List, Optional

from domain.errors import ContractCallError
from domain.models import AuthData, Session
from domain.repositories import AuthStore, KeyStore


class InMemoryKeyStore(KeyStore):
    def __init__(self):
        self.keys = {}

    def set_key(self, network_id: str, account_id: str, secret_key: str) -> None:
        self.keys[(network_id, account_id)] = secret_key

    def get_key(self, network_id: str, account_id: str):
        return self.keys.get((network_id, account_id))

    def remove_key(self, network_id: str, account_id: str) -> None:
        self.keys.pop((network_id, account_id), None)


class InMemoryAuthStore(AuthStore):
    def __init__(self):
        self.records = {}

    def get_auth_data(self, app_key: str):
        return self.records.get(app_key)

    def set_auth_data(self, app_key: str, auth_data: AuthData) -> None:
        self.records[app_key] = auth_data

    def clear_auth_data(self, app_key: str) -> None:
        self.records.pop(app_key, None)


class FakeNavigator:
    def __init__(self, location: str):
        self.location = location
        self.assigned: List[str] = []
        self.replaced: List[str] = []

    def assign(self, url: str) -> None:
        self.assigned.append(url)
        self.location = url

    def replace(self, url: str) -> None:
        self.replaced.append(url)
        self.location = url

    def arrive(self, url: str) -> None:
        self.location = url


class PuzzleContractStub:
    """
    In-memory stand-in for the puzzle contract, following its rules for
    players, stakes and opponents. The caller is passed explicitly.
    """

    def __init__(self):
        self.players_vec: List[str] = []
        self.players: Dict[str, Dict[str, Any]] = {}
        self.games: Dict[str, List[int]] = {}

    def _player(self, account_id: str) -> Dict[str, Any]:
        if account_id not in self.players:
            raise ContractCallError("Smart contract panicked: value not found")
        return self.players[account_id]

    def view(self, caller: str, method: str, args: Dict[str, Any]) -> Any:
        if method == "get_tiles":
            account_id = args.get("account_id") or caller
            if account_id not in self.games:
                raise ContractCallError("Smart contract panicked: value not found")
            return list(self.games[account_id])
        if method == "is_i_in_players":
            return caller in self.players_vec
        if method == "get_players":
            if not self.players_vec:
                raise ContractCallError("Smart contract panicked: there are no players")
            return [list(self.players_vec), [dict(self.players[a]) for a in self.players_vec]]
        if method == "get_opponent":
            return self._player(args["account_id"])["opponent"]
        if method == "is_play_player":
            if args["player_id"] not in self.players_vec:
                raise ContractCallError(
                    "Smart contract panicked: the opponent is not from the list of players"
                )
            return self._player(args["player_id"])["is_play"]
        raise ContractCallError(f"MethodNotFound: {method}")

    def call(self, caller: str, method: str, args: Dict[str, Any], deposit: int) -> Any:
        if method == "add_me_to_players":
            if caller in self.players_vec:
                raise ContractCallError("Smart contract panicked: you are already in the player list")
            self.players_vec.append(caller)
            self.players[caller] = {"price": 0, "opponent": None, "is_play": False}
            return None
        if method == "set_price":
            player = self._player(caller)
            if player["price"] != 0:
                raise ContractCallError("Smart contract panicked: you have already placed a bet")
            player["price"] = deposit
            return None
        if method == "withdraw_and_cancel_price":
            player = self._player(caller)
            if player["price"] <= 0:
                raise ContractCallError("Smart contract panicked: you don't have a bid")
            player["price"] = 0
            return None
        if method == "set_opponent":
            opponent_id = args["opponent_id"]
            if opponent_id not in self.players_vec:
                raise ContractCallError(
                    "Smart contract panicked: the opponent is not from the list of players"
                )
            if caller not in self.players_vec:
                raise ContractCallError("Smart contract panicked: you are not in the player list")
            player = self._player(caller)
            player["opponent"] = opponent_id
            player["is_play"] = True
            return None
        if method == "new_game":
            self.games[caller] = list(args["shuffle"])
            # Starting a board resets the caller's player record.
            self.players[caller] = {"price": 0, "opponent": None, "is_play": False}
            return None
        if method == "run":
            if caller not in self.games:
                raise ContractCallError("Smart contract panicked: value not found")
            self.games[caller] = list(args["tiles"])
            return None
        raise ContractCallError(f"MethodNotFound: {method}")


class StubAccount:
    def __init__(self, account_id: str, contract: Optional[PuzzleContractStub], calls: list):
        self.account_id = account_id
        self._contract = contract
        self._calls = calls
        self.balance = {"total": 0, "state_staked": 0, "staked": 0, "available": 0}
        self.fail_with: Optional[BaseException] = None

    async def view_function(self, contract_id, method_name, args):
        self._calls.append(("view", contract_id, method_name, dict(args), 0))
        if self.fail_with is not None:
            raise self.fail_with
        return self._contract.view(self.account_id, method_name, args)

    async def function_call(self, contract_id, method_name, args, gas, deposit):
        self._calls.append(("change", contract_id, method_name, dict(args), deposit))
        if self.fail_with is not None:
            raise self.fail_with
        if not self.account_id:
            raise ContractCallError("Transaction has no signer")
        return self._contract.call(self.account_id, method_name, args, deposit)

    async def get_account_balance(self):
        self._calls.append(("balance", self.account_id))
        return dict(self.balance)


class StubConnection:
    """Wallet connection double; every call it receives is logged in `calls`."""

    def __init__(self, account_id: str = "", contract: Optional[PuzzleContractStub] = None):
        self.account_id = account_id
        self.calls: list = []
        self._account = StubAccount(account_id, contract or PuzzleContractStub(), self.calls)
        self.sign_in_requests: List[str] = []
        self.sign_outs = 0
        self.closed = False

    def get_account_id(self) -> str:
        return self.account_id

    def is_signed_in(self) -> bool:
        return bool(self.account_id)

    async def request_sign_in(self, contract_id, success_url=None, failure_url=None):
        self.sign_in_requests.append(contract_id)

    def sign_out(self) -> None:
        self.sign_outs += 1
        self.account_id = ""
        self._account.account_id = ""

    def account(self) -> StubAccount:
        return self._account

    async def aclose(self) -> None:
        self.closed = True


def signed_in_session(account_id: str, contract: PuzzleContractStub) -> Session:
    connection = StubConnection(account_id, contract)
    return Session(account_id=account_id, connection=connection, signed_in=True)


class FakeProvider:
    """Records RPC-level calls made by the wallet connection."""

    def __init__(self):
        self.calls: list = []
        self.access_keys: Dict[str, Dict[str, Any]] = {}
        self.access_key_list: List[Dict[str, Any]] = []
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self.block_hash = ""
        self.storage_amount_per_byte = "10000000000000000000"
        self.sent: list = []
        self.send_result: Any = None
        self.view_results: Dict[str, Any] = {}

    async def view_account(self, account_id):
        self.calls.append(("view_account", account_id))
        if account_id not in self.accounts:
            raise ContractCallError(f"UNKNOWN_ACCOUNT: {account_id} does not exist")
        return self.accounts[account_id]

    async def view_access_key(self, account_id, public_key):
        self.calls.append(("view_access_key", account_id, public_key))
        if public_key not in self.access_keys:
            raise ContractCallError(f"UNKNOWN_ACCESS_KEY: {public_key}")
        return self.access_keys[public_key]

    async def view_access_key_list(self, account_id):
        self.calls.append(("view_access_key_list", account_id))
        return list(self.access_key_list)

    async def call_function(self, contract_id, method_name, args):
        self.calls.append(("call_function", contract_id, method_name, args))
        return self.view_results.get(method_name)

    async def protocol_config(self):
        self.calls.append(("protocol_config",))
        return {"runtime_config": {"storage_amount_per_byte": self.storage_amount_per_byte}}

    async def final_block_hash(self):
        self.calls.append(("block",))
        return self.block_hash

    async def send_transaction(self, signed):
        self.calls.append(("send_transaction",))
        self.sent.append(signed)
        return self.send_result

    async def aclose(self):
        pass
