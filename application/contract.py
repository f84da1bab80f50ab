from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from domain.amounts import Amount, parse_near_amount
from domain.errors import (
    InvalidAmountError,
    NotSignedInError,
    SessionNotInitializedError,
    UnsupportedMethodError,
)
from domain.models import (
    CapabilityProfile,
    ContractMethod,
    MethodKind,
    Player,
    Session,
)
from domain.profiles import methods_for


DEFAULT_FUNCTION_CALL_GAS = 30_000_000_000_000


class ContractFacade:
    """
    Typed call surface of the puzzle contract.

    Each method issues exactly one remote call, named and shaped as listed
    in the capability profile the façade was built with, and returns the
    contract's answer. Nothing is cached: every read goes to the ledger.
    """

    def __init__(
        self,
        session: Session,
        contract_id: str,
        profile: CapabilityProfile = CapabilityProfile.MATCHED,
        gas: int = DEFAULT_FUNCTION_CALL_GAS,
    ) -> None:
        self._session = session
        self.contract_id = contract_id
        self.profile = CapabilityProfile(profile)
        self._methods = methods_for(self.profile)
        self._gas = gas

    # ---- game methods ----

    async def new_game(self, shuffle: Any) -> Any:
        return await self._change("new_game", {"shuffle": shuffle})

    async def run(self, tiles: Sequence[int]) -> Any:
        return await self._change("run", {"tiles": list(tiles)})

    async def get_tiles(self, account_id: Optional[str] = None) -> List[int]:
        if self.profile is CapabilityProfile.SOLO:
            return await self._view("get_tiles", {})
        return await self._view("get_tiles", {"account_id": account_id})

    # ---- match methods ----

    async def get_players(self) -> List[Player]:
        accounts, players = await self._view("get_players", {})
        return [
            Player(
                account_id=account_id,
                price=int(raw.get("price", 0)),
                opponent=raw.get("opponent"),
                is_play=bool(raw.get("is_play", False)),
            )
            for account_id, raw in zip(accounts, players)
        ]

    async def add_me_to_players(self) -> Any:
        return await self._change("add_me_to_players", {})

    async def is_i_in_players(self) -> bool:
        return bool(await self._view("is_i_in_players", {}))

    async def set_price(self, amount: Amount) -> Any:
        """
        Post the stake. `amount` is in NEAR and travels as the attached
        deposit, not as a method argument.
        """

        method = self._method("set_price")
        deposit = parse_near_amount(amount)
        return await self._change(method.name, {}, deposit=deposit)

    async def withdraw_cancel_price(self) -> Any:
        return await self._change("withdraw_and_cancel_price", {})

    async def set_opponent(self, account_id: str) -> Any:
        return await self._change("set_opponent", {"opponent_id": account_id})

    async def is_play_player(self, player_id: str) -> bool:
        return bool(await self._view("is_play_player", {"player_id": player_id}))

    async def get_opponent(self, account_id: str) -> Optional[str]:
        return await self._view("get_opponent", {"account_id": account_id})

    # ---- dispatch ----

    def _method(self, name: str) -> ContractMethod:
        method = self._methods.get(name)
        if method is None:
            raise UnsupportedMethodError(name, self.profile.value)
        return method

    def _connection(self):
        if self._session.connection is None:
            raise SessionNotInitializedError()
        return self._session.connection

    async def _view(self, name: str, args: Dict[str, Any]) -> Any:
        method = self._method(name)
        _check_kind(method, MethodKind.VIEW)
        _check_args(method, args)
        account = self._connection().account()
        return await account.view_function(self.contract_id, method.name, args)

    async def _change(self, name: str, args: Dict[str, Any], deposit: int = 0) -> Any:
        method = self._method(name)
        _check_kind(method, MethodKind.CHANGE)
        _check_args(method, args)
        if deposit and not method.payable:
            raise InvalidAmountError(deposit, f"{method.name} does not accept a deposit")
        connection = self._connection()
        if not self._session.signed_in:
            raise NotSignedInError(method.name)
        return await connection.account().function_call(
            self.contract_id,
            method.name,
            args,
            self._gas,
            deposit,
        )


def _check_kind(method: ContractMethod, kind: MethodKind) -> None:
    if method.kind is not kind:
        raise TypeError(f"{method.name} is a {method.kind.value} method, not {kind.value}")


def _check_args(method: ContractMethod, args: Dict[str, Any]) -> None:
    if tuple(args) != method.arg_keys:
        raise TypeError(
            f"{method.name} takes arguments {method.arg_keys}, got {tuple(args)}"
        )
