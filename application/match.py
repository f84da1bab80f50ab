from __future__ import annotations

from typing import Any, List, Optional, Sequence

from domain.amounts import Amount
from domain.errors import NotSignedInError
from domain.models import MatchSnapshot, MatchStatus, Player, Session

from .contract import ContractFacade


# Board layout the contract treats as finished: 1..15 then the blank.
SOLVED_TILES: List[int] = list(range(1, 16)) + [0]


def derive_status(
    opponent_id: Optional[str],
    price: int,
    self_playing: bool,
    opponent_playing: bool,
    solved: bool = False,
) -> MatchStatus:
    """
    Map the contract's projections of one player onto a match status.

    unset -> opponent-set -> price-set -> active -> settled. Cancelled is
    reported when an opponent is still recorded but the player is no longer
    playing. `solved` comes from `MatchCoordinator.is_settled` and only
    matters for an active match.
    """

    if opponent_id is None:
        return MatchStatus.UNSET
    if not self_playing:
        return MatchStatus.CANCELLED
    if price <= 0:
        return MatchStatus.OPPONENT_SET
    if not opponent_playing:
        return MatchStatus.PRICE_SET
    if solved:
        return MatchStatus.SETTLED
    return MatchStatus.ACTIVE


def price_of(players: Sequence[Player], account_id: str) -> int:
    for player in players:
        if player.account_id == account_id:
            return player.price
    return 0


class MatchCoordinator:
    """
    Drives a two-player match through the contract.

    Transitions are issued one call at a time, exactly when asked for; the
    coordinator does not check whether a transition is legal, the contract
    does, and its rejection reaches the caller unchanged.
    """

    def __init__(self, facade: ContractFacade, session: Session) -> None:
        self._facade = facade
        self._session = session

    async def join(self) -> Any:
        return await self._facade.add_me_to_players()

    async def choose_opponent(self, account_id: str) -> Any:
        return await self._facade.set_opponent(account_id)

    async def post_price(self, amount: Amount) -> Any:
        return await self._facade.set_price(amount)

    async def cancel(self) -> Any:
        return await self._facade.withdraw_cancel_price()

    async def play(self, tiles: Sequence[int]) -> Any:
        return await self._facade.run(tiles)

    async def observe(
        self,
        account_id: Optional[str] = None,
        include_boards: bool = False,
    ) -> MatchSnapshot:
        """
        Read the match of `account_id` (default: the signed-in account) afresh.

        Boards are only read when `include_boards` is set and the match is
        active; a match can be active before either player has a board.
        """

        me = self._account(account_id, "observe")

        opponent_id = await self._facade.get_opponent(me)
        if opponent_id is None:
            return MatchSnapshot(me, None, 0, MatchStatus.UNSET)

        players = await self._facade.get_players()
        price = price_of(players, me)
        self_playing = await self._facade.is_play_player(me)
        opponent_playing = await self._facade.is_play_player(opponent_id)

        status = derive_status(opponent_id, price, self_playing, opponent_playing)
        if include_boards and status is MatchStatus.ACTIVE:
            if await self._boards_solved(me, opponent_id):
                status = MatchStatus.SETTLED
        return MatchSnapshot(me, opponent_id, price, status)

    async def is_settled(self, account_id: Optional[str] = None) -> bool:
        """
        True once either side of the match has a solved board.

        Both boards must exist: the contract rejects `get_tiles` for an
        account that never started a game, and that rejection is raised.
        """

        me = self._account(account_id, "is_settled")
        opponent_id = await self._facade.get_opponent(me)
        if opponent_id is None:
            return False
        return await self._boards_solved(me, opponent_id)

    async def _boards_solved(self, me: str, opponent_id: str) -> bool:
        for player_id in (me, opponent_id):
            tiles = await self._facade.get_tiles(player_id)
            if list(tiles or []) == SOLVED_TILES:
                return True
        return False

    def _account(self, account_id: Optional[str], operation: str) -> str:
        me = account_id or self._session.account_id
        if not me:
            raise NotSignedInError(operation)
        return me
