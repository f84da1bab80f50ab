from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, List, Optional

from application.balance import get_possibly_available_balance
from application.contract import ContractFacade
from application.links import creation_transaction_link, smart_contract_link
from application.match import MatchCoordinator
from application.session import SessionManager
from domain.models import MatchStatus, NetworkConfig
from infrastructure.navigation import BrowserNavigator
from interfaces.console.commands import Command, format_board, parse_command, parse_tiles


HELP_TEXT = (
    "login                      - sign in with the wallet\n"
    "arrive <url>               - paste the URL the wallet sent you back to\n"
    "logout                     - sign out\n"
    "whoami                     - show the signed-in account\n"
    "balance                    - show the spendable balance\n"
    "new <16 tiles>             - start a new game with the given board\n"
    "move <16 tiles>            - submit the board after one move\n"
    "tiles [account]            - show a board\n"
    "players                    - list players and their stakes\n"
    "join                       - add yourself to the players\n"
    "opponent <account>         - choose an opponent\n"
    "price <amount>             - post your stake in NEAR\n"
    "withdraw                   - withdraw your stake and cancel\n"
    "match [account]            - show the match status\n"
    "settled [account]          - check both boards for a finished match\n"
    "links                      - explorer links\n"
    "quit                       - leave\n"
)

Handler = Callable[[Command], Awaitable[str]]


class ConsoleApp:
    """
    Line-oriented UI over the gateway.

    Each command is awaited to completion before the next line is read, so
    there is never more than one contract call in flight.
    """

    def __init__(
        self,
        session_manager: SessionManager,
        facade: ContractFacade,
        coordinator: MatchCoordinator,
        config: NetworkConfig,
        navigator: BrowserNavigator,
    ) -> None:
        self._sessions = session_manager
        self._facade = facade
        self._match = coordinator
        self._config = config
        self._navigator = navigator
        self._handlers: Dict[str, Handler] = {
            "help": self._help,
            "login": self._login,
            "arrive": self._arrive,
            "logout": self._logout,
            "whoami": self._whoami,
            "balance": self._balance,
            "new": self._new_game,
            "move": self._move,
            "tiles": self._tiles,
            "players": self._players,
            "join": self._join,
            "opponent": self._opponent,
            "price": self._price,
            "withdraw": self._withdraw,
            "match": self._observe,
            "settled": self._settled,
            "links": self._links,
        }

    async def handle(self, line: str) -> str:
        try:
            command = parse_command(line)
            handler = self._handlers.get(command.name)
            if handler is None:
                return f"Unknown command {command.name}. Type help to see available commands."
            return await handler(command)
        except Exception as exc:  # Every failure is shown to the user; the loop goes on.
            return f"Error: {exc}"

    async def run(self, read_line: Optional[Callable[[str], str]] = None) -> None:
        read_line = read_line or input
        print("Welcome to the puzzle table! Type help to see available commands.")
        while True:
            try:
                line = await asyncio.to_thread(read_line, "> ")
            except EOFError:
                return
            if line.strip().lower() in ("quit", "exit"):
                return
            if not line.strip():
                continue
            print(await self.handle(line))

    # ---- session ----

    async def _help(self, command: Command) -> str:
        return HELP_TEXT

    async def _login(self, command: Command) -> str:
        await self._sessions.login()
        return (
            "Approve the sign-in in your browser, then paste the address "
            "you land on with: arrive <url>"
        )

    async def _arrive(self, command: Command) -> str:
        if not command.args:
            return "Please enter the URL the wallet sent you to."
        self._navigator.arrive(command.args[0])
        await self._sessions.initialize()
        return await self._whoami(command)

    async def _logout(self, command: Command) -> str:
        self._sessions.logout()
        return "Signed out."

    async def _whoami(self, command: Command) -> str:
        if not self._sessions.is_signed_in():
            return "Not signed in."
        return f"Signed in as {self._sessions.get_account_id()}"

    async def _balance(self, command: Command) -> str:
        balance = await get_possibly_available_balance(self._sessions.session)
        return f"Available: {balance} NEAR"

    # ---- game ----

    async def _new_game(self, command: Command) -> str:
        tiles = parse_tiles(command.args)
        await self._facade.new_game(tiles)
        return "New game started.\n" + format_board(tiles)

    async def _move(self, command: Command) -> str:
        tiles = parse_tiles(command.args)
        await self._match.play(tiles)
        return "Move accepted.\n" + format_board(tiles)

    async def _tiles(self, command: Command) -> str:
        account_id = command.args[0] if command.args else self._sessions.get_account_id()
        tiles = await self._facade.get_tiles(account_id)
        return format_board(tiles)

    # ---- match ----

    async def _players(self, command: Command) -> str:
        players = await self._facade.get_players()
        lines: List[str] = []
        for p in players:
            opponent = p.opponent or "-"
            lines.append(f"{p.account_id}: stake {p.price} yocto, opponent {opponent}, playing {p.is_play}")
        return "\n".join(lines) or "No players yet."

    async def _join(self, command: Command) -> str:
        if await self._facade.is_i_in_players():
            return "You are already in the player list."
        await self._match.join()
        return "Joined the player list."

    async def _opponent(self, command: Command) -> str:
        if not command.args:
            opponent = await self._facade.get_opponent(self._sessions.get_account_id())
            return f"Opponent: {opponent or '-'}"
        await self._match.choose_opponent(command.args[0])
        return f"Opponent set to {command.args[0]}."

    async def _price(self, command: Command) -> str:
        if not command.args:
            return "Please enter the amount in NEAR."
        before = self._navigator.location
        await self._match.post_price(command.args[0])
        if self._navigator.location != before:
            return "Confirm the stake in your browser, then paste the address you land on with: arrive <url>"
        return f"Stake of {command.args[0]} NEAR posted."

    async def _withdraw(self, command: Command) -> str:
        await self._match.cancel()
        return "Stake withdrawn, match cancelled."

    async def _observe(self, command: Command) -> str:
        snapshot = await self._match.observe(command.args[0] if command.args else None)
        opponent = snapshot.opponent_id or "-"
        return f"{snapshot.account_id} vs {opponent}: {snapshot.status.value} (stake {snapshot.price} yocto)"

    async def _settled(self, command: Command) -> str:
        snapshot = await self._match.observe(
            command.args[0] if command.args else None, include_boards=True
        )
        if snapshot.status is MatchStatus.SETTLED:
            return f"{snapshot.account_id} vs {snapshot.opponent_id}: settled"
        return f"Not settled ({snapshot.status.value})."

    async def _links(self, command: Command) -> str:
        lines = [f"Contract: {smart_contract_link(self._config)}"]
        tx_link = creation_transaction_link(self._config, self._navigator.location)
        if tx_link:
            lines.append(f"Last transaction: {tx_link}")
        return "\n".join(lines)
