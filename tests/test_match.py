import unittest

from application.contract import ContractFacade
from application.match import SOLVED_TILES, MatchCoordinator, derive_status
from domain.errors import ContractCallError, NotSignedInError
from domain.models import MatchStatus, Session

from fakes import PuzzleContractStub, StubConnection, signed_in_session


CONTRACT = "puzzle.testnet"
ALICE = "alice.testnet"
BOB = "bob.testnet"


class DeriveStatusTests(unittest.TestCase):
    def test_status_table(self):
        cases = [
            ((None, 0, False, False), MatchStatus.UNSET),
            ((BOB, 0, True, False), MatchStatus.OPPONENT_SET),
            ((BOB, 10, True, False), MatchStatus.PRICE_SET),
            ((BOB, 10, True, True), MatchStatus.ACTIVE),
            ((BOB, 0, False, True), MatchStatus.CANCELLED),
            ((BOB, 10, False, True), MatchStatus.CANCELLED),
        ]
        for args, expected in cases:
            with self.subTest(args=args):
                self.assertEqual(derive_status(*args), expected)

    def test_solved_board_settles_an_active_match(self):
        self.assertEqual(derive_status(BOB, 10, True, True, solved=True), MatchStatus.SETTLED)
        # A solved board alone does not settle a match that never started.
        self.assertEqual(derive_status(BOB, 0, True, False, solved=True), MatchStatus.OPPONENT_SET)


class MatchCoordinatorTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.contract = PuzzleContractStub()
        self.alice_session = signed_in_session(ALICE, self.contract)
        self.bob_session = signed_in_session(BOB, self.contract)
        self.alice = MatchCoordinator(
            ContractFacade(self.alice_session, CONTRACT), self.alice_session
        )
        self.bob = MatchCoordinator(ContractFacade(self.bob_session, CONTRACT), self.bob_session)
        self.alice_facade = ContractFacade(self.alice_session, CONTRACT)

    async def _join_both(self):
        await self.alice.join()
        await self.bob.join()

    async def test_set_opponent_then_get_opponent_round_trip(self):
        await self._join_both()

        await self.alice.choose_opponent(BOB)

        self.assertEqual(await self.alice_facade.get_opponent(ALICE), BOB)

    async def _start_match(self):
        await self._join_both()
        await self.alice.choose_opponent(BOB)
        await self.alice.post_price("1")
        await self.bob.choose_opponent(ALICE)

    async def test_full_lifecycle(self):
        await self._join_both()
        self.assertEqual((await self.alice.observe()).status, MatchStatus.UNSET)

        await self.alice.choose_opponent(BOB)
        self.assertEqual((await self.alice.observe()).status, MatchStatus.OPPONENT_SET)

        await self.alice.post_price("1")
        snapshot = await self.alice.observe()
        self.assertEqual(snapshot.status, MatchStatus.PRICE_SET)
        self.assertEqual(snapshot.price, 10**24)
        self.assertEqual(snapshot.opponent_id, BOB)

        await self.bob.choose_opponent(ALICE)
        self.assertEqual((await self.alice.observe()).status, MatchStatus.ACTIVE)

    async def test_active_match_without_boards_is_observable(self):
        await self._start_match()
        calls = self.alice_session.connection.calls
        before = len(calls)

        snapshot = await self.alice.observe()

        self.assertEqual(snapshot.status, MatchStatus.ACTIVE)
        self.assertNotIn("get_tiles", [c[2] for c in calls[before:]])

    async def test_settlement_reads_both_boards(self):
        # Starting a board resets the player record, so boards come first.
        reversed_board = list(range(15, -1, -1))
        await self.alice_facade.new_game(reversed_board)
        await self.bob_session.connection.account().function_call(
            CONTRACT, "new_game", {"shuffle": reversed_board}, 0, 0
        )
        await self._start_match()

        self.assertFalse(await self.alice.is_settled())
        self.assertEqual(
            (await self.alice.observe(include_boards=True)).status, MatchStatus.ACTIVE
        )

        await self.alice.play(SOLVED_TILES)

        self.assertTrue(await self.alice.is_settled())
        self.assertEqual(
            (await self.alice.observe(include_boards=True)).status, MatchStatus.SETTLED
        )
        # Without boards the same match still reads as active.
        self.assertEqual((await self.alice.observe()).status, MatchStatus.ACTIVE)

    async def test_settlement_needs_the_boards(self):
        await self._start_match()

        with self.assertRaises(ContractCallError):
            await self.alice.is_settled()

    async def test_is_settled_without_opponent(self):
        await self._join_both()
        self.assertFalse(await self.alice.is_settled())

    async def test_cancel_is_observed_from_fresh_reads(self):
        await self._start_match()
        self.assertEqual((await self.alice.observe()).status, MatchStatus.ACTIVE)

        calls = self.alice_session.connection.calls
        before = len(calls)
        await self.alice.cancel()

        snapshot = await self.alice.observe()
        self.assertEqual(snapshot.price, 0)
        # The contract only returns the stake; both players keep their opponents.
        self.assertEqual(snapshot.status, MatchStatus.OPPONENT_SET)
        self.assertTrue(await self.alice_facade.is_play_player(ALICE))
        self.assertTrue(await self.alice_facade.is_play_player(BOB))
        methods = [c[2] for c in calls[before:]]
        self.assertEqual(methods[0], "withdraw_and_cancel_price")
        self.assertEqual(methods.count("get_players"), 1)
        self.assertEqual(methods.count("is_play_player"), 4)

    async def test_player_no_longer_playing_is_cancelled(self):
        await self._start_match()
        self.contract.players[ALICE]["is_play"] = False

        self.assertEqual((await self.alice.observe()).status, MatchStatus.CANCELLED)

    async def test_observe_always_reads_the_contract(self):
        await self._start_match()
        calls = self.alice_session.connection.calls

        start = len(calls)
        await self.alice.observe()
        first = len(calls) - start
        await self.alice.observe()
        second = len(calls) - start - first

        self.assertEqual(first, 4)
        self.assertEqual(second, first)
        self.assertEqual(calls[-4:], calls[start:start + 4])

    async def test_illegal_transitions_are_rejected_by_the_contract(self):
        # Posting a price before joining the player list.
        with self.assertRaises(ContractCallError):
            await self.alice.post_price("1")

        await self._join_both()
        # Withdrawing without a stake.
        with self.assertRaises(ContractCallError):
            await self.alice.cancel()

        await self.alice.post_price("1")
        # Posting twice.
        with self.assertRaises(ContractCallError):
            await self.alice.post_price("1")

    async def test_observe_other_account(self):
        await self._join_both()
        await self.bob.choose_opponent(ALICE)

        snapshot = await self.alice.observe(BOB)

        self.assertEqual(snapshot.account_id, BOB)
        self.assertEqual(snapshot.opponent_id, ALICE)
        self.assertEqual(snapshot.status, MatchStatus.OPPONENT_SET)

    async def test_observe_needs_an_account(self):
        session = Session(connection=StubConnection("", self.contract))
        coordinator = MatchCoordinator(ContractFacade(session, CONTRACT), session)
        with self.assertRaises(NotSignedInError):
            await coordinator.observe()


if __name__ == "__main__":
    unittest.main()
