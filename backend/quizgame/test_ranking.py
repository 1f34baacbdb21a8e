from __future__ import annotations

import asyncio
from unittest import IsolatedAsyncioTestCase, TestCase, mock

from .db import InMemoryDatabase
from .errors import PlayerNotFound
from .models import Player
from .players import PlayerRepository, level_for_score
from .ranking import FullRankRecalculator, Leaderboard


async def _repository(*players: Player) -> PlayerRepository:
    repo = PlayerRepository(InMemoryDatabase().players)
    for player in players:
        await repo.add(player)
    return repo


class LevelForScoreTests(TestCase):
    def test_levels_step_every_points_per_level(self):
        self.assertEqual(level_for_score(0, 100), 1)
        self.assertEqual(level_for_score(99, 100), 1)
        self.assertEqual(level_for_score(100, 100), 2)
        self.assertEqual(level_for_score(250, 100), 3)
        self.assertEqual(level_for_score(90, 30), 4)

    def test_rejects_non_positive_step(self):
        with self.assertRaises(ValueError):
            level_for_score(10, 0)


class FullRankRecalculatorTests(IsolatedAsyncioTestCase):
    async def test_ranks_by_score_descending_with_id_tiebreak(self):
        repo = await _repository(
            Player(id=3, total_score=50),
            Player(id=1, total_score=50),
            Player(id=2, total_score=80),
            Player(id=4, total_score=0),
        )

        await FullRankRecalculator().recalculate(repo)

        ranks = {p.id: p.current_rank for p in await repo.get_all()}
        self.assertEqual(ranks, {2: 1, 1: 2, 3: 3, 4: 4})

    async def test_recompute_is_reproducible(self):
        repo = await _repository(*(Player(id=i, total_score=10) for i in range(1, 6)))

        await FullRankRecalculator().recalculate(repo)
        first = [p.current_rank for p in await repo.get_all()]
        await FullRankRecalculator().recalculate(repo)
        second = [p.current_rank for p in await repo.get_all()]

        self.assertEqual(first, [1, 2, 3, 4, 5])
        self.assertEqual(first, second)

    async def test_empty_repository(self):
        repo = await _repository()
        await FullRankRecalculator().recalculate(repo)
        self.assertEqual(await repo.get_all(), [])


class LeaderboardTests(IsolatedAsyncioTestCase):
    async def test_record_session_updates_stats_level_and_ranks(self):
        repo = await _repository(Player(id=1, total_score=40), Player(id=2, total_score=100, current_rank=1))
        board = Leaderboard(repo, points_per_level=100)

        player = await board.record_session(1, 90)

        self.assertEqual(player.total_score, 130)
        self.assertEqual(player.games_played, 1)
        self.assertEqual(player.level, 2)
        self.assertEqual(player.current_rank, 1)
        other = await repo.get_by_id(2)
        self.assertEqual(other.current_rank, 2)
        self.assertEqual(other.games_played, 0)

    async def test_record_session_for_unknown_player(self):
        repo = await _repository(Player(id=1))
        ranks = mock.AsyncMock()
        board = Leaderboard(repo, ranks=ranks)

        with self.assertRaises(PlayerNotFound):
            await board.record_session(7, 50)

        ranks.recalculate.assert_not_awaited()
        self.assertEqual((await repo.get_by_id(1)).total_score, 0)

    async def test_record_session_triggers_one_full_recompute(self):
        repo = await _repository(Player(id=1))
        ranks = mock.AsyncMock()
        board = Leaderboard(repo, ranks=ranks)

        await board.record_session(1, 10)

        ranks.recalculate.assert_awaited_once_with(repo)

    async def test_concurrent_completions_do_not_lose_updates(self):
        repo = await _repository(Player(id=1), Player(id=2))
        board = Leaderboard(repo)

        await asyncio.gather(
            *(board.record_session(1, 10) for _ in range(5)),
            *(board.record_session(2, 30) for _ in range(3)),
        )

        first, second = await repo.get_by_id(1), await repo.get_by_id(2)
        self.assertEqual((first.total_score, first.games_played), (50, 5))
        self.assertEqual((second.total_score, second.games_played), (90, 3))
        self.assertEqual((second.current_rank, first.current_rank), (1, 2))

    async def test_update_player_waits_for_running_recompute(self):
        repo = await _repository(Player(id=1, username="old"))
        board = Leaderboard(repo)

        async with board.lock:
            pending = asyncio.create_task(board.update_player(Player(id=1, username="new")))
            await asyncio.sleep(0)
            self.assertFalse(pending.done())

        await pending
        self.assertEqual((await repo.get_by_id(1)).username, "new")

    async def test_update_unknown_player(self):
        board = Leaderboard(await _repository())
        with self.assertRaises(PlayerNotFound):
            await board.update_player(Player(id=5))

    async def test_failed_rerank_restores_every_player(self):
        repo = await _repository(Player(id=1, total_score=10, current_rank=2), Player(id=2, total_score=20, current_rank=1))

        class _HalfwayFailure:
            async def recalculate(self, players):
                first = await players.get_by_id(1)
                first.current_rank = 1
                await players.update(first)
                raise RuntimeError("recompute interrupted")

        board = Leaderboard(repo, ranks=_HalfwayFailure())

        with self.assertRaises(RuntimeError):
            await board.record_session(1, 50)

        first, second = await repo.get_by_id(1), await repo.get_by_id(2)
        self.assertEqual((first.total_score, first.games_played, first.current_rank), (10, 0, 2))
        self.assertEqual(second.current_rank, 1)
        self.assertFalse(board.lock.locked())

    async def test_standings_wait_for_running_recompute(self):
        repo = await _repository(Player(id=1, current_rank=2), Player(id=2, current_rank=1))
        board = Leaderboard(repo)

        async with board.lock:
            pending = asyncio.create_task(board.standings(10))
            await asyncio.sleep(0)
            self.assertFalse(pending.done())

        self.assertEqual([p.id for p in await pending], [2, 1])
