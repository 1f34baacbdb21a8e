from __future__ import annotations

import asyncio
import logging
from typing import List, Protocol

from .errors import PlayerNotFound
from .models import Player
from .players import PlayerRepository, level_for_score
from .utils import sort_leaderboard

logger = logging.getLogger(__name__)


class RankRecalculator(Protocol):
    async def recalculate(self, players: PlayerRepository) -> None: ...


class FullRankRecalculator:
    """Re-derives every player's rank from scratch.

    Highest total score is rank 1; equal scores keep player id order.
    """

    async def recalculate(self, players: PlayerRepository) -> None:
        ordered = sort_leaderboard(await players.get_all())
        for rank, player in enumerate(ordered, start=1):
            player.current_rank = rank
            await players.update(player)
        logger.info("Recalculated ranks for %d players", len(ordered))


class Leaderboard:
    """Single writer for player aggregates.

    Every pass that writes player records holds ``self.lock`` for its full
    duration, so a rank recompute never interleaves with another update.
    """

    def __init__(
        self,
        players: PlayerRepository,
        ranks: RankRecalculator | None = None,
        points_per_level: int = 100,
    ):
        self.players = players
        self.ranks = ranks or FullRankRecalculator()
        self.points_per_level = points_per_level
        self.lock = asyncio.Lock()

    async def record_session(self, player_id: int, score: int) -> Player:
        """Fold a completed session's score into the player's stats and re-rank everyone.

        Either the stats update and the re-rank both land, or every player
        record is put back as it was before the call.
        """
        async with self.lock:
            before = await self.players.get_all()
            player = next((p.model_copy() for p in before if p.id == player_id), None)
            if player is None:
                logger.warning("Player %s not found while recording session result", player_id)
                raise PlayerNotFound(player_id)

            player.total_score += score
            player.games_played += 1
            player.level = level_for_score(player.total_score, self.points_per_level)
            try:
                await self.players.update(player)
                await self.ranks.recalculate(self.players)
            except Exception:
                logger.exception("Recording session result for player %s failed; restoring player records", player_id)
                for original in before:
                    await self.players.update(original)
                raise
            return await self.players.get_by_id(player_id)

    async def update_player(self, player: Player) -> None:
        async with self.lock:
            await self.players.update(player)

    async def standings(self, limit: int) -> List[Player]:
        """Players in rank order, never read mid-recompute."""
        async with self.lock:
            return await self.players.top(limit)

    async def recalculate(self) -> None:
        async with self.lock:
            await self.ranks.recalculate(self.players)
