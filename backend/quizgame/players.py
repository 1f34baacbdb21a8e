from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from pydantic import TypeAdapter

from .db import InMemoryCollection
from .errors import PlayerNotFound
from .models import Player

logger = logging.getLogger(__name__)

_players_adapter = TypeAdapter(List[Player])


def level_for_score(total_score: int, points_per_level: int) -> int:
    """Level 1 covers the first ``points_per_level`` points, level 2 the next, and so on."""
    if points_per_level <= 0:
        raise ValueError("points_per_level must be positive")
    return 1 + max(total_score, 0) // points_per_level


class PlayerRepository:
    """Player aggregates kept in a Mongo-style collection."""

    def __init__(self, collection: InMemoryCollection):
        self.collection = collection

    async def get_by_id(self, player_id: int) -> Optional[Player]:
        doc = await self.collection.find_one(player_id)
        return Player(**doc) if doc else None

    async def get_all(self) -> List[Player]:
        docs = await self.collection.find().sort("id").to_list()
        return [Player(**doc) for doc in docs]

    async def top(self, limit: int) -> List[Player]:
        docs = await self.collection.find().sort("current_rank").limit(limit).to_list()
        return [Player(**doc) for doc in docs]

    async def add(self, player: Player) -> None:
        if await self.collection.find_one(player.id):
            raise ValueError(f"Player {player.id} already exists")
        await self.collection.insert_one(player.model_dump())

    async def update(self, player: Player) -> None:
        if not await self.collection.replace_one(player.model_dump()):
            raise PlayerNotFound(player.id)

    async def load_file(self, path: str | Path) -> int:
        """Seed players from a JSON array file, skipping ids that already exist."""
        path = Path(path)
        if not path.exists():
            logger.warning("Players file %s does not exist; starting with no players", path)
            return 0

        data = await asyncio.to_thread(path.read_bytes)
        players = _players_adapter.validate_json(data)
        added = 0
        for player in players:
            if await self.collection.find_one(player.id):
                continue
            await self.collection.insert_one(player.model_dump())
            added += 1
        logger.info("Loaded %d players from %s", added, path)
        return added
