from datetime import datetime, timezone
from typing import Iterable, List

from .models import Player


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def sort_leaderboard(players: Iterable[Player]) -> List[Player]:
    return sorted(players, key=lambda p: (-p.total_score, p.id))
