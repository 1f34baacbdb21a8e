from __future__ import annotations

import asyncio
import inspect
from datetime import datetime
from typing import Awaitable, Callable, Dict, Sequence, Union

from .errors import SessionNotFound
from .models import GameQuestion, GameSession

Mutation = Callable[[GameSession], Union[None, Awaitable[None]]]


class SessionStore:
    """Owns every live game session for the lifetime of the process.

    Readers get deep copies. Writers go through :meth:`mutate`, which works on
    a private draft and only commits it when the mutation returns cleanly.
    """

    def __init__(self):
        self._sessions: Dict[int, GameSession] = {}
        self.locks: Dict[int, asyncio.Lock] = {}
        self._next_id = 1

    def _lock(self, session_id: int) -> asyncio.Lock:
        self.locks.setdefault(session_id, asyncio.Lock())
        return self.locks[session_id]

    def count(self) -> int:
        return len(self._sessions)

    def create(
        self,
        player_id: int,
        question_ids: Sequence[int],
        total_questions: int,
        time_limit_seconds: int,
        start_time: datetime,
    ) -> int:
        # No await between reading and bumping the counter, so ids stay unique.
        session_id = self._next_id
        self._next_id += 1
        self._sessions[session_id] = GameSession(
            id=session_id,
            player_id=player_id,
            start_time=start_time,
            total_questions=total_questions,
            time_limit_seconds=time_limit_seconds,
            questions=[GameQuestion(question_id=qid, started_at=start_time) for qid in question_ids],
        )
        return session_id

    def get(self, session_id: int) -> GameSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session.model_copy(deep=True)

    async def mutate(self, session_id: int, fn: Mutation) -> GameSession:
        if session_id not in self._sessions:
            raise SessionNotFound(session_id)

        async with self._lock(session_id):
            draft = self._sessions[session_id].model_copy(deep=True)
            result = fn(draft)
            if inspect.isawaitable(result):
                await result
            self._sessions[session_id] = draft
            return draft.model_copy(deep=True)
