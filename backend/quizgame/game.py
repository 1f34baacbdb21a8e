from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from .errors import QuestionAlreadyAnswered, QuestionNotInSession, QuizGameError, SessionNotActive
from .models import AnswerResult, GameSession, SessionStarted, SessionStatus
from .questions import QuestionPool
from .ranking import Leaderboard
from .scoring import AnswerEvaluator
from .selector import QuestionSelector
from .sessions import SessionStore
from .utils import utcnow

logger = logging.getLogger(__name__)


TOTAL_QUESTIONS = 5
TIME_LIMIT_SECONDS = 10


class SessionEngine:
    """Drives a game session from start through its final answer.

    Session state only changes inside :meth:`SessionStore.mutate`, so a
    rejected submission never leaves a half-applied answer behind.
    """

    def __init__(
        self,
        pool: QuestionPool,
        store: SessionStore,
        leaderboard: Leaderboard,
        selector: Optional[QuestionSelector] = None,
        evaluator: Optional[AnswerEvaluator] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.pool = pool
        self.store = store
        self.leaderboard = leaderboard
        self.selector = selector or QuestionSelector()
        self.evaluator = evaluator or AnswerEvaluator(pool)
        self.clock = clock

    async def start(self, player_id: int) -> SessionStarted:
        logger.info("Starting new game for player %s", player_id)

        question_ids = self.selector.select(await self.pool.get_all())
        session_id = self.store.create(
            player_id,
            question_ids,
            total_questions=TOTAL_QUESTIONS,
            time_limit_seconds=TIME_LIMIT_SECONDS,
            start_time=self.clock(),
        )
        s = self.store.get(session_id)

        logger.info("Game session %s created for player %s", session_id, player_id)
        return SessionStarted(
            session_id=s.id,
            player_id=s.player_id,
            start_time=s.start_time,
            total_questions=s.total_questions,
            time_limit_seconds=s.time_limit_seconds,
            question_ids=s.question_ids,
        )

    def get(self, session_id: int) -> GameSession:
        return self.store.get(session_id)

    async def submit_answer(self, session_id: int, question_id: int, answer_id: int) -> AnswerResult:
        outcome: dict = {}

        async def apply(s: GameSession) -> None:
            if s.status != SessionStatus.IN_PROGRESS:
                raise SessionNotActive(session_id)

            entry = s.find_question(question_id)
            if entry is None:
                raise QuestionNotInSession(session_id, question_id)
            if entry.is_answered:
                raise QuestionAlreadyAnswered(session_id, question_id)

            is_correct, points = await self.evaluator.evaluate(question_id, answer_id)

            now = self.clock()
            entry.selected_answer_id = answer_id
            entry.is_correct = is_correct
            entry.time_taken = max(now - entry.started_at, timedelta(0))
            s.score += points

            completed = s.all_answered()
            if completed:
                s.status = SessionStatus.COMPLETED
                s.end_time = now
                # Runs before the draft is committed; a failure here discards the answer too.
                await self.leaderboard.record_session(s.player_id, s.score)
                logger.info("Game session %s completed with score %s", session_id, s.score)

            outcome.update(
                is_correct=is_correct,
                points_earned=points,
                total_score=s.score,
                is_game_completed=completed,
            )

        try:
            await self.store.mutate(session_id, apply)
        except QuizGameError as exc:
            logger.info("Rejected answer for session %s question %s: %s", session_id, question_id, exc)
            raise

        return AnswerResult(**outcome)
