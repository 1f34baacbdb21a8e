"""Answer evaluation against the authoritative question data."""

from __future__ import annotations

from typing import Tuple

from .errors import QuestionNotFound
from .models import Question
from .questions import QuestionPool


def evaluate_answer(question: Question, answer_id: int) -> Tuple[bool, int]:
    """Return ``(is_correct, points)``; a wrong answer earns nothing."""
    is_correct = answer_id == question.correct_answer_id
    return is_correct, question.points if is_correct else 0


class AnswerEvaluator:
    def __init__(self, pool: QuestionPool):
        self.pool = pool

    async def evaluate(self, question_id: int, answer_id: int) -> Tuple[bool, int]:
        # Looked up on every call: scoring follows the pool as it is now.
        questions = await self.pool.get_all()
        question = next((q for q in questions if q.id == question_id), None)
        if question is None:
            raise QuestionNotFound(question_id)
        return evaluate_answer(question, answer_id)
