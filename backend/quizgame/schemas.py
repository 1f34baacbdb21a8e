from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .models import Answer, GameSession


class SubmitAnswerIn(BaseModel):
    game_session_id: int
    question_id: int
    answer_id: int


class SubmitAnswerOut(BaseModel):
    is_correct: bool
    points_earned: int
    total_score: int
    is_game_completed: bool


class StartGameOut(BaseModel):
    game_session_id: int
    player_id: int
    start_time: datetime
    total_questions: int
    time_limit_seconds: int
    question_ids: List[int]


class GameSessionOut(BaseModel):
    id: int
    player_id: int
    start_time: datetime
    end_time: Optional[datetime]
    score: int
    status: str
    total_questions: int
    time_limit_seconds: int
    question_ids: List[int]

    @classmethod
    def from_session(cls, s: GameSession) -> "GameSessionOut":
        return cls(
            id=s.id,
            player_id=s.player_id,
            start_time=s.start_time,
            end_time=s.end_time,
            score=s.score,
            status=s.status.value,
            total_questions=s.total_questions,
            time_limit_seconds=s.time_limit_seconds,
            question_ids=s.question_ids,
        )


class PublicQuestionOut(BaseModel):
    id: int
    text: str
    category: str
    difficulty: str
    points: int
    answers: List[Answer]
