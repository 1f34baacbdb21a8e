from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, PositiveInt, field_validator, model_validator


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class SessionStatus(str, Enum):
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    ABANDONED = "Abandoned"  # reserved, no transition leads here yet


class Answer(BaseModel):
    id: int
    text: str


class Question(BaseModel):
    id: int
    text: str
    category: str = ""
    difficulty: Difficulty
    points: PositiveInt
    answers: List[Answer]
    correct_answer_id: int

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalise_difficulty(cls, value):
        if isinstance(value, str):
            return value.strip().capitalize()
        return value

    @model_validator(mode="after")
    def _correct_answer_is_listed(self):
        if not any(a.id == self.correct_answer_id for a in self.answers):
            raise ValueError(f"Question {self.id}: correct answer {self.correct_answer_id} is not one of its answers")
        return self


class GameQuestion(BaseModel):
    question_id: int
    selected_answer_id: Optional[int] = None
    is_correct: bool = False
    started_at: datetime
    time_taken: Optional[timedelta] = None

    @property
    def is_answered(self) -> bool:
        return self.time_taken is not None


# States: InProgress -> Completed (Abandoned is terminal but never entered)
class GameSession(BaseModel):
    id: int
    player_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    score: int = 0
    status: SessionStatus = SessionStatus.IN_PROGRESS
    total_questions: int
    time_limit_seconds: int
    questions: List[GameQuestion] = Field(default_factory=list)

    @property
    def question_ids(self) -> List[int]:
        return [q.question_id for q in self.questions]

    def find_question(self, question_id: int) -> Optional[GameQuestion]:
        return next((q for q in self.questions if q.question_id == question_id), None)

    def all_answered(self) -> bool:
        return all(q.is_answered for q in self.questions)


class SessionStarted(BaseModel):
    session_id: int
    player_id: int
    start_time: datetime
    total_questions: int
    time_limit_seconds: int
    question_ids: List[int]


class AnswerResult(BaseModel):
    is_correct: bool
    points_earned: int
    total_score: int
    is_game_completed: bool


class Player(BaseModel):
    id: int
    username: str = ""
    total_score: int = 0
    games_played: int = 0
    games_won: int = 0
    current_rank: int = 0
    level: int = 1
