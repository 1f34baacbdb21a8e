"""Typed failures raised by the session engine and its collaborators."""

from __future__ import annotations


class QuizGameError(Exception):
    """Base class for every failure the engine reports to its caller."""


class NotFoundError(QuizGameError, LookupError):
    """A referenced identifier does not exist in the expected scope."""


class InvalidOperationError(QuizGameError):
    """The request is well formed but not allowed in the current state."""


class InsufficientQuestions(InvalidOperationError):
    def __init__(self, message: str = "Not enough questions to start game"):
        super().__init__(message)


class SessionNotFound(NotFoundError):
    def __init__(self, session_id: int):
        self.session_id = session_id
        super().__init__(f"Game session {session_id} not found")


class SessionNotActive(InvalidOperationError):
    def __init__(self, session_id: int):
        self.session_id = session_id
        super().__init__(f"Game session {session_id} is not active")


class QuestionNotInSession(NotFoundError):
    def __init__(self, session_id: int, question_id: int):
        self.session_id = session_id
        self.question_id = question_id
        super().__init__(f"Question {question_id} not found in game session {session_id}")


class QuestionAlreadyAnswered(InvalidOperationError):
    def __init__(self, session_id: int, question_id: int):
        self.session_id = session_id
        self.question_id = question_id
        super().__init__(f"Question {question_id} has already been answered")


class QuestionNotFound(NotFoundError):
    def __init__(self, question_id: int):
        self.question_id = question_id
        super().__init__(f"Question {question_id} not found")


class PlayerNotFound(NotFoundError):
    def __init__(self, player_id: int):
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found")
