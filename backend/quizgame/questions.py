"""Question pool adapters.

The engine only ever asks a pool for its full current catalogue; it never
caches the result, so edits to the backing source are visible to the next
call.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable, List, Protocol

from pydantic import TypeAdapter

from .models import Question

logger = logging.getLogger(__name__)

_questions_adapter = TypeAdapter(List[Question])


class QuestionPool(Protocol):
    async def get_all(self) -> List[Question]: ...


class InMemoryQuestionPool:
    def __init__(self, questions: Iterable[Question] = ()):
        self._questions: List[Question] = list(questions)

    async def get_all(self) -> List[Question]:
        return [q.model_copy(deep=True) for q in self._questions]

    def replace(self, questions: Iterable[Question]) -> None:
        self._questions = list(questions)


class JsonQuestionPool:
    """Reads the catalogue from a JSON array file on every call.

    A missing file is an empty pool.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def get_all(self) -> List[Question]:
        if not self.path.exists():
            logger.warning("Questions file %s does not exist", self.path)
            return []
        data = await asyncio.to_thread(self.path.read_bytes)
        return _questions_adapter.validate_json(data)
