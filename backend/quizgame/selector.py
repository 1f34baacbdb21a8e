from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Sequence

from .errors import InsufficientQuestions
from .models import Difficulty, Question

logger = logging.getLogger(__name__)

# Draw order is the order of this mapping.
DIFFICULTY_QUOTAS: Dict[Difficulty, int] = {
    Difficulty.EASY: 2,
    Difficulty.MEDIUM: 2,
    Difficulty.HARD: 1,
}


class QuestionSelector:
    def __init__(self, rng: Optional[random.Random] = None, quotas: Optional[Dict[Difficulty, int]] = None):
        self.rng = rng or random.Random()
        self.quotas = dict(quotas or DIFFICULTY_QUOTAS)

    @property
    def total(self) -> int:
        return sum(self.quotas.values())

    def select(self, pool: Sequence[Question]) -> List[int]:
        """Draw question ids per difficulty quota, without replacement."""
        if not pool:
            logger.warning("No questions available to start game")
            raise InsufficientQuestions("No questions available")

        selected: List[int] = []
        for difficulty, quota in self.quotas.items():
            stratum = [q.id for q in pool if q.difficulty == difficulty]
            selected.extend(self.rng.sample(stratum, min(quota, len(stratum))))

        if len(selected) < self.total:
            logger.warning("Not enough questions of required difficulty to start game")
            raise InsufficientQuestions()

        return selected
