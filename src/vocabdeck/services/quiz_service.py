"""Quiz session over a set of words."""
import logging
import random
from datetime import date
from typing import List, Optional, Sequence

from vocabdeck.models.vocabulary_models import EnrichedVocabulary
from vocabdeck.services.study_service import StudyService

logger = logging.getLogger(__name__)


class QuizSession:
    """Walks once through a shuffled set of words, recording each answer."""

    def __init__(
        self,
        words: Sequence[EnrichedVocabulary],
        title: str,
        study_service: StudyService,
        rng: Optional[random.Random] = None,
    ):
        self.title = title
        self.study_service = study_service
        self.words: List[EnrichedVocabulary] = list(words)
        (rng or random).shuffle(self.words)
        self.position = 0
        self.correct_count = 0

    @property
    def total(self) -> int:
        return len(self.words)

    @property
    def is_finished(self) -> bool:
        return self.position >= len(self.words)

    @property
    def current(self) -> Optional[EnrichedVocabulary]:
        if self.is_finished:
            return None
        return self.words[self.position]

    def answer(self, knew_it: bool, today: Optional[date] = None) -> None:
        """Record the answer for the current word and move to the next one."""
        word = self.current
        if word is None:
            raise RuntimeError("Quiz is already finished")
        word.stat = self.study_service.record_answer(word.word, knew_it, today)
        if knew_it:
            self.correct_count += 1
        self.position += 1
        if self.is_finished:
            logger.info(
                f"Quiz {self.title!r} finished: {self.correct_count}/{self.total} correct"
            )
