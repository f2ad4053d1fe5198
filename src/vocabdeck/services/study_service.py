"""Service for studying words and keeping their statistics."""
import logging
from datetime import date
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from vocabdeck import monitoring
from vocabdeck.config import settings
from vocabdeck.models.srs_models import CustomList, IntervalTable, StudyState, WordStat
from vocabdeck.services import srs
from vocabdeck.services.state_store import StateStore
from vocabdeck.services.transfer_service import StateImportError, read_import

logger = logging.getLogger(__name__)


class StudyService:
    """Service for recording answers, flags, lists and intervals of a session.

    Every mutation is written to the store right away. A failed write is
    logged and otherwise ignored; the in-memory state stays authoritative.
    """

    def __init__(
        self,
        state: Optional[StudyState] = None,
        store: Optional[StateStore] = None,
        session_key: Optional[str] = None,
    ):
        """Initialize the service with a state and an optional store."""
        if state is None:
            state = StudyState(srs_intervals=IntervalTable(settings.study.interval_table))
        self.state = state
        self.store = store
        self.session_key = session_key or settings.study.session_key

    @classmethod
    def load(cls, store: StateStore, session_key: Optional[str] = None) -> "StudyService":
        """Create a service from the state saved for the session."""
        session_key = session_key or settings.study.session_key
        return cls(store.load(session_key), store, session_key)

    def _persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self.session_key, self.state)
            monitoring.state_saves.inc()
        except SQLAlchemyError as e:
            monitoring.state_save_errors.inc()
            logger.error(f"Failed to save state for session {self.session_key!r}: {e}")

    def get_stat(self, word: str) -> WordStat:
        """Get a word's statistics; untouched words get the default."""
        return self.state.get_stat(word)

    def _set_stat(self, word: str, stat: WordStat) -> None:
        self.state.word_stats[word] = stat
        self._persist()

    # Answers and flags

    def record_answer(self, word: str, knew_it: bool, today: Optional[date] = None) -> WordStat:
        """Record a quiz answer for a word and reschedule it."""
        stat = self.get_stat(word)
        if knew_it:
            update = srs.record_correct_answer(stat.srs_level, self.state.srs_intervals, today)
        else:
            update = srs.record_incorrect_answer(stat.srs_level, self.state.srs_intervals, today)
        new_stat = stat.with_answer(update, correct=knew_it)
        monitoring.answers_recorded.labels(result="correct" if knew_it else "incorrect").inc()
        logger.debug(
            f"Answer for {word!r} ({'correct' if knew_it else 'incorrect'}): "
            f"level {stat.srs_level} -> {new_stat.srs_level}, next review {new_stat.next_review}"
        )
        self._set_stat(word, new_stat)
        return new_stat

    def toggle_favorite(self, word: str) -> bool:
        """Toggle the favorite flag. Returns the new value."""
        stat = self.get_stat(word).toggled_favorite()
        monitoring.words_toggled.labels(flag="favorite").inc()
        self._set_stat(word, stat)
        return stat.is_favorite

    def toggle_known(self, word: str) -> bool:
        """Toggle the known flag. Returns the new value.

        The word's level and schedule are kept, so unmarking it resumes where
        it left off; known words are simply left out of the review views.
        """
        stat = self.get_stat(word).toggled_known()
        monitoring.words_toggled.labels(flag="known").inc()
        self._set_stat(word, stat)
        return stat.is_known

    # Derived views

    def favorite_words(self) -> List[str]:
        return srs.favorite_words(self.state.word_stats)

    def known_words(self) -> List[str]:
        return srs.known_words(self.state.word_stats)

    def due_words(self, today: Optional[date] = None) -> List[str]:
        return srs.due_for_review(self.state.word_stats, today)

    def difficult_words(self, today: Optional[date] = None, limit: Optional[int] = None) -> List[str]:
        return srs.difficult_words(self.state.word_stats, today, limit)

    def difficulty(self, word: str, today: Optional[date] = None) -> float:
        return srs.calculate_difficulty(self.state.word_stats.get(word), today)

    def review_forecast(self) -> Dict[date, List[str]]:
        return srs.review_forecast(self.state.word_stats)

    # Interval configuration

    @property
    def intervals(self) -> IntervalTable:
        return self.state.srs_intervals

    def update_intervals(self, intervals: Mapping) -> IntervalTable:
        """Replace the interval table. Raises ValueError for invalid entries."""
        table = IntervalTable(intervals)
        self.state.srs_intervals = table
        logger.info(f"Updated SRS intervals: {table.to_dict()}")
        self._persist()
        return table

    def set_interval(self, level: int, days: int) -> IntervalTable:
        """Set the interval of a single level."""
        return self.update_intervals(self.state.srs_intervals.with_interval(level, days))

    def reset_intervals(self) -> IntervalTable:
        """Restore the configured default interval table."""
        return self.update_intervals(settings.study.interval_table)

    # Custom lists

    @property
    def custom_lists(self) -> List[CustomList]:
        return self.state.custom_lists

    def create_list(self, name: str) -> bool:
        """Create an empty list. Returns False if the name is blank or taken."""
        name = name.strip()
        if not name or self.state.get_list(name) is not None:
            return False
        self.state.custom_lists.append(CustomList(name=name))
        logger.info(f"Created custom list {name!r}")
        self._persist()
        return True

    def delete_list(self, name: str) -> bool:
        """Delete a list. Returns False if there is no such list."""
        custom_list = self.state.get_list(name)
        if custom_list is None:
            return False
        self.state.custom_lists.remove(custom_list)
        logger.info(f"Deleted custom list {name!r}")
        self._persist()
        return True

    def toggle_word_in_list(self, name: str, word: str) -> bool:
        """Add the word to the list or remove it. Returns True if it is now in the list."""
        custom_list = self.state.get_list(name)
        if custom_list is None:
            raise ValueError(f"Custom list {name!r} not found")
        in_list = custom_list.toggle(word)
        self._persist()
        return in_list

    def is_word_in_list(self, name: str, word: str) -> bool:
        custom_list = self.state.get_list(name)
        return custom_list is not None and custom_list.contains(word)

    def lists_containing(self, word: str) -> List[str]:
        return [custom_list.name for custom_list in self.state.custom_lists if custom_list.contains(word)]

    # Import

    def replace_state(self, state: StudyState) -> None:
        """Replace the whole state, as after a successful import."""
        self.state = state
        self._persist()

    def import_file(self, path: Union[str, Path]) -> StudyState:
        """Import state from an exported file.

        On failure the current state is kept and StateImportError is raised.
        """
        try:
            state = read_import(path)
        except StateImportError:
            monitoring.state_imports.labels(outcome="rejected").inc()
            logger.warning(f"Rejected import from {path}")
            raise
        monitoring.state_imports.labels(outcome="accepted").inc()
        logger.info(f"Imported {len(state.word_stats)} word stats from {path}")
        self.replace_state(state)
        return state
