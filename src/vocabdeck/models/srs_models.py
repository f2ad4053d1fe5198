"""Models for spaced repetition state."""
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, Iterator, List, Optional

from vocabdeck.config import DEFAULT_SRS_INTERVALS


DEFAULT_INTERVALS: Dict[int, int] = {
    level: days for level, days in enumerate(DEFAULT_SRS_INTERVALS, start=1)
}


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD string, keeping None as None."""
    if value is None:
        return None
    if len(value) != 10:
        raise ValueError(f"date must be in YYYY-MM-DD form, got {value!r}")
    return datetime.strptime(value, "%Y-%m-%d").date()


def format_date(value: Optional[date]) -> Optional[str]:
    """Format a date as YYYY-MM-DD, keeping None as None."""
    if value is None:
        return None
    return value.isoformat()


@dataclass(frozen=True)
class ReviewUpdate:
    """Result of an answer: the SRS fields to merge into a WordStat."""
    srs_level: int
    next_review: date
    last_reviewed: date


@dataclass(frozen=True)
class WordStat:
    """Study statistics for a single word."""
    is_favorite: bool = False
    correct_count: int = 0
    incorrect_count: int = 0
    srs_level: int = 0
    next_review: Optional[date] = None
    last_reviewed: Optional[date] = None
    is_known: bool = False

    @property
    def has_answers(self) -> bool:
        return self.correct_count > 0 or self.incorrect_count > 0

    def with_answer(self, update: ReviewUpdate, correct: bool) -> "WordStat":
        """Return a copy with the review merged and the matching count bumped."""
        return replace(
            self,
            srs_level=update.srs_level,
            next_review=update.next_review,
            last_reviewed=update.last_reviewed,
            correct_count=self.correct_count + (1 if correct else 0),
            incorrect_count=self.incorrect_count + (0 if correct else 1),
        )

    def toggled_favorite(self) -> "WordStat":
        return replace(self, is_favorite=not self.is_favorite)

    def toggled_known(self) -> "WordStat":
        # SRS fields are left as they are so unmarking resumes the schedule.
        return replace(self, is_known=not self.is_known)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the exported camelCase keys."""
        return {
            "isFavorite": self.is_favorite,
            "correctCount": self.correct_count,
            "incorrectCount": self.incorrect_count,
            "srsLevel": self.srs_level,
            "nextReview": format_date(self.next_review),
            "isKnown": self.is_known,
            "lastReviewed": format_date(self.last_reviewed),
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "WordStat":
        """Build a stat from exported data.

        Missing keys take their defaults. Raises ValueError for values of the
        wrong type or dates not in YYYY-MM-DD form.
        """
        if not isinstance(data, Mapping):
            raise ValueError("word stat must be an object")

        def flag(key: str) -> bool:
            value = data.get(key, False)
            if not isinstance(value, bool):
                raise ValueError(f"{key} must be a boolean")
            return value

        def count(key: str) -> int:
            value = data.get(key, 0)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{key} must be a non-negative integer")
            return value

        def day(key: str) -> Optional[date]:
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{key} must be a YYYY-MM-DD string")
            return parse_date(value)

        return cls(
            is_favorite=flag("isFavorite"),
            correct_count=count("correctCount"),
            incorrect_count=count("incorrectCount"),
            srs_level=count("srsLevel"),
            next_review=day("nextReview"),
            last_reviewed=day("lastReviewed"),
            is_known=flag("isKnown"),
        )


class IntervalTable(Mapping):
    """Read-only mapping of SRS level to interval length in days.

    Levels run from 1 to the number of entries with no gaps, so a table
    with more entries raises the ceiling words can climb to. Keys are always
    iterated in numeric order.
    """

    def __init__(self, intervals: Optional[Mapping] = None):
        if intervals is None:
            intervals = DEFAULT_INTERVALS
        parsed = {}
        for level, days in intervals.items():
            level = self._positive_int(level, "level")
            parsed[level] = self._positive_int(days, f"interval for level {level}")
        if not parsed:
            raise ValueError("interval table must not be empty")
        if sorted(parsed) != list(range(1, len(parsed) + 1)):
            raise ValueError(
                f"interval levels must run from 1 to {len(parsed)} without gaps, "
                f"got {sorted(parsed)}"
            )
        self._intervals = dict(sorted(parsed.items()))

    @staticmethod
    def _positive_int(value: Any, name: str) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be a positive integer, got {value!r}")
        try:
            number = int(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"{name} must be a positive integer, got {value!r}") from e
        if number < 1 or (isinstance(value, float) and number != value):
            raise ValueError(f"{name} must be a positive integer, got {value!r}")
        return number

    @classmethod
    def default(cls) -> "IntervalTable":
        return cls(DEFAULT_INTERVALS)

    @property
    def max_level(self) -> int:
        return len(self._intervals)

    def with_interval(self, level: int, days: int) -> "IntervalTable":
        """Return a new table with one level set to the given day count.

        The level may be an existing one or the next one up.
        """
        intervals = dict(self._intervals)
        intervals[level] = days
        return IntervalTable(intervals)

    def to_dict(self) -> Dict[str, int]:
        """Serialize with string keys, as JSON stores them."""
        return {str(level): days for level, days in self._intervals.items()}

    def __getitem__(self, level: int) -> int:
        return self._intervals[level]

    def __iter__(self) -> Iterator[int]:
        return iter(self._intervals)

    def __len__(self) -> int:
        return len(self._intervals)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, IntervalTable):
            return self._intervals == other._intervals
        return super().__eq__(other)

    def __repr__(self) -> str:
        return f"IntervalTable({self._intervals!r})"


@dataclass
class CustomList:
    """A user-defined, named list of words."""
    name: str
    words: List[str] = field(default_factory=list)

    def contains(self, word: str) -> bool:
        return word in self.words

    def toggle(self, word: str) -> bool:
        """Add or remove the word. Returns True if the word is now in the list."""
        if word in self.words:
            self.words.remove(word)
            return False
        self.words.append(word)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "words": list(self.words)}


@dataclass
class StudyState:
    """All per-session study data: word stats, custom lists and intervals."""
    word_stats: Dict[str, WordStat] = field(default_factory=dict)
    custom_lists: List[CustomList] = field(default_factory=list)
    srs_intervals: IntervalTable = field(default_factory=IntervalTable.default)

    def get_stat(self, word: str) -> WordStat:
        """Get the stat for a word, or the default one if it was never touched."""
        return self.word_stats.get(word, WordStat())

    def get_list(self, name: str) -> Optional[CustomList]:
        for custom_list in self.custom_lists:
            if custom_list.name == name:
                return custom_list
        return None
