"""Spaced repetition engine.

Words climb a ladder of levels. Each correct answer moves a word one level up
(capped at the size of the interval table) and schedules the next review after
that level's interval. A wrong answer halves the level, never below 1, and
always schedules the next review after the level-1 interval.

Everything here is a pure function of its arguments. Dates have day
granularity; ``today`` defaults to the host's local calendar day.
"""
from collections import defaultdict
from collections.abc import Mapping
from datetime import date, timedelta
from typing import Dict, List, Optional

from vocabdeck.config import DEFAULT_INTERVAL_DAYS
from vocabdeck.models.srs_models import ReviewUpdate, WordStat

INCORRECT_WEIGHT = 5
CORRECT_WEIGHT = -2
TIME_FACTOR = 0.1  # per day since last review


def _today(today: Optional[date]) -> date:
    return today if today is not None else date.today()


def _max_level(intervals: Mapping) -> int:
    return max(1, len(intervals))


def get_next_review_date(level: int, intervals: Mapping, today: Optional[date] = None) -> date:
    """Calculate the next review date for a word at the given level."""
    days = intervals.get(level)
    if not isinstance(days, int) or isinstance(days, bool) or days < 1:
        days = DEFAULT_INTERVAL_DAYS
    return _today(today) + timedelta(days=days)


def record_correct_answer(
    current_level: int, intervals: Mapping, today: Optional[date] = None
) -> ReviewUpdate:
    """Promote a word by one level and schedule it after that level's interval."""
    today = _today(today)
    new_level = min(_max_level(intervals), current_level + 1)
    return ReviewUpdate(
        srs_level=new_level,
        next_review=get_next_review_date(new_level, intervals, today),
        last_reviewed=today,
    )


def record_incorrect_answer(
    current_level: int, intervals: Mapping, today: Optional[date] = None
) -> ReviewUpdate:
    """Demote a word to half its level and schedule it after the level-1 interval."""
    today = _today(today)
    new_level = max(1, current_level // 2)
    # A shrunken table can leave an old level above the new ceiling.
    new_level = min(_max_level(intervals), new_level)
    return ReviewUpdate(
        srs_level=new_level,
        next_review=get_next_review_date(1, intervals, today),
        last_reviewed=today,
    )


def calculate_difficulty(stat: Optional[WordStat], today: Optional[date] = None) -> float:
    """Score how much attention a word needs; higher is more urgent.

    Wrong answers weigh most, right answers pull the score down and every day
    since the last review adds a little. Only meaningful for ordering.
    """
    if stat is None:
        return 0

    days_since_last_review = 0
    if stat.last_reviewed is not None:
        days_since_last_review = (_today(today) - stat.last_reviewed).days

    return (
        stat.incorrect_count * INCORRECT_WEIGHT
        + stat.correct_count * CORRECT_WEIGHT
        + days_since_last_review * TIME_FACTOR
    )


def is_due(stat: Optional[WordStat], today: Optional[date] = None) -> bool:
    """Check whether a word is scheduled for review today or earlier."""
    if stat is None or stat.is_known or stat.next_review is None:
        return False
    return stat.next_review <= _today(today)


def due_for_review(word_stats: Dict[str, WordStat], today: Optional[date] = None) -> List[str]:
    """Get words due for review, oldest schedule first."""
    today = _today(today)
    due = [word for word, stat in word_stats.items() if is_due(stat, today)]
    return sorted(due, key=lambda word: (word_stats[word].next_review, word))


def difficult_words(
    word_stats: Dict[str, WordStat],
    today: Optional[date] = None,
    limit: Optional[int] = None,
) -> List[str]:
    """Get answered, not-known words ordered from most to least difficult."""
    today = _today(today)
    scores = {
        word: calculate_difficulty(stat, today)
        for word, stat in word_stats.items()
        if stat.has_answers and not stat.is_known
    }
    ranked = sorted(scores, key=lambda word: (-scores[word], word))
    if limit is not None:
        ranked = ranked[:limit]
    return ranked


def favorite_words(word_stats: Dict[str, WordStat]) -> List[str]:
    return [word for word, stat in word_stats.items() if stat.is_favorite]


def known_words(word_stats: Dict[str, WordStat]) -> List[str]:
    return [word for word, stat in word_stats.items() if stat.is_known]


def review_forecast(word_stats: Dict[str, WordStat]) -> Dict[date, List[str]]:
    """Group scheduled, not-known words by their next review date."""
    forecast = defaultdict(list)
    for word, stat in word_stats.items():
        if stat.next_review is not None and not stat.is_known:
            forecast[stat.next_review].append(word)
    return {day: sorted(words) for day, words in sorted(forecast.items())}
