"""Service for exporting and importing study state as JSON files."""
import json
import logging
from collections.abc import Mapping, Sequence
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional, Union

from vocabdeck.config import settings
from vocabdeck.models.srs_models import CustomList, IntervalTable, StudyState, WordStat

logger = logging.getLogger(__name__)


class StateImportError(ValueError):
    """Raised when imported data cannot be accepted."""


def export_state(state: StudyState) -> Dict[str, Any]:
    """Convert the state into the exported JSON structure."""
    return {
        "wordStats": {word: stat.to_dict() for word, stat in state.word_stats.items()},
        "customLists": [custom_list.to_dict() for custom_list in state.custom_lists],
        "srsIntervals": state.srs_intervals.to_dict(),
    }


def export_filename(today: Optional[date] = None) -> str:
    """Name of the export file for the given day."""
    today = today or date.today()
    return f"vocab-progress-{today.isoformat()}.json"


def write_export(state: StudyState, path: Union[str, Path]) -> Path:
    """Write the state to a JSON file and return its path."""
    path = Path(path)
    if path.is_dir():
        path = path / export_filename()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(export_state(state), f, ensure_ascii=False, indent=2)
    logger.info(f"Exported {len(state.word_stats)} word stats to {path}")
    return path


def import_state(payload: Any) -> StudyState:
    """Build a state from exported data.

    The payload is accepted whole or not at all: any invalid part raises
    StateImportError.
    """
    if not isinstance(payload, Mapping):
        raise StateImportError("Invalid file format: expected a JSON object")

    raw_stats = payload.get("wordStats")
    raw_lists = payload.get("customLists")
    if not isinstance(raw_stats, Mapping):
        raise StateImportError("Invalid file format: wordStats must be an object")
    if isinstance(raw_lists, (str, bytes)) or not isinstance(raw_lists, Sequence):
        raise StateImportError("Invalid file format: customLists must be a list")

    word_stats = {}
    for word, raw_stat in raw_stats.items():
        try:
            word_stats[str(word)] = WordStat.from_dict(raw_stat)
        except ValueError as e:
            raise StateImportError(f"Invalid stats for word {word!r}: {e}") from e

    custom_lists = []
    names = set()
    for index, raw_list in enumerate(raw_lists):
        if not isinstance(raw_list, Mapping):
            raise StateImportError(f"Invalid custom list at position {index}")
        name = raw_list.get("name")
        words = raw_list.get("words", [])
        if not isinstance(name, str) or not name.strip():
            raise StateImportError(f"Custom list at position {index} has no name")
        if name in names:
            raise StateImportError(f"Duplicate custom list name {name!r}")
        if not isinstance(words, list) or not all(isinstance(word, str) for word in words):
            raise StateImportError(f"Custom list {name!r} must contain a list of words")
        names.add(name)
        custom_lists.append(CustomList(name=name, words=list(dict.fromkeys(words))))

    raw_intervals = payload.get("srsIntervals")
    if raw_intervals is None:
        intervals = IntervalTable(settings.study.interval_table)
    elif not isinstance(raw_intervals, Mapping):
        raise StateImportError("Invalid file format: srsIntervals must be an object")
    else:
        try:
            intervals = IntervalTable(raw_intervals)
        except ValueError as e:
            raise StateImportError(f"Invalid srsIntervals: {e}") from e

    for word, stat in word_stats.items():
        if stat.srs_level > intervals.max_level:
            raise StateImportError(
                f"srsLevel {stat.srs_level} of {word!r} is above "
                f"the highest level {intervals.max_level}"
            )

    return StudyState(
        word_stats=word_stats,
        custom_lists=custom_lists,
        srs_intervals=intervals,
    )


def read_import(path: Union[str, Path]) -> StudyState:
    """Read and validate an exported JSON file."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except FileNotFoundError as e:
        raise StateImportError(f"File not found: {path}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise StateImportError(f"Could not parse {path}: {e}") from e
    except OSError as e:
        raise StateImportError(f"Could not read {path}: {e}") from e
    return import_state(payload)
