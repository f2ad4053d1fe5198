"""Service for loading the vocabulary catalogue."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from vocabdeck.config import settings
from vocabdeck.models.srs_models import WordStat
from vocabdeck.models.vocabulary_models import (
    Derivative,
    EnrichedVocabulary,
    Section,
    Vocabulary,
    VocabularyData,
)

logger = logging.getLogger(__name__)


class VocabularyLoadError(Exception):
    """Raised when the vocabulary file is missing or malformed."""


def _string_list(entry: Mapping, key: str) -> List[str]:
    value = entry.get(key) or []
    if not isinstance(value, list):
        raise VocabularyLoadError(f"{key} of {entry.get('word')!r} must be a list")
    return [str(item) for item in value]


def _parse_vocabulary(entry: Any) -> Vocabulary:
    if not isinstance(entry, Mapping):
        raise VocabularyLoadError("Vocabulary entries must be objects")
    try:
        word = entry["word"]
        pos = entry["pos"]
        definition = entry["definition"]
    except KeyError as e:
        raise VocabularyLoadError(f"Vocabulary entry is missing {e.args[0]!r}") from e

    derivatives = [
        Derivative(word=item["word"], pos=item["pos"], definition=item["definition"])
        for item in entry.get("derivatives") or []
    ]
    return Vocabulary(
        word=word,
        pos=pos,
        definition=definition,
        examples=_string_list(entry, "examples"),
        notes=entry.get("notes"),
        derivatives=derivatives,
        antonyms=_string_list(entry, "antonyms"),
        synonyms=_string_list(entry, "synonyms"),
        distinctions=_string_list(entry, "distinctions"),
    )


def parse_vocabulary(data: Any) -> VocabularyData:
    """Build the catalogue from decoded JSON."""
    if not isinstance(data, Mapping) or not data.get("sections"):
        raise VocabularyLoadError("No sections found. Please add your vocabulary data.")
    try:
        sections = [
            Section(
                title=section["title"],
                vocabulary=[_parse_vocabulary(entry) for entry in section.get("vocabulary") or []],
            )
            for section in data["sections"]
        ]
    except (KeyError, TypeError) as e:
        raise VocabularyLoadError(f"Malformed section: {e}") from e
    return VocabularyData(sections=sections)


def load_vocabulary(path: Optional[Union[str, Path]] = None) -> VocabularyData:
    """Load the catalogue from the vocabulary file."""
    path = Path(path) if path is not None else settings.paths.vocabulary_file
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise VocabularyLoadError(f"Vocabulary file {path} does not exist") from e
    except json.JSONDecodeError as e:
        raise VocabularyLoadError(f"Vocabulary file {path} is not valid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise VocabularyLoadError(f"Vocabulary file {path} is not UTF-8 text: {e}") from e
    except OSError as e:
        raise VocabularyLoadError(f"Could not read vocabulary file {path}: {e}") from e

    vocabulary = parse_vocabulary(data)
    logger.info(
        f"Loaded {sum(len(s.vocabulary) for s in vocabulary.sections)} words "
        f"in {len(vocabulary.sections)} sections from {path}"
    )
    return vocabulary


def find_section(vocabulary: VocabularyData, title: str) -> Optional[Section]:
    """Find a section by title, ignoring case."""
    for section in vocabulary.sections:
        if section.title.lower() == title.lower():
            return section
    return None


def build_vocabulary_map(
    vocabulary: VocabularyData, word_stats: Dict[str, WordStat]
) -> Dict[str, EnrichedVocabulary]:
    """Map every word to its entry and statistics. The first occurrence wins."""
    vocabulary_map = {}
    for section in vocabulary.sections:
        for entry in section.vocabulary:
            if entry.word in vocabulary_map:
                continue
            vocabulary_map[entry.word] = EnrichedVocabulary(
                vocabulary=entry,
                stat=word_stats.get(entry.word, WordStat()),
                section_title=section.title,
            )
    return vocabulary_map


def enrich_words(
    words: List[str], vocabulary_map: Dict[str, EnrichedVocabulary]
) -> List[EnrichedVocabulary]:
    """Look up words in the map, skipping words not in the catalogue."""
    missing = [word for word in words if word not in vocabulary_map]
    if missing:
        logger.warning(f"Skipping {len(missing)} words not in the catalogue: {missing}")
    return [vocabulary_map[word] for word in words if word in vocabulary_map]
