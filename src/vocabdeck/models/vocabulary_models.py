"""Models for the vocabulary catalogue."""
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from vocabdeck.models.srs_models import WordStat


@dataclass
class Derivative:
    """A word derived from a vocabulary entry."""
    word: str
    pos: str
    definition: str


@dataclass
class Vocabulary:
    """A single vocabulary entry."""
    word: str
    pos: str
    definition: str
    examples: List[str] = field(default_factory=list)
    notes: Optional[str] = None
    derivatives: List[Derivative] = field(default_factory=list)
    antonyms: List[str] = field(default_factory=list)
    synonyms: List[str] = field(default_factory=list)
    distinctions: List[str] = field(default_factory=list)


@dataclass
class Section:
    """A curated group of vocabulary entries."""
    title: str
    vocabulary: List[Vocabulary] = field(default_factory=list)


@dataclass
class VocabularyData:
    """The whole catalogue as loaded from the vocabulary file."""
    sections: List[Section]


@dataclass
class EnrichedVocabulary:
    """A vocabulary entry together with its study statistics."""
    vocabulary: Vocabulary
    stat: WordStat = field(default_factory=WordStat)
    section_title: Optional[str] = None

    @property
    def word(self) -> str:
        return self.vocabulary.word

    @property
    def definition(self) -> str:
        return self.vocabulary.definition

    @property
    def srs_level(self) -> int:
        return self.stat.srs_level

    @property
    def next_review(self) -> Optional[date]:
        return self.stat.next_review
