from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class WordOccurrence:
    vocab_id: int
    spelling_id: int
    occurrence_count: int


@dataclass(frozen=True)
class DeckVocabulary:
    deck_id: int
    deck_name: str
    occurrences: tuple[WordOccurrence, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SpellingEntry:
    vocab_id: int
    spelling_text: str


@dataclass(frozen=True)
class CompressedEntry:
    word_index: int
    occurrence_count: int = 1

    @property
    def is_bare(self) -> bool:
        return self.occurrence_count == 1


@dataclass(frozen=True)
class CompressedDeck:
    deck_id: int
    deck_name: str
    entries: tuple[CompressedEntry, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CacheSnapshot:
    """One immutable, versioned encoding of every deck in the collection.

    ``words`` is the interned spelling table; a ``CompressedEntry.word_index``
    is a position in it.
    """

    format_tag: str
    decks: tuple[CompressedDeck, ...]
    words: tuple[SpellingEntry, ...]
    last_fetched_at: datetime

    def resolve(self, word_index: int) -> SpellingEntry:
        return self.words[word_index]
