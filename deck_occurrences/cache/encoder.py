from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Mapping

from deck_occurrences.cache.formats import CURRENT_FORMAT_TAG
from deck_occurrences.cache.snapshot import (
    CacheSnapshot,
    CompressedDeck,
    CompressedEntry,
    DeckVocabulary,
    SpellingEntry,
)

logger = logging.getLogger(__name__)


class SpellingInterner:
    """Assigns dense word indexes to ``(vocab_id, spelling_id)`` pairs."""

    def __init__(self) -> None:
        self._entries: list[SpellingEntry] = []
        self._index: dict[tuple[int, int], int] = {}

    def intern(self, vocab_id: int, spelling_id: int, spelling_text: str) -> int:
        key = (vocab_id, spelling_id)
        word_index = self._index.get(key)
        if word_index is None:
            word_index = len(self._entries)
            self._index[key] = word_index
            self._entries.append(SpellingEntry(vocab_id=vocab_id, spelling_text=spelling_text))
        return word_index

    def __len__(self) -> int:
        return len(self._entries)

    def table(self) -> tuple[SpellingEntry, ...]:
        return tuple(self._entries)


class CacheEncoder:
    def __init__(self, format_tag: str = CURRENT_FORMAT_TAG) -> None:
        self.format_tag = format_tag

    def encode(
        self,
        decks: Iterable[DeckVocabulary],
        spelling_lookup: Mapping[int, str],
        *,
        fetched_at: datetime | None = None,
    ) -> CacheSnapshot:
        interner = SpellingInterner()
        compressed_decks: list[CompressedDeck] = []
        skipped = 0

        for deck in decks:
            entries: list[CompressedEntry] = []
            for occurrence in deck.occurrences:
                if occurrence.occurrence_count < 1:
                    raise ValueError(
                        f"deck {deck.deck_id}: non-positive occurrence count "
                        f"{occurrence.occurrence_count} for vocab {occurrence.vocab_id}"
                    )
                spelling_text = spelling_lookup.get(occurrence.spelling_id)
                if spelling_text is None:
                    skipped += 1
                    continue
                word_index = interner.intern(occurrence.vocab_id, occurrence.spelling_id, spelling_text)
                entries.append(CompressedEntry(word_index=word_index, occurrence_count=occurrence.occurrence_count))
            compressed_decks.append(
                CompressedDeck(deck_id=deck.deck_id, deck_name=deck.deck_name, entries=tuple(entries))
            )

        if skipped:
            logger.debug("skipped %s occurrences without a resolved spelling", skipped)

        return CacheSnapshot(
            format_tag=self.format_tag,
            decks=tuple(compressed_decks),
            words=interner.table(),
            last_fetched_at=fetched_at or datetime.now(timezone.utc),
        )


cache_encoder = CacheEncoder()


def encode(
    decks: Iterable[DeckVocabulary],
    spelling_lookup: Mapping[int, str],
    *,
    fetched_at: datetime | None = None,
) -> CacheSnapshot:
    return cache_encoder.encode(decks, spelling_lookup, fetched_at=fetched_at)
