from collections import Counter
from datetime import datetime, timezone

from deck_occurrences.cache import (
    DeckVocabulary,
    TrimmedDeck,
    TrimmedVariant,
    WordOccurrence,
    dump_snapshot,
    encode,
    parse_snapshot,
    query,
)

FETCHED_AT = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

SPELLINGS = {1: "読む", 2: "讀む", 3: "見る", 4: "観る", 5: "ヨム"}

RAW_DECKS = [
    DeckVocabulary(10, "Novel", (WordOccurrence(5, 1, 3), WordOccurrence(7, 3, 1), WordOccurrence(7, 4, 2))),
    DeckVocabulary(11, "Anime", (WordOccurrence(5, 2, 2), WordOccurrence(5, 1, 1), WordOccurrence(8, 99, 6))),
    DeckVocabulary(12, "Manga", (WordOccurrence(7, 3, 5),)),
    DeckVocabulary(13, "Empty", ()),
]


def _snapshot():
    return encode(RAW_DECKS, SPELLINGS, fetched_at=FETCHED_AT)


def test_query_keeps_only_decks_containing_the_word() -> None:
    trimmed = query(_snapshot(), 5)

    assert trimmed == [
        TrimmedDeck(10, "Novel", (TrimmedVariant("読む", 3),)),
        TrimmedDeck(11, "Anime", (TrimmedVariant("讀む", 2), TrimmedVariant("読む", 1))),
    ]


def test_query_returns_nothing_for_unknown_word() -> None:
    assert query(_snapshot(), 424242) == []


def test_query_skips_words_whose_spelling_was_not_resolved() -> None:
    assert query(_snapshot(), 8) == []


def test_query_matches_on_word_id_not_spelling() -> None:
    snapshot = encode(
        [DeckVocabulary(1, "Deck", (WordOccurrence(100, 1, 2), WordOccurrence(200, 2, 4)))],
        {1: "同じ", 2: "同じ"},
        fetched_at=FETCHED_AT,
    )

    assert query(snapshot, 100) == [TrimmedDeck(1, "Deck", (TrimmedVariant("同じ", 2),))]
    assert query(snapshot, 200) == [TrimmedDeck(1, "Deck", (TrimmedVariant("同じ", 4),))]


def test_stored_snapshot_answers_like_the_raw_input() -> None:
    snapshot = parse_snapshot(dump_snapshot(_snapshot()))

    for vid in {occ.vocab_id for deck in RAW_DECKS for occ in deck.occurrences}:
        expected = Counter(
            (SPELLINGS[occ.spelling_id], occ.occurrence_count)
            for deck in RAW_DECKS
            for occ in deck.occurrences
            if occ.vocab_id == vid and occ.spelling_id in SPELLINGS
        )
        decoded = Counter(
            (variant.spelling_text, variant.occurrence_count)
            for deck in query(snapshot, vid)
            for variant in deck.variants
        )
        assert decoded == expected, vid
