import json
from datetime import datetime, timezone

import pytest

from deck_occurrences.cache import (
    FORMAT_1_TAG,
    CorruptCacheError,
    DeckVocabulary,
    UnsupportedCacheFormatError,
    WordOccurrence,
    dump_snapshot,
    encode,
    parse_snapshot,
)
from deck_occurrences.cache.formats import from_base36, to_base36

FETCHED_AT = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _snapshot():
    decks = [
        DeckVocabulary(10, "Novel", (WordOccurrence(1358280, 1, 3), WordOccurrence(7, 3, 1))),
        DeckVocabulary(11, "Anime", (WordOccurrence(7, 3, 2),)),
    ]
    return encode(decks, {1: "食べる", 3: "見る"}, fetched_at=FETCHED_AT)


def _record(**overrides) -> str:
    record = {
        "format": FORMAT_1_TAG,
        "lastFetched": FETCHED_AT.isoformat(),
        "words": ["5", "読む"],
        "decks": [{"name": "Novel", "id": 10, "vocabulary": [0]}],
    }
    record.update(overrides)
    return json.dumps(record)


def test_base36_is_compact_and_reversible() -> None:
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"
    assert from_base36(to_base36(1358280)) == 1358280
    with pytest.raises(ValueError):
        from_base36("ZZ")


def test_dump_snapshot_writes_format_1_wire_record() -> None:
    record = json.loads(dump_snapshot(_snapshot()))

    assert record["format"] == FORMAT_1_TAG
    assert record["lastFetched"] == "2026-10-18T12:00:00+00:00"
    assert record["words"] == [to_base36(1358280), "食べる", "7", "見る"]
    assert record["decks"] == [
        {"name": "Novel", "id": 10, "vocabulary": [[0, 3], 1]},
        {"name": "Anime", "id": 11, "vocabulary": [[1, 2]]},
    ]


def test_parse_snapshot_restores_dumped_snapshot() -> None:
    snapshot = _snapshot()

    assert parse_snapshot(dump_snapshot(snapshot)) == snapshot


def test_bare_and_pair_entries_normalize_to_the_same_shape() -> None:
    parsed = parse_snapshot(_record(decks=[{"name": "Novel", "id": 10, "vocabulary": [0, [0, 4]]}]))

    entries = parsed.decks[0].entries
    assert [(e.word_index, e.occurrence_count) for e in entries] == [(0, 1), (0, 4)]
    assert entries[0].is_bare
    assert not entries[1].is_bare


def test_parse_snapshot_rejects_unknown_format_tag() -> None:
    with pytest.raises(UnsupportedCacheFormatError) as excinfo:
        parse_snapshot(_record(format="00000000-0000-0000-0000-000000000000"))

    assert excinfo.value.format_tag == "00000000-0000-0000-0000-000000000000"


def test_parse_snapshot_treats_missing_format_as_unsupported() -> None:
    with pytest.raises(UnsupportedCacheFormatError):
        parse_snapshot(json.dumps({"decks": [], "words": []}))


@pytest.mark.parametrize(
    "text",
    [
        "not json at all",
        "[1, 2, 3]",
        _record(words=["5"]),
        _record(words=["5X", "読む"]),
        _record(decks=[{"name": "Novel", "id": 10, "vocabulary": [1]}]),
        _record(decks=[{"name": "Novel", "id": 10, "vocabulary": [[0, 0]]}]),
        _record(decks=[{"name": "Novel", "id": 10, "vocabulary": ["0"]}]),
        _record(decks=[{"name": "Novel", "id": 10, "vocabulary": [[0, 2, 3]]}]),
        _record(lastFetched="yesterday-ish"),
        "[" * 200_000,
    ],
)
def test_parse_snapshot_rejects_malformed_records(text: str) -> None:
    with pytest.raises(CorruptCacheError):
        parse_snapshot(text)
