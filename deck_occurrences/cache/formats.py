"""Wire formats of the persisted cache snapshot.

Every supported format is registered in ``FORMAT_CODECS`` under its tag. A
stored record is dispatched on its ``format`` field; a tag outside the
registry is rejected rather than guessed at.
"""

from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Annotated, Any, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from deck_occurrences.cache.snapshot import CacheSnapshot, CompressedDeck, CompressedEntry, SpellingEntry

FORMAT_1_TAG = "2f0169ea-593c-423f-8496-255f98f73df5"
CURRENT_FORMAT_TAG = FORMAT_1_TAG

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
BASE36_RE = re.compile(r"^(0|[1-9a-z][0-9a-z]*)$")

WordIndex = Annotated[int, Field(strict=True, ge=0)]
OccurrenceCount = Annotated[int, Field(strict=True, ge=1)]


class CacheFormatError(Exception):
    pass


class CorruptCacheError(CacheFormatError):
    pass


class UnsupportedCacheFormatError(CacheFormatError):
    def __init__(self, format_tag: object) -> None:
        super().__init__(f"unsupported cache format: {format_tag!r}")
        self.format_tag = format_tag


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError(f"negative id: {value}")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36_ALPHABET[rem])
    return "".join(reversed(digits))


def from_base36(text: str) -> int:
    if not BASE36_RE.fullmatch(text):
        raise ValueError(f"invalid base36 id: {text!r}")
    return int(text, 36)


class _DeckRecordV1(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    id: Annotated[int, Field(strict=True)]
    vocabulary: list[Union[WordIndex, tuple[WordIndex, OccurrenceCount]]]


class _SnapshotRecordV1(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    format: str
    last_fetched: datetime = Field(alias="lastFetched")
    words: list[str]
    decks: list[_DeckRecordV1]

    @model_validator(mode="after")
    def _check_table(self) -> "_SnapshotRecordV1":
        if len(self.words) % 2:
            raise ValueError("words table has odd length")
        for vid_text in self.words[0::2]:
            if not BASE36_RE.fullmatch(vid_text):
                raise ValueError(f"invalid vocab id text {vid_text!r}")
        size = len(self.words) // 2
        for deck in self.decks:
            for entry in deck.vocabulary:
                word_index = entry if isinstance(entry, int) else entry[0]
                if word_index >= size:
                    raise ValueError(f"deck {deck.id}: word index {word_index} out of range")
        return self


class FormatCodec(Protocol):
    tag: str

    def encode(self, snapshot: CacheSnapshot) -> dict[str, Any]: ...

    def decode(self, record: dict[str, Any]) -> CacheSnapshot: ...


class Format1Codec:
    tag = FORMAT_1_TAG

    def encode(self, snapshot: CacheSnapshot) -> dict[str, Any]:
        words: list[str] = []
        for entry in snapshot.words:
            words.append(to_base36(entry.vocab_id))
            words.append(entry.spelling_text)
        return {
            "format": self.tag,
            "decks": [
                {
                    "name": deck.deck_name,
                    "id": deck.deck_id,
                    "vocabulary": [
                        entry.word_index if entry.is_bare else [entry.word_index, entry.occurrence_count]
                        for entry in deck.entries
                    ],
                }
                for deck in snapshot.decks
            ],
            "words": words,
            "lastFetched": snapshot.last_fetched_at.isoformat(),
        }

    def decode(self, record: dict[str, Any]) -> CacheSnapshot:
        try:
            parsed = _SnapshotRecordV1.model_validate(record)
        except ValidationError as exc:
            raise CorruptCacheError(f"malformed format-1 record: {exc.error_count()} errors") from exc

        words = tuple(
            SpellingEntry(vocab_id=from_base36(parsed.words[i]), spelling_text=parsed.words[i + 1])
            for i in range(0, len(parsed.words), 2)
        )
        decks = tuple(
            CompressedDeck(
                deck_id=deck.id,
                deck_name=deck.name,
                entries=tuple(
                    CompressedEntry(word_index=entry)
                    if isinstance(entry, int)
                    else CompressedEntry(word_index=entry[0], occurrence_count=entry[1])
                    for entry in deck.vocabulary
                ),
            )
            for deck in parsed.decks
        )
        return CacheSnapshot(
            format_tag=self.tag,
            decks=decks,
            words=words,
            last_fetched_at=parsed.last_fetched,
        )


FORMAT_CODECS: dict[str, FormatCodec] = {
    FORMAT_1_TAG: Format1Codec(),
}


def is_supported_format(format_tag: object) -> bool:
    return isinstance(format_tag, str) and format_tag in FORMAT_CODECS


def dump_snapshot(snapshot: CacheSnapshot) -> str:
    codec = FORMAT_CODECS.get(snapshot.format_tag)
    if codec is None:
        raise UnsupportedCacheFormatError(snapshot.format_tag)
    return json.dumps(codec.encode(snapshot), ensure_ascii=False, separators=(",", ":"))


def parse_snapshot(text: str) -> CacheSnapshot:
    try:
        record = json.loads(text)
    except (ValueError, RecursionError) as exc:
        raise CorruptCacheError("stored cache is not valid JSON") from exc
    if not isinstance(record, dict):
        raise CorruptCacheError(f"stored cache is a JSON {type(record).__name__}, not an object")

    format_tag = record.get("format")
    if not is_supported_format(format_tag):
        raise UnsupportedCacheFormatError(format_tag)
    return FORMAT_CODECS[format_tag].decode(record)
