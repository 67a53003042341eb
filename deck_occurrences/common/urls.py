from __future__ import annotations

from urllib.parse import quote, urlencode, urlsplit

from deck_occurrences.common.config import settings


class InvalidVocabularyIdError(ValueError):
    pass


def parse_vocabulary_id(value: str | int) -> int:
    """Return the word id of a jpdb vocabulary URL (or a bare id)."""
    if isinstance(value, bool):
        raise InvalidVocabularyIdError(f"invalid word id: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise InvalidVocabularyIdError(f"invalid word id: {value!r}")
        return value

    raw = (value or "").strip()
    token = raw
    if "/" in raw:
        parts = urlsplit(raw)
        segments = [segment for segment in parts.path.split("/") if segment]
        if len(segments) < 2 or segments[0] != "vocabulary":
            raise InvalidVocabularyIdError(f"not a vocabulary URL: {raw!r}")
        token = segments[1]

    if not token.isascii() or not token.isdigit():
        raise InvalidVocabularyIdError(f"invalid word id: {token!r}")
    return int(token)


def vocabulary_url(vocab_id: int, spelling: str, *, site_url: str | None = None) -> str:
    base = (site_url or settings.jpdb_site_url).rstrip("/")
    return f"{base}/vocabulary/{vocab_id}/{quote(spelling, safe='')}#a"


def deck_url(deck_id: int, *, site_url: str | None = None) -> str:
    base = (site_url or settings.jpdb_site_url).rstrip("/")
    return f"{base}/deck?{urlencode({'id': deck_id})}"
