from .encoder import CacheEncoder, SpellingInterner, encode
from .formats import (
    CURRENT_FORMAT_TAG,
    FORMAT_1_TAG,
    CacheFormatError,
    CorruptCacheError,
    UnsupportedCacheFormatError,
    dump_snapshot,
    parse_snapshot,
)
from .query import TrimmedDeck, TrimmedVariant, query
from .snapshot import (
    CacheSnapshot,
    CompressedDeck,
    CompressedEntry,
    DeckVocabulary,
    SpellingEntry,
    WordOccurrence,
)
from .store import CacheLoadResult, CacheStatus, CacheStore, default_store

__all__ = [
    "CURRENT_FORMAT_TAG",
    "FORMAT_1_TAG",
    "CacheEncoder",
    "CacheFormatError",
    "CacheLoadResult",
    "CacheSnapshot",
    "CacheStatus",
    "CacheStore",
    "CompressedDeck",
    "CompressedEntry",
    "CorruptCacheError",
    "DeckVocabulary",
    "SpellingEntry",
    "SpellingInterner",
    "TrimmedDeck",
    "TrimmedVariant",
    "UnsupportedCacheFormatError",
    "WordOccurrence",
    "default_store",
    "dump_snapshot",
    "encode",
    "parse_snapshot",
    "query",
]
