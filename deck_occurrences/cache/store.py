from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from deck_occurrences.cache.formats import (
    CorruptCacheError,
    UnsupportedCacheFormatError,
    dump_snapshot,
    parse_snapshot,
)
from deck_occurrences.cache.snapshot import CacheSnapshot
from deck_occurrences.common.config import settings
from deck_occurrences.common.storage import FileSlotStorage, SlotStorage

logger = logging.getLogger(__name__)


class CacheStatus(str, enum.Enum):
    OK = "ok"
    MISSING = "missing"
    CORRUPT = "corrupt"
    INCOMPATIBLE = "incompatible"


@dataclass(frozen=True)
class CacheLoadResult:
    status: CacheStatus
    snapshot: CacheSnapshot | None = None
    detail: str = ""

    @property
    def available(self) -> bool:
        return self.snapshot is not None


class CacheStore:
    """Holds exactly one serialized snapshot under a fixed storage key."""

    def __init__(self, storage: SlotStorage, key: str | None = None) -> None:
        self.storage = storage
        self.key = key or settings.cache_slot_key

    def save(self, snapshot: CacheSnapshot) -> None:
        payload = dump_snapshot(snapshot)
        self.storage.put(self.key, payload)
        logger.info(
            "stored cache snapshot key=%s decks=%s words=%s bytes=%s",
            self.key,
            len(snapshot.decks),
            len(snapshot.words),
            len(payload.encode("utf-8")),
        )

    def load(self) -> CacheLoadResult:
        try:
            stored = self.storage.get(self.key)
        except (UnicodeDecodeError, OSError) as exc:
            logger.warning("damaged cached decks key=%s: %s", self.key, exc)
            return CacheLoadResult(status=CacheStatus.CORRUPT, detail=f"stored cache is unreadable: {exc}")
        if not stored:
            logger.info("no cached decks under key=%s", self.key)
            return CacheLoadResult(status=CacheStatus.MISSING, detail="No decks in cache")

        try:
            snapshot = parse_snapshot(stored)
        except UnsupportedCacheFormatError as exc:
            logger.warning("incompatible deck format in cache key=%s format=%r", self.key, exc.format_tag)
            return CacheLoadResult(status=CacheStatus.INCOMPATIBLE, detail=str(exc))
        except CorruptCacheError as exc:
            logger.warning("damaged cached decks key=%s: %s", self.key, exc)
            return CacheLoadResult(status=CacheStatus.CORRUPT, detail=str(exc))

        return CacheLoadResult(status=CacheStatus.OK, snapshot=snapshot)

    def load_snapshot(self) -> CacheSnapshot | None:
        return self.load().snapshot


def default_store() -> CacheStore:
    return CacheStore(FileSlotStorage(settings.cache_dir), settings.cache_slot_key)
