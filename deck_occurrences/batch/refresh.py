from __future__ import annotations

import asyncio
import logging
from typing import Callable

from deck_occurrences.batch.jpdb_client import JpdbClient
from deck_occurrences.cache.encoder import CacheEncoder
from deck_occurrences.cache.snapshot import CacheSnapshot, DeckVocabulary
from deck_occurrences.cache.store import CacheStore, default_store

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class RefreshError(RuntimeError):
    pass


class RefreshInProgressError(RefreshError):
    pass


def _ignore_progress(_message: str) -> None:
    return None


def last_fetched_text(snapshot: CacheSnapshot) -> str:
    return f"Last time fetched: {snapshot.last_fetched_at.isoformat(timespec='seconds')}"


class DeckRefresher:
    """Rebuilds the cached snapshot from the remote API.

    Stages run strictly one after another: list decks, fetch each deck's
    vocabulary, look up spellings, encode, persist. The store is written only
    when every stage has succeeded.
    """

    def __init__(
        self,
        client: JpdbClient,
        store: CacheStore,
        *,
        encoder: CacheEncoder | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.client = client
        self.store = store
        self.encoder = encoder or CacheEncoder()
        self.progress = progress or _ignore_progress
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    async def refresh(self, progress: ProgressCallback | None = None) -> CacheSnapshot:
        if self._lock.locked():
            raise RefreshInProgressError("a deck refresh is already running")
        report = progress or self.progress
        async with self._lock:
            try:
                snapshot = await self._run_stages(report)
            except Exception as exc:
                logger.exception("deck refresh failed; keeping previous cache")
                raise RefreshError(str(exc)) from exc
        report(last_fetched_text(snapshot))
        return snapshot

    async def _run_stages(self, report: ProgressCallback) -> CacheSnapshot:
        async with self.client.session() as http:
            report("Fetching decks")
            decks = await self.client.list_user_decks(http)
            logger.info("fetched deck list: %s decks", len(decks))

            vocabularies: list[DeckVocabulary] = []
            pairs: dict[tuple[int, int], None] = {}
            for idx, deck in enumerate(decks, start=1):
                report(f"Fetching deck {idx} of {len(decks)}")
                vocabulary = await self.client.list_deck_vocabulary(http, deck)
                vocabularies.append(vocabulary)
                for occurrence in vocabulary.occurrences:
                    pairs[(occurrence.vocab_id, occurrence.spelling_id)] = None

            report("Fetching word spellings")
            logger.info("fetching spellings for %s words", len(pairs))
            spellings = await self.client.lookup_spellings(http, list(pairs))

        report("Compressing data")
        snapshot = self.encoder.encode(vocabularies, spellings)
        self.store.save(snapshot)
        return snapshot


_default_refresher: DeckRefresher | None = None


def default_refresher() -> DeckRefresher:
    global _default_refresher
    if _default_refresher is None:
        _default_refresher = DeckRefresher(JpdbClient(), default_store())
    return _default_refresher


async def run(progress: ProgressCallback | None = None) -> CacheSnapshot:
    return await default_refresher().refresh(progress)


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    snapshot = asyncio.run(run(progress=lambda message: logger.info("%s", message)))
    logger.info("cached %s decks and %s words", len(snapshot.decks), len(snapshot.words))


if __name__ == "__main__":
    main()
