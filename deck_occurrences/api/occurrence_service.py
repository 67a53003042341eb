from __future__ import annotations

import logging
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from deck_occurrences.cache.query import query
from deck_occurrences.cache.store import CacheLoadResult, CacheStatus, CacheStore, default_store
from deck_occurrences.ranking.aggregator import (
    OccurrenceAggregator,
    OccurrenceTable,
    RankedDeckRow,
    RankedSpelling,
    occurrence_aggregator,
)

logger = logging.getLogger(__name__)

OccurrenceStatus = Literal["found", "not_found", "cache_missing"]


class OccurrenceResponse(BaseModel):
    vocab_id: int
    status: OccurrenceStatus
    spellings: list[RankedSpelling] = Field(default_factory=list)
    rows: list[RankedDeckRow] = Field(default_factory=list)
    total_occurrence_count: int = 0
    last_fetched_at: datetime | None = None

    def table(self) -> OccurrenceTable | None:
        if self.status != "found":
            return None
        return OccurrenceTable(
            spellings=self.spellings,
            rows=self.rows,
            total_occurrence_count=self.total_occurrence_count,
        )


class CacheStatusResponse(BaseModel):
    status: CacheStatus
    last_fetched_at: datetime | None = None
    deck_count: int = 0
    word_count: int = 0
    detail: str = ""


class OccurrenceService:
    def __init__(self, store: CacheStore | None = None, aggregator: OccurrenceAggregator | None = None) -> None:
        self.store = store or default_store()
        self.aggregator = aggregator or occurrence_aggregator

    def lookup(self, vocab_id: int) -> OccurrenceResponse:
        loaded = self.store.load()
        if loaded.snapshot is None:
            logger.info("no usable cache for vocab_id=%s (cache status %s)", vocab_id, loaded.status.value)
            return OccurrenceResponse(vocab_id=vocab_id, status="cache_missing")

        snapshot = loaded.snapshot
        table = self.aggregator.aggregate(query(snapshot, vocab_id))
        if table is None or not table.rows:
            logger.info("word not in any deck vocab_id=%s", vocab_id)
            return OccurrenceResponse(
                vocab_id=vocab_id,
                status="not_found",
                last_fetched_at=snapshot.last_fetched_at,
            )

        logger.info("word found in %s decks vocab_id=%s", len(table.rows), vocab_id)
        return OccurrenceResponse(
            vocab_id=vocab_id,
            status="found",
            spellings=table.spellings,
            rows=table.rows,
            total_occurrence_count=table.total_occurrence_count,
            last_fetched_at=snapshot.last_fetched_at,
        )

    def cache_status(self) -> CacheStatusResponse:
        loaded: CacheLoadResult = self.store.load()
        if loaded.snapshot is None:
            return CacheStatusResponse(status=loaded.status, detail=loaded.detail)
        return CacheStatusResponse(
            status=loaded.status,
            last_fetched_at=loaded.snapshot.last_fetched_at,
            deck_count=len(loaded.snapshot.decks),
            word_count=len(loaded.snapshot.words),
        )


occurrence_service = OccurrenceService()


def lookup_occurrences(vocab_id: int) -> OccurrenceResponse:
    return occurrence_service.lookup(vocab_id)


def get_cache_status() -> CacheStatusResponse:
    return occurrence_service.cache_status()
