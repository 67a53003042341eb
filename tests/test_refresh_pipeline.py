import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import pytest

from deck_occurrences.batch.jpdb_client import DeckSummary, JpdbApiError
from deck_occurrences.batch.refresh import DeckRefresher, RefreshError, RefreshInProgressError
from deck_occurrences.cache import CacheStatus, CacheStore, DeckVocabulary, WordOccurrence, encode, query
from deck_occurrences.common.storage import MemorySlotStorage


class _FakeClient:
    def __init__(self, *, fail_deck: int | None = None, gate: asyncio.Event | None = None) -> None:
        self.fail_deck = fail_deck
        self.gate = gate
        self.calls: list[str] = []
        self.looked_up: list[tuple[int, int]] = []

    @asynccontextmanager
    async def session(self):
        self.calls.append("open")
        yield object()
        self.calls.append("close")

    async def list_user_decks(self, http) -> list[DeckSummary]:
        self.calls.append("decks")
        if self.gate is not None:
            await self.gate.wait()
        return [DeckSummary(10, "Novel"), DeckSummary(11, "Anime")]

    async def list_deck_vocabulary(self, http, deck: DeckSummary) -> DeckVocabulary:
        self.calls.append(f"deck:{deck.deck_id}")
        if deck.deck_id == self.fail_deck:
            raise JpdbApiError("deck/list-vocabulary: status=500")
        if deck.deck_id == 10:
            occurrences = (WordOccurrence(5, 1, 3), WordOccurrence(7, 3, 1))
        else:
            occurrences = (WordOccurrence(5, 1, 1), WordOccurrence(5, 2, 2))
        return DeckVocabulary(deck.deck_id, deck.name, occurrences)

    async def lookup_spellings(self, http, pairs) -> dict[int, str]:
        self.calls.append("spellings")
        self.looked_up = list(pairs)
        return {1: "読む", 2: "讀む", 3: "見る"}


def test_refresh_runs_stages_in_order_and_stores_snapshot() -> None:
    store = CacheStore(MemorySlotStorage(), "vv_decks")
    client = _FakeClient()
    messages: list[str] = []

    snapshot = asyncio.run(DeckRefresher(client, store, progress=messages.append).refresh())

    assert client.calls == ["open", "decks", "deck:10", "deck:11", "spellings", "close"]
    assert client.looked_up == [(5, 1), (7, 3), (5, 2)]
    assert messages[:5] == [
        "Fetching decks",
        "Fetching deck 1 of 2",
        "Fetching deck 2 of 2",
        "Fetching word spellings",
        "Compressing data",
    ]
    assert messages[5].startswith("Last time fetched: ")
    assert store.load_snapshot() == snapshot
    assert [deck.deck_name for deck in query(snapshot, 5)] == ["Novel", "Anime"]


def test_failed_stage_keeps_previous_snapshot() -> None:
    store = CacheStore(MemorySlotStorage(), "vv_decks")
    previous = encode(
        [DeckVocabulary(1, "Old", (WordOccurrence(5, 1, 9),))],
        {1: "読む"},
        fetched_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )
    store.save(previous)
    client = _FakeClient(fail_deck=11)

    with pytest.raises(RefreshError, match="status=500"):
        asyncio.run(DeckRefresher(client, store).refresh())

    assert "spellings" not in client.calls
    loaded = store.load()
    assert loaded.status is CacheStatus.OK
    assert loaded.snapshot == previous


def test_second_refresh_while_running_is_rejected() -> None:
    store = CacheStore(MemorySlotStorage(), "vv_decks")

    async def scenario() -> None:
        gate = asyncio.Event()
        refresher = DeckRefresher(_FakeClient(gate=gate), store)

        first = asyncio.create_task(refresher.refresh())
        await asyncio.sleep(0)
        assert refresher.running

        with pytest.raises(RefreshInProgressError):
            await refresher.refresh()

        gate.set()
        await first
        assert not refresher.running

    asyncio.run(scenario())

    assert store.load().status is CacheStatus.OK


def test_refresh_can_run_again_after_failure() -> None:
    store = CacheStore(MemorySlotStorage(), "vv_decks")
    client = _FakeClient(fail_deck=10)
    refresher = DeckRefresher(client, store)

    with pytest.raises(RefreshError):
        asyncio.run(refresher.refresh())

    client.fail_deck = None
    asyncio.run(refresher.refresh())

    assert store.load().status is CacheStatus.OK
