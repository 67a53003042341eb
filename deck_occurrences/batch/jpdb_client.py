from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable
from urllib.parse import urljoin

import httpx

from deck_occurrences.cache.snapshot import DeckVocabulary, WordOccurrence
from deck_occurrences.common.config import settings

logger = logging.getLogger(__name__)

USER_AGENT = "deck-occurrences/1.0"


class JpdbApiError(RuntimeError):
    pass


@dataclass(frozen=True)
class DeckSummary:
    deck_id: int
    name: str


class JpdbClient:
    """Thin wrapper over the three jpdb API calls a refresh needs."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.jpdb_api_key
        self.base_url = base_url or settings.jpdb_api_base_url
        if not self.base_url.endswith("/"):
            self.base_url += "/"
        self.timeout = httpx.Timeout(timeout_s if timeout_s is not None else settings.request_timeout_s)
        self._transport = transport

    async def _post(self, client: httpx.AsyncClient, endpoint: str, body: dict[str, Any]) -> dict[str, Any]:
        url = urljoin(self.base_url, endpoint)
        try:
            response = await client.post(
                url,
                json=body,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "User-Agent": USER_AGENT,
                },
            )
        except httpx.HTTPError as exc:
            raise JpdbApiError(f"{endpoint}: request failed: {exc}") from exc

        if response.status_code >= 400:
            raise JpdbApiError(f"{endpoint}: status={response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise JpdbApiError(f"{endpoint}: response is not JSON") from exc
        if not isinstance(payload, dict):
            raise JpdbApiError(f"{endpoint}: unexpected response shape")
        return payload

    def session(self) -> httpx.AsyncClient:
        if not self.api_key:
            raise JpdbApiError("JPDB_API_KEY is not configured")
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def list_user_decks(self, client: httpx.AsyncClient) -> list[DeckSummary]:
        payload = await self._post(client, "list-user-decks", {"fields": ["name", "id"]})
        try:
            return [DeckSummary(deck_id=int(deck_id), name=str(name)) for name, deck_id in payload["decks"]]
        except (KeyError, TypeError, ValueError) as exc:
            raise JpdbApiError("list-user-decks: malformed deck list") from exc

    async def list_deck_vocabulary(self, client: httpx.AsyncClient, deck: DeckSummary) -> DeckVocabulary:
        payload = await self._post(
            client,
            "deck/list-vocabulary",
            {"id": deck.deck_id, "fetch_occurences": True},
        )
        try:
            vocabulary = payload["vocabulary"]
            occurrences = payload["occurences"]
            if len(vocabulary) != len(occurrences):
                raise ValueError("vocabulary/occurences length mismatch")
            words = tuple(
                WordOccurrence(vocab_id=int(vid), spelling_id=int(sid), occurrence_count=int(count))
                for (vid, sid), count in zip(vocabulary, occurrences)
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise JpdbApiError(f"deck/list-vocabulary: malformed vocabulary for deck {deck.deck_id}") from exc
        return DeckVocabulary(deck_id=deck.deck_id, deck_name=deck.name, occurrences=words)

    async def lookup_spellings(
        self,
        client: httpx.AsyncClient,
        pairs: Iterable[tuple[int, int]],
    ) -> dict[int, str]:
        ids = [[vid, sid] for vid, sid in pairs]
        if not ids:
            return {}
        payload = await self._post(client, "lookup-vocabulary", {"list": ids, "fields": ["spelling"]})
        try:
            info = payload["vocabulary_info"]
            if len(info) != len(ids):
                raise ValueError("vocabulary_info length mismatch")
        except (KeyError, TypeError, ValueError) as exc:
            raise JpdbApiError("lookup-vocabulary: malformed response") from exc

        spellings: dict[int, str] = {}
        for (_, sid), fields in zip(ids, info):
            if not isinstance(fields, list) or not fields or not isinstance(fields[0], str):
                continue
            spellings[sid] = fields[0]
        if len(spellings) < len({sid for _, sid in ids}):
            logger.info("lookup-vocabulary resolved %s of %s spellings", len(spellings), len(ids))
        return spellings
