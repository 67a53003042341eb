#!/usr/bin/env python3
import argparse
import asyncio
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from deck_occurrences.api.occurrence_service import OccurrenceService
from deck_occurrences.api.render import render_text_table
from deck_occurrences.batch.jpdb_client import JpdbClient
from deck_occurrences.batch.refresh import DeckRefresher, RefreshError
from deck_occurrences.cache.store import default_store
from deck_occurrences.common.urls import InvalidVocabularyIdError, parse_vocabulary_id


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Fetch all jpdb decks into the local occurrence cache."
    )
    parser.add_argument("--api-key", default=None, help="jpdb API key (default: JPDB_API_KEY)")
    parser.add_argument(
        "--show",
        default=None,
        help="After refreshing, print occurrences for this vocabulary URL or word id",
    )
    args = parser.parse_args()

    vocab_id = None
    if args.show:
        try:
            vocab_id = parse_vocabulary_id(args.show)
        except InvalidVocabularyIdError as exc:
            parser.error(str(exc))

    logging.basicConfig(level=logging.INFO)
    store = default_store()
    refresher = DeckRefresher(JpdbClient(args.api_key), store, progress=print)
    try:
        asyncio.run(refresher.refresh())
    except RefreshError as exc:
        print(f"Refresh failed, previous cache kept: {exc}", file=sys.stderr)
        return 1

    if vocab_id is not None:
        response = OccurrenceService(store).lookup(vocab_id)
        table = response.table()
        print(render_text_table(table) if table else "Word not in any deck")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
