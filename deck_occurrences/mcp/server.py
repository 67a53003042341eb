from __future__ import annotations

from deck_occurrences.api.occurrence_service import get_cache_status, lookup_occurrences
from deck_occurrences.api.render import cache_status_text, render_text_table
from deck_occurrences.batch.refresh import RefreshError, last_fetched_text, run as run_refresh
from deck_occurrences.common.urls import InvalidVocabularyIdError, parse_vocabulary_id

try:
    from fastmcp import FastMCP
except ImportError as exc:  # pragma: no cover - runtime dependency guard
    raise RuntimeError(
        "FastMCP is required to run the MCP server. Install the project dependencies."
    ) from exc


SERVER_TITLE = "DeckOccurrences"
SERVER_INSTRUCTIONS = (
    "Use word_occurrences with a jpdb vocabulary URL or word id to see how often "
    "the word occurs in each of the user's decks. Use cache_status to see when the "
    "cache was last fetched and refresh_cache after decks change."
)

mcp = FastMCP(
    name=SERVER_TITLE,
    instructions=SERVER_INSTRUCTIONS,
    version='1',
)


def word_occurrences_text(vocabulary: str) -> str:
    try:
        vocab_id = parse_vocabulary_id(vocabulary)
    except InvalidVocabularyIdError as exc:
        return f"Invalid word ID: {exc}"

    response = lookup_occurrences(vocab_id)
    if response.status == "cache_missing":
        return "No decks in cache. Run refresh_cache first."
    table = response.table()
    if table is None:
        return "Word not in any deck"
    return render_text_table(table)


def cache_status_summary() -> str:
    return cache_status_text(get_cache_status())


@mcp.tool(name="word_occurrences", description="Show occurrences of a word across all of the user's decks.")
async def word_occurrences(vocabulary: str) -> str:
    """Look up a word by jpdb vocabulary URL or numeric id."""
    return word_occurrences_text(vocabulary)


@mcp.tool(name="cache_status", description="Report when the local deck cache was last fetched.")
async def cache_status() -> str:
    return cache_status_summary()


@mcp.tool(name="refresh_cache",description="Fetch all decks from jpdb into the local cache.")
async def refresh_cache() -> str:
    """Rebuild the deck cache from the jpdb API."""
    try:
        snapshot = await run_refresh()
    except RefreshError as exc:
        return f"Refresh failed: {exc}"
    return last_fetched_text(snapshot)


if __name__ == "__main__":
    mcp.run("http")
