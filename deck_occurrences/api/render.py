from __future__ import annotations

from html import escape

from deck_occurrences.api.occurrence_service import CacheStatusResponse
from deck_occurrences.common.urls import deck_url, vocabulary_url
from deck_occurrences.ranking.aggregator import DeckCell, OccurrenceTable

CELL_STYLE = "padding:0;border:none;padding-left:1em;text-align:right"


def _spelling_cell(vocab_id: int, spelling: str, count: int, *, css_class: str = "") -> str:
    class_attr = f' class="{css_class}"' if css_class else ""
    href = escape(vocabulary_url(vocab_id, spelling))
    return (
        f'<td{class_attr} style="{CELL_STYLE}">'
        f'<b>{count}×</b>&nbsp;<a class="plain" href="{href}">{escape(spelling)}</a>'
        "</td>"
    )


def _deck_cell(vocab_id: int, cell: DeckCell | None) -> str:
    if cell is None:
        return f'<td style="{CELL_STYLE}"></td>'
    return _spelling_cell(vocab_id, cell.spelling_text, cell.occurrence_count)


def render_occurrence_table(vocab_id: int, table: OccurrenceTable) -> str:
    lines = ["<div><table>"]
    for row in table.rows:
        cells = "".join(_deck_cell(vocab_id, cell) for cell in row.cells)
        lines.append(
            "<tr>"
            f'<td style="padding:0;border:none"><a href="{escape(deck_url(row.deck_id))}">{escape(row.deck_name)}</a></td>'
            f"{cells}</tr>"
        )

    totals = "".join(
        _spelling_cell(vocab_id, spelling.spelling_text, spelling.total_occurrence_count, css_class="greyed-out")
        for spelling in table.spellings
    )
    lines.append(
        f'<tr><td style="border:none">Total: <b>{table.total_occurrence_count}</b></td>{totals}</tr>'
    )
    lines.append("</table></div>")
    return "\n".join(lines)


def render_text_table(table: OccurrenceTable) -> str:
    lines: list[str] = []
    for row in table.rows:
        cells = [f"{cell.occurrence_count}× {cell.spelling_text}" for cell in row.cells if cell is not None]
        lines.append(f"{row.deck_name}: {', '.join(cells)}")
    totals = ", ".join(f"{s.total_occurrence_count}× {s.spelling_text}" for s in table.spellings)
    lines.append(f"Total: {table.total_occurrence_count} ({totals})")
    return "\n".join(lines)


def cache_status_text(status: CacheStatusResponse) -> str:
    if status.last_fetched_at is None:
        return "No decks in cache"
    return f"Last time fetched: {status.last_fetched_at.isoformat(timespec='seconds')}"
