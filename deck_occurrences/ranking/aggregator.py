from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel

from deck_occurrences.cache.query import TrimmedDeck

# Weight of a spelling outside the ranked columns; ranked columns add their
# reverse position on top so any ranked match outweighs an unranked one.
UNRANKED_WEIGHT = 100_000_000


class RankedSpelling(BaseModel):
    spelling_text: str
    total_occurrence_count: int


class DeckCell(BaseModel):
    spelling_text: str
    occurrence_count: int
    ranked: bool = True


class RankedDeckRow(BaseModel):
    deck_id: int
    deck_name: str
    total_occurrence_count: int
    rank_score: int
    cells: list[DeckCell | None]


class OccurrenceTable(BaseModel):
    spellings: list[RankedSpelling]
    rows: list[RankedDeckRow]
    total_occurrence_count: int


class OccurrenceAggregator:
    def __init__(self, unranked_weight: int = UNRANKED_WEIGHT) -> None:
        self.unranked_weight = unranked_weight

    def rank_spellings(self, decks: Sequence[TrimmedDeck]) -> list[RankedSpelling]:
        totals: dict[str, int] = {}
        for deck in decks:
            for variant in deck.variants:
                totals[variant.spelling_text] = totals.get(variant.spelling_text, 0) + variant.occurrence_count

        # dict keeps first-seen order and sorted() is stable, so ties stay in encounter order.
        ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
        return [RankedSpelling(spelling_text=text, total_occurrence_count=total) for text, total in ordered]

    def column_weight(self, position: int | None, column_count: int) -> int:
        base = max(self.unranked_weight, column_count + 1)
        if position is None:
            return base
        return base + (column_count - position)

    def build_row(self, deck: TrimmedDeck, spellings: Sequence[RankedSpelling]) -> RankedDeckRow | None:
        positions = {spelling.spelling_text: idx for idx, spelling in enumerate(spellings)}
        column_count = len(spellings)
        cells: list[DeckCell | None] = [None] * column_count
        total = 0
        score = 0

        for variant in deck.variants:
            position = positions.get(variant.spelling_text)
            total += variant.occurrence_count
            score += variant.occurrence_count * self.column_weight(position, column_count)
            cell = DeckCell(
                spelling_text=variant.spelling_text,
                occurrence_count=variant.occurrence_count,
                ranked=position is not None,
            )
            if position is None:
                cells.append(cell)
            else:
                cells[position] = cell

        if total <= 0:
            return None

        return RankedDeckRow(
            deck_id=deck.deck_id,
            deck_name=deck.deck_name,
            total_occurrence_count=total,
            rank_score=score,
            cells=cells,
        )

    def aggregate(self, decks: Sequence[TrimmedDeck]) -> OccurrenceTable | None:
        """Rank decks and spelling variants for one queried word.

        Returns ``None`` when the word occurs in no deck at all.
        """
        if not decks:
            return None

        spellings = self.rank_spellings(decks)
        if not spellings:
            return None

        rows: list[RankedDeckRow] = []
        for deck in decks:
            row = self.build_row(deck, spellings)
            if row is not None:
                rows.append(row)

        rows.sort(key=lambda row: row.rank_score, reverse=True)
        return OccurrenceTable(
            spellings=spellings,
            rows=rows,
            total_occurrence_count=sum(row.total_occurrence_count for row in rows),
        )


occurrence_aggregator = OccurrenceAggregator()


def rank_spellings(decks: Sequence[TrimmedDeck]) -> list[RankedSpelling]:
    return occurrence_aggregator.rank_spellings(decks)


def aggregate(decks: Sequence[TrimmedDeck]) -> OccurrenceTable | None:
    return occurrence_aggregator.aggregate(decks)
