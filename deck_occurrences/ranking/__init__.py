from .aggregator import (
    UNRANKED_WEIGHT,
    DeckCell,
    OccurrenceAggregator,
    OccurrenceTable,
    RankedDeckRow,
    RankedSpelling,
    aggregate,
    rank_spellings,
)

__all__ = [
    "UNRANKED_WEIGHT",
    "DeckCell",
    "OccurrenceAggregator",
    "OccurrenceTable",
    "RankedDeckRow",
    "RankedSpelling",
    "aggregate",
    "rank_spellings",
]
