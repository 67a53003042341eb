from __future__ import annotations

from dataclasses import dataclass, field

from deck_occurrences.cache.snapshot import CacheSnapshot


@dataclass(frozen=True)
class TrimmedVariant:
    spelling_text: str
    occurrence_count: int


@dataclass(frozen=True)
class TrimmedDeck:
    deck_id: int
    deck_name: str
    variants: tuple[TrimmedVariant, ...] = field(default_factory=tuple)


def query(snapshot: CacheSnapshot, target_vocab_id: int) -> list[TrimmedDeck]:
    """Cut a snapshot down to the decks that contain ``target_vocab_id``.

    Decks without a matching entry are left out of the result. Variants keep
    the deck's own entry order, not the order of the shared spelling table.
    """
    matching = {
        word_index
        for word_index, entry in enumerate(snapshot.words)
        if entry.vocab_id == target_vocab_id
    }
    if not matching:
        return []

    trimmed: list[TrimmedDeck] = []
    for deck in snapshot.decks:
        variants = tuple(
            TrimmedVariant(
                spelling_text=snapshot.resolve(entry.word_index).spelling_text,
                occurrence_count=entry.occurrence_count,
            )
            for entry in deck.entries
            if entry.word_index in matching
        )
        if variants:
            trimmed.append(TrimmedDeck(deck_id=deck.deck_id, deck_name=deck.deck_name, variants=variants))
    return trimmed
