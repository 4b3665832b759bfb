"""Case-insensitive deduplication of flashcards against an accepted set.

A candidate is a duplicate when both its trimmed, lower-cased question and
answer equal those of an existing card. Only incoming candidates are filtered;
the existing set is never deduplicated against itself.
"""
from __future__ import annotations

import asyncio
from typing import Iterable, List, Tuple

from notestudy.models import Flashcard
from notestudy.utils import get_logger

LOG = get_logger()


def card_key(card: Flashcard) -> Tuple[str, str]:
    return card.question.strip().lower(), card.answer.strip().lower()


def deduplicate(existing: Iterable[Flashcard], candidates: Iterable[Flashcard], within_candidates: bool = False) -> List[Flashcard]:
    """Return the candidates not already present in ``existing``, in candidate order.

    Args:
        existing: accepted cards, read once as a snapshot
        candidates: newly extracted cards
        within_candidates: also drop a candidate that repeats an earlier accepted candidate
    """
    seen = {card_key(c) for c in existing}
    out: List[Flashcard] = []
    dropped = 0
    for card in candidates:
        key = card_key(card)
        if key in seen:
            dropped += 1
            continue
        if within_candidates:
            seen.add(key)
        out.append(card)
    LOG.debug('dedup', extra={'kept': len(out), 'dropped': dropped})
    return out


class FlashcardCollection:
    """The accepted flashcard set, with commits serialized behind one lock.

    ``commit`` re-checks candidates against the contents at commit time, so two
    batches that deduplicated against the same older snapshot cannot both add
    the same card.
    """

    def __init__(self, cards: Iterable[Flashcard] = ()):
        self._cards: List[Flashcard] = list(cards)
        self._lock = asyncio.Lock()

    def snapshot(self) -> Tuple[Flashcard, ...]:
        return tuple(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self):
        return iter(self.snapshot())

    async def commit(self, cards: Iterable[Flashcard], within_candidates: bool = False) -> List[Flashcard]:
        async with self._lock:
            added = deduplicate(self._cards, cards, within_candidates=within_candidates)
            self._cards.extend(added)
        LOG.info('flashcards_committed', extra={'added_count': len(added), 'total_count': len(self._cards)})
        return added
