from __future__ import annotations

import uuid
from typing import Iterable, List, Optional

from notestudy.extraction.patterns import QAPair
from notestudy.models import Flashcard


def build_flashcard(pair: QAPair, source_note_id: Optional[uuid.UUID] = None) -> Flashcard:
    return Flashcard(question=pair.question, answer=pair.answer, source_note_id=source_note_id, pattern=pair.pattern)


def build_flashcards(pairs: Iterable[QAPair], source_note_id: Optional[uuid.UUID] = None) -> List[Flashcard]:
    return [build_flashcard(p, source_note_id) for p in pairs]
