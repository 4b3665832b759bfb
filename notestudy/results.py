from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from notestudy.models import Flashcard


class NoteStatus(str, Enum):
    COMPLETED = 'completed'
    FAILED = 'failed'
    TIMED_OUT = 'timed_out'
    CANCELLED = 'cancelled'


class BatchStatus(str, Enum):
    COMPLETED = 'completed'
    PARTIAL_SUCCESS = 'partial_success'
    FAILED = 'failed'


@dataclass(frozen=True)
class NoteResult:
    """Outcome of one note: its flashcards on success, the contained error otherwise."""
    note_id: Optional[uuid.UUID]
    status: NoteStatus
    flashcards: List[Flashcard] = field(default_factory=list)
    error: Optional[Exception] = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status == NoteStatus.COMPLETED

    @classmethod
    def success(cls, note_id, flashcards: List[Flashcard], duration_ms: int = 0) -> 'NoteResult':
        return cls(note_id, NoteStatus.COMPLETED, list(flashcards), None, duration_ms)

    @classmethod
    def failure(cls, note_id, status: NoteStatus, error: Exception, duration_ms: int = 0) -> 'NoteResult':
        return cls(note_id, status, [], error, duration_ms)


@dataclass(frozen=True)
class BatchResult:
    batch_id: str
    flashcards: List[Flashcard]
    outcomes: List[NoteResult]
    status: BatchStatus

    @property
    def failed(self) -> List[NoteResult]:
        return [o for o in self.outcomes if not o.ok]


class CancellationToken:
    """Thread-safe cancel flag, checked before each OCR call and before extraction."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
