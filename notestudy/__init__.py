"""notestudy: question/answer flashcards from photographed study notes.

Example:
    >>> import asyncio
    >>> from notestudy import NoteProcessor, Note, Settings
    >>> from notestudy.ocr import TextractRecognizer
    >>>
    >>> settings = Settings()
    >>> processor = NoteProcessor(TextractRecognizer(settings.recognition_config()), settings=settings)
    >>> cards = asyncio.run(processor.process_notes([Note(image='page1.jpg'), Note(image='page2.jpg')]))
    >>> for card in cards:
    ...     print(card.question, '->', card.answer)
"""

from .config import Settings
from .errors import (
    NoteStudyError,
    RecognitionFailure,
    TaggingFailure,
    MalformedCapture,
    NoteTimeout,
    NoteCancelled,
)
from .models import Flashcard, Note
from .pipeline import FlashcardExtractor
from .processor import NoteProcessor
from .results import BatchResult, BatchStatus, CancellationToken, NoteResult, NoteStatus
from .flashcards import FlashcardCollection, deduplicate

__all__ = [
    'Settings',
    'NoteStudyError',
    'RecognitionFailure',
    'TaggingFailure',
    'MalformedCapture',
    'NoteTimeout',
    'NoteCancelled',
    'Flashcard',
    'Note',
    'FlashcardExtractor',
    'NoteProcessor',
    'BatchResult',
    'BatchStatus',
    'CancellationToken',
    'NoteResult',
    'NoteStatus',
    'FlashcardCollection',
    'deduplicate',
]

__version__ = '1.0.0'
