"""Note processing service: single-note and batch entry points.

A NoteProcessor is an ordinary object built per call site (or injected); it
holds no cross-call state besides its recognizer and the tagger's loaded
model.

Pipeline per note:
  image -> recognizer (worker thread) -> corrected lines joined with "\\n"
        -> FlashcardExtractor (worker thread) -> flashcards tagged with the note id

Batches fan out one task per note, bounded by ``max_concurrent_notes``, and
join on ``asyncio.gather``. Every note reports a NoteResult; a failed, timed
out or cancelled note contributes no flashcards and never affects the others.
The union is built in input-note order, so the result does not depend on
which note finished first, and is deduplicated once against the existing set.
"""
from __future__ import annotations

import asyncio
import threading
import time
import uuid
from typing import Any, Callable, Iterable, List, Optional

from notestudy.config import Settings
from notestudy.errors import NoteCancelled, NoteTimeout, RecognitionFailure
from notestudy.extraction import SentenceTagger
from notestudy.flashcards import FlashcardCollection, deduplicate
from notestudy.models import Flashcard, Note
from notestudy.ocr import TextRecognizer, TextractRecognizer, correct_lines
from notestudy.pipeline import FlashcardExtractor
from notestudy.results import BatchResult, BatchStatus, CancellationToken, NoteResult, NoteStatus
from notestudy.utils import (
    get_logger,
    get_processing_context,
    log_batch_result,
    log_ocr_result,
    reset_processing_context,
    set_processing_context,
)

LOG = get_logger()


class NoteProcessor:
    """Runs recognition and extraction for single notes and batches.

    Recognition options (accuracy, autocorrect) belong to the recognizer, which
    may already hold a loaded model; ``from_settings`` builds the recognizer from
    ``Settings``. A recognizer whose config disagrees with explicitly passed
    settings is kept as is and the mismatch is logged.

    At most ``max_concurrent_notes`` recognizer calls run at once. A note that
    times out frees its batch slot, but its worker thread keeps its recognition
    slot until the recognizer returns.
    """

    def __init__(self, recognizer: TextRecognizer, settings: Settings = None, extractor: FlashcardExtractor = None):
        self.settings = settings or Settings()
        self.recognizer = recognizer
        if settings is not None and recognizer.config != settings.recognition_config():
            LOG.warning('recognizer_config_differs_from_settings', extra={
                'recognizer': recognizer.name,
                'recognizer_config': recognizer.config.model_dump(),
                'settings_config': settings.recognition_config().model_dump(),
            })
        self._ocr_slots = threading.BoundedSemaphore(self.settings.max_concurrent_notes)
        self.extractor = extractor or FlashcardExtractor(
            tagger=SentenceTagger(
                language=self.settings.tagger_language,
                line_breaks_as_boundaries=self.settings.line_breaks_as_boundaries,
                auto_download=self.settings.nltk_auto_download,
            ),
            pair_questions=self.settings.pair_questions,
        )

    @classmethod
    def from_settings(cls, settings: Settings = None, recognizer_cls=TextractRecognizer) -> 'NoteProcessor':
        settings = settings or Settings()
        return cls(recognizer_cls(settings.recognition_config()), settings=settings)

    def _recognize(self, image: Any) -> str:
        try:
            with self._ocr_slots:
                lines = self.recognizer.recognize_text(image)
        except TimeoutError as e:
            # a recognizer-side timeout is a recognition error, not the note deadline
            raise RecognitionFailure(f'Recognizer timed out: {e}') from e
        if lines is None:
            raise RecognitionFailure('Recognizer returned no result')
        if self.recognizer.config.autocorrect:
            lines = correct_lines(lines)
        return '\n'.join(lines)

    @staticmethod
    def _check_cancelled(cancel_token: Optional[CancellationToken]):
        if cancel_token is not None and cancel_token.cancelled:
            raise NoteCancelled('Processing cancelled')

    async def _pipeline(self, image: Any, note_id: Optional[uuid.UUID], cancel_token: Optional[CancellationToken]) -> List[Flashcard]:
        if image is None:
            raise RecognitionFailure('Note has no image payload')
        self._check_cancelled(cancel_token)
        start = time.time()
        text = await asyncio.to_thread(self._recognize, image)
        log_ocr_result(str(note_id) if note_id else None, self.recognizer.name, text.count('\n') + 1 if text else 0, len(text), int((time.time() - start) * 1000))
        self._check_cancelled(cancel_token)
        return await asyncio.to_thread(self.extractor.extract, text, note_id)

    async def _run(self, image: Any, note_id: Optional[uuid.UUID], cancel_token: Optional[CancellationToken] = None) -> NoteResult:
        start = time.time()
        ctx = get_processing_context()
        token = set_processing_context(ctx.get('batch_id'), str(note_id) if note_id else None)
        timeout = self.settings.note_timeout_seconds or None
        try:
            flashcards = await asyncio.wait_for(self._pipeline(image, note_id, cancel_token), timeout=timeout)
            return NoteResult.success(note_id, flashcards, int((time.time() - start) * 1000))
        except asyncio.TimeoutError:
            # the worker thread is left to finish; its result is discarded
            LOG.warning('note_timed_out', extra={'timeout_seconds': timeout})
            return NoteResult.failure(note_id, NoteStatus.TIMED_OUT, NoteTimeout(f'note timeout after {timeout} seconds'), int((time.time() - start) * 1000))
        except NoteCancelled as e:
            LOG.info('note_cancelled')
            return NoteResult.failure(note_id, NoteStatus.CANCELLED, e, int((time.time() - start) * 1000))
        except RecognitionFailure as e:
            LOG.warning('note_recognition_failed', extra={'error': str(e)})
            return NoteResult.failure(note_id, NoteStatus.FAILED, e, int((time.time() - start) * 1000))
        except Exception as e:
            LOG.exception('note_processing_failed', exc_info=True)
            return NoteResult.failure(note_id, NoteStatus.FAILED, e, int((time.time() - start) * 1000))
        finally:
            reset_processing_context(token)

    async def process_note_image(self, image: Any, source_note_id: Optional[uuid.UUID] = None, cancel_token: Optional[CancellationToken] = None,
                                 callback: Optional[Callable[[List[Flashcard]], Any]] = None, loop: Optional[asyncio.AbstractEventLoop] = None) -> List[Flashcard]:
        """Turn one note image into flashcards; any failure yields an empty list."""
        result = await self._run(image, source_note_id, cancel_token)
        self._deliver(result.flashcards, callback, loop)
        return result.flashcards

    async def process_note(self, note: Note, cancel_token: Optional[CancellationToken] = None) -> NoteResult:
        return await self._run(note.image, note.id, cancel_token)

    async def run_batch(self, notes: Iterable[Note], existing: Iterable[Flashcard] = (), cancel_token: Optional[CancellationToken] = None) -> BatchResult:
        """Process ``notes`` concurrently, join, and deduplicate once against ``existing``.

        ``existing`` is read as a snapshot only after every note has reported.
        """
        notes = list(notes)
        start = time.time()
        batch_id = uuid.uuid4().hex
        token = set_processing_context(batch_id=batch_id)
        try:
            semaphore = asyncio.Semaphore(self.settings.max_concurrent_notes)

            async def _bounded(note: Note) -> NoteResult:
                async with semaphore:
                    return await self.process_note(note, cancel_token)

            LOG.info('batch_started', extra={'note_count': len(notes), 'max_concurrent_notes': self.settings.max_concurrent_notes})
            outcomes: List[NoteResult] = list(await asyncio.gather(*(_bounded(n) for n in notes)))

            candidates = [card for outcome in outcomes for card in outcome.flashcards]
            added = deduplicate(tuple(existing), candidates, within_candidates=self.settings.dedupe_within_batch)

            failed_count = sum(1 for o in outcomes if not o.ok)
            if failed_count == 0:
                status = BatchStatus.COMPLETED
            elif failed_count == len(outcomes):
                status = BatchStatus.FAILED
            else:
                status = BatchStatus.PARTIAL_SUCCESS
            log_batch_result(batch_id, len(notes), failed_count, len(candidates), len(added), int((time.time() - start) * 1000))
            return BatchResult(batch_id, added, outcomes, status)
        finally:
            reset_processing_context(token)

    async def process_notes(self, notes: Iterable[Note], existing: Iterable[Flashcard] = (), cancel_token: Optional[CancellationToken] = None,
                            callback: Optional[Callable[[List[Flashcard]], Any]] = None, loop: Optional[asyncio.AbstractEventLoop] = None) -> List[Flashcard]:
        """Batch entry point: the new flashcards of ``notes`` not already in ``existing``."""
        result = await self.run_batch(notes, existing, cancel_token)
        self._deliver(result.flashcards, callback, loop)
        return result.flashcards

    async def process_and_commit(self, notes: Iterable[Note], collection: FlashcardCollection, cancel_token: Optional[CancellationToken] = None) -> List[Flashcard]:
        """Run a batch against ``collection`` and commit the result through its lock."""
        result = await self.run_batch(notes, collection, cancel_token)
        return await collection.commit(result.flashcards, within_candidates=self.settings.dedupe_within_batch)

    @staticmethod
    def _deliver(flashcards: List[Flashcard], callback, loop):
        if callback is None:
            return
        target = loop or asyncio.get_running_loop()
        target.call_soon_threadsafe(callback, flashcards)
