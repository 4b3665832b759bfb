"""
Integration tests for batch processing: concurrency, failure isolation,
deduplication and commits into a shared collection.
"""
import asyncio

import pytest

from notestudy.flashcards import FlashcardCollection
from notestudy.models import Flashcard, Note
from notestudy.ocr.textract import TextractRecognizer
from notestudy.processor import NoteProcessor
from notestudy.results import BatchStatus, CancellationToken, NoteStatus
from tests.fixtures.fake_ocr import FakeRecognizer
from tests.fixtures.mock_aws import MockTextractClient

pytestmark = pytest.mark.integration

PAGE_A = ['Capital of France: Paris', 'Mitosis is cell division']
PAGE_B = ['What is ATP? Energy currency.', '', 'Chlorophyll: green pigment']


def _keys(cards):
    return [(c.question, c.answer, c.source_note_id) for c in cards]


def test_batch_result_independent_of_completion_order(settings):
    note_a, note_b = Note(image='a'), Note(image='b')
    a_slow = NoteProcessor(FakeRecognizer({'a': (0.2, PAGE_A), 'b': PAGE_B}), settings=settings)
    b_slow = NoteProcessor(FakeRecognizer({'a': PAGE_A, 'b': (0.2, PAGE_B)}), settings=settings)

    first = asyncio.run(a_slow.process_notes([note_a, note_b]))
    second = asyncio.run(b_slow.process_notes([note_a, note_b]))
    assert _keys(first) == _keys(second)
    assert [c.source_note_id for c in first] == [note_a.id, note_a.id, note_b.id, note_b.id]


def test_failed_note_does_not_affect_others(settings):
    note_a, note_b = Note(image='missing'), Note(image='b')
    processor = NoteProcessor(FakeRecognizer({'b': PAGE_B}), settings=settings)

    batch = asyncio.run(processor.process_notes([note_a, note_b]))
    alone = asyncio.run(processor.process_notes([note_b]))
    assert _keys(batch) == _keys(alone)


def test_run_batch_statuses(settings):
    processor = NoteProcessor(FakeRecognizer({'a': PAGE_A, 'b': PAGE_B}), settings=settings)

    ok = asyncio.run(processor.run_batch([Note(image='a'), Note(image='b')]))
    assert ok.status == BatchStatus.COMPLETED
    assert ok.failed == []

    partial = asyncio.run(processor.run_batch([Note(image='a'), Note(image='missing')]))
    assert partial.status == BatchStatus.PARTIAL_SUCCESS
    assert [o.status for o in partial.outcomes] == [NoteStatus.COMPLETED, NoteStatus.FAILED]
    assert len(partial.failed) == 1

    failed = asyncio.run(processor.run_batch([Note(image='missing'), Note(image=None)]))
    assert failed.status == BatchStatus.FAILED
    assert failed.flashcards == []


def test_empty_batch(settings):
    processor = NoteProcessor(FakeRecognizer({}), settings=settings)
    result = asyncio.run(processor.run_batch([]))
    assert result.flashcards == []
    assert result.status == BatchStatus.COMPLETED


def test_batch_deduplicates_against_existing(settings):
    existing = [Flashcard(question='capital of france', answer='PARIS')]
    processor = NoteProcessor(FakeRecognizer({'a': PAGE_A}), settings=settings)
    cards = asyncio.run(processor.process_notes([Note(image='a')], existing=existing))
    assert [(c.question, c.answer) for c in cards] == [('Mitosis', 'cell division')]


def test_batch_keeps_repeats_across_notes_by_default(settings):
    processor = NoteProcessor(FakeRecognizer({'a': PAGE_A}), settings=settings)
    notes = [Note(image='a'), Note(image='a')]
    assert len(asyncio.run(processor.process_notes(notes))) == 4

    within = settings.model_copy(update={'dedupe_within_batch': True})
    processor = NoteProcessor(FakeRecognizer({'a': PAGE_A}), settings=within)
    assert len(asyncio.run(processor.process_notes(notes))) == 2


def test_batch_timeout_isolated(settings):
    settings = settings.model_copy(update={'note_timeout_seconds': 0.1})
    processor = NoteProcessor(FakeRecognizer({'slow': (0.6, PAGE_A), 'b': PAGE_B}), settings=settings)
    result = asyncio.run(processor.run_batch([Note(image='slow'), Note(image='b')]))
    assert [o.status for o in result.outcomes] == [NoteStatus.TIMED_OUT, NoteStatus.COMPLETED]
    assert result.status == BatchStatus.PARTIAL_SUCCESS
    assert [c.question for c in result.flashcards] == ['What is ATP?', 'Chlorophyll']


def test_batch_cancellation(settings):
    token = CancellationToken()
    token.cancel()
    processor = NoteProcessor(FakeRecognizer({'a': PAGE_A}), settings=settings)
    result = asyncio.run(processor.run_batch([Note(image='a'), Note(image='a')], cancel_token=token))
    assert {o.status for o in result.outcomes} == {NoteStatus.CANCELLED}
    assert result.flashcards == []


def test_concurrency_bound(settings):
    settings = settings.model_copy(update={'max_concurrent_notes': 1})
    recognizer = FakeRecognizer({'a': (0.05, PAGE_A), 'b': (0.05, PAGE_B)})
    processor = NoteProcessor(recognizer, settings=settings)
    result = asyncio.run(processor.run_batch([Note(image='a'), Note(image='b')]))
    assert result.status == BatchStatus.COMPLETED
    assert recognizer.calls == ['a', 'b']


def test_batch_callback(settings):
    processor = NoteProcessor(FakeRecognizer({'a': PAGE_A}), settings=settings)
    received = []

    async def _run():
        cards = await processor.process_notes([Note(image='a')], callback=received.append)
        await asyncio.sleep(0)
        return cards

    cards = asyncio.run(_run())
    assert received == [cards]


def test_concurrent_batches_commit_once(settings):
    processor = NoteProcessor(FakeRecognizer({'a': (0.05, PAGE_A), 'b': PAGE_A}), settings=settings)
    collection = FlashcardCollection([Flashcard(question='Mitosis', answer='cell division')])

    async def _run():
        return await asyncio.gather(
            processor.process_and_commit([Note(image='a')], collection),
            processor.process_and_commit([Note(image='b')], collection),
        )

    first, second = asyncio.run(_run())
    assert len(first) + len(second) == 1
    assert sorted((c.question, c.answer) for c in collection) == [('Capital of France', 'Paris'), ('Mitosis', 'cell division')]


def test_end_to_end_with_textract(settings, sample_image):
    processor = NoteProcessor(TextractRecognizer(settings.recognition_config(), client=MockTextractClient()), settings=settings)
    note = Note(image=sample_image, title='Biology')
    result = asyncio.run(processor.run_batch([note]))
    assert result.status == BatchStatus.COMPLETED
    assert [(c.question, c.answer, c.pattern) for c in result.flashcards] == [
        ('Capital of France', 'Paris', 'colon'),
        ('Mitosis', 'cell division', 'definition'),
        ('What is ATP?', 'Energy currency.', 'question'),
    ]
    assert {c.source_note_id for c in result.flashcards} == {note.id}
