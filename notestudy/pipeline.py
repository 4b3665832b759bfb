"""Text to flashcards: segmentation, sentence tagging, pattern extraction, card building.

Everything here is synchronous and CPU-bound; the processor runs it in a
worker thread. Failures are contained per unit: a unit the tagger cannot
handle is logged and skipped, and the remaining units are still extracted.
"""
from __future__ import annotations

import time
import uuid
from collections import Counter
from typing import List, Optional

from notestudy.errors import TaggingFailure
from notestudy.extraction import (
    CandidateSentence,
    ExtractionUnit,
    PatternExtractor,
    SentenceTagger,
    segment,
)
from notestudy.extraction.tagger import INTERROGATIVE
from notestudy.flashcards import build_flashcard
from notestudy.models import Flashcard
from notestudy.utils import get_logger, log_extraction

LOG = get_logger()


class FlashcardExtractor:
    def __init__(self, tagger: SentenceTagger = None, patterns: PatternExtractor = None, pair_questions: bool = True):
        self.tagger = tagger or SentenceTagger()
        self.patterns = patterns or PatternExtractor()
        self.pair_questions = pair_questions

    def candidate_sentences(self, unit: ExtractionUnit) -> List[CandidateSentence]:
        sentences = self.tagger.sentences(unit)
        if not self.pair_questions:
            return sentences
        # A question is usually followed by its answer as a separate sentence,
        # unless that sentence is a card of its own.
        out: List[CandidateSentence] = []
        i = 0
        while i < len(sentences):
            cur = sentences[i]
            nxt = sentences[i + 1] if i + 1 < len(sentences) else None
            if cur.tag == INTERROGATIVE and nxt is not None and nxt.tag != INTERROGATIVE and self.patterns.extract(nxt.text) is None:
                out.append(CandidateSentence(f'{cur.text} {nxt.text}', cur.start, nxt.end, cur.tag))
                i += 2
                continue
            out.append(cur)
            i += 1
        return out

    def extract(self, text: str, source_note_id: Optional[uuid.UUID] = None) -> List[Flashcard]:
        start = time.time()
        flashcards: List[Flashcard] = []
        pattern_counts: Counter = Counter()
        unit_count = 0
        sentence_count = 0
        for unit in segment(text):
            unit_count += 1
            try:
                sentences = self.candidate_sentences(unit)
            except TaggingFailure as e:
                LOG.warning('unit_skipped_tagging_failed', extra={'unit_start': unit.start, 'unit_end': unit.end, 'error': str(e)})
                continue
            for sentence in sentences:
                sentence_count += 1
                pair = self.patterns.extract(sentence.text)
                if pair is None:
                    continue
                pattern_counts[pair.pattern] += 1
                flashcards.append(build_flashcard(pair, source_note_id))
        duration_ms = int((time.time() - start) * 1000)
        log_extraction(str(source_note_id) if source_note_id else None, unit_count, sentence_count, len(flashcards), dict(pattern_counts), duration_ms)
        return flashcards
