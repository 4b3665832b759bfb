"""Sentence tagging over extraction units (NLTK Punkt).

Recognized text often has no or irregular punctuation, so sentence boundaries
come from Punkt's span tokenizer rather than splitting on periods, and by
default every recognized line break is also treated as a boundary.

Each span carries a lexical sentence tag:
- interrogative: ends with "?"
- declarative: ends with "." or "!"
- fragment: anything else (typical for handwritten keyword lines)

The tag is informational; extraction only uses the span boundaries.
"""
from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Tuple

import nltk
from nltk.tokenize.punkt import PunktSentenceTokenizer, PunktTokenizer

from notestudy.errors import TaggingFailure
from notestudy.extraction.segmenter import ExtractionUnit
from notestudy.utils import get_logger

LOG = get_logger()

INTERROGATIVE = 'interrogative'
DECLARATIVE = 'declarative'
FRAGMENT = 'fragment'

_LINE_RE = re.compile(r'[^\r\n]+')


class TaggedSpan(NamedTuple):
    tag: str
    start: int
    end: int


@dataclass(frozen=True)
class CandidateSentence:
    text: str
    start: int
    end: int
    tag: str


def sentence_tag(text: str) -> str:
    s = text.rstrip()
    if s.endswith('?'):
        return INTERROGATIVE
    if s.endswith(('.', '!')):
        return DECLARATIVE
    return FRAGMENT


class SentenceTagger:
    def __init__(self, language: str = 'english', line_breaks_as_boundaries: bool = True, auto_download: bool = True):
        self.language = language
        self.line_breaks_as_boundaries = line_breaks_as_boundaries
        self.auto_download = auto_download
        self._tokenizer = None
        self._lock = threading.Lock()

    def _load_tokenizer(self) -> PunktSentenceTokenizer:
        try:
            return PunktTokenizer(self.language)
        except LookupError:
            if self.auto_download:
                LOG.info('nltk_punkt_download', extra={'language': self.language})
                nltk.download('punkt_tab', quiet=True)
                try:
                    return PunktTokenizer(self.language)
                except LookupError:
                    pass
        LOG.warning('nltk_punkt_unavailable_using_untrained', extra={'language': self.language})
        return PunktSentenceTokenizer()

    @property
    def tokenizer(self) -> PunktSentenceTokenizer:
        if self._tokenizer is None:
            with self._lock:
                if self._tokenizer is None:
                    self._tokenizer = self._load_tokenizer()
        return self._tokenizer

    def _regions(self, text: str) -> Iterator[Tuple[int, int]]:
        if not self.line_breaks_as_boundaries:
            yield 0, len(text)
            return
        for m in _LINE_RE.finditer(text):
            yield m.start(), m.end()

    def tag_sentences(self, text: str) -> List[TaggedSpan]:
        """Return ordered (tag, start, end) spans for ``text``.

        Raises:
            TaggingFailure: if the tokenizer cannot be loaded or fails on the text
        """
        spans: List[TaggedSpan] = []
        try:
            tokenizer = self.tokenizer
            for region_start, region_end in self._regions(text):
                region = text[region_start:region_end]
                for start, end in tokenizer.span_tokenize(region):
                    s, e = region_start + start, region_start + end
                    if text[s:e].strip():
                        spans.append(TaggedSpan(sentence_tag(text[s:e]), s, e))
        except TaggingFailure:
            raise
        except Exception as e:
            LOG.warning('sentence_tagging_failed', extra={'error': str(e)})
            raise TaggingFailure(str(e))
        return spans

    def sentences(self, unit: ExtractionUnit) -> List[CandidateSentence]:
        """Tag one extraction unit and return its candidate sentences (offsets relative to the unit)."""
        return [
            CandidateSentence(' '.join(unit.text[span.start:span.end].split()), span.start, span.end, span.tag)
            for span in self.tag_sentences(unit.text)
        ]
