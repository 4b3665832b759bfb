"""Question/answer patterns applied to candidate sentences.

Patterns are tried in a fixed priority order and the first one that yields a
non-empty question and answer wins:

1. question   - "What is mitosis? Cell division."  -> ("What is mitosis?", "Cell division.")
2. definition - "Photosynthesis is the process..." -> ("Photosynthesis", "the process...")
3. colon      - "Capital of France: Paris"          -> ("Capital of France", "Paris")
4. dash       - "Mitochondria - powerhouse"         -> ("Mitochondria", "powerhouse")

The order is part of the contract: a sentence such as "Note: water is wet"
matches several patterns, and the most specific marker must win. The dash form
is last because hyphenated words and ranges also contain dashes.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import List, NamedTuple, Optional, Sequence

from notestudy.errors import MalformedCapture
from notestudy.utils import get_logger

LOG = get_logger()


class QAPair(NamedTuple):
    question: str
    answer: str
    pattern: str


def is_extractable(sentence: str) -> bool:
    """Cheap gate run before any pattern: a '?', a ':' or the word ' is '."""
    return '?' in sentence or ':' in sentence or ' is ' in sentence.lower()


class QAPattern(ABC):
    name = 'pattern'

    @abstractmethod
    def attempt(self, sentence: str) -> Optional[QAPair]:
        """Return the captured pair, or None to let the next pattern try."""


class RegexPattern(QAPattern):
    def __init__(self, name: str, pattern: str):
        self.name = name
        self.regex = re.compile(pattern, re.IGNORECASE | re.DOTALL)
        if self.regex.groups != 2:
            raise ValueError(f'Pattern {name!r} must define exactly two groups, got {self.regex.groups}')

    def capture(self, sentence: str) -> Optional[QAPair]:
        m = self.regex.match(sentence)
        if m is None:
            return None
        question, answer = (g.strip() if g else '' for g in m.groups())
        if not question or not answer:
            raise MalformedCapture(f'{self.name}: empty capture')
        return QAPair(question, answer, self.name)

    def attempt(self, sentence: str) -> Optional[QAPair]:
        try:
            return self.capture(sentence)
        except MalformedCapture as e:
            LOG.debug('pattern_malformed_capture', extra={'pattern': self.name, 'error': str(e)})
            return None

    def __repr__(self) -> str:
        return f'RegexPattern({self.name!r}, {self.regex.pattern!r})'


QUESTION_PATTERN = RegexPattern('question', r'^(.+?\?)\s*(.*)$')
DEFINITION_PATTERN = RegexPattern('definition', r'^(.+?)\s+is\s+(.+)$')
COLON_PATTERN = RegexPattern('colon', r'^(.+?):\s*(.*)$')
DASH_PATTERN = RegexPattern('dash', r'^(.+?)\s*-\s*(.*)$')

DEFAULT_PATTERNS: Sequence[QAPattern] = (
    QUESTION_PATTERN,
    DEFINITION_PATTERN,
    COLON_PATTERN,
    DASH_PATTERN,
)


class PatternExtractor:
    def __init__(self, patterns: Sequence[QAPattern] = DEFAULT_PATTERNS):
        self.patterns: List[QAPattern] = list(patterns)

    def extract(self, sentence: str) -> Optional[QAPair]:
        """Split ``sentence`` into a question/answer pair, or return None.

        Sentences failing ``is_extractable`` are skipped without running any
        pattern. At most one pair is produced per sentence.
        """
        if not sentence or not is_extractable(sentence):
            return None
        for pattern in self.patterns:
            pair = pattern.attempt(sentence)
            if pair is not None:
                return pair
        return None
