"""
Text-side extraction: paragraph segmentation, sentence tagging and
question/answer pattern matching.
"""
from .segmenter import ExtractionUnit, UnitSequence, segment
from .tagger import CandidateSentence, SentenceTagger, TaggedSpan, sentence_tag
from .patterns import (
	QAPair,
	QAPattern,
	RegexPattern,
	PatternExtractor,
	DEFAULT_PATTERNS,
	is_extractable,
)

__all__ = [
	'ExtractionUnit',
	'UnitSequence',
	'segment',
	'CandidateSentence',
	'SentenceTagger',
	'TaggedSpan',
	'sentence_tag',
	'QAPair',
	'QAPattern',
	'RegexPattern',
	'PatternExtractor',
	'DEFAULT_PATTERNS',
	'is_extractable',
]
