"""
Flashcard construction and deduplication.
"""

from .builder import build_flashcard, build_flashcards
from .dedup import card_key, deduplicate, FlashcardCollection

__all__ = [
	'build_flashcard',
	'build_flashcards',
	'card_key',
	'deduplicate',
	'FlashcardCollection',
]
