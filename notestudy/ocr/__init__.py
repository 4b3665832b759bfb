"""
OCR collaborators for note images.
Supports AWS Textract (cloud) and TrOCR (local handwriting model, optional extra).
"""
from .base import RecognitionConfig, TextRecognizer, load_image
from .correction import clean_line, correct_lines
from .textract import TextractRecognizer
from .trocr import TrOCRRecognizer

__all__ = [
	'RecognitionConfig',
	'TextRecognizer',
	'load_image',
	'clean_line',
	'correct_lines',
	'TextractRecognizer',
	'TrOCRRecognizer',
]
