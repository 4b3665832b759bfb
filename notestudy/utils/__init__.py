"""Utility subpackage for notestudy"""

from .logger import (
	get_logger,
	log_error,
	log_ocr_result,
	log_extraction,
	log_batch_result,
	set_processing_context,
	reset_processing_context,
	get_processing_context,
)

__all__ = [
	'get_logger',
	'log_error',
	'log_ocr_result',
	'log_extraction',
	'log_batch_result',
	'set_processing_context',
	'reset_processing_context',
	'get_processing_context',
]
