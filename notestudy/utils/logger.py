import os
import sys
import logging
import pathlib
import contextvars
from logging.handlers import RotatingFileHandler
from pythonjsonlogger import jsonlogger

_processing_ctx_var = contextvars.ContextVar('processing_ctx', default={})


def set_processing_context(batch_id: str = None, note_id: str = None):
    return _processing_ctx_var.set({'batch_id': batch_id, 'note_id': note_id})


def reset_processing_context(token):
    _processing_ctx_var.reset(token)


def get_processing_context():
    return _processing_ctx_var.get()


def _inject_processing_context(record):
    ctx = get_processing_context()
    # explicit extra={...} values win over the ambient context
    if not hasattr(record, 'batch_id'):
        record.batch_id = ctx.get('batch_id')
    if not hasattr(record, 'note_id'):
        record.note_id = ctx.get('note_id')
    return True


def get_logger(name: str = 'notestudy'):
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FORMAT = os.getenv('LOG_FORMAT', 'json')
    LOG_TO_FILE = os.getenv('LOG_TO_FILE', 'false').lower() in ('1', 'true', 'yes')
    LOG_FILE_PATH = os.getenv('LOG_FILE_PATH', 'logs')
    LOG_MAX_SIZE = int(os.getenv('LOG_MAX_SIZE', str(10 * 1024 * 1024)))
    LOG_MAX_FILES = int(os.getenv('LOG_MAX_FILES', '7'))

    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(LOG_LEVEL.upper())

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    if LOG_FORMAT == 'json':
        fmt = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s %(batch_id)s %(note_id)s')
    else:
        fmt = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    # Rotating file handlers, only when a host asks for them
    if LOG_TO_FILE:
        log_path = pathlib.Path(LOG_FILE_PATH)
        if not log_path.is_absolute():
            log_path = pathlib.Path(os.getcwd()) / log_path
        log_path.mkdir(parents=True, exist_ok=True)

        combined = RotatingFileHandler(log_path / 'combined.log', maxBytes=LOG_MAX_SIZE, backupCount=LOG_MAX_FILES)
        combined.setFormatter(fmt)
        logger.addHandler(combined)

        errors = RotatingFileHandler(log_path / 'error.log', maxBytes=LOG_MAX_SIZE, backupCount=LOG_MAX_FILES)
        errors.setLevel(logging.ERROR)
        errors.setFormatter(fmt)
        logger.addHandler(errors)

    # inject context
    f = logging.Filter()
    f.filter = _inject_processing_context
    logger.addFilter(f)

    return logger


def log_error(error: Exception, context: dict = None):
    logger = get_logger()
    logger.error('error', exc_info=error, extra=context or {})


def log_ocr_result(note_id: str, service: str, line_count: int, text_length: int, duration_ms: float):
    logger = get_logger()
    logger.info('ocr_result', extra={'note_id': note_id, 'service': service, 'line_count': line_count, 'text_length': text_length, 'duration_ms': duration_ms})


def log_extraction(note_id: str, unit_count: int, sentence_count: int, flashcard_count: int, pattern_counts: dict, duration_ms: float):
    logger = get_logger()
    logger.info('flashcard_extraction', extra={
        'note_id': note_id,
        'unit_count': unit_count,
        'sentence_count': sentence_count,
        'flashcard_count': flashcard_count,
        'pattern_counts': pattern_counts,
        'duration_ms': duration_ms,
    })


def log_batch_result(batch_id: str, note_count: int, failed_count: int, candidate_count: int, added_count: int, duration_ms: float):
    logger = get_logger()
    logger.info('batch_result', extra={
        'batch_id': batch_id,
        'note_count': note_count,
        'failed_count': failed_count,
        'candidate_count': candidate_count,
        'added_count': added_count,
        'duplicate_count': candidate_count - added_count,
        'duration_ms': duration_ms,
    })
