from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from notestudy.ocr.base import RecognitionConfig


class Settings(BaseSettings):
    """Processor configuration, read from NOTESTUDY_* environment variables or a .env file."""

    model_config = SettingsConfigDict(env_prefix='NOTESTUDY_', env_file='.env', extra='ignore')

    ocr_accuracy: Literal['fast', 'accurate'] = 'accurate'
    ocr_autocorrect: bool = True
    # None or 0 disables the per-note timeout
    note_timeout_seconds: Optional[float] = Field(120.0, ge=0)
    max_concurrent_notes: int = Field(4, ge=1)
    tagger_language: str = 'english'
    line_breaks_as_boundaries: bool = True
    pair_questions: bool = True
    nltk_auto_download: bool = True
    dedupe_within_batch: bool = False

    def recognition_config(self) -> RecognitionConfig:
        return RecognitionConfig(accuracy=self.ocr_accuracy, autocorrect=self.ocr_autocorrect)
