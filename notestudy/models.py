from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Flashcard(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    question: str
    answer: str
    source_note_id: Optional[uuid.UUID] = None
    pattern: Optional[str] = None

    @field_validator('question', 'answer')
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('must not be empty')
        return v

    def with_edits(self, question: Optional[str] = None, answer: Optional[str] = None) -> 'Flashcard':
        """Return an edited copy that keeps this card's identity and source note."""
        return Flashcard(
            id=self.id,
            question=self.question if question is None else question,
            answer=self.answer if answer is None else answer,
            source_note_id=self.source_note_id,
            pattern=self.pattern,
        )


class Note(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    image: Any = None
    title: str = 'New Note'
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
