"""Recognizer contract consumed by the note processor.

A recognizer turns one note image into its recognized lines, in reading
order. Back-ends raise RecognitionFailure for every failure they can detect;
the processor treats that note as contributing no flashcards.
"""
from __future__ import annotations

import io
import os
from abc import ABC, abstractmethod
from typing import Any, List, Literal

from PIL import Image
from pydantic import BaseModel

from notestudy.errors import RecognitionFailure


class RecognitionConfig(BaseModel):
    accuracy: Literal['fast', 'accurate'] = 'accurate'
    autocorrect: bool = True


class TextRecognizer(ABC):
    name = 'recognizer'

    def __init__(self, config: RecognitionConfig = None):
        self.config = config or RecognitionConfig()

    @abstractmethod
    def recognize_text(self, image: Any) -> List[str]:
        """Return the recognized lines of ``image``; blank strings mark paragraph gaps."""


def load_image(payload: Any) -> Image.Image:
    """Normalize an image payload (PIL image, raw bytes or a file path) to RGB."""
    if payload is None:
        raise RecognitionFailure('No image payload')
    try:
        if isinstance(payload, Image.Image):
            return payload if payload.mode == 'RGB' else payload.convert('RGB')
        if isinstance(payload, (bytes, bytearray)):
            source = io.BytesIO(payload)
        elif isinstance(payload, (str, os.PathLike)):
            source = payload
        else:
            raise RecognitionFailure(f'Unsupported image payload: {type(payload).__name__}')
        # convert() reads the pixels into a new image, so the file is closed on return
        with Image.open(source) as img:
            return img.convert('RGB')
    except RecognitionFailure:
        raise
    except (OSError, ValueError) as e:
        raise RecognitionFailure(f'Unreadable image payload: {e}')


def image_to_bytes(image: Image.Image, format: str = 'PNG') -> bytes:
    buf = io.BytesIO()
    image.save(buf, format=format)
    return buf.getvalue()
