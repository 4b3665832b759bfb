"""AWS Textract recognizer with retry logic using tenacity.

Sends the note image to ``detect_document_text`` and returns its LINE blocks in
reading order. Where the vertical gap between two consecutive lines is larger
than TEXTRACT_PARAGRAPH_GAP times the median line height, an empty line is
inserted so paragraph structure survives into segmentation.

Raises RecognitionFailure on failures.
"""
from __future__ import annotations

import os
import time
import statistics
from typing import Any, Dict, List

from botocore.exceptions import BotoCoreError, ClientError
from botocore.config import Config
import boto3
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from notestudy.errors import RecognitionFailure
from notestudy.ocr.base import RecognitionConfig, TextRecognizer, image_to_bytes, load_image
from notestudy.utils import get_logger

LOG = get_logger()

AWS_TEXTRACT_ENABLED = os.getenv('AWS_TEXTRACT_ENABLED', 'true').lower() in ('1', 'true', 'yes')
AWS_TEXTRACT_MAX_PAGES = int(os.getenv('AWS_TEXTRACT_MAX_PAGES', '1'))
AWS_TEXTRACT_TIMEOUT = int(os.getenv('AWS_TEXTRACT_TIMEOUT', '60'))
AWS_TEXTRACT_RETRY_ATTEMPTS = int(os.getenv('AWS_TEXTRACT_RETRY_ATTEMPTS', '3'))
TEXTRACT_PARAGRAPH_GAP = float(os.getenv('TEXTRACT_PARAGRAPH_GAP', '1.5'))
TEXTRACT_MIN_CONFIDENCE = float(os.getenv('TEXTRACT_MIN_CONFIDENCE', '0'))


class TextractRecognizer(TextRecognizer):
    name = 'textract'

    def __init__(self, config: RecognitionConfig = None, client=None):
        super().__init__(config)
        self._enabled = AWS_TEXTRACT_ENABLED
        self._client = client
        if self._client is None:
            try:
                boto_config = Config(read_timeout=AWS_TEXTRACT_TIMEOUT, connect_timeout=AWS_TEXTRACT_TIMEOUT)
                self._client = boto3.client('textract', region_name=os.getenv('AWS_REGION'), config=boto_config)
            except (BotoCoreError, ClientError):
                LOG.exception('textract_client_init_failed', exc_info=True)
                self._client = None

    def is_enabled(self) -> bool:
        return self._enabled and self._client is not None

    def _parse_blocks(self, blocks: List[Dict[str, Any]]) -> List[str]:
        lines = []
        for b in blocks:
            if b.get('BlockType') != 'LINE':
                continue
            if float(b.get('Confidence', 100.0)) < TEXTRACT_MIN_CONFIDENCE:
                continue
            box = b.get('Geometry', {}).get('BoundingBox', {})
            lines.append((b.get('Text', '').strip(), box.get('Top'), box.get('Height')))

        heights = [h for _, top, h in lines if top is not None and h]
        if not heights:
            return [text for text, _, _ in lines]
        median_height = statistics.median(heights)

        out: List[str] = []
        prev_bottom = None
        for text, top, height in lines:
            if prev_bottom is not None and top is not None:
                if top - prev_bottom > TEXTRACT_PARAGRAPH_GAP * median_height:
                    out.append('')
            out.append(text)
            if top is not None and height is not None:
                prev_bottom = top + height
        return out

    @retry(stop=stop_after_attempt(AWS_TEXTRACT_RETRY_ATTEMPTS), wait=wait_exponential(multiplier=1, min=2, max=10), retry=retry_if_exception_type(ClientError), reraise=True)
    def _detect(self, data: bytes) -> Dict[str, Any]:
        return self._client.detect_document_text(Document={'Bytes': data})

    def recognize_text(self, image: Any) -> List[str]:
        start = time.time()
        if not self.is_enabled():
            raise RecognitionFailure('Textract not enabled or client unavailable')
        img = load_image(image)
        data = image_to_bytes(img)
        # Textract synchronous has limits; warn if large
        if len(data) > 5 * 1024 * 1024:
            LOG.warning('textract_large_payload', extra={'size_bytes': len(data)})
        try:
            resp = self._detect(data)
        except (BotoCoreError, ClientError) as e:
            LOG.exception('textract_client_error', exc_info=True)
            raise RecognitionFailure(str(e))
        pages = resp.get('DocumentMetadata', {}).get('Pages')
        if pages and pages > AWS_TEXTRACT_MAX_PAGES:
            LOG.warning('textract_page_count_exceeded', extra={'pages': pages, 'max_pages': AWS_TEXTRACT_MAX_PAGES})
            raise RecognitionFailure(f'page_count_exceeded: {pages} > {AWS_TEXTRACT_MAX_PAGES}')
        lines = self._parse_blocks(resp.get('Blocks', []))
        total_ms = int((time.time() - start) * 1000)
        LOG.info('textract_call', extra={'line_count': len(lines), 'duration_ms': total_ms})
        return lines
