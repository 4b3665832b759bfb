"""TrOCR recognizer: load a handwriting model once per recognizer and run inference.

The recognition accuracy option picks the checkpoint:
- fast: TROCR_FAST_MODEL (default microsoft/trocr-base-handwritten)
- accurate: TROCR_ACCURATE_MODEL (default microsoft/trocr-large-handwritten)

torch and transformers are an optional extra (``pip install notestudy[trocr]``);
when they are missing the recognizer raises RecognitionFailure at load time.
"""
from __future__ import annotations

import os
import time
import threading
from typing import Any, Dict, List

from notestudy.errors import RecognitionFailure
from notestudy.ocr.base import RecognitionConfig, TextRecognizer, load_image
from notestudy.utils import get_logger

LOG = get_logger()

try:
    import torch
    from transformers import TrOCRProcessor, VisionEncoderDecoderModel
except ImportError:
    # Defer import errors until used; log on load
    torch = None
    TrOCRProcessor = None
    VisionEncoderDecoderModel = None

TROCR_MODELS = {
    'fast': os.getenv('TROCR_FAST_MODEL', 'microsoft/trocr-base-handwritten'),
    'accurate': os.getenv('TROCR_ACCURATE_MODEL', 'microsoft/trocr-large-handwritten'),
}


class TrOCRRecognizer(TextRecognizer):
    name = 'trocr'

    def __init__(self, config: RecognitionConfig = None):
        super().__init__(config)
        self._lock = threading.Lock()
        self._loaded: Dict[str, Any] = None

    def _load_model(self) -> Dict[str, Any]:
        start = time.time()
        model_name = TROCR_MODELS[self.config.accuracy]
        cache_dir = os.getenv('TRANSFORMERS_CACHE') or None
        device_hint = os.getenv('TROCR_DEVICE', 'auto')
        if torch is None:
            raise RecognitionFailure('torch or transformers not installed')
        try:
            device = 'cuda' if device_hint != 'cpu' and torch.cuda.is_available() else 'cpu'
            LOG.info('trocr_load_start', extra={'model': model_name, 'device': device})
            proc = TrOCRProcessor.from_pretrained(model_name, cache_dir=cache_dir)
            model = VisionEncoderDecoderModel.from_pretrained(model_name, cache_dir=cache_dir)
            model.to(torch.device(device))
            model.eval()
            load_ms = int((time.time() - start) * 1000)
            LOG.info('model_load', extra={'model': model_name, 'device': device, 'load_time_ms': load_ms})
            return {'model': model, 'processor': proc, 'device': device, 'model_name': model_name}
        except (OSError, RuntimeError, ValueError) as e:
            LOG.exception('trocr_model_load_failed', exc_info=True)
            raise RecognitionFailure(str(e))

    def _ensure_loaded(self) -> Dict[str, Any]:
        if self._loaded is not None:
            return self._loaded
        with self._lock:
            if self._loaded is None:
                self._loaded = self._load_model()
        return self._loaded

    def recognize_text(self, image: Any) -> List[str]:
        start = time.time()
        img = load_image(image)
        loaded = self._ensure_loaded()
        try:
            pixel_values = loaded['processor'](images=img, return_tensors='pt').pixel_values
            if loaded['device'] == 'cuda':
                pixel_values = pixel_values.to('cuda')
            max_len = int(os.getenv('TROCR_MAX_LENGTH', '512'))
            with torch.no_grad():
                generated = loaded['model'].generate(pixel_values, max_length=max_len)
            decoded = loaded['processor'].batch_decode(generated, skip_special_tokens=True)
        except (RuntimeError, ValueError) as e:
            LOG.exception('trocr_inference_failed', exc_info=True)
            raise RecognitionFailure(str(e))
        text = decoded[0] if decoded else ''
        dur = int((time.time() - start) * 1000)
        LOG.info('trocr_inference', extra={'model': loaded['model_name'], 'device': loaded['device'], 'duration_ms': dur, 'text_len': len(text)})
        return text.split('\n')
