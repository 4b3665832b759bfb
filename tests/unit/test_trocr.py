import contextlib
from types import SimpleNamespace

import pytest

import notestudy.ocr.trocr as trocr_mod
from notestudy.errors import RecognitionFailure
from notestudy.ocr import RecognitionConfig
from notestudy.ocr.trocr import TROCR_MODELS, TrOCRRecognizer


class FakeProcessor:
    loaded = []

    @classmethod
    def from_pretrained(cls, name, cache_dir=None):
        cls.loaded.append(name)
        return cls()

    def __call__(self, images=None, return_tensors=None):
        return SimpleNamespace(pixel_values='pixels')

    def batch_decode(self, generated, skip_special_tokens=True):
        return ['Capital of France: Paris\nMitosis is cell division']


class FakeModel:
    @classmethod
    def from_pretrained(cls, name, cache_dir=None):
        return cls()

    def to(self, device):
        return self

    def eval(self):
        return self

    def generate(self, pixel_values, max_length=None):
        assert pixel_values == 'pixels'
        return ['ids']


@pytest.fixture
def fake_torch(monkeypatch):
    FakeProcessor.loaded = []
    torch = SimpleNamespace(
        cuda=SimpleNamespace(is_available=lambda: False),
        device=lambda name: name,
        no_grad=contextlib.nullcontext,
    )
    monkeypatch.setattr(trocr_mod, 'torch', torch)
    monkeypatch.setattr(trocr_mod, 'TrOCRProcessor', FakeProcessor)
    monkeypatch.setattr(trocr_mod, 'VisionEncoderDecoderModel', FakeModel)
    return torch


def test_trocr_without_torch(monkeypatch, sample_image):
    monkeypatch.setattr(trocr_mod, 'torch', None)
    r = TrOCRRecognizer()
    with pytest.raises(RecognitionFailure):
        r.recognize_text(sample_image)


def test_trocr_recognizes_lines(fake_torch, sample_image):
    r = TrOCRRecognizer()
    assert r.recognize_text(sample_image) == ['Capital of France: Paris', 'Mitosis is cell division']
    assert FakeProcessor.loaded == [TROCR_MODELS['accurate']]


def test_trocr_fast_uses_smaller_model(fake_torch, sample_image):
    r = TrOCRRecognizer(RecognitionConfig(accuracy='fast'))
    r.recognize_text(sample_image)
    assert FakeProcessor.loaded == [TROCR_MODELS['fast']]


def test_trocr_loads_model_once(fake_torch, sample_image):
    r = TrOCRRecognizer()
    r.recognize_text(sample_image)
    r.recognize_text(sample_image)
    assert len(FakeProcessor.loaded) == 1


def test_trocr_rejects_missing_image(fake_torch):
    with pytest.raises(RecognitionFailure):
        TrOCRRecognizer().recognize_text(None)
