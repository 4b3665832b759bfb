import os
import pytest
from pathlib import Path

from dotenv import load_dotenv

# load test env first
env_path = Path(__file__).resolve().parents[1] / '.env.test'
if env_path.exists():
    load_dotenv(env_path)

os.environ.setdefault('LOG_LEVEL', 'WARNING')
os.environ.setdefault('LOG_FORMAT', 'text')
# never reach the network for NLTK data during tests
os.environ.setdefault('NOTESTUDY_NLTK_AUTO_DOWNLOAD', 'false')


@pytest.fixture
def sample_image():
    from PIL import Image
    img = Image.new('RGB', (100, 100), color=(255, 255, 255))
    return img


@pytest.fixture
def sample_image_bytes(sample_image):
    from io import BytesIO
    buf = BytesIO()
    sample_image.save(buf, format='JPEG')
    buf.seek(0)
    return buf.getvalue()


@pytest.fixture
def tagger():
    from notestudy.extraction import SentenceTagger
    return SentenceTagger(auto_download=False)


@pytest.fixture
def settings():
    from notestudy.config import Settings
    return Settings(nltk_auto_download=False, note_timeout_seconds=10, max_concurrent_notes=4)


@pytest.fixture
def sample_note_text():
    """Recognized text of a biology page: three paragraphs, one line without a card."""
    return """Capital of France: Paris
Photosynthesis is the process plants use to convert light into energy

What is mitosis? Cell division.
The sky looked grey today.

Chlorophyll: green pigment that absorbs light"""
