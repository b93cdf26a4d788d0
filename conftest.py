"""
Shared fixtures: sample decks and in-process fake providers.
"""

import base64
import copy
from io import BytesIO

import pytest
from PIL import Image

from vedasmart.errors import NoImageGenerated
from vedasmart.models import ChapterContent, DocumentPayload
from vedasmart.providers import ContentProvider, ImageProvider


def png_data_uri(color: str = "red", size=(32, 18)) -> str:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


SAMPLE_DECK = {
    "chapterTitle": "Life Processes",
    "subject": "Biology",
    "theme": {
        "primaryColor": "#F26B21",
        "secondaryColor": "#1E3A5F",
        "textColor": "#222222",
        "backgroundColor": "#FFFFFF",
        "accentColor": "#FFC107",
    },
    "slides": (
        [{"id": "s0", "type": "TITLE", "title": "Life Processes"}]
        + [
            {
                "id": f"s{i}",
                "type": "CONTENT",
                "title": f"Topic {i}",
                "content": f"Explanation of topic {i}.",
                "keyPoints": [f"Point {i}.1", f"Point {i}.2"],
                "imagePrompt": f"Create a clean, professional, textbook-style labelled diagram of topic {i}",
            }
            for i in range(1, 7)
        ]
        + [
            {
                "id": f"q{i}",
                "type": "QUIZ",
                "title": f"Question {i}",
                "quizData": {
                    "question": f"What is answer {i}?",
                    "options": ["Alpha", "Beta", "Gamma", "Delta"],
                    "correctAnswer": i % 4,
                    "explanation": f"Because of reason {i}.",
                },
            }
            for i in range(1, 6)
        ]
    ),
}


class FakeContentProvider(ContentProvider):
    """Returns a fresh copy of a deck, or raises the queued errors first."""

    def __init__(self, deck_data=None, errors=None):
        self.deck_data = deck_data or SAMPLE_DECK
        self.errors = list(errors or [])
        self.calls = []
        self.name = "fake"

    async def generate_deck(self, chapter, style=None):
        self.calls.append((chapter, style))
        if self.errors:
            raise self.errors.pop(0)
        return ChapterContent.from_dict(copy.deepcopy(self.deck_data))


class FakeImageProvider(ImageProvider):
    """Returns a PNG data URI unless the prompt is listed in ``failing``."""

    def __init__(self, failing=(), error_factory=None):
        self.failing = set(failing)
        self.error_factory = error_factory or (lambda: NoImageGenerated())
        self.calls = []
        self.name = "fake"

    async def generate_image(self, prompt, subject):
        self.calls.append((prompt, subject))
        if prompt in self.failing:
            raise self.error_factory()
        return png_data_uri()


class SleepRecorder:
    """Awaitable stand-in for asyncio.sleep that only records delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


class RateLimitError(Exception):
    """Mimics a provider SDK error carrying an HTTP status."""

    def __init__(self, message="429 RESOURCE_EXHAUSTED"):
        super().__init__(message)
        self.code = 429


@pytest.fixture
def deck_data():
    return copy.deepcopy(SAMPLE_DECK)


@pytest.fixture
def deck(deck_data):
    return ChapterContent.from_dict(deck_data)


@pytest.fixture
def chapter():
    return DocumentPayload(data=b"%PDF-1.4 fake", mime_type="application/pdf", filename="chapter.pdf")


@pytest.fixture
def style_image():
    return DocumentPayload(data=b"\x89PNG fake", mime_type="image/png", filename="style.png")


@pytest.fixture
def sleeper():
    return SleepRecorder()
