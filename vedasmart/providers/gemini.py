"""
Gemini integration for deck structure and diagram generation.

Uses the google-genai SDK's async client. The content request carries an
explicit response schema, since a strict output schema is the only guard
against malformed generations.
"""

import base64
import os
from typing import List, Optional

from google import genai
from google.genai import types

from vedasmart.errors import NoImageGenerated
from vedasmart.models import ChapterContent, DocumentPayload
from vedasmart.providers.base import ContentProvider, ImageProvider
from vedasmart.providers.prompts import build_deck_prompt, parse_deck


def _string() -> types.Schema:
    return types.Schema(type=types.Type.STRING)


def build_deck_schema() -> types.Schema:
    """Response schema mirroring ChapterContent on the wire."""
    theme_fields = [
        "primaryColor",
        "secondaryColor",
        "textColor",
        "backgroundColor",
        "accentColor",
    ]
    quiz = types.Schema(
        type=types.Type.OBJECT,
        properties={
            "question": _string(),
            "options": types.Schema(type=types.Type.ARRAY, items=_string()),
            "correctAnswer": types.Schema(type=types.Type.INTEGER),
            "explanation": _string(),
        },
        required=["question", "options", "correctAnswer", "explanation"],
    )
    slide = types.Schema(
        type=types.Type.OBJECT,
        properties={
            "id": _string(),
            "type": types.Schema(type=types.Type.STRING, enum=["TITLE", "CONTENT", "QUIZ"]),
            "title": _string(),
            "content": _string(),
            "keyPoints": types.Schema(type=types.Type.ARRAY, items=_string()),
            "imagePrompt": _string(),
            "quizData": quiz,
        },
        required=["id", "type", "title"],
    )
    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "chapterTitle": _string(),
            "subject": _string(),
            "theme": types.Schema(
                type=types.Type.OBJECT,
                properties={name: _string() for name in theme_fields},
                required=theme_fields,
            ),
            "slides": types.Schema(type=types.Type.ARRAY, items=slide),
        },
        required=["chapterTitle", "subject", "slides", "theme"],
    )


def create_client(api_key: Optional[str] = None) -> genai.Client:
    """Create a Gemini client from GEMINI_API_KEY (or API_KEY)."""
    api_key = api_key or os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    if not api_key:
        raise ValueError(
            "Gemini API key required. Set GEMINI_API_KEY env var or pass api_key parameter."
        )
    return genai.Client(api_key=api_key)


class GeminiContentProvider(ContentProvider):
    """
    Generate the deck structure with a Gemini multimodal model.

    The chapter PDF, the instruction and the optional style sample are sent
    as inline parts, in that order.
    """

    DEFAULT_MODEL = "gemini-3-pro-preview"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        self.client = client or create_client(api_key)
        self.model = model or os.getenv("VEDASMART_CONTENT_MODEL", self.DEFAULT_MODEL)
        self.name = "gemini"

    def build_parts(
        self, chapter: DocumentPayload, style: Optional[DocumentPayload] = None
    ) -> List[types.Part]:
        parts = [
            types.Part.from_bytes(data=chapter.data, mime_type=chapter.mime_type),
            types.Part.from_text(text=build_deck_prompt(with_style=style is not None)),
        ]
        if style is not None:
            parts.append(types.Part.from_bytes(data=style.data, mime_type=style.mime_type))
        return parts

    async def generate_deck(
        self, chapter: DocumentPayload, style: Optional[DocumentPayload] = None
    ) -> ChapterContent:
        print(f"[Gemini] Requesting deck structure from {self.model}")

        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=self.build_parts(chapter, style),
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=build_deck_schema(),
            ),
        )

        deck = parse_deck(response.text)
        print(f"[Gemini] Received {len(deck.slides)} slides for '{deck.chapter_title}'")
        return deck


class GeminiImageProvider(ImageProvider):
    """Generate labelled 16:9 diagrams with a Gemini image model."""

    DEFAULT_MODEL = "gemini-2.5-flash-image"
    ASPECT_RATIO = "16:9"
    QUALIFIERS = (
        "Detailed, professional educational diagram, high-quality, clear labels, "
        "white background, suitable for Class 10 {subject} students."
    )

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        self.client = client or create_client(api_key)
        self.model = model or os.getenv("VEDASMART_IMAGE_MODEL", self.DEFAULT_MODEL)
        self.name = "gemini"

    def enhance_prompt(self, prompt: str, subject: str) -> str:
        return f"{prompt}. {self.QUALIFIERS.format(subject=subject)}"

    async def generate_image(self, prompt: str, subject: str) -> str:
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=self.enhance_prompt(prompt, subject),
            config=types.GenerateContentConfig(
                image_config=types.ImageConfig(aspect_ratio=self.ASPECT_RATIO),
            ),
        )

        candidates = response.candidates or []
        content = candidates[0].content if candidates else None
        for part in (content.parts if content and content.parts else []):
            if part.inline_data and part.inline_data.data:
                encoded = base64.b64encode(part.inline_data.data).decode("ascii")
                return f"data:image/png;base64,{encoded}"

        raise NoImageGenerated()
