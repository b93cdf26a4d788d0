"""
Claude-backed content provider.

Alternative to Gemini for the deck structure. Claude has no response
schema option, so the JSON shape is spelled out in the prompt and the
reply is validated on our side.
"""

import base64
import os
from typing import Any, Dict, List, Optional

from anthropic import AsyncAnthropic

from vedasmart.models import ChapterContent, DocumentPayload
from vedasmart.providers.base import ContentProvider
from vedasmart.providers.prompts import (
    DECK_JSON_SHAPE,
    build_deck_prompt,
    parse_deck,
    strip_code_fences,
)


class ClaudeContentProvider(ContentProvider):
    """Generate the deck structure with Claude's PDF and vision support."""

    SYSTEM_PROMPT = """You turn school textbook chapters into study slide decks.

Return valid JSON only. No extra text, no markdown code blocks, no explanations."""

    DEFAULT_MODEL = "claude-sonnet-4-5"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = 8192,
        client: Optional[AsyncAnthropic] = None,
    ):
        if client is None:
            api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
            if not api_key:
                raise ValueError(
                    "Anthropic API key required. Set ANTHROPIC_API_KEY env var or pass api_key parameter."
                )
            client = AsyncAnthropic(api_key=api_key)

        self.client = client
        self.model = model or os.getenv("VEDASMART_CLAUDE_MODEL", self.DEFAULT_MODEL)
        self.max_tokens = max_tokens
        self.name = "claude"

    @staticmethod
    def _attachment(payload: DocumentPayload) -> Dict[str, Any]:
        block_type = "image" if payload.is_image else "document"
        return {
            "type": block_type,
            "source": {
                "type": "base64",
                "media_type": payload.mime_type,
                "data": base64.b64encode(payload.data).decode("ascii"),
            },
        }

    def build_content(
        self, chapter: DocumentPayload, style: Optional[DocumentPayload] = None
    ) -> List[Dict[str, Any]]:
        prompt = build_deck_prompt(with_style=style is not None) + "\n" + DECK_JSON_SHAPE
        content = [self._attachment(chapter), {"type": "text", "text": prompt}]
        if style is not None:
            content.append(self._attachment(style))
        return content

    async def generate_deck(
        self, chapter: DocumentPayload, style: Optional[DocumentPayload] = None
    ) -> ChapterContent:
        print(f"[Claude] Requesting deck structure from {self.model}")

        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=self.SYSTEM_PROMPT,
            messages=[{"role": "user", "content": self.build_content(chapter, style)}],
        )

        response_text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        deck = parse_deck(strip_code_fences(response_text))
        print(f"[Claude] Received {len(deck.slides)} slides for '{deck.chapter_title}'")
        return deck
