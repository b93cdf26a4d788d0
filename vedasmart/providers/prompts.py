"""
Generation instructions and response parsing shared by content providers.
"""

import json
from typing import Optional

from pydantic import ValidationError

from vedasmart.errors import InvalidResponseFormat
from vedasmart.models import ChapterContent


DECK_PROMPT = """
Analyze the provided Class 10 educational PDF chapter.
Create a comprehensive presentation deck structure suitable for Vedantu students.
The deck MUST be structured as follows:
1. Slide 0: A 'TITLE' type slide containing the chapter title and subject.
2. Slides 1 to 6: 'CONTENT' type slides explaining topics.
   - Each MUST have a detailed explanation.
   - Each MUST have an 'imagePrompt' that describes a highly detailed, LABELLED educational diagram or conceptual visual specific to that topic.
   - The imagePrompt should specify: "Create a clean, professional, textbook-style labelled diagram of [Topic]...".
3. Last 5 Slides: 'QUIZ' type slides. Each must contain 'quizData' with a question, 4 options, correctAnswer index, and explanation.

Ensure the language is student-friendly for Vedantu students.
"""

STYLE_PROMPT = """
CRITICAL: I have provided a "Style Sample". Mimic its visual hierarchy, tone, and complexity.
Identify primary branding colors and return them in the 'theme' object.
"""

# Spelled out for providers without native schema enforcement
DECK_JSON_SHAPE = """Output structure:
{
  "chapterTitle": "...",
  "subject": "...",
  "theme": {
    "primaryColor": "#RRGGBB",
    "secondaryColor": "#RRGGBB",
    "textColor": "#RRGGBB",
    "backgroundColor": "#RRGGBB",
    "accentColor": "#RRGGBB"
  },
  "slides": [
    {"id": "s0", "type": "TITLE", "title": "..."},
    {"id": "s1", "type": "CONTENT", "title": "...", "content": "...", "keyPoints": ["..."], "imagePrompt": "..."},
    {"id": "s7", "type": "QUIZ", "title": "...", "quizData": {"question": "...", "options": ["...", "...", "...", "..."], "correctAnswer": 0, "explanation": "..."}}
  ]
}

Output ONLY the JSON object. Do not include markdown formatting, code blocks, or explanatory text."""


def build_deck_prompt(with_style: bool) -> str:
    """Instruction text, with the style clause when a sample is attached."""
    prompt = DECK_PROMPT
    if with_style:
        prompt += STYLE_PROMPT
    return prompt


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` block if the model added one."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_deck(response_text: Optional[str]) -> ChapterContent:
    """
    Parse a provider response into a deck.

    Raises:
        InvalidResponseFormat: On malformed JSON or a schema mismatch
    """
    try:
        data = json.loads(response_text or "{}")
        return ChapterContent.from_dict(data)
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        print(f"[Provider] Error parsing deck response: {e}")
        raise InvalidResponseFormat() from e
