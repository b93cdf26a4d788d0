"""
Core data models for VedaSmart.

Defines the Deck (ChapterContent) JSON schema using Pydantic for validation.
Wire format is camelCase, exactly as the content provider returns it.
"""

import mimetypes
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


QUIZ_OPTION_COUNT = 4


class DeckModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ThemeConfig(DeckModel):
    """Five-color palette applied across viewing and export. All fields required."""

    primary_color: str
    secondary_color: str
    text_color: str
    background_color: str
    accent_color: str


class TitleSlide(DeckModel):
    """Opening slide. Subject is tracked on the deck, not here."""

    type: Literal["TITLE"] = "TITLE"
    id: str
    title: str


class ContentSlide(DeckModel):
    """Explanatory slide with an optional generated diagram."""

    type: Literal["CONTENT"] = "CONTENT"
    id: str
    title: str
    content: str = ""
    key_points: List[str] = Field(default_factory=list)
    image_prompt: Optional[str] = None
    image_url: Optional[str] = Field(
        None, description="data:image/png;base64 payload, absent until generation succeeds"
    )

    @property
    def needs_image(self) -> bool:
        return bool(self.image_prompt)


class QuizData(DeckModel):
    """A 4-option multiple choice question."""

    question: str
    options: List[str]
    correct_answer: int
    explanation: str

    @field_validator("options")
    @classmethod
    def validate_options(cls, v: List[str]) -> List[str]:
        if len(v) != QUIZ_OPTION_COUNT:
            raise ValueError(f"Quiz must have exactly {QUIZ_OPTION_COUNT} options, got {len(v)}")
        return v

    @model_validator(mode="after")
    def validate_correct_answer(self) -> "QuizData":
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError(f"correctAnswer out of range: {self.correct_answer}")
        return self


class QuizSlide(DeckModel):
    """Closing quiz slide."""

    type: Literal["QUIZ"] = "QUIZ"
    id: str
    title: str
    quiz_data: QuizData


Slide = Annotated[Union[TitleSlide, ContentSlide, QuizSlide], Field(discriminator="type")]


class ChapterContent(DeckModel):
    """
    The complete generated deck.

    Providers are trusted to return one TITLE slide, then CONTENT slides,
    then QUIZ slides; only non-emptiness is enforced here.
    """

    chapter_title: str
    subject: str
    theme: ThemeConfig
    slides: List[Slide] = Field(..., min_length=1)

    def content_slides(self) -> List[ContentSlide]:
        return [s for s in self.slides if isinstance(s, ContentSlide)]

    def to_dict(self) -> Dict[str, Any]:
        """Export to dict for JSON serialization."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChapterContent":
        """Load from dict."""
        return cls.model_validate(data)


# --- Uploads ---

CHAPTER_MIME_TYPE = "application/pdf"


class DocumentPayload(BaseModel):
    """Raw uploaded bytes plus their media type."""

    data: bytes
    mime_type: str
    filename: Optional[str] = None

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == CHAPTER_MIME_TYPE

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @classmethod
    def from_path(cls, path: Path) -> "DocumentPayload":
        path = Path(path)
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(data=path.read_bytes(), mime_type=mime_type, filename=path.name)


# --- Generation lifecycle ---


class AppState(str, Enum):
    """User-facing generation states."""

    IDLE = "IDLE"
    UPLOADING = "UPLOADING"
    GENERATING_CONTENT = "GENERATING_CONTENT"
    GENERATING_IMAGES = "GENERATING_IMAGES"
    VIEWING_DECK = "VIEWING_DECK"


class GenerationState(BaseModel):
    """
    Lifecycle of one generation session.

    Owned by the caller and passed into the pipeline, which drives the
    transitions. ``deck`` is published as soon as the structure arrives,
    so it can be observed before images finish.
    """

    state: AppState = AppState.IDLE
    progress: float = Field(default=0.0, ge=0.0, le=100.0)
    error: Optional[str] = None
    warning: Optional[str] = None
    deck: Optional[ChapterContent] = None
    failed_images: int = 0

    @property
    def is_busy(self) -> bool:
        return self.state not in (AppState.IDLE, AppState.VIEWING_DECK)

    @property
    def is_ready(self) -> bool:
        return self.state == AppState.VIEWING_DECK and self.deck is not None

    def dismiss_error(self) -> None:
        self.error = None

    def dismiss_warning(self) -> None:
        self.warning = None
