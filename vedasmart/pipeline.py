"""
Main orchestration pipeline for VedaSmart.

Coordinates deck structure generation, per-slide diagram generation and
PPTX export.
"""

import asyncio
import json
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from vedasmart.errors import GenerationError, PreconditionFailure
from vedasmart.models import (
    AppState,
    ChapterContent,
    ContentSlide,
    DocumentPayload,
    GenerationState,
    QuizSlide,
    TitleSlide,
)
from vedasmart.providers import ContentProvider, ImageProvider, create_content_provider
from vedasmart.renderers import DeckExporter
from vedasmart.retry import DEFAULT_DELAY, DEFAULT_RETRIES, with_retry
from vedasmart.viewer import DeckPreviewGenerator

FALLBACK_ERROR = "An error occurred. Please try again later."
IMAGE_WARNING = "Some educational diagrams could not be generated due to rate limits."

# Progress checkpoints per phase
PROGRESS_UPLOADING = 10.0
PROGRESS_CONTENT = 30.0
PROGRESS_IMAGES = 60.0
PROGRESS_IMAGE_SPAN = 35.0
PROGRESS_IMAGE_CAP = 95.0
PROGRESS_DONE = 100.0

ProgressCallback = Callable[[float, str], None]


def validate_uploads(
    chapter: Optional[DocumentPayload], style: Optional[DocumentPayload] = None
) -> None:
    """
    Check upload kinds before any state changes.

    Raises:
        PreconditionFailure: Missing chapter, non-PDF chapter, or a style
            sample that is neither PDF nor image
    """
    if chapter is None:
        raise PreconditionFailure("Please upload a chapter PDF first.")
    if not chapter.is_pdf:
        raise PreconditionFailure("Please upload a PDF for the chapter content.")
    if style is not None and not (style.is_pdf or style.is_image):
        raise PreconditionFailure("Style sample must be a PDF or an image.")


class DeckPipeline:
    """
    End-to-end pipeline turning a chapter PDF into a themed deck.

    State machine (see AppState):
    1. IDLE -> UPLOADING -> GENERATING_CONTENT: fetch deck structure
    2. GENERATING_IMAGES: one diagram per CONTENT slide with a prompt,
       strictly sequential, with a fixed delay before each request
    3. VIEWING_DECK: done; failed diagrams only produce a warning

    A structure failure returns the session to IDLE with an error message.
    Image failures never abort the deck.
    """

    def __init__(
        self,
        content_provider: Union[str, ContentProvider] = "gemini",
        image_provider: Optional[ImageProvider] = None,
        image_delay: float = 0.8,
        max_retries: int = DEFAULT_RETRIES,
        retry_delay: float = DEFAULT_DELAY,
        save_intermediate: bool = True,
        generate_preview: bool = True,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """
        Initialize pipeline.

        Args:
            content_provider: "gemini", "claude", or a ContentProvider instance
            image_provider: ImageProvider instance (default: Gemini)
            image_delay: Seconds to wait before each image request
            max_retries: Retry budget for rate-limited provider calls
            retry_delay: Initial backoff in seconds, doubled per retry
            save_intermediate: Save the deck JSON next to the PPTX
            generate_preview: Write an HTML preview next to the PPTX
            sleep: Awaitable sleep, injectable for tests
        """
        if isinstance(content_provider, str):
            content_provider = create_content_provider(content_provider)
        if image_provider is None:
            from vedasmart.providers.gemini import GeminiImageProvider

            image_provider = GeminiImageProvider()

        self.content_provider = content_provider
        self.image_provider = image_provider
        self.image_delay = image_delay
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.save_intermediate = save_intermediate
        self.generate_preview = generate_preview
        self.sleep = sleep or asyncio.sleep

        self.exporter = DeckExporter()
        self.preview_generator = DeckPreviewGenerator() if generate_preview else None

    async def _call(self, fn):
        return await with_retry(
            fn, retries=self.max_retries, delay=self.retry_delay, sleep=self.sleep
        )

    async def generate(
        self,
        chapter: Optional[DocumentPayload],
        style: Optional[DocumentPayload] = None,
        state: Optional[GenerationState] = None,
        on_update: Optional[Callable[[GenerationState], None]] = None,
    ) -> GenerationState:
        """
        Run one generation request to completion or failure.

        Args:
            chapter: Chapter PDF (required)
            style: Optional style sample
            state: Caller-owned state; a fresh one is created if omitted
            on_update: Called after every state change

        Returns:
            The state, either VIEWING_DECK with a deck or IDLE with an error

        Raises:
            PreconditionFailure: Before any transition, if uploads are invalid
        """
        validate_uploads(chapter, style)

        state = state if state is not None else GenerationState()

        def update(**changes) -> None:
            for key, value in changes.items():
                setattr(state, key, value)
            if on_update:
                on_update(state)

        # A new request discards the previous deck entirely
        update(
            state=AppState.UPLOADING,
            progress=PROGRESS_UPLOADING,
            error=None,
            warning=None,
            deck=None,
            failed_images=0,
        )

        try:
            update(state=AppState.GENERATING_CONTENT, progress=PROGRESS_CONTENT)
            print(f"[Pipeline] Generating deck structure with {self.content_provider.name}")
            deck = await self._call(lambda: self.content_provider.generate_deck(chapter, style))

            update(deck=deck, state=AppState.GENERATING_IMAGES, progress=PROGRESS_IMAGES)
            failures = await self._generate_images(deck, state, update)

            warning = IMAGE_WARNING if failures > 0 else None
            update(
                failed_images=failures,
                warning=warning,
                state=AppState.VIEWING_DECK,
                progress=PROGRESS_DONE,
            )
            print(f"[Pipeline] Deck ready: {len(deck.slides)} slides, {failures} diagram(s) failed")

        except Exception as e:
            print(f"[Pipeline] Generation failed: {e}")
            update(
                state=AppState.IDLE,
                progress=0.0,
                error=str(e) or FALLBACK_ERROR,
                warning=None,
                deck=None,
            )

        return state

    async def _generate_images(self, deck: ChapterContent, state: GenerationState, update) -> int:
        """Attach diagrams in place, slide by slide. Returns the failure count."""
        total = len(deck.slides)
        step = PROGRESS_IMAGE_SPAN / total
        failures = 0

        for i, slide in enumerate(deck.slides):
            if isinstance(slide, ContentSlide):
                if slide.needs_image:
                    print(f"  → Generating diagram {i + 1}/{total}: {slide.title}")
                    await self.sleep(self.image_delay)
                    try:
                        slide.image_url = await self._call(
                            lambda: self.image_provider.generate_image(slide.image_prompt, deck.subject)
                        )
                    except Exception as e:
                        failures += 1
                        print(f"[Pipeline] Diagram failed for slide {slide.id}: {e}")
            elif isinstance(slide, (TitleSlide, QuizSlide)):
                pass
            else:
                raise TypeError(f"Unknown slide type: {type(slide).__name__}")

            update(progress=min(state.progress + step, PROGRESS_IMAGE_CAP))

        return failures

    def process(
        self,
        chapter_path: Path,
        style_path: Optional[Path] = None,
        output_dir: Optional[Path] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> dict:
        """
        Generate a deck from files on disk and export it.

        Args:
            chapter_path: Path to the chapter PDF
            style_path: Optional style sample (PDF or image)
            output_dir: Output directory (default: ./output/<pdf_name>)
            progress_callback: Called with (progress, phase name)

        Returns:
            Dictionary with paths to generated files:
            {
                "pptx": Path to PPTX file,
                "deck": Path to deck JSON (if enabled),
                "preview": Path to HTML preview (if enabled),
                "warning": Partial-failure warning or None
            }
        """
        chapter_path = Path(chapter_path)
        if not chapter_path.exists():
            raise FileNotFoundError(f"Chapter not found: {chapter_path}")

        if output_dir is None:
            output_dir = Path("output") / chapter_path.stem
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        chapter = DocumentPayload.from_path(chapter_path)
        style = DocumentPayload.from_path(style_path) if style_path else None

        print(f"\n{'='*60}")
        print(f"VedaSmart Pipeline")
        print(f"{'='*60}")
        print(f"Chapter: {chapter_path}")
        print(f"Style sample: {style_path or '-'}")
        print(f"Output: {output_dir}")
        print(f"Content provider: {self.content_provider.name}")
        print(f"{'='*60}\n")

        def on_update(s: GenerationState) -> None:
            if progress_callback:
                progress_callback(s.progress, s.state.value)

        state = asyncio.run(self.generate(chapter, style, on_update=on_update))
        if state.error:
            raise GenerationError(state.error)

        result = self._write_outputs(state.deck, output_dir, chapter_path.stem)
        result["warning"] = state.warning

        print(f"\n{'='*60}")
        print(f"✓ Pipeline Complete")
        print(f"{'='*60}")
        for key in ("pptx", "deck", "preview"):
            if result.get(key):
                print(f"{key}: {result[key]}")
        if state.warning:
            print(f"Warning: {state.warning}")
        print(f"{'='*60}\n")

        return result

    def _write_outputs(self, deck: ChapterContent, output_dir: Path, stem: str) -> dict:
        deck_path = None
        if self.save_intermediate:
            deck_path = output_dir / f"{stem}.deck.json"
            with open(deck_path, "w", encoding="utf-8") as f:
                json.dump(deck.to_dict(), f, indent=2, ensure_ascii=False)
            print(f"[Pipeline] Saved deck to {deck_path}")

        pptx_path = self.exporter.export_to_path(deck, output_dir)

        preview_path = None
        if self.preview_generator:
            preview_path = self.preview_generator.generate(deck, output_dir / f"{stem}.preview.html")

        return {"pptx": pptx_path, "deck": deck_path, "preview": preview_path}

    @classmethod
    def from_deck_json(
        cls,
        deck_path: Path,
        output_dir: Optional[Path] = None,
        generate_preview: bool = True,
    ) -> dict:
        """
        Re-export a saved deck JSON without calling any provider.

        Args:
            deck_path: Path to a ``.deck.json`` file
            output_dir: Output directory (default: next to the JSON)
            generate_preview: Also write the HTML preview

        Returns:
            Dictionary with paths to generated files
        """
        deck_path = Path(deck_path)
        if not deck_path.exists():
            raise FileNotFoundError(f"Deck not found: {deck_path}")

        with open(deck_path, "r", encoding="utf-8") as f:
            deck = ChapterContent.from_dict(json.load(f))

        output_dir = Path(output_dir) if output_dir else deck_path.parent
        output_dir.mkdir(parents=True, exist_ok=True)
        stem = deck_path.name.replace(".deck.json", "")

        print(f"[Pipeline] Re-exporting {deck_path} ({len(deck.slides)} slides)")

        pptx_path = DeckExporter().export_to_path(deck, output_dir)
        preview_path = None
        if generate_preview:
            preview_path = DeckPreviewGenerator().generate(deck, output_dir / f"{stem}.preview.html")

        return {"pptx": pptx_path, "preview": preview_path}
