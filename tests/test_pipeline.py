"""
Tests for the deck assembly pipeline.
"""

import json

import pytest

from conftest import (
    SAMPLE_DECK,
    FakeContentProvider,
    FakeImageProvider,
    RateLimitError,
    SleepRecorder,
)
from vedasmart.errors import GenerationError, InvalidResponseFormat, PreconditionFailure
from vedasmart.models import AppState, ContentSlide, DocumentPayload, GenerationState
from vedasmart.pipeline import FALLBACK_ERROR, IMAGE_WARNING, DeckPipeline


def make_pipeline(content=None, images=None, sleeper=None, **kwargs):
    return DeckPipeline(
        content_provider=content or FakeContentProvider(),
        image_provider=images or FakeImageProvider(),
        sleep=sleeper or SleepRecorder(),
        **kwargs,
    )


def prompt_of(slide_index):
    return SAMPLE_DECK["slides"][slide_index]["imagePrompt"]


@pytest.mark.asyncio
async def test_end_to_end_generation(chapter, sleeper):
    """1 TITLE + 6 CONTENT + 5 QUIZ, no style sample."""
    images = FakeImageProvider()
    content = FakeContentProvider()
    pipeline = make_pipeline(content, images, sleeper)

    state = await pipeline.generate(chapter)

    assert state.state == AppState.VIEWING_DECK
    assert state.progress == 100.0
    assert state.error is None
    assert state.warning is None
    assert content.calls == [(chapter, None)]

    deck = state.deck
    assert len(deck.slides) == 12
    assert [s.id for s in deck.slides] == [s["id"] for s in SAMPLE_DECK["slides"]]
    assert all(s.image_url.startswith("data:image/png;base64,") for s in deck.content_slides())

    # Six sequential requests, each preceded by the fixed delay
    assert [p for p, _ in images.calls] == [prompt_of(i) for i in range(1, 7)]
    assert all(subject == "Biology" for _, subject in images.calls)
    assert sleeper.delays == [0.8] * 6


@pytest.mark.asyncio
async def test_style_sample_forwarded(chapter, style_image):
    content = FakeContentProvider()
    await make_pipeline(content).generate(chapter, style_image)
    assert content.calls == [(chapter, style_image)]


@pytest.mark.asyncio
@pytest.mark.parametrize("failing_slides", [[2], [1, 4, 6], [1, 2, 3, 4, 5]])
async def test_partial_image_failure_is_not_fatal(chapter, failing_slides):
    images = FakeImageProvider(failing={prompt_of(i) for i in failing_slides})
    state = await make_pipeline(images=images).generate(chapter)

    assert state.state == AppState.VIEWING_DECK
    assert state.error is None
    assert state.warning == IMAGE_WARNING
    assert state.failed_images == len(failing_slides)

    deck = state.deck
    assert len(deck.slides) == 12
    with_image = [s for s in deck.content_slides() if s.image_url]
    assert len(with_image) == 6 - len(failing_slides)
    for i in failing_slides:
        assert deck.slides[i].image_url is None
        assert deck.slides[i].image_prompt


@pytest.mark.asyncio
async def test_image_rate_limit_retried_then_counted(chapter, sleeper):
    images = FakeImageProvider(failing={prompt_of(3)}, error_factory=RateLimitError)
    state = await make_pipeline(images=images, sleeper=sleeper).generate(chapter)

    # 1 attempt + 3 retries for the failing slide, 1 attempt for the others
    assert len(images.calls) == 5 + 4
    assert state.failed_images == 1
    assert state.warning == IMAGE_WARNING
    assert sleeper.delays.count(0.8) == 6
    assert [d for d in sleeper.delays if d != 0.8] == [1.0, 2.0, 4.0]


@pytest.mark.asyncio
async def test_slides_without_prompt_pass_through(chapter, deck_data):
    deck_data["slides"][2].pop("imagePrompt")
    images = FakeImageProvider()
    state = await make_pipeline(FakeContentProvider(deck_data), images).generate(chapter)

    assert len(images.calls) == 5
    assert state.deck.slides[2].image_url is None
    assert state.warning is None


@pytest.mark.asyncio
async def test_structure_failure_returns_to_idle(chapter):
    content = FakeContentProvider(errors=[InvalidResponseFormat()])
    images = FakeImageProvider()
    state = await make_pipeline(content, images).generate(chapter)

    assert state.state == AppState.IDLE
    assert state.error == "Invalid response format from AI"
    assert state.deck is None
    assert state.warning is None
    # Parse failures are not transient
    assert len(content.calls) == 1
    assert images.calls == []


@pytest.mark.asyncio
async def test_structure_failure_without_message_uses_fallback(chapter):
    content = FakeContentProvider(errors=[RuntimeError()])
    state = await make_pipeline(content).generate(chapter)
    assert state.error == FALLBACK_ERROR


@pytest.mark.asyncio
async def test_structure_rate_limit_retried(chapter, sleeper):
    content = FakeContentProvider(errors=[RateLimitError(), RateLimitError()])
    state = await make_pipeline(content, sleeper=sleeper).generate(chapter)

    assert state.state == AppState.VIEWING_DECK
    assert len(content.calls) == 3
    assert sleeper.delays[:2] == [1.0, 2.0]


@pytest.mark.asyncio
async def test_missing_chapter_is_precondition_failure():
    state = GenerationState()
    with pytest.raises(PreconditionFailure):
        await make_pipeline().generate(None, state=state)
    assert state.state == AppState.IDLE
    assert state.progress == 0.0


@pytest.mark.asyncio
async def test_upload_kinds_validated(chapter):
    word = DocumentPayload(data=b"doc", mime_type="application/msword")
    with pytest.raises(PreconditionFailure):
        await make_pipeline().generate(word)
    with pytest.raises(PreconditionFailure):
        await make_pipeline().generate(chapter, word)


@pytest.mark.asyncio
async def test_phase_boundary_and_progress_observable(chapter):
    snapshots = []

    def on_update(state):
        snapshots.append((state.state, state.progress, state.deck is not None))

    await make_pipeline().generate(chapter, on_update=on_update)

    states = [s for s, _, _ in snapshots]
    assert states[0] == AppState.UPLOADING
    assert AppState.GENERATING_CONTENT in states
    assert states[-1] == AppState.VIEWING_DECK

    # Deck is published on entering the image phase
    first_images = states.index(AppState.GENERATING_IMAGES)
    assert snapshots[first_images][2] is True
    assert snapshots[first_images][1] == 60.0

    progress = [p for _, p, _ in snapshots]
    assert progress == sorted(progress)
    assert max(p for s, p, _ in snapshots if s == AppState.GENERATING_IMAGES) <= 95.0
    assert progress[-1] == 100.0


@pytest.mark.asyncio
async def test_new_request_discards_previous_deck(chapter):
    state = GenerationState()
    pipeline = make_pipeline(FakeContentProvider(errors=[RuntimeError("boom")]))

    state.warning = "old warning"
    await pipeline.generate(chapter, state=state)
    assert state.error == "boom"

    await pipeline.generate(chapter, state=state)
    assert state.error is None
    assert state.warning is None
    assert state.state == AppState.VIEWING_DECK


@pytest.mark.asyncio
async def test_images_attached_in_place(chapter):
    """The published working deck is the one that receives the images."""
    published = []

    def on_update(state):
        if state.state == AppState.GENERATING_IMAGES and not published:
            published.append(state.deck)

    state = await make_pipeline().generate(chapter, on_update=on_update)
    assert published[0] is state.deck
    assert isinstance(published[0].slides[1], ContentSlide)
    assert published[0].slides[1].image_url


def test_process_writes_outputs(tmp_path):
    chapter_path = tmp_path / "life.pdf"
    chapter_path.write_bytes(b"%PDF-1.4 fake")
    progress = []

    pipeline = make_pipeline()
    result = pipeline.process(
        chapter_path,
        output_dir=tmp_path / "out",
        progress_callback=lambda p, phase: progress.append((p, phase)),
    )

    assert result["pptx"].name == "Life Processes_Vedantu_Official.pptx"
    assert result["pptx"].exists()
    assert result["deck"].name == "life.deck.json"
    assert result["preview"].exists()
    assert result["warning"] is None
    assert progress[-1] == (100.0, "VIEWING_DECK")

    saved = json.loads(result["deck"].read_text(encoding="utf-8"))
    assert saved["chapterTitle"] == "Life Processes"
    assert saved["slides"][1]["imageUrl"].startswith("data:image/png;base64,")


def test_process_raises_generation_error(tmp_path):
    chapter_path = tmp_path / "life.pdf"
    chapter_path.write_bytes(b"%PDF-1.4 fake")
    pipeline = make_pipeline(FakeContentProvider(errors=[InvalidResponseFormat()]))

    with pytest.raises(GenerationError, match="Invalid response format"):
        pipeline.process(chapter_path, output_dir=tmp_path / "out")
    assert not list((tmp_path / "out").glob("*.pptx"))


def test_process_missing_chapter(tmp_path):
    with pytest.raises(FileNotFoundError):
        make_pipeline().process(tmp_path / "missing.pdf")


def test_from_deck_json(tmp_path, deck):
    deck_path = tmp_path / "life.deck.json"
    deck_path.write_text(json.dumps(deck.to_dict()), encoding="utf-8")

    result = DeckPipeline.from_deck_json(deck_path, output_dir=tmp_path / "again")

    assert result["pptx"].exists()
    assert result["preview"].name == "life.preview.html"
