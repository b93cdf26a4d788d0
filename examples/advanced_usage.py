"""
Advanced usage examples for VedaSmart.

Shows how to:
- Use Claude for the deck structure
- Pass a style sample
- Re-export from a saved deck JSON
- Drive the async pipeline and the viewer directly
"""

import asyncio
from pathlib import Path

from vedasmart import DeckPipeline
from vedasmart.models import DocumentPayload
from vedasmart.viewer import DeckViewer


def example_with_claude():
    """Use Claude for the deck structure (diagrams still use Gemini)."""
    print("\n[Example 1] Using Claude for content")

    pipeline = DeckPipeline(content_provider="claude")

    result = pipeline.process(
        chapter_path=Path("examples/life_processes.pdf"),
        output_dir=Path("output/life_processes_claude"),
    )

    print(f"✓ PPTX: {result['pptx']}")


def example_with_style_sample():
    """Mimic the look of an existing poster or deck."""
    print("\n[Example 2] With style sample")

    pipeline = DeckPipeline(image_delay=1.5)

    result = pipeline.process(
        chapter_path=Path("examples/life_processes.pdf"),
        style_path=Path("examples/brand_poster.png"),
        output_dir=Path("output/life_processes_styled"),
        progress_callback=lambda progress, phase: print(f"  {phase}: {progress:.0f}%"),
    )

    print(f"✓ PPTX: {result['pptx']}")


def example_reexport_from_deck():
    """Re-export a saved deck JSON without calling any provider."""
    print("\n[Example 3] Re-export from deck JSON")

    result = DeckPipeline.from_deck_json(
        deck_path=Path("output/life_processes/life_processes.deck.json"),
        output_dir=Path("output/life_processes_reexported"),
    )

    print(f"✓ PPTX: {result['pptx']}")


def example_interactive_session():
    """Generate in-process, then walk the deck and answer a quiz."""
    print("\n[Example 4] Interactive session")

    pipeline = DeckPipeline()
    chapter = DocumentPayload.from_path(Path("examples/life_processes.pdf"))

    state = asyncio.run(pipeline.generate(chapter))
    if state.error:
        print(f"  ✗ Error: {state.error}")
        return

    viewer = DeckViewer(state.deck)
    while not viewer.is_last:
        viewer.next_slide()
        slide = viewer.current_slide
        if slide.type == "QUIZ":
            viewer.select_answer(slide.id, 0)
            print(f"  {slide.title}: {viewer.option_states(slide.id)}")

    output_path = Path("output") / viewer.export_filename
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(viewer.export())
    print(f"✓ PPTX: {output_path}")


if __name__ == "__main__":
    # Run examples
    # example_with_claude()
    # example_with_style_sample()
    # example_reexport_from_deck()
    # example_interactive_session()

    print("\nUncomment the example you want to run in advanced_usage.py")
