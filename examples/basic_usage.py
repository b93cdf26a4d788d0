"""
Basic usage example for VedaSmart.

This example shows how to turn a chapter PDF into a branded study deck
using the Python API.
"""

from pathlib import Path
from vedasmart import DeckPipeline


def main():
    # Initialize pipeline with default settings (Gemini for content and diagrams)
    pipeline = DeckPipeline(
        content_provider="gemini",  # Requires GEMINI_API_KEY
        image_delay=0.8,  # Pause before each diagram request
        generate_preview=True,  # Generate HTML preview
        save_intermediate=True,  # Save deck JSON
    )

    # Process the chapter
    chapter_path = Path("examples/life_processes.pdf")
    output_dir = Path("output/life_processes")

    result = pipeline.process(chapter_path=chapter_path, output_dir=output_dir)

    print("\n✓ Deck complete!")
    print(f"  PPTX: {result['pptx']}")
    print(f"  Deck JSON: {result['deck']}")
    print(f"  Preview HTML: {result['preview']}")
    if result["warning"]:
        print(f"  Warning: {result['warning']}")


if __name__ == "__main__":
    main()
