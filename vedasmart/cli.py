"""
Command-line interface for VedaSmart.
"""

import os
import sys
import argparse
from pathlib import Path

from dotenv import load_dotenv

from vedasmart import __version__
from vedasmart.pipeline import DeckPipeline


def main() -> int:
    """Main CLI entry point."""
    load_dotenv()  # Load .env file if present

    parser = argparse.ArgumentParser(
        description="VedaSmart: Generate a branded study deck (PPTX) from a chapter PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage with Gemini
  vedasmart chapter.pdf

  # Match the look of an existing deck or poster
  vedasmart chapter.pdf --style sample.png

  # Use Claude for the deck structure
  vedasmart chapter.pdf --content-provider claude

  # Re-export from a saved deck JSON
  vedasmart --from-deck output/chapter/chapter.deck.json

  # Specify custom output directory
  vedasmart chapter.pdf --output ./my_output

Environment Variables:
  GEMINI_API_KEY              API key for Gemini (content and diagrams)
  ANTHROPIC_API_KEY           API key for Claude (--content-provider claude)
  VEDASMART_CONTENT_PROVIDER  Default content provider
  VEDASMART_CONTENT_MODEL     Gemini model for the deck structure
  VEDASMART_IMAGE_MODEL       Gemini model for diagrams
  OUTPUT_DIR                  Default output directory
        """,
    )

    parser.add_argument(
        "input",
        nargs="?",
        type=Path,
        help="Chapter PDF, or deck JSON with --from-deck",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"VedaSmart {__version__}",
    )

    parser.add_argument(
        "--style",
        "-s",
        type=Path,
        help="Style sample (PDF or image) to mimic",
    )

    parser.add_argument(
        "--content-provider",
        choices=["gemini", "claude"],
        default=os.getenv("VEDASMART_CONTENT_PROVIDER", "gemini"),
        help="Provider for the deck structure (default: gemini)",
    )

    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=Path(os.environ["OUTPUT_DIR"]) if os.getenv("OUTPUT_DIR") else None,
        help="Output directory (default: ./output/<pdf_name>)",
    )

    parser.add_argument(
        "--image-delay",
        type=float,
        default=0.8,
        help="Seconds to wait before each diagram request (default: 0.8)",
    )

    parser.add_argument(
        "--no-preview",
        action="store_true",
        help="Skip HTML preview generation",
    )

    parser.add_argument(
        "--no-intermediate",
        action="store_true",
        help="Don't save the intermediate deck JSON",
    )

    parser.add_argument(
        "--from-deck",
        action="store_true",
        help="Export from saved deck JSON instead of generating",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print tracebacks on failure",
    )

    args = parser.parse_args()

    # Validate input
    if not args.input:
        parser.print_help()
        return 1

    if not args.input.exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        return 1

    if args.style and not args.style.exists():
        print(f"Error: Style sample not found: {args.style}", file=sys.stderr)
        return 1

    try:
        if args.from_deck:
            DeckPipeline.from_deck_json(
                deck_path=args.input,
                output_dir=args.output,
                generate_preview=not args.no_preview,
            )
        else:
            pipeline = DeckPipeline(
                content_provider=args.content_provider,
                image_delay=args.image_delay,
                save_intermediate=not args.no_intermediate,
                generate_preview=not args.no_preview,
            )

            pipeline.process(
                chapter_path=args.input,
                style_path=args.style,
                output_dir=args.output,
                progress_callback=lambda p, phase: print(f"[{p:5.1f}%] {phase}"),
            )

        return 0

    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 130

    except Exception as e:
        print(f"\nError: {e}", file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
