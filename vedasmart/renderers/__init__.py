"""
PPTX renderers for exporting generated decks.

Uses python-pptx for deterministic generation.
"""

from vedasmart.renderers.pptx_renderer import DeckExporter, PPTX_MIME_TYPE

__all__ = ["DeckExporter", "PPTX_MIME_TYPE"]
