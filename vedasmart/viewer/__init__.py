"""
Interactive viewing of generated decks.

Holds per-session navigation and quiz state, and renders a static HTML
preview of a deck.
"""

from vedasmart.viewer.html_generator import DeckPreviewGenerator
from vedasmart.viewer.session import DeckViewer

__all__ = ["DeckPreviewGenerator", "DeckViewer"]
