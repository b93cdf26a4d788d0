"""
VedaSmart: Turn a textbook chapter PDF into a branded study deck.

An AI-driven pipeline: deck structure from a multimodal model, one labelled
diagram per content slide, and deterministic PPTX export with brand
watermarks.
"""

__version__ = "0.1.0"
__author__ = "VedaSmart Team"

from vedasmart.models import ChapterContent, ContentSlide, QuizSlide, Slide, TitleSlide
from vedasmart.pipeline import DeckPipeline

__all__ = [
    "ChapterContent",
    "Slide",
    "TitleSlide",
    "ContentSlide",
    "QuizSlide",
    "DeckPipeline",
]
