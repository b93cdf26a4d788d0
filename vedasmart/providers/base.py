"""
Base provider interfaces.
"""

from abc import ABC, abstractmethod
from typing import Optional

from vedasmart.models import ChapterContent, DocumentPayload


class ContentProvider(ABC):
    """Turns a chapter document into a deck description."""

    name: str = "content"

    @abstractmethod
    async def generate_deck(
        self, chapter: DocumentPayload, style: Optional[DocumentPayload] = None
    ) -> ChapterContent:
        """
        Generate the deck structure for a chapter.

        Args:
            chapter: The chapter PDF
            style: Optional style sample (PDF or image)

        Returns:
            Parsed deck, images not yet attached

        Raises:
            InvalidResponseFormat: If the response does not parse into a deck
        """
        pass


class ImageProvider(ABC):
    """Generates one diagram image per request."""

    name: str = "image"

    @abstractmethod
    async def generate_image(self, prompt: str, subject: str) -> str:
        """
        Generate a diagram for a content slide.

        Args:
            prompt: Free-text diagram description
            subject: Subject label used to pitch the diagram

        Returns:
            ``data:image/png;base64,...`` payload

        Raises:
            NoImageGenerated: If the response carries no image
        """
        pass
