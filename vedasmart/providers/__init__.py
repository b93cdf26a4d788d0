"""
External content and image providers.

Supports multiple backends for the deck structure:
- Gemini (primary, schema-enforced)
- Claude (alternative)

Diagrams are always generated with Gemini.
"""

from vedasmart.providers.base import ContentProvider, ImageProvider

__all__ = ["ContentProvider", "ImageProvider", "create_content_provider"]


def create_content_provider(name: str = "gemini", **kwargs) -> ContentProvider:
    """Instantiate a content provider by name."""
    if name == "gemini":
        from vedasmart.providers.gemini import GeminiContentProvider

        return GeminiContentProvider(**kwargs)
    elif name == "claude":
        from vedasmart.providers.claude import ClaudeContentProvider

        return ClaudeContentProvider(**kwargs)
    raise ValueError(f"Unknown content provider: {name}")
