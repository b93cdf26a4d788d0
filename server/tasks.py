"""
Background task processing for deck generation.
"""

import asyncio
import json
import traceback
from typing import Callable, Optional

from server.models import GenerationSettings
from server.store import DeckSession
from server.websocket_manager import ConnectionManager

from vedasmart import DeckPipeline
from vedasmart.models import GenerationState


def build_pipeline(settings: GenerationSettings) -> DeckPipeline:
    """Create a pipeline for one request. The HTML preview is served on demand."""
    return DeckPipeline(
        content_provider=settings.content_provider,
        image_delay=settings.image_delay,
        save_intermediate=False,
        generate_preview=False,
    )


def state_message(state: GenerationState) -> str:
    return json.dumps({
        "state": state.state.value,
        "progress": state.progress,
        "error": state.error,
        "warning": state.warning,
    })


async def generate_deck_task(
    session: DeckSession,
    settings: GenerationSettings,
    manager: ConnectionManager,
    pipeline_factory: Optional[Callable[[GenerationSettings], DeckPipeline]] = None,
):
    """
    Background task to generate a deck.

    Runs on the server's event loop and pushes every state change to
    WebSocket subscribers of the session.
    """
    print(f"\n[TASK] Starting generation for session_id={session.id}")
    pending = []

    def on_update(state: GenerationState) -> None:
        session.touch()
        pending.append(asyncio.ensure_future(manager.broadcast(session.id, state_message(state))))

    try:
        pipeline = (pipeline_factory or build_pipeline)(settings)
        await pipeline.generate(session.chapter, session.style, state=session.state, on_update=on_update)
    except Exception as e:
        # Pipeline construction failed (e.g. missing API key)
        print(f"[TASK] ✗ Generation FAILED: {e}")
        print(f"[TASK] Traceback:\n{traceback.format_exc()}")
        session.state.error = str(e)
        on_update(session.state)

    session.release_uploads()

    if session.state.error:
        print(f"[TASK] ✗ Generation ended with error: {session.state.error}")
    else:
        print(f"[TASK] ✓ Deck ready for session {session.id}")

    results = await asyncio.gather(*pending, return_exceptions=True)
    for result in results:
        if isinstance(result, Exception):
            print(f"[TASK] WebSocket broadcast failed (non-critical): {result}")
