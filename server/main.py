"""
Main FastAPI application.
"""

import os
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import quote

from dotenv import load_dotenv
from fastapi import BackgroundTasks, FastAPI, File, Form, HTTPException, UploadFile, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, Response

from server.models import DeckSessionResponse, GenerationSettings, SettingsRequest
from server.store import DeckSession, SessionStore
from server.tasks import generate_deck_task
from server.websocket_manager import ConnectionManager

from vedasmart.errors import ExportFailure, PreconditionFailure
from vedasmart.models import DocumentPayload
from vedasmart.pipeline import validate_uploads
from vedasmart.renderers import DeckExporter, PPTX_MIME_TYPE
from vedasmart.viewer import DeckPreviewGenerator


# Lifespan context manager
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    load_dotenv()
    app.state.store = SessionStore(on_evict=manager.close_session)
    yield
    # Shutdown
    app.state.store.sessions.clear()

app = FastAPI(
    title="VedaSmart API",
    description="Generate branded study decks from chapter PDFs",
    version="0.1.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# WebSocket connection manager
manager = ConnectionManager()


def get_session(session_id: str) -> DeckSession:
    session = app.state.store.get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Deck session not found")
    return session


def session_response(session: DeckSession) -> DeckSessionResponse:
    state = session.state
    return DeckSessionResponse(
        session_id=session.id,
        state=state.state.value,
        progress=state.progress,
        error=state.error,
        warning=state.warning,
        chapter_filename=session.chapter.filename,
        created_at=session.created_at.isoformat(),
        updated_at=session.updated_at.isoformat(),
        deck=state.deck.to_dict() if state.deck else None,
    )


def content_disposition(filename: str) -> str:
    """
    Attachment header safe for any chapter title.

    Headers are latin-1 on the wire, so non-ASCII names go in the RFC 5987
    ``filename*`` form, as Starlette's FileResponse does, with an ASCII
    ``filename`` fallback for older clients.
    """
    quoted = quote(filename)
    if quoted == filename:
        return f'attachment; filename="{filename}"'

    fallback = filename.encode("ascii", "ignore").decode("ascii")
    fallback = fallback.replace('"', "'").replace("\\", "-")
    return f"attachment; filename=\"{fallback}\"; filename*=utf-8''{quoted}"


async def read_upload(file: Optional[UploadFile]) -> Optional[DocumentPayload]:
    if file is None or not file.filename:
        return None
    return DocumentPayload(
        data=await file.read(),
        mime_type=file.content_type or "application/octet-stream",
        filename=file.filename,
    )


# --- API Endpoints ---

@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "VedaSmart API is running"}


@app.post("/api/decks", response_model=DeckSessionResponse)
async def create_deck(
    background_tasks: BackgroundTasks,
    chapter: UploadFile = File(...),
    style: Optional[UploadFile] = File(None),
    content_provider: str = Form(default=os.getenv("VEDASMART_CONTENT_PROVIDER", "gemini")),
    image_delay: float = Form(default=0.8),
):
    """
    Upload a chapter PDF (and optional style sample) and start generating.

    Kicks off background task and returns immediately.
    """
    chapter_payload = await read_upload(chapter)
    style_payload = await read_upload(style)

    try:
        validate_uploads(chapter_payload, style_payload)
        settings = GenerationSettings(content_provider=content_provider, image_delay=image_delay)
    except (PreconditionFailure, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    session = app.state.store.create(chapter_payload, style_payload)

    background_tasks.add_task(
        generate_deck_task,
        session=session,
        settings=settings,
        manager=manager,
    )

    return session_response(session)


@app.get("/api/decks/{session_id}", response_model=DeckSessionResponse)
async def get_deck(session_id: str):
    """Get generation state, progress and (once available) the deck."""
    return session_response(get_session(session_id))


@app.delete("/api/decks/{session_id}")
async def discard_deck(session_id: str):
    """Discard a session ("New Deck"). An in-flight generation is not cancelled."""
    if not app.state.store.discard(session_id):
        raise HTTPException(status_code=404, detail="Deck session not found")
    manager.close_session(session_id)
    return {"message": "Deck discarded"}


@app.get("/api/decks/{session_id}/export")
def export_deck(session_id: str):
    """
    Download the deck as PPTX.

    Plain ``def`` so FastAPI runs the python-pptx work in its threadpool
    instead of on the event loop driving generations.
    """
    session = get_session(session_id)

    if not session.state.is_ready:
        raise HTTPException(status_code=400, detail="Deck not ready")

    exporter = DeckExporter()
    try:
        data = exporter.export(session.state.deck)
    except ExportFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

    filename = exporter.filename_for(session.state.deck)
    return Response(
        content=data,
        media_type=PPTX_MIME_TYPE,
        headers={"Content-Disposition": content_disposition(filename)},
    )


@app.get("/api/decks/{session_id}/preview", response_class=HTMLResponse)
async def preview_deck(session_id: str):
    """HTML preview of the deck, available as soon as the structure arrives."""
    session = get_session(session_id)

    if session.state.deck is None:
        raise HTTPException(status_code=400, detail="Deck not generated yet")

    return HTMLResponse(DeckPreviewGenerator().render(session.state.deck))


@app.get("/api/settings")
async def get_settings():
    """Get current settings (masked API keys)."""
    return {
        "gemini_api_key": "****" if (os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")) else None,
        "anthropic_api_key": "****" if os.getenv("ANTHROPIC_API_KEY") else None,
        "default_content_provider": os.getenv("VEDASMART_CONTENT_PROVIDER", "gemini"),
    }


@app.post("/api/settings")
async def update_settings(settings: SettingsRequest):
    """Update settings (in-memory only)."""
    if settings.gemini_api_key:
        os.environ["GEMINI_API_KEY"] = settings.gemini_api_key

    if settings.anthropic_api_key:
        os.environ["ANTHROPIC_API_KEY"] = settings.anthropic_api_key

    if settings.default_content_provider:
        os.environ["VEDASMART_CONTENT_PROVIDER"] = settings.default_content_provider

    return {"message": "Settings updated"}


# --- WebSocket for real-time progress ---

@app.websocket("/ws/{session_id}")
async def websocket_endpoint(websocket: WebSocket, session_id: str):
    """
    WebSocket endpoint for real-time generation progress.
    """
    await manager.connect(session_id, websocket)

    try:
        while True:
            # Keep connection alive and receive any client messages
            data = await websocket.receive_text()

            # Echo back for heartbeat
            if data == "ping":
                await websocket.send_text("pong")

    except WebSocketDisconnect:
        manager.disconnect(session_id, websocket)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
