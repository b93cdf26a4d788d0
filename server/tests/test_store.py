from datetime import datetime, timedelta

from server.store import DeckSession, SessionStore
from vedasmart.models import AppState, DocumentPayload


def payload():
    return DocumentPayload(data=b"%PDF-1.4 fake", mime_type="application/pdf", filename="chapter.pdf")


def aged(session, minutes):
    session.updated_at = datetime.utcnow() - timedelta(minutes=minutes)
    return session


def test_expired_sessions_evicted_on_create():
    evicted = []
    store = SessionStore(max_sessions=10, max_age_seconds=600, on_evict=evicted.append)
    old = aged(store.create(payload()), 30)
    recent = aged(store.create(payload()), 5)

    new = store.create(payload())

    assert store.get(old.id) is None
    assert store.get(recent.id) is recent
    assert store.get(new.id) is new
    assert evicted == [old.id]


def test_count_bound_drops_least_recently_updated():
    store = SessionStore(max_sessions=3, max_age_seconds=3600)
    a = aged(store.create(payload()), 3)
    b = aged(store.create(payload()), 1)
    c = aged(store.create(payload()), 2)

    d = store.create(payload())

    assert set(store.sessions) == {b.id, c.id, d.id}
    assert store.get(a.id) is None


def test_busy_sessions_never_evicted():
    store = SessionStore(max_sessions=1, max_age_seconds=60)
    busy = aged(store.create(payload()), 30)
    busy.state.state = AppState.GENERATING_IMAGES

    store.create(payload())

    assert store.get(busy.id) is busy
    assert len(store.sessions) == 2


def test_evict_returns_ids():
    store = SessionStore(max_sessions=10, max_age_seconds=60)
    old = aged(store.create(payload()), 5)
    assert store.evict() == [old.id]
    assert store.evict() == []


def test_release_uploads_keeps_filename():
    session = DeckSession(payload(), DocumentPayload(data=b"\x89PNG", mime_type="image/png"))
    session.release_uploads()

    assert session.chapter.data == b""
    assert session.chapter.filename == "chapter.pdf"
    assert session.style is None
