"""Shared test fixtures for music-catalog."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from music_catalog.core.codec import LyricsCodec
from music_catalog.core.config import Settings
from music_catalog.db.database import create_db_engine, get_session, init_db
from music_catalog.db.models import Artist, SongDetail
from music_catalog.main import create_app


@pytest.fixture
def engine():
    """In-memory SQLite engine with the schema created."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """TestClient whose requests use the in-memory database."""
    app = create_app(Settings(database_url="sqlite://"))

    def override_get_session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_session] = override_get_session
    return TestClient(app)


@pytest.fixture
def make_song(session):
    """Insert a song directly, bypassing the API. `text` is stored verbatim."""
    def _make(song_name, artist_name="Test Artist", text=None, verses=None, release_date=None):
        artist = session.query(Artist).filter_by(name=artist_name).first()
        if artist is None:
            artist = Artist(name=artist_name)
            session.add(artist)
            session.flush()
        if verses is not None:
            text = LyricsCodec.encode(verses)
        song = SongDetail(
            artist_id=artist.id,
            group_name=artist_name,
            song_name=song_name,
            text=text,
            release_date=release_date,
        )
        session.add(song)
        session.commit()
        return song

    return _make
