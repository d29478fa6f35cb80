from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
import logging

from music_catalog.db.database import get_session
from music_catalog.schemas.models import (
    PaginatedLyricsResponse,
    SongCreate,
    SongOut,
    SongsResponse,
    SongUpdate,
    SongUpdateResponse,
)
from music_catalog.services.song_service import SongService

router = APIRouter(tags=["songs"])
logger = logging.getLogger(__name__)

# Dependency Injection for Service
def get_song_service(session: Session = Depends(get_session)) -> SongService:
    return SongService(session)

# Handlers are sync: FastAPI runs them in its thread pool next to the blocking DB calls.

@router.get("/songs", response_model=SongsResponse, summary="List songs")
def list_songs(
    field: Optional[str] = Query(None, description="Filter field: song_name, artist_name or release_date"),
    value: Optional[str] = Query(None, description="Filter value (release_date as YYYY-MM-DD)"),
    limit: Optional[str] = Query(None, description="Songs per page (default 10)"),
    page: Optional[str] = Query(None, description="Page number (default 1)"),
    service: SongService = Depends(get_song_service),
):
    """
    Lists songs with optional filtering and pagination.
    An unknown filter field is rejected; an unparseable release date is ignored.
    """
    logger.info(f"Handling list songs request: field={field!r} value={value!r}")
    return service.list_songs(field=field, value=value, limit=limit, page=page)


@router.post(
    "/songs",
    response_model=SongOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add a song",
)
def add_song(
    data: SongCreate,
    service: SongService = Depends(get_song_service),
):
    """
    Adds a song for an artist. The artist is created if it does not exist yet.
    """
    logger.info(f"Received add song request for: {data.song} - {data.group}")
    return service.add_song(data)


@router.put("/songs/{song_name}", response_model=SongUpdateResponse, summary="Update a song")
def update_song(
    song_name: str,
    data: SongUpdate,
    service: SongService = Depends(get_song_service),
):
    """
    Updates an existing song by name. Fields that are missing or empty stay unchanged.
    """
    logger.info(f"Received update request for: {song_name}")
    return service.update_song(song_name, data)


@router.delete("/songs/{song_name}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a song")
def delete_song(
    song_name: str,
    service: SongService = Depends(get_song_service),
):
    logger.info(f"Received delete request for: {song_name}")
    service.delete_song(song_name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/songs/{song_name}/lyrics",
    response_model=PaginatedLyricsResponse,
    summary="Get song lyrics by verse pages",
)
def get_song_lyrics(
    song_name: str,
    verse_page: Optional[str] = Query(None, description="Verse page number (default 1)"),
    verse_limit: Optional[str] = Query(None, description="Verses per page (default 3)"),
    service: SongService = Depends(get_song_service),
):
    """
    Returns one page of the song's verses.
    """
    logger.info(f"Received lyrics request for: {song_name}")
    return service.get_lyrics(song_name, verse_page=verse_page, verse_limit=verse_limit)
