from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from music_catalog.core.normalizer import NameNormalizer

# Canonical date format is ISO (YYYY-MM-DD); dotted input is still accepted on update
UPDATE_DATE_FORMATS = ("%Y-%m-%d", "%Y.%m.%d")


def parse_release_date(value) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    for fmt in UPDATE_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"invalid release date {text!r}, expected YYYY-MM-DD or YYYY.MM.DD")


class InfoResponse(BaseModel):
    title: str
    version: str


class SongText(BaseModel):
    verses: List[str] = Field(default_factory=list)


class SongCreate(BaseModel):
    group: str = Field(..., description="Artist (group) name")
    song: str = Field(..., description="Song name")

    @field_validator("group")
    @classmethod
    def _normalize_group(cls, value: str) -> str:
        value = NameNormalizer.normalize(value)
        if not value:
            raise ValueError("artist name cannot be empty")
        return value

    @field_validator("song")
    @classmethod
    def _normalize_song(cls, value: str) -> str:
        value = NameNormalizer.normalize(value)
        if not value:
            raise ValueError("song name cannot be empty")
        return value


class SongOut(BaseModel):
    id: int
    artist_id: int
    group_name: str
    song_name: str
    release_date: Optional[date] = None
    group_link: Optional[str] = None
    text: SongText = Field(default_factory=SongText)
    created_at: Optional[datetime] = None


class SongsResponse(BaseModel):
    total_items: int
    page: int
    limit: int
    songs: List[SongOut]


class SongUpdate(BaseModel):
    """Partial update. Empty or missing fields are left unchanged."""
    song_name: Optional[str] = None
    artist_name: Optional[str] = None
    group_link: Optional[str] = None
    release_date: Optional[date] = None
    text: Optional[SongText] = None

    model_config = ConfigDict(extra='forbid')

    @field_validator("song_name", "artist_name", "group_link")
    @classmethod
    def _normalize_names(cls, value: Optional[str]) -> Optional[str]:
        return NameNormalizer.normalize(value) or None

    @field_validator("release_date", mode="before")
    @classmethod
    def _parse_release_date(cls, value):
        return parse_release_date(value)

    def has_changes(self) -> bool:
        return bool(
            self.song_name
            or self.artist_name
            or self.group_link
            or self.release_date
            or (self.text and self.text.verses)
        )


class SongUpdateResponse(BaseModel):
    artist_name: str
    song_name: str
    release_date: Optional[date] = None
    group_link: Optional[str] = None
    text: SongText


class PaginatedLyricsResponse(BaseModel):
    song_name: str
    verse_page: int
    verse_limit: int
    total_verses: int
    verses: List[str]
