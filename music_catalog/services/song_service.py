import logging
from typing import Optional, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from music_catalog.core.codec import LyricsCodec
from music_catalog.core.errors import ConflictError, NotFoundError, ValidationError
from music_catalog.core.filters import FilterKind, FilterQueryBuilder, FilterSpec
from music_catalog.core.normalizer import NameNormalizer
from music_catalog.core.pagination import (
    DEFAULT_PAGE,
    DEFAULT_SONGS_LIMIT,
    DEFAULT_VERSE_LIMIT,
    coerce_positive,
    paginate,
)
from music_catalog.db.models import Artist, SongDetail
from music_catalog.schemas.models import (
    PaginatedLyricsResponse,
    SongCreate,
    SongOut,
    SongsResponse,
    SongText,
    SongUpdate,
    SongUpdateResponse,
)

logger = logging.getLogger(__name__)


def apply_filter(stmt: Select, spec: Optional[FilterSpec]) -> Select:
    """Translate a FilterSpec into a WHERE clause (and join) on a SongDetail select."""
    if spec is None:
        return stmt

    if spec.kind is FilterKind.ILIKE:
        return stmt.where(SongDetail.song_name.ilike(spec.value))
    if spec.kind is FilterKind.CONTAINS:
        return stmt.join(Artist, Artist.id == SongDetail.artist_id).where(
            Artist.name.ilike(f"%{spec.value}%")
        )
    if spec.kind is FilterKind.DATE_EQUALS:
        return stmt.where(SongDetail.release_date == spec.value)

    raise ValueError(f"Unsupported filter kind: {spec.kind}")


def to_song_out(song: SongDetail) -> SongOut:
    return SongOut(
        id=song.id,
        artist_id=song.artist_id,
        group_name=song.group_name,
        song_name=song.song_name,
        release_date=song.release_date,
        group_link=song.group_link,
        text=SongText(verses=LyricsCodec.decode(song.text)),
        created_at=song.created_at,
    )


class SongService:
    """
    Catalog operations over one database session.
    Coordinators:
    - Names -> NameNormalizer
    - Listing filters -> FilterQueryBuilder
    - Stored lyrics -> LyricsCodec
    - Paging of records and verses -> pagination.paginate
    """

    def __init__(self, session: Session):
        self.session = session

    def _find_song(self, song_name: str) -> SongDetail:
        name = NameNormalizer.normalize(song_name)
        song = self.session.scalars(
            select(SongDetail).where(SongDetail.song_name == name).order_by(SongDetail.id).limit(1)
        ).first()
        if song is None:
            raise NotFoundError(f"Song not found: {name}")
        return song

    def _find_artist(self, name: str) -> Optional[Artist]:
        return self.session.scalars(select(Artist).where(Artist.name == name)).first()

    def find_or_create_artist(self, name: str) -> Tuple[Artist, bool]:
        """
        Return the artist with this name, creating it when missing.

        Two requests creating the same new artist race on the unique name
        constraint; the loser rolls back and reads the winner's row.

        Returns:
            (artist, created)
        """
        name = NameNormalizer.normalize(name)
        artist = self._find_artist(name)
        if artist is not None:
            logger.debug(f"Artist found: {name} (id={artist.id})")
            return artist, False

        logger.debug(f"Artist not found, creating new artist: {name}")
        artist = Artist(name=name)
        self.session.add(artist)
        try:
            self.session.flush()
        except IntegrityError:
            self.session.rollback()
            artist = self._find_artist(name)
            if artist is None:
                raise
            logger.info(f"Artist {name} was created concurrently, reusing id={artist.id}")
            return artist, False

        logger.info(f"New artist created: {name} (id={artist.id})")
        return artist, True

    def list_songs(
        self,
        field: Optional[str] = None,
        value: Optional[str] = None,
        limit=None,
        page=None,
    ) -> SongsResponse:
        """
        Filtered, paginated listing.

        Raises:
            InvalidFilterFieldError: Unknown filter field.
            PageOutOfRangeError: Page starts past the matching songs.
        """
        limit = coerce_positive(limit, DEFAULT_SONGS_LIMIT)
        page = coerce_positive(page, DEFAULT_PAGE)
        logger.debug(f"Listing songs: field={field!r} value={value!r} limit={limit} page={page}")

        spec = FilterQueryBuilder.build(field, value)
        stmt = apply_filter(select(SongDetail), spec)

        total = self.session.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        window = paginate(total, page, limit)

        songs = self.session.scalars(
            stmt.order_by(SongDetail.id).offset(window.start).limit(window.end - window.start)
        ).all()
        logger.debug(f"Fetched {len(songs)} of {total} matching songs")

        return SongsResponse(
            total_items=total,
            page=page,
            limit=limit,
            songs=[to_song_out(s) for s in songs],
        )

    def add_song(self, data: SongCreate) -> SongOut:
        """
        Create a song, creating its artist first if needed.

        Raises:
            ConflictError: The artist already has a song with this name.
        """
        song_name = NameNormalizer.normalize(data.song)
        artist, _ = self.find_or_create_artist(data.group)

        existing = self.session.scalars(
            select(SongDetail).where(
                SongDetail.song_name == song_name, SongDetail.artist_id == artist.id
            )
        ).first()
        group_name = artist.name
        if existing is not None:
            self.session.rollback()
            raise ConflictError(f"Song already exists: {group_name} - {song_name}")

        song = SongDetail(artist_id=artist.id, song_name=song_name, group_name=group_name)
        self.session.add(song)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError(f"Song already exists: {group_name} - {song_name}")

        self.session.refresh(song)
        logger.info(f"New song added: {song.group_name} - {song.song_name} (id={song.id})")
        return to_song_out(song)

    def update_song(self, song_name: str, data: SongUpdate) -> SongUpdateResponse:
        """
        Apply the non-empty fields of `data` to the song.

        Raises:
            NotFoundError: Song, or the requested artist, does not exist.
            ValidationError: Nothing to update.
            ConflictError: The new name clashes with another song of the artist.
        """
        song = self._find_song(song_name)

        if not data.has_changes():
            raise ValidationError("No fields to update")

        if data.artist_name:
            artist = self._find_artist(data.artist_name)
            if artist is None:
                raise NotFoundError(f"Artist not found: {data.artist_name}")
            song.artist_id = artist.id
            song.group_name = artist.name
            logger.debug(f"Artist updated: id={artist.id}")

        if data.song_name:
            song.song_name = data.song_name
            logger.debug(f"Song name updated: {data.song_name}")

        if data.release_date:
            song.release_date = data.release_date
            logger.debug(f"Release date updated: {data.release_date}")

        if data.group_link:
            song.group_link = data.group_link
            logger.debug(f"Group link updated: {data.group_link}")

        if data.text and data.text.verses:
            song.text = LyricsCodec.encode(data.text.verses)
            logger.debug(f"Song text updated: {len(data.text.verses)} verses")

        # rollback expires the song, so the names for error messages are read now
        group_name, new_name = song.group_name, song.song_name

        clash = None
        if data.artist_name or data.song_name:
            # pending changes would hit the unique constraint before the check runs
            with self.session.no_autoflush:
                clash = self.session.scalars(
                    select(SongDetail).where(
                        SongDetail.artist_id == song.artist_id,
                        SongDetail.song_name == new_name,
                        SongDetail.id != song.id,
                    )
                ).first()
        if clash is not None:
            self.session.rollback()
            raise ConflictError(f"Song already exists: {group_name} - {new_name}")

        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError(f"Song already exists: {group_name} - {new_name}")

        logger.info(f"Song updated successfully: {song.group_name} - {song.song_name}")
        return SongUpdateResponse(
            artist_name=song.group_name,
            song_name=song.song_name,
            release_date=song.release_date,
            group_link=song.group_link,
            text=SongText(verses=LyricsCodec.decode(song.text)),
        )

    def delete_song(self, song_name: str) -> None:
        """Remove the song. Its artist is kept."""
        song = self._find_song(song_name)
        self.session.delete(song)
        self.session.commit()
        logger.info(f"Song deleted: {song.group_name} - {song.song_name}")

    def get_lyrics(self, song_name: str, verse_page=None, verse_limit=None) -> PaginatedLyricsResponse:
        """
        One page of a song's verses.

        Raises:
            NotFoundError: Song does not exist.
            PageOutOfRangeError: Page starts past the last verse.
        """
        verse_page = coerce_positive(verse_page, DEFAULT_PAGE)
        verse_limit = coerce_positive(verse_limit, DEFAULT_VERSE_LIMIT)

        song = self._find_song(song_name)
        verses = LyricsCodec.decode(song.text)
        window = paginate(len(verses), verse_page, verse_limit)
        logger.debug(f"Lyrics window for {song.song_name}: [{window.start}, {window.end}) of {len(verses)}")

        return PaginatedLyricsResponse(
            song_name=song.song_name,
            verse_page=verse_page,
            verse_limit=verse_limit,
            total_verses=len(verses),
            verses=list(window.slice(verses)),
        )
