from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from music_catalog.db.database import Base


class Artist(Base):
    __tablename__ = "artists"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    # no cascade: deleting songs never removes their artist
    songs: Mapped[list["SongDetail"]] = relationship(back_populates="artist")

    def __repr__(self) -> str:
        return f"<Artist {self.name}>"


class SongDetail(Base):
    __tablename__ = "song_details"

    id: Mapped[int] = mapped_column(primary_key=True)
    artist_id: Mapped[int] = mapped_column(ForeignKey("artists.id"), index=True, nullable=False)
    group_name: Mapped[str] = mapped_column(String(255), nullable=False)
    song_name: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    release_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # LyricsCodec output or legacy raw text
    group_link: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    artist: Mapped[Artist] = relationship(back_populates="songs")

    __table_args__ = (
        UniqueConstraint("artist_id", "song_name", name="uq_song_per_artist"),
    )

    def __repr__(self) -> str:
        return f"<SongDetail {self.group_name} - {self.song_name}>"
