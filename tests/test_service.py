from datetime import date

import pytest
from sqlalchemy import select

from music_catalog.core.errors import (
    ConflictError,
    InvalidFilterFieldError,
    NotFoundError,
    PageOutOfRangeError,
    ValidationError,
)
from music_catalog.db.models import Artist, SongDetail
from music_catalog.schemas.models import SongCreate, SongText, SongUpdate
from music_catalog.services.song_service import SongService


@pytest.fixture
def service(session):
    return SongService(session)


def test_find_or_create_artist(service, session):
    artist, created = service.find_or_create_artist("  New   Artist ")
    assert created
    assert artist.name == "New Artist"

    again, created = service.find_or_create_artist("New Artist")
    assert not created
    assert again.id == artist.id
    assert session.query(Artist).count() == 1


def test_add_song_normalizes_names(service, session):
    song = service.add_song(SongCreate(group="Artist  -  Name", song=" Song ,  One "))
    assert song.group_name == "Artist-Name"
    assert song.song_name == "Song,One"
    assert song.text.verses == []
    assert session.scalar(select(Artist.name)) == "Artist-Name"


def test_add_duplicate_song_conflicts(service):
    service.add_song(SongCreate(group="Artist", song="Song"))
    with pytest.raises(ConflictError):
        service.add_song(SongCreate(group="Artist", song="Song"))


def test_same_song_name_for_other_artist_is_allowed(service, session):
    service.add_song(SongCreate(group="Artist A", song="Song"))
    service.add_song(SongCreate(group="Artist B", song="Song"))
    assert session.query(SongDetail).count() == 2


def test_update_song(service, make_song):
    make_song("Song", verses=["old"])
    response = service.update_song("Song", SongUpdate(
        song_name="Renamed",
        release_date="2006.06.19",
        group_link="  https://example.com/band ",
        text=SongText(verses=["one", "two"]),
    ))
    assert response.song_name == "Renamed"
    assert response.release_date == date(2006, 6, 19)
    assert response.group_link == "https://example.com/band"
    assert response.text.verses == ["one", "two"]
    assert response.artist_name == "Test Artist"


def test_update_empty_verses_keeps_text(service, make_song):
    make_song("Song", verses=["keep me"])
    response = service.update_song("Song", SongUpdate(song_name="Song 2", text=SongText(verses=[])))
    assert response.text.verses == ["keep me"]


def test_update_without_fields_is_rejected(service, make_song):
    make_song("Song")
    with pytest.raises(ValidationError):
        service.update_song("Song", SongUpdate())


def test_update_missing_song(service):
    with pytest.raises(NotFoundError):
        service.update_song("Nope", SongUpdate(song_name="x"))


def test_update_unknown_artist(service, make_song):
    make_song("Song")
    with pytest.raises(NotFoundError):
        service.update_song("Song", SongUpdate(artist_name="Nobody"))


def test_update_moves_song_to_existing_artist(service, make_song, session):
    make_song("Song")
    make_song("Other", artist_name="Second Artist")
    response = service.update_song("Song", SongUpdate(artist_name="Second Artist"))
    assert response.artist_name == "Second Artist"
    song = session.scalars(select(SongDetail).where(SongDetail.song_name == "Song")).one()
    assert song.group_name == "Second Artist"


def test_rename_clash_conflicts(service, make_song):
    make_song("First")
    make_song("Second")
    with pytest.raises(ConflictError):
        service.update_song("First", SongUpdate(song_name="Second"))


def test_delete_keeps_artist(service, make_song, session):
    make_song("Song")
    service.delete_song("Song")
    assert session.query(SongDetail).count() == 0
    assert session.query(Artist).count() == 1
    with pytest.raises(NotFoundError):
        service.delete_song("Song")


def test_get_lyrics_pages(service, make_song):
    make_song("Song", verses=["v1", "v2", "v3", "v4", "v5"])
    page = service.get_lyrics("Song", verse_page=2, verse_limit=3)
    assert page.verses == ["v4", "v5"]
    assert page.total_verses == 5
    with pytest.raises(PageOutOfRangeError):
        service.get_lyrics("Song", verse_page=3, verse_limit=3)


def test_get_lyrics_legacy_text(service, make_song):
    make_song("Legacy", text="line1\nline2\n\nline3")
    page = service.get_lyrics("Legacy", verse_limit="10")
    assert page.verses == ["line1", "line2", "line3"]


def test_get_lyrics_normalizes_lookup_name(service, make_song):
    make_song("Song-Name")
    page = service.get_lyrics(" Song  -  Name ")
    assert page.song_name == "Song-Name"
    assert page.verses == []


def test_list_songs_filters(service, make_song):
    make_song("Alpha", artist_name="The Band", release_date=date(2020, 1, 2))
    make_song("Beta", artist_name="Solo Singer")
    make_song("alpha", artist_name="Solo Singer")

    by_name = service.list_songs(field="song_name", value="ALPHA")
    assert by_name.total_items == 2

    by_artist = service.list_songs(field="artist_name", value="band")
    assert [s.song_name for s in by_artist.songs] == ["Alpha"]

    by_date = service.list_songs(field="release_date", value="2020-01-02")
    assert [s.song_name for s in by_date.songs] == ["Alpha"]

    bad_date = service.list_songs(field="release_date", value="2020/01/02")
    assert bad_date.total_items == 3

    with pytest.raises(InvalidFilterFieldError):
        service.list_songs(field="bogus", value="x")


def test_list_songs_pagination(service, make_song):
    for i in range(5):
        make_song(f"Song {i}")
    page = service.list_songs(limit="2", page="3")
    assert page.total_items == 5
    assert page.limit == 2
    assert [s.song_name for s in page.songs] == ["Song 4"]

    defaults = service.list_songs(limit="junk", page="-1")
    assert defaults.limit == 10
    assert defaults.page == 1
    assert len(defaults.songs) == 5

    with pytest.raises(PageOutOfRangeError):
        service.list_songs(limit=2, page=4)


def test_list_songs_empty_catalog(service):
    page = service.list_songs()
    assert page.total_items == 0
    assert page.songs == []


def test_list_songs_filters_fold_cyrillic_case(service, make_song):
    make_song("Песня", artist_name="Хор Александрова")
    make_song("За тебя,Родина-мать", artist_name="Хор Александрова")
    make_song("Muse Song", artist_name="Muse")

    by_artist = service.list_songs(field="artist_name", value="хор")
    assert by_artist.total_items == 2

    by_artist_upper = service.list_songs(field="artist_name", value="АЛЕКСАНДРОВА")
    assert by_artist_upper.total_items == 2

    by_name = service.list_songs(field="song_name", value="за тебя, родина - мать")
    assert [s.song_name for s in by_name.songs] == ["За тебя,Родина-мать"]

    by_name_upper = service.list_songs(field="song_name", value="ПЕСНЯ")
    assert [s.song_name for s in by_name_upper.songs] == ["Песня"]

    ascii_control = service.list_songs(field="artist_name", value="MUS")
    assert [s.song_name for s in ascii_control.songs] == ["Muse Song"]


def test_rename_clash_reports_new_name(service, make_song):
    make_song("First")
    make_song("Second")
    with pytest.raises(ConflictError, match="Test Artist - Second"):
        service.update_song("First", SongUpdate(song_name="Second"))
