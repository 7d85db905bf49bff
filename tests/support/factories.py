"""Factory Boy factories for database models used in tests."""

import factory
from factory.alchemy import SQLAlchemyModelFactory

from melodix.database.db_manager import Artist, DeviceUser, Playlist, Song


class _BaseFactory(SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        sqlalchemy_session = None
        sqlalchemy_session_persistence = "flush"


class ArtistFactory(_BaseFactory):
    class Meta:
        model = Artist

    name = factory.Sequence(lambda n: f"Artist {n}")
    slug = factory.LazyAttribute(lambda obj: obj.name.lower().replace(" ", "-"))
    spotify_id = factory.Sequence(lambda n: f"sp-artist-{n}")
    spotify_url = factory.LazyAttribute(lambda obj: f"https://open.spotify.com/artist/{obj.spotify_id}")
    image_url = factory.LazyAttribute(lambda obj: f"http://images/{obj.spotify_id}.jpg")


class SongFactory(_BaseFactory):
    class Meta:
        model = Song

    isrc = factory.Sequence(lambda n: f"ISRC{n:08d}")
    title = factory.Sequence(lambda n: f"Track {n}")
    artist_subtitle = None
    artist_ids = factory.LazyFunction(list)
    album = "Album"
    cover_art_url = factory.LazyAttribute(lambda obj: f"http://images/{obj.isrc}.jpg")
    duration_ms = 180000
    spotify_song_id = factory.Sequence(lambda n: f"sp-track-{n}")
    spotify_url = factory.LazyAttribute(lambda obj: f"https://open.spotify.com/track/{obj.spotify_song_id}")
    genre = "Pop"
    release_date = "2020-01-01"
    popularity = 50


class DeviceUserFactory(_BaseFactory):
    class Meta:
        model = DeviceUser

    device_id = factory.Sequence(lambda n: f"device-{n}")
    anonymous = True
    search_history = factory.LazyFunction(list)


class PlaylistFactory(_BaseFactory):
    class Meta:
        model = Playlist

    source = Playlist.SOURCE_USER
    name = factory.Sequence(lambda n: f"Playlist {n}")
    tracks = factory.LazyFunction(list)
    owner_device_id = "device-owner"
    device_ids = factory.LazyAttribute(lambda obj: [obj.owner_device_id] if obj.owner_device_id else [])


class CatalogPlaylistFactory(PlaylistFactory):
    source = Playlist.SOURCE_CATALOG
    owner_device_id = None
    spotify_playlist_id = factory.Sequence(lambda n: f"sp-playlist-{n}")
    owner_name = "Spotify"
    total_tracks = 0


_FACTORIES = [ArtistFactory, SongFactory, DeviceUserFactory, PlaylistFactory, CatalogPlaylistFactory]


def set_session(session):
    for factory_cls in _FACTORIES:
        factory_cls._meta.sqlalchemy_session = session


def reset_session():
    for factory_cls in _FACTORIES:
        factory_cls._meta.sqlalchemy_session = None


__all__ = [
    "ArtistFactory",
    "SongFactory",
    "DeviceUserFactory",
    "PlaylistFactory",
    "CatalogPlaylistFactory",
    "set_session",
    "reset_session",
]
