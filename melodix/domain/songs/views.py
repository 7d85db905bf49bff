"""Read-side representation of stored songs."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from melodix.database.db_manager import Artist, Song

UNKNOWN_ARTIST = "Unknown Artist"


def load_artists(artist_ids: Iterable[str]) -> Dict[str, Artist]:
    ids = list(dict.fromkeys(i for i in artist_ids if i))
    if not ids:
        return {}
    return {artist.id: artist for artist in Artist.query.filter(Artist.id.in_(ids)).all()}


def load_songs(song_ids: Iterable[str]) -> Dict[str, Song]:
    ids = list(dict.fromkeys(i for i in song_ids if i))
    if not ids:
        return {}
    return {song.id: song for song in Song.query.filter(Song.id.in_(ids)).all()}


def song_view(song: Song, artists_by_id: Optional[Dict[str, Artist]] = None) -> dict:
    """Merge a stored song with its stored artists into the API shape.

    The display name prefers the stored subtitle, then the stored artist
    names, never a freshly recognized value.
    """
    if artists_by_id is None:
        artists_by_id = load_artists(song.artist_ids or [])
    artists: List[Artist] = [artists_by_id[i] for i in (song.artist_ids or []) if i in artists_by_id]

    display = song.artist_subtitle or ", ".join(a.name for a in artists) or UNKNOWN_ARTIST
    return {
        "_id": song.id,
        "isrc": song.isrc,
        "title": song.title,
        "artist": display,
        "artist_image_url": (artists[0].image_url or "") if artists else "",
        "artist_ids": list(song.artist_ids or []),
        "album": song.album,
        "cover_art_url": song.cover_art_url,
        "duration_ms": song.duration_ms,
        "spotify_url": song.spotify_url or "",
        "spotify_uri": song.spotify_uri or "",
        "apple_music_url": song.apple_music_url or "",
        "preview_url": song.preview_url or "",
        "youtube": song.youtube_url or "",
        "genre": song.genre,
        "release_date": song.release_date,
        "popularity": song.popularity,
    }


def song_views(songs: Iterable[Song]) -> List[dict]:
    """Views for many songs with a single artist query."""
    songs = list(songs)
    artists = load_artists(aid for song in songs for aid in (song.artist_ids or []))
    return [song_view(song, artists) for song in songs]


__all__ = ["UNKNOWN_ARTIST", "load_artists", "load_songs", "song_view", "song_views"]
