"""Song store operations: lookup, explicit submission and popularity."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional, Tuple
from urllib.parse import quote_plus

from melodix.database.db_manager import DeviceUser, Song, db
from melodix.domain.songs.views import load_songs, song_views
from melodix.support.identity import is_valid_object_id

logger = logging.getLogger(__name__)

YOUTUBE_SEARCH_URL = "https://www.youtube.com/results?search_query="
APPLE_MUSIC_SONG_URL = "https://music.apple.com/song/"


def youtube_search_url(artist: Optional[str], title: Optional[str]) -> str:
    terms = " ".join(part.strip() for part in (artist, title) if part and part.strip())
    if not terms:
        return ""
    return YOUTUBE_SEARCH_URL + quote_plus(terms)


def apple_music_url(apple_music_id: Optional[str]) -> str:
    return f"{APPLE_MUSIC_SONG_URL}{apple_music_id}" if apple_music_id else ""


def get_song(song_id: str) -> Optional[Song]:
    if not is_valid_object_id(song_id):
        return None
    return db.session.get(Song, song_id)


def find_existing_song(isrc: Optional[str] = None, spotify_song_id: Optional[str] = None) -> Optional[Song]:
    """ISRC is the natural key; the Spotify id is only a best-effort fallback."""
    if isrc:
        song = Song.query.filter_by(isrc=isrc).order_by(Song.created_at).first()
        if song is not None:
            return song
    if spotify_song_id:
        return Song.query.filter_by(spotify_song_id=spotify_song_id).order_by(Song.created_at).first()
    return None


def _int_or_none(value) -> Optional[int]:
    try:
        return int(value) if value is not None and value != "" else None
    except (TypeError, ValueError):
        return None


def submit_song(payload: dict) -> Tuple[Song, bool]:
    """Find-or-create a song from a client submission; returns (song, created)."""
    isrc = (payload.get("isrc") or "").strip() or None
    spotify_song_id = (payload.get("spotify_song_id") or "").strip() or None

    existing = find_existing_song(isrc, spotify_song_id)
    if existing is not None:
        return existing, False

    title = (payload.get("title") or "").strip() or "Unknown"
    subtitle = (payload.get("artist_subtitle") or payload.get("artist") or "").strip() or None
    artist_ids = [i for i in (payload.get("artist_ids") or []) if is_valid_object_id(i)]
    song = Song(
        isrc=isrc,
        spotify_song_id=spotify_song_id,
        title=title,
        artist_subtitle=subtitle,
        artist_ids=artist_ids,
        album=payload.get("album"),
        cover_art_url=payload.get("cover_art_url"),
        duration_ms=_int_or_none(payload.get("duration_ms")),
        spotify_url=payload.get("spotify_url"),
        spotify_uri=payload.get("spotify_uri"),
        apple_music_url=payload.get("apple_music_url"),
        preview_url=payload.get("preview_url"),
        youtube_url=payload.get("youtube_url") or youtube_search_url(subtitle, title),
        genre=payload.get("genre"),
        release_date=payload.get("release_date"),
        popularity=_int_or_none(payload.get("popularity")),
    )
    db.session.add(song)
    db.session.commit()
    logger.info("Stored submitted song %s (isrc=%s)", song.id, isrc)
    return song, True


def top_songs(limit: int = 4) -> list:
    """Songs ranked by how many users have them in history; ties keep first appearance."""
    counts: Counter = Counter()
    for (history,) in db.session.query(DeviceUser.search_history).order_by(DeviceUser.created_at).all():
        # A user counts once per song
        counts.update(list(dict.fromkeys(history or [])))

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    songs = load_songs(song_id for song_id, _ in ranked)

    picked = []
    for song_id, count in ranked:
        song = songs.get(song_id)
        if song is None:
            continue
        picked.append((song, count))
        if len(picked) >= limit:
            break

    views = song_views(song for song, _ in picked)
    for view, (_, count) in zip(views, picked):
        view["search_count"] = count
    return views


__all__ = [
    "youtube_search_url",
    "apple_music_url",
    "get_song",
    "find_existing_song",
    "submit_song",
    "top_songs",
]
