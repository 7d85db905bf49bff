"""Read side of playlists: resolving stored track references into song views."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from melodix.database.db_manager import Playlist, Song
from melodix.domain.playlists.track_refs import LegacyTrack, SongRef, TrackRefError, decode_all
from melodix.domain.songs.views import UNKNOWN_ARTIST, load_artists, load_songs, song_view

logger = logging.getLogger(__name__)

MAX_COVER_IMAGES = 4


def _songs_by_isrc(isrcs: Iterable[str]) -> Dict[str, Song]:
    wanted = list(dict.fromkeys(i for i in isrcs if i))
    if not wanted:
        return {}
    found: Dict[str, Song] = {}
    # Oldest first so duplicates created by racing inserts resolve consistently
    for song in Song.query.filter(Song.isrc.in_(wanted)).order_by(Song.created_at).all():
        found.setdefault(song.isrc, song)
    return found


def legacy_fallback(ref: LegacyTrack) -> dict:
    return {
        "isrc": ref.isrc,
        "song_name": ref.song_name,
        "title": ref.song_name,
        "artist": UNKNOWN_ARTIST,
        "cover_art_url": None,
        "duration_ms": 0,
    }


def resolve_tracks(raw_refs: Sequence) -> List[dict]:
    """Song views for stored references, in playlist order.

    Unresolvable ids are dropped; unresolvable legacy pairs keep a fallback
    entry built from the stored name.
    """
    refs = decode_all(raw_refs)
    by_id = load_songs(ref.song_id for ref in refs if isinstance(ref, SongRef))
    by_isrc = _songs_by_isrc(ref.isrc for ref in refs if isinstance(ref, LegacyTrack))
    artists = load_artists(
        artist_id
        for song in list(by_id.values()) + list(by_isrc.values())
        for artist_id in (song.artist_ids or [])
    )

    views: List[dict] = []
    for ref in refs:
        if isinstance(ref, SongRef):
            song = by_id.get(ref.song_id)
            if song is not None:
                views.append(song_view(song, artists))
        elif isinstance(ref, LegacyTrack):
            song = by_isrc.get(ref.isrc) if ref.isrc else None
            views.append(song_view(song, artists) if song is not None else legacy_fallback(ref))
        else:
            raise TrackRefError(f"Unhandled track reference type: {type(ref).__name__}")
    return views


def safe_resolve_tracks(playlist: Playlist) -> List[dict]:
    try:
        return resolve_tracks(playlist.tracks or [])
    except (TrackRefError, SQLAlchemyError) as exc:
        logger.warning("Could not resolve tracks of playlist %s: %s", playlist.id, exc, exc_info=True)
        return []


def playlist_view(playlist: Playlist) -> dict:
    return playlist.to_dict(tracks=safe_resolve_tracks(playlist))


def playlist_summary(playlist: Playlist) -> dict:
    """Playlist without its tracks: counts plus a grid of up to four covers."""
    summary = playlist.to_dict(tracks=[])
    summary.pop("tracks", None)
    raw_refs = list(playlist.tracks or [])
    summary["song_count"] = len(raw_refs)
    try:
        leading = resolve_tracks(raw_refs[: MAX_COVER_IMAGES * 2])
    except (TrackRefError, SQLAlchemyError) as exc:
        logger.warning("Could not resolve covers of playlist %s: %s", playlist.id, exc)
        leading = []
    covers = [view["cover_art_url"] for view in leading if view.get("cover_art_url")]
    summary["cover_images"] = covers[:MAX_COVER_IMAGES]
    return summary


def device_playlists(device_id: str) -> List[dict]:
    """Every user playlist whose access list contains ``device_id``."""
    playlists = (
        Playlist.query.filter_by(source=Playlist.SOURCE_USER)
        .order_by(Playlist.created_at)
        .all()
    )
    return [playlist_view(p) for p in playlists if device_id in (p.device_ids or [])]


def _matches_history(playlist: Playlist, song_ids: set, isrcs: set) -> bool:
    try:
        refs = decode_all(playlist.tracks or [])
    except TrackRefError:
        return False
    for ref in refs:
        if isinstance(ref, SongRef) and ref.song_id in song_ids:
            return True
        if isinstance(ref, LegacyTrack) and ref.isrc and ref.isrc in isrcs:
            return True
    return False


def playlists_for_you(device_id: str, history: Sequence[str], match_limit: int = 10,
                      featured_names: Optional[Sequence[str]] = None) -> List[dict]:
    """Catalog playlists sharing songs with the device's history, then featured ones."""
    songs = load_songs(history)
    song_ids = set(songs)
    isrcs = {song.isrc for song in songs.values() if song.isrc}

    picked: List[Playlist] = []
    if song_ids:
        candidates = (
            Playlist.query.filter_by(source=Playlist.SOURCE_CATALOG)
            .order_by(Playlist.created_at)
            .all()
        )
        for playlist in candidates:
            if playlist.owner_device_id == device_id:
                continue
            if _matches_history(playlist, song_ids, isrcs):
                picked.append(playlist)
                if len(picked) >= match_limit:
                    break

    names = [name for name in (featured_names or []) if name]
    if names:
        seen = {p.id for p in picked}
        featured = (
            Playlist.query.filter(Playlist.source == Playlist.SOURCE_CATALOG, Playlist.name.in_(names))
            .order_by(Playlist.created_at)
            .all()
        )
        for playlist in featured:
            if playlist.id not in seen:
                picked.append(playlist)
                seen.add(playlist.id)

    return [playlist_summary(p) for p in picked]


__all__ = [
    "device_playlists",
    "legacy_fallback",
    "playlist_summary",
    "playlist_view",
    "playlists_for_you",
    "resolve_tracks",
    "safe_resolve_tracks",
]
