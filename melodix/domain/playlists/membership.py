"""User playlists: creation, sharing and track edits scoped by device id.

Every mutation is read-modify-write on JSON columns with no row locking;
concurrent writers to the same playlist are last-write-wins.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from melodix.database.db_manager import Playlist, Song, db
from melodix.domain.playlists.track_refs import LegacyTrack, SongRef, decode_all, encode_all
from melodix.support.identity import is_valid_object_id

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    ADDED = "added"
    DUPLICATE = "duplicate"
    SHARED = "shared"
    ALREADY_MEMBER = "already_member"
    LEFT = "left"
    OWNER_CANNOT_LEAVE = "owner_cannot_leave"
    NOT_MEMBER = "not_member"
    DELETED = "deleted"
    REMOVED = "removed"
    NOT_IN_PLAYLIST = "not_in_playlist"
    FORBIDDEN = "forbidden"


def get_playlist(playlist_id: str) -> Optional[Playlist]:
    if not is_valid_object_id(playlist_id):
        return None
    return db.session.get(Playlist, playlist_id)


def create_playlist(device_id: str, name: str, description: Optional[str] = None) -> Playlist:
    playlist = Playlist(
        source=Playlist.SOURCE_USER,
        name=name,
        description=description,
        owner_device_id=device_id,
        device_ids=[device_id],
        tracks=[],
    )
    db.session.add(playlist)
    db.session.commit()
    logger.info("Device %s created playlist %s", device_id, playlist.id)
    return playlist


def _contains_song(playlist: Playlist, song: Song) -> bool:
    for ref in decode_all(playlist.tracks or []):
        if isinstance(ref, SongRef) and ref.song_id == song.id:
            return True
        if isinstance(ref, LegacyTrack) and song.isrc and ref.isrc == song.isrc:
            return True
    return False


def add_song(playlist: Playlist, device_id: str, song: Song) -> Outcome:
    """Append ``song`` and grant ``device_id`` access if it has none yet."""
    if _contains_song(playlist, song):
        return Outcome.DUPLICATE
    refs = decode_all(playlist.tracks or [])
    refs.append(SongRef(song_id=song.id))
    playlist.tracks = encode_all(refs)
    members = list(playlist.device_ids or [])
    if device_id not in members:
        members.append(device_id)
        playlist.device_ids = members
    db.session.commit()
    return Outcome.ADDED


def share_playlist(playlist: Playlist, target_device_id: str) -> Outcome:
    members = list(playlist.device_ids or [])
    if target_device_id in members:
        return Outcome.ALREADY_MEMBER
    playlist.device_ids = members + [target_device_id]
    db.session.commit()
    logger.info("Playlist %s shared with device %s", playlist.id, target_device_id)
    return Outcome.SHARED


def leave_playlist(playlist: Playlist, device_id: str) -> Outcome:
    if playlist.owner_device_id == device_id:
        return Outcome.OWNER_CANNOT_LEAVE
    members = list(playlist.device_ids or [])
    if device_id not in members:
        return Outcome.NOT_MEMBER
    playlist.device_ids = [member for member in members if member != device_id]
    db.session.commit()
    return Outcome.LEFT


def delete_playlist(playlist: Playlist, device_id: str) -> Outcome:
    if playlist.owner_device_id != device_id:
        return Outcome.FORBIDDEN
    db.session.delete(playlist)
    db.session.commit()
    logger.info("Device %s deleted playlist %s", device_id, playlist.id)
    return Outcome.DELETED


def remove_song(playlist: Playlist, device_id: str, song_id: str) -> Outcome:
    """Owner-only removal of every reference to ``song_id`` (by id or by its ISRC)."""
    if playlist.owner_device_id != device_id:
        return Outcome.FORBIDDEN
    song = db.session.get(Song, song_id)
    isrc = song.isrc if song is not None else None

    refs = decode_all(playlist.tracks or [])
    kept = [
        ref for ref in refs
        if not (isinstance(ref, SongRef) and ref.song_id == song_id)
        and not (isinstance(ref, LegacyTrack) and isrc and ref.isrc == isrc)
    ]
    if len(kept) == len(refs):
        return Outcome.NOT_IN_PLAYLIST
    playlist.tracks = encode_all(kept)
    db.session.commit()
    return Outcome.REMOVED


__all__ = [
    "Outcome",
    "add_song",
    "create_playlist",
    "delete_playlist",
    "get_playlist",
    "leave_playlist",
    "remove_song",
    "share_playlist",
]
