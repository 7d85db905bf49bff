"""Device users and their ordered search/recognition history."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from melodix.database.db_manager import DeviceUser, db
from melodix.domain.songs.views import load_artists, load_songs, song_views

logger = logging.getLogger(__name__)


def get_device_user(device_id: Optional[str]) -> Optional[DeviceUser]:
    if not device_id:
        return None
    return DeviceUser.query.filter_by(device_id=device_id).first()


def register_device(device_id: str) -> Tuple[DeviceUser, bool]:
    """Return the user for ``device_id``, creating it on first contact."""
    user = get_device_user(device_id)
    if user is not None:
        return user, False
    user = DeviceUser(device_id=device_id, anonymous=True, search_history=[])
    db.session.add(user)
    db.session.commit()
    logger.info("Registered new device user %s", user.id)
    return user, True


def append_history(device_id: str, song_id: str) -> bool:
    """Append ``song_id`` unless already present; returns whether it was added.

    Check-then-write: concurrent appends for the same device can race.
    """
    user = get_device_user(device_id)
    if user is None:
        return False
    history = list(user.search_history or [])
    if song_id in history:
        return False
    history.append(song_id)
    # JSON columns only notice reassignment
    user.search_history = history
    db.session.commit()
    return True


def history_views(device_id: str) -> List[dict]:
    user = get_device_user(device_id)
    if user is None:
        return []
    history = list(user.search_history or [])
    songs = load_songs(history)
    return song_views(songs[song_id] for song_id in history if song_id in songs)


def remove_from_history(device_id: str, song_id: str) -> bool:
    user = get_device_user(device_id)
    if user is None:
        return False
    history = list(user.search_history or [])
    if song_id not in history:
        return False
    user.search_history = [item for item in history if item != song_id]
    db.session.commit()
    return True


def clear_history(device_id: str) -> None:
    user = get_device_user(device_id)
    if user is None:
        return
    user.search_history = []
    db.session.commit()


def artists_from_history(device_id: str) -> List[dict]:
    """Unique artists across the device's history songs, first-seen order."""
    user = get_device_user(device_id)
    history = list(user.search_history or []) if user is not None else []
    if not history:
        return []
    songs = load_songs(history)
    ordered_ids: List[str] = []
    for song_id in history:
        song = songs.get(song_id)
        if song is None:
            continue
        for artist_id in song.artist_ids or []:
            if artist_id not in ordered_ids:
                ordered_ids.append(artist_id)
    artists = load_artists(ordered_ids)
    return [
        {
            "_id": artist.id,
            "name": artist.name,
            "slug": artist.slug,
            "image_url": artist.image_url,
        }
        for artist in (artists.get(i) for i in ordered_ids)
        if artist is not None
    ]


__all__ = [
    "get_device_user",
    "register_device",
    "append_history",
    "history_views",
    "remove_from_history",
    "clear_history",
    "artists_from_history",
]
