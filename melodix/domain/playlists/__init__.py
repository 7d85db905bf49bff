"""Playlists: stored track references, read-side aggregation, membership and catalog import."""

from .aggregator import device_playlists, playlist_summary, playlist_view, playlists_for_you, resolve_tracks
from .catalog_import import CatalogImportService
from .membership import (
    Outcome,
    add_song,
    create_playlist,
    delete_playlist,
    get_playlist,
    leave_playlist,
    remove_song,
    share_playlist,
)
from .track_refs import LegacyTrack, SongRef, TrackRefError

__all__ = [
    "CatalogImportService",
    "LegacyTrack",
    "Outcome",
    "SongRef",
    "TrackRefError",
    "add_song",
    "create_playlist",
    "delete_playlist",
    "device_playlists",
    "get_playlist",
    "leave_playlist",
    "playlist_summary",
    "playlist_view",
    "playlists_for_you",
    "remove_song",
    "resolve_tracks",
    "share_playlist",
]
