"""Extract the fields the pipeline needs from a Shazam ``track`` object."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

DEFAULT_TITLE = "Unknown"
DEFAULT_SUBTITLE = "Unknown Artist"
DEFAULT_GENRE = "Unknown"


@dataclass(frozen=True)
class RecognizedTrack:
    isrc: Optional[str]
    title: str
    subtitle: str
    cover_art_url: str
    genre: str
    apple_music_id: str
    preview_url: str
    shazam_key: Optional[str] = None
    album: Optional[str] = None
    release_date: Optional[str] = None


def _actions(track: Dict[str, Any]) -> Iterable[Dict[str, Any]]:
    hub = track.get("hub") or {}
    for action in hub.get("actions") or []:
        if isinstance(action, dict):
            yield action
    for option in hub.get("options") or []:
        for action in (option or {}).get("actions") or []:
            if isinstance(action, dict):
                yield action


def _field(action: Dict[str, Any], key: str) -> str:
    return str(action.get(key) or "").lower()


def find_apple_music_id(track: Dict[str, Any]) -> str:
    for action in _actions(track):
        kind, name = _field(action, "type"), _field(action, "name")
        if action.get("id") and ("applemusic" in kind or "apple" in name):
            return str(action["id"])
    return ""


def find_preview_url(track: Dict[str, Any]) -> str:
    for action in _actions(track):
        kind, name = _field(action, "type"), _field(action, "name")
        uri = action.get("uri") or ""
        if uri.startswith("http") and (kind == "uri" or "preview" in name or "preview" in kind):
            return uri
    return ""


def _song_metadata(track: Dict[str, Any]) -> Dict[str, str]:
    metadata: Dict[str, str] = {}
    for section in track.get("sections") or []:
        for entry in (section or {}).get("metadata") or []:
            title = (entry or {}).get("title")
            text = (entry or {}).get("text")
            if title and text:
                metadata.setdefault(str(title).lower(), str(text))
    return metadata


def parse_track(track: Dict[str, Any]) -> RecognizedTrack:
    images = track.get("images") or {}
    genres = track.get("genres") or {}
    metadata = _song_metadata(track)
    return RecognizedTrack(
        isrc=(track.get("isrc") or "").strip() or None,
        title=track.get("title") or DEFAULT_TITLE,
        subtitle=track.get("subtitle") or DEFAULT_SUBTITLE,
        cover_art_url=images.get("coverarthq") or images.get("coverart") or images.get("background") or "",
        genre=genres.get("primary") or DEFAULT_GENRE,
        apple_music_id=find_apple_music_id(track),
        preview_url=find_preview_url(track),
        shazam_key=str(track["key"]) if track.get("key") else None,
        album=metadata.get("album"),
        release_date=metadata.get("released"),
    )


__all__ = ["RecognizedTrack", "parse_track", "find_apple_music_id", "find_preview_url"]
