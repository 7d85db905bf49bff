"""Stored playlist track references.

A playlist stores two kinds of track reference. Imported catalog
playlists hold ``LegacyTrack`` pairs (ISRC plus name). Songs added by users
are ``SongRef`` ids into the song store. Stored rows may be tagged
(``{"kind": ...}``) or pre-date tagging (a bare id string, or an untagged
``{"isrc", "song_name"}`` pair). Either way they are decoded once here,
and callers branch on the type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Union

LEGACY_KIND = "legacy"
SONG_REF_KIND = "ref"


class TrackRefError(ValueError):
    """A stored track reference has an unrecognised shape."""


@dataclass(frozen=True)
class LegacyTrack:
    isrc: str
    song_name: str


@dataclass(frozen=True)
class SongRef:
    song_id: str


TrackRef = Union[LegacyTrack, SongRef]


def decode(raw: Any) -> TrackRef:
    if isinstance(raw, str):
        return SongRef(song_id=raw)
    if isinstance(raw, dict):
        kind = raw.get("kind")
        if kind == SONG_REF_KIND:
            return SongRef(song_id=str(raw.get("song_id") or ""))
        if kind == LEGACY_KIND or (kind is None and ("isrc" in raw or "song_name" in raw)):
            return LegacyTrack(isrc=raw.get("isrc") or "", song_name=raw.get("song_name") or "")
    raise TrackRefError(f"Unrecognised track reference: {raw!r}")


def encode(ref: TrackRef) -> dict:
    if isinstance(ref, SongRef):
        return {"kind": SONG_REF_KIND, "song_id": ref.song_id}
    if isinstance(ref, LegacyTrack):
        return {"kind": LEGACY_KIND, "isrc": ref.isrc, "song_name": ref.song_name}
    raise TrackRefError(f"Cannot encode {ref!r}")


def decode_all(raw_refs: Iterable[Any]) -> List[TrackRef]:
    return [decode(raw) for raw in raw_refs or []]


def encode_all(refs: Iterable[TrackRef]) -> List[dict]:
    return [encode(ref) for ref in refs]


__all__ = [
    "LegacyTrack",
    "SongRef",
    "TrackRef",
    "TrackRefError",
    "decode",
    "decode_all",
    "encode",
    "encode_all",
]
