"""Artist store: lazy creation from recognized names and catalog upserts."""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional

from melodix.database.db_manager import Artist, db
from melodix.domain.catalog import EnrichmentResult, slugify

logger = logging.getLogger(__name__)

_ARTIST_DELIMITERS = re.compile(r"[&,]")


def split_artist_names(subtitle: Optional[str]) -> List[str]:
    """Split a display string such as "A & B, C" into trimmed non-empty names."""
    if not subtitle:
        return []
    return [name.strip() for name in _ARTIST_DELIMITERS.split(subtitle) if name.strip()]


def find_or_create_artist(name: str, catalog=None) -> Artist:
    """Return the stored artist called ``name``, creating it when absent.

    New artists are enriched with the catalog's image and profile link when
    the lookup succeeds; otherwise they are stored with the name alone.
    """
    artist = Artist.query.filter_by(name=name).order_by(Artist.created_at).first()
    if artist is not None:
        return artist

    enrichment = catalog.find_artist(name) if catalog is not None else EnrichmentResult.not_found()
    if enrichment.status == EnrichmentResult.FAILED:
        logger.warning("Artist enrichment failed for %r; storing name only: %s", name, enrichment.error)

    spotify_id = enrichment.value("spotify_id")
    if spotify_id:
        artist = Artist.query.filter_by(spotify_id=spotify_id).first()
        if artist is not None:
            return artist

    artist = Artist(
        name=name,
        slug=slugify(name),
        spotify_id=spotify_id,
        spotify_url=enrichment.value("spotify_url"),
        image_url=enrichment.value("image_url"),
    )
    db.session.add(artist)
    db.session.flush()
    logger.info("Created artist %s (%s)", artist.name, artist.id)
    return artist


def resolve_artist_ids(subtitle: Optional[str], catalog=None) -> List[str]:
    """Artist ids for every name in ``subtitle``, in order and without repeats."""
    ids: List[str] = []
    for name in split_artist_names(subtitle):
        artist = find_or_create_artist(name, catalog)
        if artist.id not in ids:
            ids.append(artist.id)
    return ids


def upsert_catalog_artists(entries: Iterable[dict]) -> Dict[str, str]:
    """Insert or update artists keyed by Spotify id; returns spotify_id -> stored id."""
    by_spotify_id: Dict[str, dict] = {}
    for entry in entries:
        spotify_id = entry.get("spotify_id")
        if spotify_id and spotify_id not in by_spotify_id:
            by_spotify_id[spotify_id] = entry
    if not by_spotify_id:
        return {}

    stored = {
        artist.spotify_id: artist
        for artist in Artist.query.filter(Artist.spotify_id.in_(list(by_spotify_id))).all()
    }
    mapping: Dict[str, str] = {}
    for spotify_id, entry in by_spotify_id.items():
        artist = stored.get(spotify_id)
        if artist is None:
            artist = Artist(spotify_id=spotify_id)
            db.session.add(artist)
        artist.name = entry.get("name") or artist.name or "Unknown"
        artist.slug = entry.get("slug") or slugify(artist.name)
        artist.spotify_url = entry.get("spotify_url") or artist.spotify_url
        db.session.flush()
        mapping[spotify_id] = artist.id
    return mapping


__all__ = ["split_artist_names", "find_or_create_artist", "resolve_artist_ids", "upsert_catalog_artists"]
