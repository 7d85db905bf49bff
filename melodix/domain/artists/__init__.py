"""Artist store helpers."""

from .service import find_or_create_artist, resolve_artist_ids, split_artist_names, upsert_catalog_artists

__all__ = ["find_or_create_artist", "resolve_artist_ids", "split_artist_names", "upsert_catalog_artists"]
