"""Catalog domain services (Spotify enrichment and playlist lookups)."""

from .enrichment import EnrichmentResult
from .spotify_catalog import SpotifyCatalog, slugify

__all__ = ["EnrichmentResult", "SpotifyCatalog", "slugify"]
