#!/usr/bin/env python
"""
Centralized configuration schema for the provider clients.

Merges defaults from config.Config with optional runtime overrides and
validates the values the recognition, catalog and events clients rely on.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import Config


class AppSettings(BaseModel):
    """Provider credentials, timeouts and personalisation knobs."""

    model_config = ConfigDict(extra="ignore")

    production: bool = False

    # Spotify credentials
    spotify_client_id: Optional[str] = None
    spotify_client_secret: Optional[str] = None
    spotify_timeout: int = 10
    playlist_search_limit: int = 20
    catalog_fetch_workers: int = 4

    # Shazam
    shazam_url: str
    shazam_key: Optional[str] = None
    shazam_host: Optional[str] = None
    shazam_timeout: int = 30

    # Ticketmaster
    ticketmaster_key: Optional[str] = None
    ticketmaster_url: str
    ticketmaster_timeout: int = 10
    concerts_default_limit: int = 20
    concerts_max_limit: int = 200

    featured_playlist_names: List[str] = Field(default_factory=list)
    for_you_match_limit: int = 10
    top_songs_limit: int = 4

    @field_validator(
        "spotify_timeout",
        "shazam_timeout",
        "ticketmaster_timeout",
        "catalog_fetch_workers",
        "for_you_match_limit",
        "top_songs_limit",
        "concerts_default_limit",
        "concerts_max_limit",
        mode="before",
    )
    @classmethod
    def _coerce_positive(cls, value: object) -> int:
        try:
            number = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 1
        return max(1, number)

    @field_validator("playlist_search_limit", mode="before")
    @classmethod
    def _clamp_search_limit(cls, value: object) -> int:
        try:
            limit = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 20
        # Spotify caps search pages at 50 items
        return max(1, min(limit, 50))

    @field_validator("featured_playlist_names", mode="before")
    @classmethod
    def _split_names(cls, value: object) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            tokens = value.split(",")
        else:
            tokens = list(value)  # type: ignore[arg-type]
        return [str(token).strip() for token in tokens if str(token).strip()]

    @property
    def spotify_configured(self) -> bool:
        return bool(self.spotify_client_id and self.spotify_client_secret)


def load_app_settings(overrides: Optional[Dict[str, Any]] = None) -> AppSettings:
    """Load settings merging config defaults with optional runtime overrides."""
    data: Dict[str, Any] = {
        "production": Config.IS_PRODUCTION,
        "spotify_client_id": Config.SPOTIPY_CLIENT_ID,
        "spotify_client_secret": Config.SPOTIPY_CLIENT_SECRET,
        "spotify_timeout": Config.SPOTIFY_TIMEOUT_SECONDS,
        "playlist_search_limit": Config.CATALOG_PLAYLIST_SEARCH_LIMIT,
        "catalog_fetch_workers": Config.CATALOG_FETCH_WORKERS,
        "shazam_url": Config.SHAZAM_API_URL,
        "shazam_key": Config.SHAZAM_API_KEY,
        "shazam_host": Config.SHAZAM_API_HOST,
        "shazam_timeout": Config.SHAZAM_TIMEOUT_SECONDS,
        "ticketmaster_key": Config.TICKETMASTER_API_KEY,
        "ticketmaster_url": Config.TICKETMASTER_API_URL,
        "ticketmaster_timeout": Config.TICKETMASTER_TIMEOUT_SECONDS,
        "concerts_default_limit": Config.CONCERTS_DEFAULT_LIMIT,
        "concerts_max_limit": Config.CONCERTS_MAX_LIMIT,
        "featured_playlist_names": Config.FEATURED_PLAYLIST_NAMES,
        "for_you_match_limit": Config.FOR_YOU_MATCH_LIMIT,
        "top_songs_limit": Config.TOP_SONGS_LIMIT,
    }
    if overrides:
        data.update(overrides)
    return AppSettings.model_validate(data)


__all__ = [
    "AppSettings",
    "load_app_settings",
]
