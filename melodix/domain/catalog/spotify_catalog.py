import logging
from typing import Any, Callable, Dict, List, Optional

import spotipy
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyClientCredentials

from config import Config
from melodix.errors import CatalogError
from melodix.domain.catalog.enrichment import EnrichmentResult
from melodix.observability.metrics import record_enrichment
from melodix.observability.tracing import annotate, provider_span

logger = logging.getLogger(__name__)


def slugify(name: Optional[str]) -> str:
    """Lowercase the name and join whitespace runs with dashes."""
    if not name:
        return "unknown"
    return "-".join(name.strip().lower().split()) or "unknown"


def _first_image(images) -> Optional[str]:
    if not images:
        return None
    first = images[0] or {}
    return first.get("url")


class SpotifyCatalog:
    """Spotify lookups used to enrich recognitions and import playlists."""

    def __init__(self, spotify_client_id=None,
                 spotify_client_secret=None,
                 spotify_client=None,
                 requests_timeout: int = 10):
        self._spotify_client_id = spotify_client_id or Config.SPOTIPY_CLIENT_ID
        self._spotify_client_secret = spotify_client_secret or Config.SPOTIPY_CLIENT_SECRET
        self._requests_timeout = requests_timeout

        self.sp = spotify_client
        if not self.sp:
            self._initialize_spotify_client()
        else:
            logger.info("Spotipy client injected into SpotifyCatalog.")

    def _initialize_spotify_client(self) -> bool:
        if not self._spotify_client_id or not self._spotify_client_secret:
            logger.warning("Spotify client ID and secret not provided. Catalog enrichment is disabled.")
            self.sp = None
            return False
        try:
            # Token acquisition is deferred by spotipy until the first call
            self.sp = spotipy.Spotify(
                auth_manager=SpotifyClientCredentials(
                    client_id=self._spotify_client_id,
                    client_secret=self._spotify_client_secret,
                ),
                requests_timeout=self._requests_timeout,
                retries=0,
            )
        except Exception as exc:
            logger.error("Failed to initialize Spotipy client in SpotifyCatalog: %s", exc, exc_info=True)
            self.sp = None
            return False
        logger.info("Spotipy client initialized successfully in SpotifyCatalog.")
        return True

    def _call(self, operation: str, action: str, call: Callable[[], Any]) -> Any:
        if not self.sp:
            raise CatalogError(f"Spotify client not configured; cannot {action}")
        log_fields = {"provider": "spotify", "operation": operation}
        with provider_span("spotify", operation) as span:
            try:
                return call()
            except SpotifyException as exc:
                annotate(span, outcome="error", status_code=exc.http_status)
                logger.warning("Spotify API call failed during %s: %s", action, exc,
                               extra={**log_fields, "outcome": "error", "status_code": exc.http_status})
                raise CatalogError(f"Spotify API error during {action}: {exc}") from exc
            except Exception as exc:
                # Covers token acquisition failures and transport errors
                annotate(span, outcome="error")
                logger.warning("Unexpected error during %s: %s", action, exc,
                               extra={**log_fields, "outcome": "error"})
                raise CatalogError(f"Unexpected error during {action}: {exc}") from exc

    # --- Enrichment (never raises) ---

    def find_track_by_isrc(self, isrc: str) -> EnrichmentResult:
        """Album, duration and links for the recording with this ISRC."""
        try:
            response = self._call(
                "track_by_isrc", f"search track for isrc {isrc}",
                lambda: self.sp.search(q=f"isrc:{isrc}", type="track", limit=1),
            )
        except CatalogError as exc:
            record_enrichment("track", EnrichmentResult.FAILED)
            return EnrichmentResult.failed(exc)

        items = ((response or {}).get("tracks") or {}).get("items") or []
        if not items:
            record_enrichment("track", EnrichmentResult.NOT_FOUND)
            return EnrichmentResult.not_found()

        track = items[0] or {}
        album = track.get("album") or {}
        record_enrichment("track", EnrichmentResult.FOUND)
        return EnrichmentResult.found_with({
            "spotify_id": track.get("id"),
            "album": album.get("name"),
            "duration_ms": track.get("duration_ms"),
            "spotify_url": (track.get("external_urls") or {}).get("spotify"),
            "spotify_uri": track.get("uri"),
            "popularity": track.get("popularity"),
            "release_date": album.get("release_date"),
            "cover_art_url": _first_image(album.get("images")),
        })

    def find_artist(self, name: str) -> EnrichmentResult:
        """Image and profile link for the best artist match on ``name``."""
        try:
            response = self._call(
                "artist_search", f"search artist {name}",
                lambda: self.sp.search(q=f"artist:{name}", type="artist", limit=1),
            )
        except CatalogError as exc:
            record_enrichment("artist", EnrichmentResult.FAILED)
            return EnrichmentResult.failed(exc)

        items = ((response or {}).get("artists") or {}).get("items") or []
        if not items:
            record_enrichment("artist", EnrichmentResult.NOT_FOUND)
            return EnrichmentResult.not_found()

        artist = items[0] or {}
        record_enrichment("artist", EnrichmentResult.FOUND)
        return EnrichmentResult.found_with({
            "spotify_id": artist.get("id"),
            "image_url": _first_image(artist.get("images")),
            "spotify_url": (artist.get("external_urls") or {}).get("spotify"),
        })

    # --- Playlist import (raises CatalogError) ---

    def search_track(self, isrc: Optional[str] = None, title: Optional[str] = None,
                     artist: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Locate a track by ISRC, falling back to a title (+artist) query."""
        queries = []
        if isrc:
            queries.append(f"isrc:{isrc}")
        if title:
            queries.append(f"track:{title} artist:{artist}" if artist else f"track:{title}")

        for query in queries:
            response = self._call(
                "track_search", f"search track {query!r}",
                lambda q=query: self.sp.search(q=q, type="track", limit=1),
            )
            items = ((response or {}).get("tracks") or {}).get("items") or []
            if items and items[0] and items[0].get("id"):
                return {"id": items[0]["id"], "name": items[0].get("name") or title or ""}
        return None

    def search_playlists(self, query: str, limit: int = 20) -> List[Dict[str, Any]]:
        response = self._call(
            "playlist_search", f"search playlists for {query!r}",
            lambda: self.sp.search(q=query, type="playlist", limit=limit),
        )
        playlists = (response or {}).get("playlists")
        if not playlists or playlists.get("items") is None:
            raise CatalogError("Invalid response from Spotify API")
        # Spotify returns null entries for playlists that were removed
        return [item for item in playlists["items"] if item]

    def playlist_track_ids(self, playlist_id: str) -> List[str]:
        response = self._call(
            "playlist_track_ids", f"list track ids of playlist {playlist_id}",
            lambda: self.sp.playlist_items(playlist_id, fields="items(track(id))", limit=100),
        )
        items = (response or {}).get("items") or []
        return [item["track"]["id"] for item in items if item and item.get("track") and item["track"].get("id")]

    def playlist_tracks(self, playlist_id: str) -> List[Dict[str, Any]]:
        """Normalized first page of a playlist's tracks."""
        response = self._call(
            "playlist_tracks", f"fetch tracks of playlist {playlist_id}",
            lambda: self.sp.playlist_items(playlist_id, limit=100),
        )
        tracks = []
        for item in (response or {}).get("items") or []:
            track = (item or {}).get("track")
            if not track:
                continue
            album = track.get("album") or {}
            tracks.append({
                "isrc": (track.get("external_ids") or {}).get("isrc"),
                "spotify_url": (track.get("external_urls") or {}).get("spotify"),
                "spotify_song_id": track.get("id"),
                "song_name": track.get("name") or "Unknown",
                "popularity": track.get("popularity") or 0,
                "duration_ms": track.get("duration_ms") or 0,
                "artists": [
                    {
                        "name": a.get("name") or "Unknown",
                        "slug": slugify(a.get("name")),
                        "spotify_id": a.get("id"),
                        "spotify_url": (a.get("external_urls") or {}).get("spotify"),
                    }
                    for a in (track.get("artists") or [])
                    if a
                ],
                "album": {
                    "name": album.get("name") or "Unknown",
                    "release_date": album.get("release_date"),
                    "cover_art_url": _first_image(album.get("images")),
                },
            })
        return tracks


__all__ = ["SpotifyCatalog", "slugify"]
