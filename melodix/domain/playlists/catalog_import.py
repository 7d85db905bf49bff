import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Tuple

from melodix.database.db_manager import Playlist, Song, db
from melodix.domain.artists import upsert_catalog_artists
from melodix.domain.playlists.track_refs import LegacyTrack, encode_all
from melodix.domain.songs import find_existing_song, youtube_search_url
from melodix.errors import CatalogError, PlaylistNotFound
from melodix.observability.metrics import record_playlist_imports

logger = logging.getLogger(__name__)


class CatalogImportService:
    """Cross-reference a song into Spotify playlists and store the new ones.

    Spotify calls for independent playlists run on a small thread pool;
    all database work stays on the request thread.
    """

    def __init__(self, catalog, search_limit: int = 20, workers: int = 4):
        self.catalog = catalog
        self.search_limit = search_limit
        self.workers = max(1, workers)

    def _verified_playlists(self, items: List[Dict[str, Any]], track_id: str) -> List[Dict[str, Any]]:
        verified = []
        for item in items:
            playlist_id = item.get("id")
            if not playlist_id:
                logger.debug("Skipping playlist without id: %r", item.get("name"))
                continue
            try:
                track_ids = self.catalog.playlist_track_ids(playlist_id)
            except CatalogError as exc:
                logger.warning("Could not verify playlist %s: %s", playlist_id, exc)
                continue
            if track_id in track_ids:
                verified.append(item)
        return verified

    def _fetch_tracks(self, playlist_id: str) -> List[Dict[str, Any]]:
        try:
            return self.catalog.playlist_tracks(playlist_id)
        except CatalogError as exc:
            logger.warning("Could not fetch tracks of playlist %s: %s", playlist_id, exc)
            return []

    def _fetch_all_tracks(self, playlist_ids: List[str]) -> Dict[str, List[Dict[str, Any]]]:
        if not playlist_ids:
            return {}
        with ThreadPoolExecutor(max_workers=min(self.workers, len(playlist_ids))) as pool:
            results = pool.map(self._fetch_tracks, playlist_ids)
            return dict(zip(playlist_ids, results))

    def _store_songs(self, tracks: List[Dict[str, Any]], artist_ids: Dict[str, str]) -> Tuple[int, int]:
        """Insert tracks not already stored; returns (inserted, unique)."""
        unique: Dict[str, Dict[str, Any]] = {}
        for track in tracks:
            spotify_id = track.get("spotify_song_id")
            if spotify_id and spotify_id not in unique:
                unique[spotify_id] = track

        inserted = 0
        for spotify_id, track in unique.items():
            if find_existing_song(isrc=track.get("isrc"), spotify_song_id=spotify_id) is not None:
                continue
            artists = track.get("artists") or []
            album = track.get("album") or {}
            db.session.add(Song(
                isrc=track.get("isrc") or None,
                spotify_song_id=spotify_id,
                title=track.get("song_name") or "",
                artist_subtitle=", ".join(a["name"] for a in artists) or None,
                artist_ids=[artist_ids[a["spotify_id"]] for a in artists if a.get("spotify_id") in artist_ids],
                album=album.get("name"),
                release_date=album.get("release_date"),
                cover_art_url=album.get("cover_art_url"),
                duration_ms=track.get("duration_ms") or 0,
                spotify_url=track.get("spotify_url") or "",
                spotify_uri=f"spotify:track:{spotify_id}",
                youtube_url=youtube_search_url(artists[0]["name"] if artists else None, track.get("song_name")),
                popularity=track.get("popularity") or 0,
            ))
            # Flush so a repeated ISRC later in the batch is seen as existing
            db.session.flush()
            inserted += 1
        return inserted, len(unique)

    def import_for(self, isrc: Optional[str] = None, title: Optional[str] = None,
                   artist_subtitle: Optional[str] = None) -> Tuple[Dict[str, Any], int]:
        """Import every Spotify playlist containing the song; returns (payload, status)."""
        track = self.catalog.search_track(isrc=isrc, title=title, artist=artist_subtitle)
        if not track:
            raise PlaylistNotFound("Track not found on Spotify")
        track_id, track_name = track["id"], track["name"]

        items = self.catalog.search_playlists(track_name, limit=self.search_limit)
        if not items:
            raise PlaylistNotFound("No playlist found")
        verified = self._verified_playlists(items, track_id)
        if not verified:
            raise PlaylistNotFound("No playlists found containing this track")

        verified_ids = [item["id"] for item in verified]
        existing = Playlist.query.filter(Playlist.spotify_playlist_id.in_(verified_ids)).all()
        existing_ids = {p.spotify_playlist_id for p in existing}
        new_items = [item for item in verified if item["id"] not in existing_ids]
        if not new_items:
            return {
                "message": "All playlists already exist in database",
                "existing_playlists_count": len(existing),
                "playlists": [
                    {"_id": p.id, "playlist_name": p.name, "spotify_playlist_id": p.spotify_playlist_id,
                     "spotify_url": p.spotify_url}
                    for p in existing
                ],
            }, 200
        if existing_ids:
            logger.info("Skipping %d playlists that already exist", len(existing_ids))

        tracks_by_playlist = self._fetch_all_tracks([item["id"] for item in new_items])
        all_tracks = [t for tracks in tracks_by_playlist.values() for t in tracks]

        artist_ids = upsert_catalog_artists(a for t in all_tracks for a in t.get("artists") or [])
        songs_inserted, unique_songs = self._store_songs(all_tracks, artist_ids)

        saved = []
        for item in new_items:
            refs = [
                LegacyTrack(isrc=t.get("isrc") or "", song_name=t.get("song_name") or "")
                for t in tracks_by_playlist.get(item["id"], [])
            ]
            images = item.get("images") or []
            playlist = Playlist(
                source=Playlist.SOURCE_CATALOG,
                name=item.get("name") or "Untitled Playlist",
                description=item.get("description") or None,
                tracks=encode_all(refs),
                device_ids=[],
                spotify_playlist_id=item["id"],
                spotify_track_id=track_id,
                base_song_title=title or track_name,
                base_song_artist=artist_subtitle or None,
                base_song_isrc=isrc or None,
                owner_name=(item.get("owner") or {}).get("display_name") or "Unknown",
                cover_image_url=(images[0] or {}).get("url") if images else None,
                total_tracks=(item.get("tracks") or {}).get("total") or 0,
                spotify_url=(item.get("external_urls") or {}).get("spotify"),
            )
            db.session.add(playlist)
            saved.append(playlist)
        db.session.commit()
        record_playlist_imports(len(saved))
        logger.info("Imported %d playlists (%d new songs) for track %s", len(saved), songs_inserted, track_id)

        return {
            "message": "Playlists saved successfully",
            "playlists_count": len(saved),
            "existing_playlists_skipped": len(existing_ids),
            "artists_count": len(artist_ids),
            "songs_count": songs_inserted,
            "total_unique_songs": unique_songs,
            "playlists": [
                {"_id": p.id, "playlist_name": p.name, "spotify_playlist_id": p.spotify_playlist_id,
                 "spotify_url": p.spotify_url}
                for p in saved
            ],
        }, 201


__all__ = ["CatalogImportService"]
