import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from melodix.database.db_manager import Song, db
from melodix.domain.artists import resolve_artist_ids, split_artist_names
from melodix.domain.catalog import EnrichmentResult
from melodix.domain.recognition.track_parser import RecognizedTrack, parse_track
from melodix.domain.songs import apple_music_url, find_existing_song, song_view, youtube_search_url
from melodix.domain.users import append_history
from melodix.errors import MissingAudioError, RecognitionError
from melodix.observability.metrics import record_recognition
from melodix.observability.tracing import annotate_current

logger = logging.getLogger(__name__)


@dataclass
class RecognitionOutcome:
    song: dict
    created: bool


class RecognitionPipeline:
    """Recognize an audio clip, enrich it from the catalog and persist it."""

    def __init__(self, recognizer, catalog=None):
        self.recognizer = recognizer
        self.catalog = catalog

    def _find_stored(self, track: RecognizedTrack) -> Optional[Song]:
        if track.isrc:
            return find_existing_song(isrc=track.isrc)
        if track.shazam_key:
            # Without an ISRC dedup is best-effort and may admit duplicates
            return Song.query.filter_by(shazam_key=track.shazam_key, isrc=None).first()
        return None

    def _enrich(self, track: RecognizedTrack) -> EnrichmentResult:
        if not track.isrc or self.catalog is None:
            return EnrichmentResult.not_found()
        enrichment = self.catalog.find_track_by_isrc(track.isrc)
        if enrichment.status == EnrichmentResult.FAILED:
            logger.warning("Track enrichment failed for isrc %s; using recognition data: %s",
                           track.isrc, enrichment.error,
                           extra={"provider": "spotify", "isrc": track.isrc, "outcome": enrichment.status})
        return enrichment

    def _persist(self, track: RecognizedTrack, enrichment: EnrichmentResult) -> Song:
        artist_ids = resolve_artist_ids(track.subtitle, self.catalog)
        names = split_artist_names(track.subtitle)
        song = Song(
            isrc=track.isrc,
            shazam_key=track.shazam_key,
            spotify_song_id=enrichment.value("spotify_id"),
            title=track.title,
            artist_subtitle=track.subtitle,
            artist_ids=artist_ids,
            album=enrichment.value("album", track.album),
            cover_art_url=track.cover_art_url or enrichment.value("cover_art_url", ""),
            duration_ms=enrichment.value("duration_ms", 0),
            spotify_url=enrichment.value("spotify_url", ""),
            spotify_uri=enrichment.value("spotify_uri", ""),
            apple_music_id=track.apple_music_id or None,
            apple_music_url=apple_music_url(track.apple_music_id),
            preview_url=track.preview_url,
            youtube_url=youtube_search_url(names[0] if names else track.subtitle, track.title),
            genre=track.genre,
            release_date=enrichment.value("release_date", track.release_date),
            popularity=enrichment.value("popularity", 0),
        )
        db.session.add(song)
        db.session.commit()
        logger.info("Stored recognized song %s (isrc=%s, artists=%d)", song.id, track.isrc, len(artist_ids),
                    extra={"isrc": track.isrc, "song_id": song.id, "outcome": "created"})
        return song

    def _remember(self, device_id: Optional[str], song: Song) -> None:
        if not device_id:
            return
        try:
            append_history(device_id, song.id)
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.warning("Could not add song %s to history of %s: %s", song.id, device_id, exc, exc_info=True)

    def recognize(self, audio: Optional[bytes], filename: str = "audio.mp3",
                  mimetype: str = "audio/mpeg", device_id: Optional[str] = None) -> RecognitionOutcome:
        """Run one recognition.

        ``device_id`` is the caller's identifier as presented, if any; the song
        is appended to that device's history when the user exists.
        """
        if not audio:
            record_recognition("missing_input")
            raise MissingAudioError()

        try:
            payload = self.recognizer.recognize(audio, filename=filename, mimetype=mimetype)
        except RecognitionError as exc:
            record_recognition(type(exc).__name__)
            annotate_current(recognition_outcome=type(exc).__name__)
            raise
        track = parse_track(payload)
        annotate_current(isrc=track.isrc, shazam_key=track.shazam_key)

        stored = self._find_stored(track)
        if stored is not None:
            logger.info("Recognized song already stored as %s; skipping insert", stored.id,
                        extra={"isrc": track.isrc, "song_id": stored.id, "outcome": "existing"})
            self._remember(device_id, stored)
            record_recognition("existing")
            annotate_current(recognition_outcome="existing", song_id=stored.id)
            return RecognitionOutcome(song=song_view(stored), created=False)

        enrichment = self._enrich(track)
        song = self._persist(track, enrichment)
        self._remember(device_id, song)
        record_recognition("created")
        annotate_current(recognition_outcome="created", song_id=song.id, enrichment=enrichment.status)
        return RecognitionOutcome(song=song_view(song), created=True)


__all__ = ["RecognitionPipeline", "RecognitionOutcome"]
