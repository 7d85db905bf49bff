"""Domain exceptions shared by services and the HTTP error translator."""

from __future__ import annotations

from typing import Optional


class MelodixError(Exception):
    """Base class for errors raised by Melodix services."""

    status_code = 500

    def __init__(self, message: str = "", *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class DocumentNotFound(MelodixError):
    status_code = 404


class PlaylistNotFound(MelodixError):
    status_code = 404

    def __init__(self, message: str = "No playlist found", **kwargs):
        super().__init__(message, **kwargs)


# --- Recognition taxonomy ---
class RecognitionError(MelodixError):
    """Base for failures of the recognition flow."""


class MissingAudioError(RecognitionError):
    status_code = 400

    def __init__(self, message: str = "No audio file provided", **kwargs):
        super().__init__(message, **kwargs)


class TrackNotRecognized(RecognitionError):
    status_code = 404

    def __init__(self, message: str = "Song not found", **kwargs):
        super().__init__(message, **kwargs)


class RecognitionTimeout(RecognitionError):
    status_code = 408

    def __init__(self, message: str = "Request timeout", **kwargs):
        super().__init__(message, **kwargs)


class RecognitionUpstreamError(RecognitionError):
    """Provider answered with an error status; the status is mirrored."""

    status_code = 503


# --- Provider failures absorbed by callers ---
class CatalogError(MelodixError):
    """Spotify catalog call failed or the client is not configured."""


class EventsProviderError(MelodixError):
    """Ticketmaster call failed; ``kind`` classifies the failure."""

    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    NOT_CONFIGURED = "not_configured"
    GENERIC = "generic"

    def __init__(self, message: str = "", *, kind: str = GENERIC, **kwargs):
        super().__init__(message, **kwargs)
        self.kind = kind


__all__ = [
    "MelodixError",
    "DocumentNotFound",
    "PlaylistNotFound",
    "RecognitionError",
    "MissingAudioError",
    "TrackNotRecognized",
    "RecognitionTimeout",
    "RecognitionUpstreamError",
    "CatalogError",
    "EventsProviderError",
]
