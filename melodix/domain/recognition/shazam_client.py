import logging
import time
from typing import Any, Dict, Optional

import requests

from melodix.errors import (
    RecognitionError,
    RecognitionTimeout,
    RecognitionUpstreamError,
    TrackNotRecognized,
)
from melodix.observability.metrics import observe_provider_latency
from melodix.observability.tracing import annotate, provider_span

logger = logging.getLogger(__name__)


def _provider_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return (response.text or "").strip()[:300] or f"Recognition provider returned {response.status_code}"


class ShazamClient:
    """Multipart client for a RapidAPI-hosted Shazam recognition endpoint."""

    def __init__(self, api_url: str, api_key: Optional[str] = None, api_host: Optional[str] = None,
                 timeout: int = 30, session: Optional[requests.Session] = None):
        self.api_url = api_url
        self.api_key = api_key
        self.api_host = api_host
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {}
        if self.api_key:
            headers["X-RapidAPI-Key"] = self.api_key
        if self.api_host:
            headers["X-RapidAPI-Host"] = self.api_host
        return headers

    def recognize(self, audio: bytes, filename: str = "audio.mp3",
                  mimetype: str = "audio/mpeg") -> Dict[str, Any]:
        """Submit an audio clip and return the matched ``track`` object.

        Raises TrackNotRecognized when the provider has no match,
        RecognitionTimeout on timeouts and RecognitionUpstreamError when the
        provider answers with an error status (the status is mirrored).
        """
        log_fields = {"provider": "shazam", "operation": "recognize"}
        with provider_span("shazam", "recognize", audio_bytes=len(audio or b"")) as span:
            started = time.monotonic()
            try:
                response = self.session.post(
                    self.api_url,
                    headers=self._headers(),
                    files={"upload_file": (filename, audio, mimetype)},
                    timeout=self.timeout,
                )
            except requests.Timeout as exc:
                annotate(span, outcome="timeout")
                logger.warning("Recognition request timed out after %ss", self.timeout,
                               extra={**log_fields, "outcome": "timeout"})
                raise RecognitionTimeout() from exc
            except requests.RequestException as exc:
                annotate(span, outcome="error")
                logger.error("Recognition request failed: %s", exc, exc_info=True,
                             extra={**log_fields, "outcome": "error"})
                raise RecognitionError(f"Recognition request failed: {exc}") from exc
            finally:
                observe_provider_latency("shazam", time.monotonic() - started)

            annotate(span, status_code=response.status_code)
            if response.status_code >= 400:
                status = response.status_code if 400 <= response.status_code <= 599 else 503
                message = _provider_message(response)
                annotate(span, outcome="upstream_error")
                logger.warning("Recognition provider returned %s: %s", response.status_code, message,
                               extra={**log_fields, "outcome": "upstream_error", "status_code": response.status_code})
                raise RecognitionUpstreamError(message, status_code=status)

            try:
                body = response.json()
            except ValueError as exc:
                annotate(span, outcome="invalid_json")
                raise RecognitionError("Recognition provider returned invalid JSON") from exc

            track = body.get("track") if isinstance(body, dict) else None
            annotate(span, outcome="matched" if track else "no_match")
            if not track:
                raise TrackNotRecognized()
            return track


__all__ = ["ShazamClient"]
