import logging
import time
from typing import Any, Dict, List, Optional

import requests

from melodix.errors import EventsProviderError
from melodix.observability.metrics import observe_provider_latency
from melodix.observability.tracing import annotate, provider_span

logger = logging.getLogger(__name__)

_STATUS_KINDS = {
    401: EventsProviderError.UNAUTHORIZED,
    403: EventsProviderError.UNAUTHORIZED,
    404: EventsProviderError.NOT_FOUND,
    429: EventsProviderError.RATE_LIMITED,
}


class TicketmasterClient:
    """Thin wrapper over the Ticketmaster Discovery events search."""

    def __init__(self, api_key: Optional[str], api_url: str, timeout: int = 10,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def search_events(self, keyword: str, country: Optional[str] = None, size: int = 20) -> List[Dict[str, Any]]:
        """Raw music events matching ``keyword``; raises EventsProviderError on any failure."""
        if not self.api_key:
            raise EventsProviderError("Ticketmaster API key not configured", kind=EventsProviderError.NOT_CONFIGURED)

        params = {
            "apikey": self.api_key,
            "keyword": keyword,
            "classificationName": "music",
            "sort": "date,asc",
            "size": size,
        }
        if country:
            params["countryCode"] = country.upper()

        with provider_span("ticketmaster", "search_events", artist=keyword, country=params.get("countryCode")) as span:
            started = time.monotonic()
            try:
                response = self.session.get(self.api_url, params=params, timeout=self.timeout)
            except requests.Timeout as exc:
                annotate(span, outcome=EventsProviderError.TIMEOUT)
                raise EventsProviderError("Ticketmaster request timed out", kind=EventsProviderError.TIMEOUT) from exc
            except requests.RequestException as exc:
                annotate(span, outcome=EventsProviderError.GENERIC)
                raise EventsProviderError(f"Ticketmaster request failed: {exc}") from exc
            finally:
                observe_provider_latency("ticketmaster", time.monotonic() - started)

            annotate(span, status_code=response.status_code)
            if response.status_code >= 400:
                kind = _STATUS_KINDS.get(response.status_code, EventsProviderError.GENERIC)
                annotate(span, outcome=kind)
                raise EventsProviderError(
                    f"Ticketmaster returned {response.status_code}", kind=kind, status_code=response.status_code
                )

            events = _events_from(response)
            annotate(span, outcome="ok", events=len(events))
        logger.debug("Ticketmaster returned %d events", len(events),
                     extra={"provider": "ticketmaster", "artist": keyword, "outcome": "ok"})
        return events


def _events_from(response) -> List[Dict[str, Any]]:
    """``_embedded.events`` of a search response; both levels may be absent."""
    try:
        body = response.json()
    except ValueError as exc:
        raise EventsProviderError("Ticketmaster returned invalid JSON") from exc
    if body is None:
        return []
    if not isinstance(body, dict):
        raise EventsProviderError("Ticketmaster returned an unexpected payload")
    embedded = body.get("_embedded") or {}
    if not isinstance(embedded, dict):
        raise EventsProviderError("Ticketmaster returned an unexpected payload")
    events = embedded.get("events") or []
    if not isinstance(events, list):
        raise EventsProviderError("Ticketmaster returned an unexpected payload")
    return events


__all__ = ["TicketmasterClient"]
