"""Concert lookup for stored artists, reshaped from Ticketmaster events."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from melodix.database.db_manager import Artist
from melodix.errors import EventsProviderError
from melodix.observability.metrics import record_concert_lookup

logger = logging.getLogger(__name__)

FAILURE_MESSAGES = {
    EventsProviderError.TIMEOUT: "Unable to fetch concerts: the events service timed out",
    EventsProviderError.RATE_LIMITED: "Unable to fetch concerts: too many requests, please try again later",
    EventsProviderError.NOT_FOUND: "Unable to fetch concerts: no events were found for this artist",
    EventsProviderError.UNAUTHORIZED: "Unable to fetch concerts: events service authentication failed",
    EventsProviderError.NOT_CONFIGURED: "Unable to fetch concerts: events service is not configured",
    EventsProviderError.GENERIC: "Unable to fetch concerts at this time",
}


def _float_or_none(value) -> Optional[float]:
    try:
        return float(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def event_datetime(start: Dict[str, Any]) -> Optional[str]:
    """Explicit datetime, else local date and time joined, else the local date."""
    if start.get("dateTime"):
        return start["dateTime"]
    local_date = start.get("localDate")
    local_time = start.get("localTime")
    if local_date and local_time:
        return f"{local_date}T{local_time}"
    return local_date


def reshape_event(event: Dict[str, Any]) -> Dict[str, Any]:
    start = ((event.get("dates") or {}).get("start")) or {}
    venues = ((event.get("_embedded") or {}).get("venues")) or [{}]
    venue = venues[0] or {}
    location = venue.get("location") or {}
    state = venue.get("state") or {}
    country = venue.get("country") or {}
    return {
        "id": event.get("id"),
        "title": event.get("name"),
        "datetime": event_datetime(start),
        "venue": {
            "name": venue.get("name"),
            "city": (venue.get("city") or {}).get("name"),
            "region": state.get("name") or state.get("stateCode"),
            "country": country.get("name") or country.get("countryCode"),
            "latitude": _float_or_none(location.get("latitude")),
            "longitude": _float_or_none(location.get("longitude")),
        },
        "url": event.get("url"),
        "offers": [
            {
                "type": offer.get("type"),
                "currency": offer.get("currency"),
                "min": offer.get("min"),
                "max": offer.get("max"),
            }
            for offer in event.get("priceRanges") or []
            if offer
        ],
    }


class ConcertService:
    def __init__(self, client, default_limit: int = 20, max_limit: int = 200):
        self.client = client
        self.default_limit = default_limit
        self.max_limit = max_limit

    def clamp_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.default_limit
        return max(1, min(limit, self.max_limit))

    def concerts_for(self, artist: Artist, country: Optional[str] = None,
                     limit: Optional[int] = None) -> Dict[str, Any]:
        """Upcoming concerts for ``artist``; provider failures become a message, never an error."""
        payload: Dict[str, Any] = {
            "artist": {"_id": artist.id, "name": artist.name, "image_url": artist.image_url},
            "concerts": [],
            "total": 0,
        }
        try:
            events = self.client.search_events(artist.name, country=country, size=self.clamp_limit(limit))
        except EventsProviderError as exc:
            logger.warning("Concert lookup for %s failed (%s): %s", artist.name, exc.kind, exc,
                           extra={"provider": "ticketmaster", "artist": artist.name, "outcome": exc.kind})
            record_concert_lookup(exc.kind)
            payload["message"] = FAILURE_MESSAGES.get(exc.kind, FAILURE_MESSAGES[EventsProviderError.GENERIC])
            return payload

        concerts: List[Dict[str, Any]] = [reshape_event(event) for event in events if isinstance(event, dict)]
        payload["concerts"] = concerts
        payload["total"] = len(concerts)
        if not concerts:
            payload["message"] = f"No upcoming concerts found for {artist.name}"
        record_concert_lookup("ok" if concerts else "empty")
        return payload


__all__ = ["ConcertService", "FAILURE_MESSAGES", "event_datetime", "reshape_event"]
