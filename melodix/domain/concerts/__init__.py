"""Concert listings from the events provider."""

from .service import FAILURE_MESSAGES, ConcertService, event_datetime, reshape_event
from .ticketmaster_client import TicketmasterClient

__all__ = ["ConcertService", "FAILURE_MESSAGES", "TicketmasterClient", "event_datetime", "reshape_event"]
