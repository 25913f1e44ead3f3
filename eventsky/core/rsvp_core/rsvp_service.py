from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .index_client import IndexClient
from .rsvp_models import Event

log = logging.getLogger(__name__)


def list_events(index: IndexClient, mode: str = "upcoming") -> List[Event]:
    """Fetch the event list once; ordering is whatever the index returns."""
    rows = index.fetch_events(mode)
    events = [Event.from_row(r) for r in rows]
    log.debug("Fetched %d events (%s)", len(events), mode)
    return events


def filter_events(events: Iterable[Event], search_text: Optional[str]) -> List[Event]:
    """Case-insensitive substring match on name, source order kept."""
    events = list(events)
    if not search_text:
        return events
    needle = search_text.lower()
    return [e for e in events if needle in e.name.lower()]


def search_events(index: IndexClient, search_text: Optional[str] = None, mode: str = "upcoming") -> List[Event]:
    return filter_events(list_events(index, mode), search_text)
