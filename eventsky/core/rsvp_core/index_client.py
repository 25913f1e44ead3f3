from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from .rsvp_errors import IndexQueryError

log = logging.getLogger(__name__)

Json = Dict[str, Any]

# Default listing: every enabled event, soonest first.
UPCOMING_EVENTS = """
query Events {
  events(
    orderBy: eventTimestamp
    orderDirection: asc
    where: { isDisabled: false }
  ) {
    id
    name
    eventTimestamp
    imageURL
  }
}
"""

# Older listing: future events only, latest first, disabled ones included.
RECENT_EVENTS = """
query Events($currentTimestamp: String) {
  events(
    where: { eventTimestamp_gt: $currentTimestamp }
    orderBy: eventTimestamp
    orderDirection: desc
  ) {
    id
    name
    eventTimestamp
    imageURL
  }
}
"""


class IndexClient:
    """
    Thin GraphQL client for the RSVP events subgraph.
    Read-only; one POST per query, no caching.
    """

    def __init__(self, url: str, timeout: float = 25.0, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Json:
        payload = {"query": query, "variables": variables or {}}
        t0 = time.time()
        try:
            r = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise IndexQueryError(f"Index request failed: {e}") from e
        dt = time.time() - t0
        try:
            data = r.json()
        except ValueError as e:
            raise IndexQueryError(f"Bad JSON from index: {r.status_code}, {r.text[:200]}") from e

        if data.get("errors"):
            log.error("Index GraphQL errors: %s", data["errors"])
            raise IndexQueryError(str(data["errors"]))
        if r.status_code >= 400:
            raise IndexQueryError(f"Index returned HTTP {r.status_code}")

        log.debug("Index GraphQL ok (%.2fs)", dt)
        return data.get("data") or {}

    def fetch_events(self, mode: str = "upcoming", now_ms: Optional[int] = None) -> List[Json]:
        if mode == "recent":
            current = now_ms if now_ms is not None else int(time.time() * 1000)
            data = self.query(RECENT_EVENTS, {"currentTimestamp": str(current)})
        else:
            data = self.query(UPCOMING_EVENTS)
        return data.get("events") or []

    def close(self) -> None:
        self.session.close()
