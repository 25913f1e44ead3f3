from datetime import datetime

from eventsky.core.rsvp_core.rsvp_models import Event
from eventsky.core.rsvp_core.rsvp_service import filter_events, list_events, search_events


class FakeIndex:
    def __init__(self, rows):
        self.rows = rows
        self.modes = []

    def fetch_events(self, mode="upcoming"):
        self.modes.append(mode)
        return self.rows


ROWS = [
    {"id": "0x01", "name": "Yoga Flow", "eventTimestamp": "1663762560000", "imageURL": "https://ipfs.io/ipfs/a/yoga.png"},
    {"id": "0x02", "name": "Business Mastermind", "eventTimestamp": "1663848960000", "imageURL": None},
    {"id": "0x03", "name": "Yoga Basics", "eventTimestamp": "1663935360000", "imageURL": "https://ipfs.io/ipfs/c/b.png"},
]


def test_filter_is_case_insensitive_substring_in_source_order():
    events = [Event.from_row(r) for r in ROWS]
    assert [e.name for e in filter_events(events, "yoga")] == ["Yoga Flow", "Yoga Basics"]
    assert [e.name for e in filter_events(events, "MASTER")] == ["Business Mastermind"]
    assert filter_events(events, "pilates") == []


def test_empty_search_returns_everything():
    events = [Event.from_row(r) for r in ROWS]
    assert filter_events(events, "") == events
    assert filter_events(events, None) == events


def test_list_events_maps_index_rows():
    index = FakeIndex(ROWS)
    events = list_events(index)
    assert index.modes == ["upcoming"]
    assert events[0].id == "0x01"
    assert events[0].event_timestamp == 1663762560000
    assert events[0].starts_at() == datetime.fromtimestamp(1663762560)
    assert events[1].image_url is None
    assert events[1].is_disabled is False


def test_search_events_passes_mode_through():
    index = FakeIndex(ROWS)
    found = search_events(index, "basics", mode="recent")
    assert index.modes == ["recent"]
    assert [e.id for e in found] == ["0x03"]
