import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from eventsky.core.rsvp_core.rsvp_config import RsvpConfig
from eventsky.core.rsvp_core.rsvp_models import EventDraft, ImageFile


class FakeStorage:
    def __init__(self, cid="bafyfakecid", error=None):
        self.cid = cid
        self.error = error
        self.calls = []

    def put(self, files, name=None):
        self.calls.append((list(files), name))
        if self.error:
            raise self.error
        return self.cid


class FakeContract:
    """Stands in for ContractReady: records calls, answers with canned values."""

    def __init__(self, event_id="0x" + "ab" * 32, error=None, receipt_error=None):
        self.event_id = event_id
        self.error = error
        self.receipt_error = receipt_error
        self.created = []

    def create_event(self, **kwargs):
        self.created.append(kwargs)
        if self.error:
            raise self.error
        return "0xfeedbeef"

    def wait_for_receipt(self, tx_hash):
        return {"status": 1, "transactionHash": tx_hash, "logs": []}

    def decode_event_id(self, receipt):
        if self.receipt_error:
            raise self.receipt_error
        return self.event_id


class RecordingNavigator:
    def __init__(self):
        self.redirects = []

    def schedule_redirect(self, path, delay_sec):
        self.redirects.append((path, delay_sec))


@pytest.fixture
def rsvp_cfg():
    return RsvpConfig(
        subgraph_url="https://index.example/graphql",
        rpc_url="https://rpc.example",
        storage_token="tok-1234567",
    )


@pytest.fixture
def draft():
    return EventDraft(
        name="Yoga Flow",
        description="Morning stretch",
        link="https://meet.example/yoga",
        date="2022-09-21",
        time="12:16",
        cost="15",
        max_capacity="100",
        refund="0.001",
        image=ImageFile(filename="cover.png", content=b"\x89PNG...", content_type="image/png"),
    )


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def fake_contract():
    return FakeContract()


@pytest.fixture
def navigator():
    return RecordingNavigator()


@pytest.fixture
def make_storage():
    return FakeStorage


@pytest.fixture
def make_contract():
    return FakeContract
