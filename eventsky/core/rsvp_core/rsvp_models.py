from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Event:
    """Event as mirrored by the index. Never mutated here."""

    id: str
    name: str
    event_timestamp: int  # ms since epoch
    image_url: str | None = None
    is_disabled: bool = False

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Event":
        # The index serializes BigInt fields as strings.
        return cls(
            id=str(row.get("id")),
            name=row.get("name") or "",
            event_timestamp=int(row.get("eventTimestamp") or 0),
            image_url=row.get("imageURL"),
            is_disabled=bool(row.get("isDisabled", False)),
        )

    def starts_at(self) -> datetime:
        return datetime.fromtimestamp(self.event_timestamp / 1000)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ImageFile:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class EventDraft:
    """Form state for a new event. Lives only for one submission attempt."""

    name: str = ""
    description: str = ""
    link: str = ""
    date: str = ""
    time: str = ""
    cost: str = ""
    max_capacity: str | int = ""
    refund: str = ""
    image: Optional[ImageFile] = None

    def metadata(self) -> Dict[str, str]:
        """Record uploaded next to the image as ``data.json``."""
        return {
            "name": self.name,
            "description": self.description,
            "link": self.link,
            "image": "/" + self.image.filename,
        }

    def cleared(self) -> "EventDraft":
        return replace(self, name="", description="", link="", cost="")

    def to_form(self) -> Dict[str, Any]:
        d = asdict(self)
        d["image"] = self.image.filename if self.image else None
        return d


class BannerState(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class SubmissionResult:
    cid: str
    event_id: str
    tx_hash: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Redirect:
    path: str
    delay_sec: int


@dataclass
class SubmissionOutcome:
    state: BannerState
    message: str
    draft: EventDraft
    result: Optional[SubmissionResult] = None
    redirect: Optional[Redirect] = None
    error_kind: Optional[str] = None
    cid: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is BannerState.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "message": self.message,
            "result": self.result.to_dict() if self.result else None,
            "redirect": asdict(self.redirect) if self.redirect else None,
            "error_kind": self.error_kind,
            "cid": self.cid,
            "draft": self.draft.to_form(),
        }
