"""
Event submission workflow.

validate draft → resolve contract → upload data.json + image → createNewEvent
→ wait for receipt → decode NewEventCreated → banner + delayed redirect.

Strictly sequential, no retries. Every failure is terminal for the attempt.
"""
from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional, Protocol

from web3 import Web3

from eventsky.core.logging import log
from .rsvp_config import RsvpConfig
from .rsvp_contract import ContractConnection, ContractUnavailable, connect_contract
from .rsvp_errors import DraftValidationError, EventLogMissingError, RsvpError
from .rsvp_models import BannerState, EventDraft, ImageFile, Redirect, SubmissionOutcome, SubmissionResult
from .storage_client import StorageClient, UploadFile

SUCCESS_MESSAGE = (
    "Your event has been created successfully. "
    "Please note that it may take a few minutes to appear on the home page."
)
UPLOAD_FAILED_MESSAGE = "Oops! Something went wrong. Please refresh and try again. Error {error}"
CONTRACT_FAILED_MESSAGE = "There was an error creating your event: {error}"
INVALID_DRAFT_MESSAGE = "Please check the event form: {error}"
WEI_DECIMALS = 18
MAX_UINT256 = 2**256 - 1
LISTING_PATH = "/"


class Navigator(Protocol):
    def schedule_redirect(self, path: str, delay_sec: int) -> None: ...


class LoggingNavigator:
    """Navigator for headless callers: records the redirect in the log only."""

    def schedule_redirect(self, path: str, delay_sec: int) -> None:
        log.info(f"Redirect to {path} in {delay_sec}s", source="Submission")


# ---------------- conversions ----------------

def to_base_units(amount: str) -> int:
    """Decimal display amount → integer base units (18-decimal fixed point)."""
    try:
        d = Decimal(str(amount).strip())
    except InvalidOperation as e:
        raise DraftValidationError([f"Deposit {amount!r} is not a number"]) from e
    if not d.is_finite() or d < 0:
        raise DraftValidationError([f"Deposit {amount!r} must be zero or more"])
    if d.as_tuple().exponent < -WEI_DECIMALS:
        raise DraftValidationError([f"Deposit {amount!r} has more than {WEI_DECIMALS} decimals"])
    if d == 0:
        return 0
    if d * 10**WEI_DECIMALS > MAX_UINT256:
        raise DraftValidationError([f"Deposit {amount!r} is too large"])
    return int(Web3.to_wei(d, "ether"))


def combine_timestamp(date: str, time: str) -> int:
    """Local date + time → epoch milliseconds. Local zone on purpose, not UTC."""
    text = f"{date.strip()} {time.strip()}"
    for fmt in ("%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S"):
        try:
            dt = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return round(dt.timestamp() * 1000)
    raise DraftValidationError([f"Date/time {text!r} is not YYYY-MM-DD HH:MM"])


def parse_capacity(value: str | int) -> int:
    try:
        cap = int(str(value).strip())
    except ValueError as e:
        raise DraftValidationError([f"Max capacity {value!r} is not a whole number"]) from e
    if cap < 1:
        raise DraftValidationError(["Max capacity must be at least 1"])
    return cap


# ---------------- validation ----------------

@dataclass(frozen=True)
class PreparedEvent:
    event_timestamp: int
    deposit: int
    max_capacity: int
    event_cost: str
    metadata: bytes
    image: ImageFile

    def upload_files(self) -> List[UploadFile]:
        return [
            ("data.json", self.metadata, "application/json"),
            (self.image.filename, self.image.content, self.image.content_type),
        ]


def prepare_draft(draft: EventDraft) -> PreparedEvent:
    """Check required fields and convert them; raises DraftValidationError."""
    problems: list[str] = []
    for label, value in (
        ("Event name", draft.name),
        ("Date", draft.date),
        ("Time", draft.time),
        ("Event cost", draft.cost),
        ("Event link", draft.link),
        ("Max capacity", draft.max_capacity),
        ("Refundable deposit", draft.refund),
    ):
        if value is None or str(value).strip() == "":
            problems.append(f"{label} is required")
    if draft.image is None or not draft.image.filename:
        problems.append("Event image is required")
    if problems:
        raise DraftValidationError(problems)

    converted: dict = {}
    for key, fn in (
        ("event_timestamp", lambda: combine_timestamp(draft.date, draft.time)),
        ("max_capacity", lambda: parse_capacity(draft.max_capacity)),
        ("deposit", lambda: to_base_units(draft.refund)),
    ):
        try:
            converted[key] = fn()
        except DraftValidationError as e:
            problems.extend(e.problems)
    if problems:
        raise DraftValidationError(problems)

    return PreparedEvent(
        metadata=json.dumps(draft.metadata()).encode("utf-8"),
        image=draft.image,
        event_cost=str(draft.cost).strip(),
        **converted,
    )


# ---------------- workflow ----------------

class EventSubmissionWorkflow:
    """Orchestrates one event submission per :meth:`submit` call."""

    def __init__(
        self,
        cfg: RsvpConfig,
        storage: StorageClient,
        contract_factory: Optional[Callable[[], ContractConnection]] = None,
        navigator: Optional[Navigator] = None,
    ):
        self.cfg = cfg
        self.storage = storage
        self.contract_factory = contract_factory or (lambda: connect_contract(cfg))
        self.navigator = navigator or LoggingNavigator()

    def _failed(self, draft: EventDraft, message: str, kind: str, cid: Optional[str] = None,
                clear: bool = True) -> SubmissionOutcome:
        remaining = draft.cleared() if (clear and self.cfg.clear_draft_on_failure) else draft
        return SubmissionOutcome(
            state=BannerState.FAILURE,
            message=message,
            draft=remaining,
            error_kind=kind,
            cid=cid,
        )

    def submit(self, draft: EventDraft, on_pending: Optional[Callable[[str], None]] = None) -> SubmissionOutcome:
        try:
            prepared = prepare_draft(draft)
        except DraftValidationError as e:
            log.warning(f"Draft rejected: {e}", source="Submission")
            return self._failed(draft, INVALID_DRAFT_MESSAGE.format(error=e), "validation", clear=False)

        try:
            conn = self.contract_factory()
        except RsvpError as e:
            log.error(f"Error getting contract: {e}", source="Submission")
            return self._failed(draft, str(e), "wallet", clear=False)
        if isinstance(conn, ContractUnavailable):
            log.warning(f"Error getting contract: {conn.reason}", source="Submission")
            return self._failed(draft, conn.reason, "wallet", clear=False)

        try:
            cid = self.storage.put(prepared.upload_files(), name=draft.name)
        except Exception as e:  # noqa: BLE001
            log.error(f"Upload failed: {e}", source="Submission")
            return self._failed(draft, UPLOAD_FAILED_MESSAGE.format(error=e), "upload")

        timer = f"createNewEvent {uuid.uuid4().hex[:8]}"
        log.start_timer(timer)
        try:
            tx_hash = conn.create_event(
                event_timestamp=prepared.event_timestamp,
                deposit=prepared.deposit,
                max_capacity=prepared.max_capacity,
                event_cost=prepared.event_cost,
                event_data_cid=cid,
                gas_limit=self.cfg.gas_limit,
            )
            log.info(f"Minting... {tx_hash}", source="Submission")
            if on_pending:
                on_pending(tx_hash)
            receipt = conn.wait_for_receipt(tx_hash)
            log.info(f"Minted -- {tx_hash}", source="Submission")
            event_id = conn.decode_event_id(receipt)
        except EventLogMissingError as e:
            log.error(str(e), source="Submission")
            return self._failed(draft, CONTRACT_FAILED_MESSAGE.format(error=e), "receipt", cid=cid)
        except Exception as e:  # noqa: BLE001
            log.error(f"createNewEvent failed: {e}", source="Submission")
            return self._failed(draft, CONTRACT_FAILED_MESSAGE.format(error=e), "contract", cid=cid)
        finally:
            log.end_timer(timer, source="Submission")

        redirect = Redirect(path=LISTING_PATH, delay_sec=self.cfg.redirect_delay_sec)
        self.navigator.schedule_redirect(redirect.path, redirect.delay_sec)
        log.success(f"Event {event_id} created (cid {cid})", source="Submission")
        return SubmissionOutcome(
            state=BannerState.SUCCESS,
            message=SUCCESS_MESSAGE,
            draft=draft.cleared(),
            result=SubmissionResult(cid=cid, event_id=event_id, tx_hash=tx_hash),
            redirect=redirect,
            cid=cid,
        )
