# eventsky/routes/events_api.py
"""Event listing and creation routes."""
from __future__ import annotations

from typing import Callable, Dict, List, Optional

import anyio
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from eventsky.core.rsvp_core.index_client import IndexClient
from eventsky.core.rsvp_core.rsvp_config import RsvpConfig
from eventsky.core.rsvp_core.rsvp_contract import ContractConnection
from eventsky.core.rsvp_core.rsvp_errors import IndexQueryError
from eventsky.core.rsvp_core.rsvp_models import EventDraft, ImageFile
from eventsky.core.rsvp_core.rsvp_service import search_events
from eventsky.core.rsvp_core.storage_client import StorageClient
from eventsky.core.rsvp_core.submission import EventSubmissionWorkflow
from eventsky.deps import get_config, get_contract_factory, get_index_client, get_storage_client

router = APIRouter(prefix="/api/events", tags=["events"])

STATUS_BY_ERROR_KIND = {
    None: 201,
    "validation": 422,
    "wallet": 503,
    "upload": 502,
    "contract": 502,
    "receipt": 502,
}


class EventOut(BaseModel):
    id: str
    name: str
    event_timestamp: int
    image_url: Optional[str] = None
    is_disabled: bool = False


class EventListResponse(BaseModel):
    events: List[EventOut]
    count: int


class HeaderNavigator:
    """Turns the delayed redirect into an HTTP ``Refresh`` header."""

    def __init__(self) -> None:
        self.headers: Dict[str, str] = {}

    def schedule_redirect(self, path: str, delay_sec: int) -> None:
        self.headers["Refresh"] = f"{delay_sec}; url={path}"


@router.get("", response_model=EventListResponse)
async def list_events_api(
    search: Optional[str] = Query(None, description="case-insensitive name filter"),
    cfg: RsvpConfig = Depends(get_config),
    index: IndexClient = Depends(get_index_client),
):
    try:
        events = await anyio.to_thread.run_sync(search_events, index, search, cfg.listing_mode)
    except IndexQueryError as e:
        raise HTTPException(502, f"Error! {e}")
    return EventListResponse(events=[EventOut(**e.to_dict()) for e in events], count=len(events))


@router.post("")
async def create_event_api(
    name: str = Form(""),
    description: str = Form(""),
    link: str = Form(""),
    date: str = Form(""),
    time: str = Form(""),
    cost: str = Form(""),
    max_capacity: str = Form(""),
    refund: str = Form(""),
    image: Optional[UploadFile] = File(None),
    cfg: RsvpConfig = Depends(get_config),
    storage: StorageClient = Depends(get_storage_client),
    contract_factory: Callable[[], ContractConnection] = Depends(get_contract_factory),
):
    image_file = None
    if image is not None and image.filename:
        image_file = ImageFile(
            filename=image.filename,
            content=await image.read(),
            content_type=image.content_type or "application/octet-stream",
        )
    draft = EventDraft(
        name=name,
        description=description,
        link=link,
        date=date,
        time=time,
        cost=cost,
        max_capacity=max_capacity,
        refund=refund,
        image=image_file,
    )

    navigator = HeaderNavigator()
    workflow = EventSubmissionWorkflow(cfg, storage, contract_factory=contract_factory, navigator=navigator)
    outcome = await anyio.to_thread.run_sync(workflow.submit, draft)
    return JSONResponse(
        status_code=STATUS_BY_ERROR_KIND.get(outcome.error_kind, 500),
        content=outcome.to_dict(),
        headers=navigator.headers,
    )
