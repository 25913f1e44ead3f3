"""Dependency helpers for FastAPI routes."""

from typing import Callable

from fastapi import Request

from eventsky.core.rsvp_core.index_client import IndexClient
from eventsky.core.rsvp_core.rsvp_config import RsvpConfig
from eventsky.core.rsvp_core.rsvp_contract import ContractConnection, connect_contract
from eventsky.core.rsvp_core.storage_client import StorageClient


def get_config(request: Request) -> RsvpConfig:
    return request.app.state.cfg


def get_index_client(request: Request) -> IndexClient:
    return request.app.state.index


def get_storage_client(request: Request) -> StorageClient:
    return request.app.state.storage


def get_contract_factory(request: Request) -> Callable[[], ContractConnection]:
    """Contract proxy is resolved per submission, never cached on the app."""
    cfg = get_config(request)
    return lambda: connect_contract(cfg)


__all__ = ["get_config", "get_index_client", "get_storage_client", "get_contract_factory"]
