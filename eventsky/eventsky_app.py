"""FastAPI entry point. Owns the lifecycle of the index and storage clients."""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventsky.core.logging import configure_console_log, log
from eventsky.core.rsvp_core.index_client import IndexClient
from eventsky.core.rsvp_core.rsvp_config import RsvpConfig
from eventsky.core.rsvp_core.storage_client import StorageClient
from eventsky.routes.events_api import router as events_router

API_VERSION = "v1"
ROOT_DIR = Path(__file__).resolve().parents[1]


def _load_env() -> None:
    found = find_dotenv(usecwd=True)
    if found:
        load_dotenv(found, override=False)
    elif (ROOT_DIR / ".env").exists():
        load_dotenv(ROOT_DIR / ".env", override=False)


def create_app(cfg: Optional[RsvpConfig] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        resolved = cfg or RsvpConfig.from_env()
        configure_console_log(resolved.debug)
        app.state.cfg = resolved
        app.state.index = IndexClient(resolved.subgraph_url, timeout=resolved.http_timeout_sec)
        app.state.storage = StorageClient(
            resolved.storage_token, resolved.storage_url, timeout=resolved.http_timeout_sec
        )
        log.banner("EventSky API up", source="App", payload=resolved.to_safe_dict())
        yield
        app.state.index.close()
        app.state.storage.close()

    app = FastAPI(
        title="EventSky",
        description="Find, join, and create virtual events with your web3 frens",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[os.getenv("EVENTSKY_CORS_ORIGIN", "http://localhost:3000")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": API_VERSION}

    app.include_router(events_router)
    return app


_load_env()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "eventsky.eventsky_app:app",
        host=os.getenv("API_HOST", "127.0.0.1"),
        port=int(os.getenv("API_PORT", "5000")),
    )
