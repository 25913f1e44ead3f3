from __future__ import annotations

import logging
import time
from typing import Iterable, Optional, Tuple

import requests

from .rsvp_errors import StorageUploadError

log = logging.getLogger(__name__)

# (file name, payload, content type)
UploadFile = Tuple[str, bytes, str]

GATEWAY_TEMPLATE = "https://{cid}.ipfs.w3s.link/{path}"


def gateway_url(cid: str, path: str = "") -> str:
    return GATEWAY_TEMPLATE.format(cid=cid, path=path.lstrip("/"))


class StorageClient:
    """
    Minimal HTTP client for the web3.storage upload API.
    All files of one ``put`` land in a single directory addressed by one CID.
    """

    def __init__(self, token: Optional[str], endpoint: str = "https://api.web3.storage", timeout: float = 60.0,
                 session: Optional[requests.Session] = None):
        self.token = token
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def put(self, files: Iterable[UploadFile], name: Optional[str] = None) -> str:
        if not self.token:
            raise StorageUploadError("WEB3STORAGE_TOKEN is not configured.")
        parts = [("file", (fname, content, ctype)) for fname, content, ctype in files]
        if not parts:
            raise StorageUploadError("Nothing to upload.")

        headers = {"Authorization": f"Bearer {self.token}"}
        if name:
            headers["X-Name"] = name

        t0 = time.time()
        try:
            r = self.session.post(f"{self.endpoint}/upload", files=parts, headers=headers, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except requests.RequestException as e:
            raise StorageUploadError(f"Upload failed: {e}") from e
        except ValueError as e:
            raise StorageUploadError(f"Bad JSON from storage: {r.status_code}, {r.text[:200]}") from e

        cid = data.get("cid") if isinstance(data, dict) else None
        if not cid:
            raise StorageUploadError(f"Storage reply has no cid: {data!r}")
        log.info("Stored %d file(s) as %s (%.2fs)", len(parts), cid, time.time() - t0)
        return cid

    def close(self) -> None:
        self.session.close()
