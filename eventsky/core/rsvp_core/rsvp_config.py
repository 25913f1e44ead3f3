from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from eventsky.config.config_loader import get_section, load_config, redacted
from .rsvp_errors import ConfigError

log = logging.getLogger(__name__)

DEFAULT_SUBGRAPH_URL = "https://api.thegraph.com/subgraphs/name/hayleyiscoding/events"
DEFAULT_CONTRACT_ADDRESS = "0x00Dd672d0886825ee2413aAbdf3300F000e09585"
DEFAULT_ABI_PATH = Path(__file__).resolve().parent / "abi" / "Web3RSVP.json"
DEFAULT_STORAGE_URL = "https://api.web3.storage"
LISTING_MODES = ("upcoming", "recent")


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if (v is not None and v.strip() != "") else default


def _env_bool(name: str, default: bool) -> bool:
    v = _env(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _first_existing(paths: list[str | Path | None]) -> Optional[Path]:
    for p in paths:
        if not p:
            continue
        path = Path(p)
        if path.is_file():
            return path
    return None


def _load_yaml_config() -> tuple[Dict[str, Any], Optional[str]]:
    """
    Search order:
      1) RSVP_CONFIG_PATH (env)
      2) ./config/eventsky.yaml
      3) ./eventsky.yaml
    Returns (config_dict, path_str|None)
    """
    candidates: list[str | Path | None] = [
        _env("RSVP_CONFIG_PATH"),
        Path("config") / "eventsky.yaml",
        Path("eventsky.yaml"),
    ]
    path = _first_existing(candidates)
    if not path:
        return {}, None
    return load_config(str(path)), str(path)


@dataclass(frozen=True)
class RsvpConfig:
    """Runtime config for the RSVP index, storage and contract."""

    # —— Reads (GraphQL index) ——
    subgraph_url: str
    listing_mode: str = "upcoming"

    # —— Writes (contract) ——
    rpc_url: str = "MISSING"
    chain_id: int = 80001
    contract_address: str = DEFAULT_CONTRACT_ADDRESS
    abi_path: str = str(DEFAULT_ABI_PATH)
    gas_limit: int = 900_000
    receipt_timeout_sec: int = 120

    # —— Content storage ——
    storage_token: Optional[str] = None
    storage_url: str = DEFAULT_STORAGE_URL

    # —— Tunables ——
    http_timeout_sec: int = 25
    redirect_delay_sec: int = 5
    clear_draft_on_failure: bool = True
    debug: bool = False

    # —— Debug ——
    source_path: Optional[str] = None

    @property
    def has_rpc(self) -> bool:
        return self.rpc_url != "MISSING"

    def to_safe_dict(self) -> Dict[str, Any]:
        return redacted(asdict(self))

    @staticmethod
    def from_env() -> "RsvpConfig":
        """
        Layering (highest → lowest):
          1) Process env vars
          2) eventsky.yaml (see search order above)
          3) Safe defaults
        YAML shape (example):
          index:
            subgraph_url: https://api.thegraph.com/subgraphs/name/hayleyiscoding/events
            listing_mode: upcoming
          chain:
            rpc_url: "ENV:RSVP_RPC_URL"
            chain_id: 80001
            contract_address: "0x00Dd672d0886825ee2413aAbdf3300F000e09585"
            gas_limit: 900000
          storage:
            token: "ENV:WEB3STORAGE_TOKEN"
        """
        ycfg, ypath = _load_yaml_config()
        index = get_section(ycfg, "index")
        chain = get_section(ycfg, "chain")
        storage = get_section(ycfg, "storage")
        ui = get_section(ycfg, "ui")

        subgraph = _env("RSVP_SUBGRAPH_URL", index.get("subgraph_url")) or DEFAULT_SUBGRAPH_URL
        mode = (_env("RSVP_LISTING_MODE", index.get("listing_mode")) or "upcoming").lower()
        if mode not in LISTING_MODES:
            raise ConfigError(f"RSVP_LISTING_MODE must be one of {LISTING_MODES}, got {mode!r}")

        rpc = _env("RSVP_RPC_URL") or chain.get("rpc_url") or _env("EVM_RPC_URL")

        try:
            chain_id = int(_env("RSVP_CHAIN_ID", str(chain.get("chain_id", 80001))))
            gas_limit = int(_env("RSVP_GAS_LIMIT", str(chain.get("gas_limit", 900_000))))
            receipt_timeout = int(_env("RSVP_RECEIPT_TIMEOUT_SEC", str(chain.get("receipt_timeout_sec", 120))))
            http_timeout = int(_env("RSVP_HTTP_TIMEOUT_SEC", str(index.get("http_timeout_sec", 25))))
            redirect_delay = int(_env("RSVP_REDIRECT_DELAY_SEC", str(ui.get("redirect_delay_sec", 5))))
        except ValueError as e:
            raise ConfigError(f"Numeric RSVP setting is not an integer: {e}") from e

        cfg = RsvpConfig(
            subgraph_url=subgraph,
            listing_mode=mode,
            rpc_url=rpc if rpc else "MISSING",
            chain_id=chain_id,
            contract_address=_env("RSVP_CONTRACT_ADDRESS", chain.get("contract_address")) or DEFAULT_CONTRACT_ADDRESS,
            abi_path=_env("RSVP_ABI_PATH", chain.get("abi_path")) or str(DEFAULT_ABI_PATH),
            gas_limit=gas_limit,
            receipt_timeout_sec=receipt_timeout,
            storage_token=_env("WEB3STORAGE_TOKEN", storage.get("token")),
            storage_url=_env("WEB3STORAGE_URL", storage.get("url")) or DEFAULT_STORAGE_URL,
            http_timeout_sec=http_timeout,
            redirect_delay_sec=redirect_delay,
            clear_draft_on_failure=_env_bool("RSVP_CLEAR_DRAFT_ON_FAILURE", bool(ui.get("clear_draft_on_failure", True))),
            debug=_env_bool("RSVP_DEBUG", False),
            source_path=ypath,
        )
        log.debug("RSVP config resolved: %s", cfg.to_safe_dict())
        return cfg
