"""
Binding to the deployed Web3RSVP contract.

``connect_contract`` resolves the fixed address + bundled ABI into a callable
proxy, but only when a wallet session (RPC provider + signer) is available.
The result is explicit: :class:`ContractReady` or :class:`ContractUnavailable`.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import requests
from web3 import Web3
from web3.exceptions import Web3Exception
from web3.logs import DISCARD

from eventsky.core.logging import log
from .rsvp_config import RsvpConfig
from .rsvp_errors import ConfigError, ContractCallError, EventLogMissingError

EVENT_CREATED = "NewEventCreated"


def load_abi(path: str | Path) -> List[Dict[str, Any]]:
    p = Path(path)
    if not p.is_file():
        raise ConfigError(f"Contract ABI not found at {p}")
    data = json.loads(p.read_text(encoding="utf-8"))
    # Accept both a bare ABI list and a compiler artifact with an "abi" key.
    abi = data.get("abi") if isinstance(data, dict) else data
    if not isinstance(abi, list):
        raise ConfigError(f"No ABI list in {p}")
    return abi


@dataclass
class WalletSession:
    """Signer account on top of an HTTP provider."""

    w3: Web3
    account: Any  # eth_account LocalAccount

    @property
    def address(self) -> str:
        return self.account.address

    @staticmethod
    def from_config(cfg: RsvpConfig, private_key: Optional[str] = None) -> Optional["WalletSession"]:
        pk = private_key or os.getenv("EVM_PRIVATE_KEY")
        if not cfg.has_rpc or not pk or pk.strip() == "":
            return None
        w3 = Web3(Web3.HTTPProvider(cfg.rpc_url, request_kwargs={"timeout": cfg.http_timeout_sec}))
        account = w3.eth.account.from_key(pk.strip())
        return WalletSession(w3=w3, account=account)


@dataclass(frozen=True)
class ContractUnavailable:
    reason: str


class ContractReady:
    """Callable proxy over the RSVP contract, signing with the session account."""

    def __init__(self, wallet: WalletSession, address: str, abi: List[Dict[str, Any]], chain_id: int,
                 receipt_timeout_sec: int = 120):
        self.wallet = wallet
        self.w3 = wallet.w3
        self.contract = self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
        self.chain_id = chain_id
        self.receipt_timeout_sec = receipt_timeout_sec

    @property
    def address(self) -> str:
        return self.contract.address

    def create_event(self, *, event_timestamp: int, deposit: int, max_capacity: int, event_cost: str,
                     event_data_cid: str, gas_limit: int) -> str:
        """Sign and send ``createNewEvent``; returns the 0x transaction hash."""
        try:
            fn = self.contract.functions.createNewEvent(
                event_timestamp, deposit, max_capacity, event_cost, event_data_cid
            )
            tx = fn.build_transaction(
                {
                    "from": self.wallet.address,
                    "nonce": self.w3.eth.get_transaction_count(self.wallet.address),
                    "gas": gas_limit,
                    "chainId": self.chain_id,
                }
            )
            signed = self.wallet.account.sign_transaction(tx)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except (Web3Exception, ValueError, requests.RequestException) as e:
            raise ContractCallError(str(e)) from e
        return Web3.to_hex(tx_hash)

    def wait_for_receipt(self, tx_hash: str) -> Any:
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout_sec)
        except (Web3Exception, ValueError, requests.RequestException) as e:
            raise ContractCallError(str(e)) from e
        if receipt.get("status") == 0:
            raise ContractCallError(f"Transaction {tx_hash} reverted")
        return receipt

    def decode_event_id(self, receipt: Any) -> str:
        """First argument (``eventID``) of the first NewEventCreated log."""
        logs = getattr(self.contract.events, EVENT_CREATED)().process_receipt(receipt, errors=DISCARD)
        if not logs:
            raise EventLogMissingError(f"No {EVENT_CREATED} log in transaction receipt")
        return Web3.to_hex(logs[0]["args"]["eventID"])


ContractConnection = Union[ContractReady, ContractUnavailable]


def connect_contract(cfg: RsvpConfig, wallet: Optional[WalletSession] = None) -> ContractConnection:
    """Resolve the contract proxy. Not cached: call again for every submission."""
    if wallet is None:
        try:
            wallet = WalletSession.from_config(cfg)
        except ValueError as e:  # binascii.Error included
            log.error(f"EVM_PRIVATE_KEY rejected: {e}", source="RsvpContract")
            return ContractUnavailable(reason="Wallet key is not valid. Check EVM_PRIVATE_KEY.")
    if wallet is None:
        log.info("No wallet session (RSVP_RPC_URL / EVM_PRIVATE_KEY unset)", source="RsvpContract")
        return ContractUnavailable(reason="No wallet connected. Connect a wallet to create an event.")
    abi = load_abi(cfg.abi_path)
    return ContractReady(
        wallet,
        cfg.contract_address,
        abi,
        chain_id=cfg.chain_id,
        receipt_timeout_sec=cfg.receipt_timeout_sec,
    )
