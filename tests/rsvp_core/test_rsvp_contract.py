import json
import types

import pytest
from eth_abi import encode
from hexbytes import HexBytes
from web3 import Web3

from eventsky.core.rsvp_core.rsvp_config import RsvpConfig
from eventsky.core.rsvp_core.rsvp_contract import (
    ContractReady,
    ContractUnavailable,
    WalletSession,
    connect_contract,
    load_abi,
)
from eventsky.core.rsvp_core.rsvp_errors import ConfigError, ContractCallError, EventLogMissingError

CONTRACT = "0x00Dd672d0886825ee2413aAbdf3300F000e09585"
EVENT_SIG = "NewEventCreated(bytes32,address,uint256,uint256,uint256,string,string)"


@pytest.fixture
def ready(rsvp_cfg):
    w3 = Web3(Web3.HTTPProvider("http://127.0.0.1:8545"))
    wallet = WalletSession(w3=w3, account=w3.eth.account.create())
    return ContractReady(wallet, CONTRACT, load_abi(rsvp_cfg.abi_path), chain_id=80001)


def _receipt(logs):
    return {"status": 1, "transactionHash": HexBytes("0x" + "11" * 32), "logs": logs}


def _created_log(event_id: bytes, creator: str):
    data = encode(
        ["bytes32", "address", "uint256", "uint256", "uint256", "string", "string"],
        [event_id, creator, 1663762560000, 100, 10**15, "15", "bafydir"],
    )
    return {
        "address": CONTRACT,
        "topics": [Web3.keccak(text=EVENT_SIG)],
        "data": HexBytes(data),
        "blockHash": HexBytes("0x" + "22" * 32),
        "blockNumber": 1,
        "logIndex": 0,
        "transactionHash": HexBytes("0x" + "11" * 32),
        "transactionIndex": 0,
        "removed": False,
    }


def test_bundled_abi_has_create_and_event():
    abi = load_abi(RsvpConfig(subgraph_url="x").abi_path)
    names = {entry.get("name") for entry in abi}
    assert {"createNewEvent", "NewEventCreated"} <= names
    create = next(e for e in abi if e.get("name") == "createNewEvent")
    assert [i["name"] for i in create["inputs"]] == [
        "eventTimestamp", "deposit", "maxCapacity", "eventCost", "eventDataCID",
    ]


def test_load_abi_accepts_bare_list_and_rejects_missing(tmp_path):
    p = tmp_path / "abi.json"
    p.write_text(json.dumps([{"type": "function", "name": "f", "inputs": [], "outputs": []}]))
    assert load_abi(p)[0]["name"] == "f"
    with pytest.raises(ConfigError):
        load_abi(tmp_path / "missing.json")


def test_no_wallet_yields_unavailable(monkeypatch):
    monkeypatch.delenv("EVM_PRIVATE_KEY", raising=False)
    conn = connect_contract(RsvpConfig(subgraph_url="x"))
    assert isinstance(conn, ContractUnavailable)
    assert "wallet" in conn.reason.lower()


def test_wallet_yields_ready_proxy(rsvp_cfg):
    w3 = Web3(Web3.HTTPProvider("http://127.0.0.1:8545"))
    wallet = WalletSession(w3=w3, account=w3.eth.account.create())
    conn = connect_contract(rsvp_cfg, wallet)
    assert isinstance(conn, ContractReady)
    assert conn.address == CONTRACT


def test_decode_event_id_from_first_created_log(ready):
    event_id = bytes.fromhex("ab" * 32)
    receipt = _receipt([_created_log(event_id, ready.wallet.address)])
    assert ready.decode_event_id(receipt) == "0x" + "ab" * 32


def test_decode_without_created_log_raises(ready):
    with pytest.raises(EventLogMissingError):
        ready.decode_event_id(_receipt([]))


def test_reverted_receipt_raises(ready):
    ready.w3 = types.SimpleNamespace(
        eth=types.SimpleNamespace(wait_for_transaction_receipt=lambda tx, timeout=None: {"status": 0})
    )
    with pytest.raises(ContractCallError, match="reverted"):
        ready.wait_for_receipt("0xabc")


def test_mined_receipt_is_returned(ready):
    mined = {"status": 1, "logs": []}
    ready.w3 = types.SimpleNamespace(
        eth=types.SimpleNamespace(wait_for_transaction_receipt=lambda tx, timeout=None: mined)
    )
    assert ready.wait_for_receipt("0xabc") is mined


def test_malformed_key_yields_unavailable(monkeypatch, rsvp_cfg):
    monkeypatch.setenv("EVM_PRIVATE_KEY", "not-a-key")
    conn = connect_contract(rsvp_cfg)
    assert isinstance(conn, ContractUnavailable)
    assert "EVM_PRIVATE_KEY" in conn.reason
