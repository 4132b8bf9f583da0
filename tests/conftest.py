"""Shared fixtures: an in-memory ledger standing in for the gateway.

Every gateway call is recorded in ``calls`` so tests can assert that
validation failures never reach the ledger.
"""

import os

import pytest
from eth_account import Account
from fastapi.testclient import TestClient
from web3 import Web3

# Never point tests at a real node
os.environ.setdefault("VAULTGUARD_RPC_URL", "http://127.0.0.1:1")
os.environ.setdefault("VAULTGUARD_LOG_FORMAT", "text")

from vaultguard.api import deps  # noqa: E402
from vaultguard.errors import NotFound, RemoteUnavailable  # noqa: E402
from vaultguard.gateway import FeeData  # noqa: E402
from vaultguard.main import app  # noqa: E402
from vaultguard.preparer import TransactionPreparer  # noqa: E402
from vaultguard.scanner import WillScanner  # noqa: E402
from vaultguard.submitter import TransactionSubmitter  # noqa: E402

REGISTRY = "0x141fa614e6b3a24e8076777b56e22a447d156884"
ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
CAROL = "0x" + "c3" * 20
FAR_DEADLINE = 2_000_000_000
SIGNER = Account.from_key("0x" + "4c" * 32)


def will_tuple(deadline=FAR_DEADLINE, triggered=False, nominees=(CAROL,),
               encrypted=b"\x11" * 32, decrypted=b"\x00" * 32, executed=False):
    return (deadline, triggered, list(nominees), encrypted, decrypted, executed)


def signed_transaction(nonce=0):
    """A real EIP-1559 createWill-shaped transaction, signed offline."""
    signed = SIGNER.sign_transaction({
        "type": 2,
        "chainId": 11155111,
        "nonce": nonce,
        "to": Web3.to_checksum_address(REGISTRY),
        "value": 0,
        "gas": 300_000,
        "maxFeePerGas": 2_000_000_000,
        "maxPriorityFeePerGas": 1_000_000_000,
        "data": "0x",
    })
    return Web3.to_hex(signed.raw_transaction)


class FakeGateway:
    address = REGISTRY

    def __init__(self):
        self.records = {}
        self.owners = {}
        self.unavailable_ids = set()
        self.calls = []
        self.chain = 11155111
        self.nonce = 7
        self.fees = FeeData(base_fee=10, max_priority_fee=2, max_fee=22)
        self.gas_estimate = 100_000
        self.fail_reads = False
        self.broadcast_error = None
        self.receipt = {
            "transactionHash": "0x" + "ab" * 32,
            "blockNumber": 123,
            "gasUsed": 91_000,
            "effectiveGasPrice": 1_500_000_000,
            "status": 1,
            "logs": [],
        }
        self.events = []

    def add(self, record_id, owner=ALICE, **fields):
        self.records[record_id] = will_tuple(**fields)
        if owner is not None:
            self.owners[record_id] = owner

    def is_connected(self):
        return True

    def fetch_owner(self, record_id):
        self.calls.append(("fetch_owner", record_id))
        if record_id in self.unavailable_ids:
            raise RemoteUnavailable("Ledger call ownerOf failed", details="read timed out")
        if record_id not in self.owners:
            raise NotFound(f"Will {record_id} has no owner", details="ERC721: invalid token ID")
        return self.owners[record_id]

    def fetch_record(self, record_id):
        self.calls.append(("fetch_record", record_id))
        if record_id in self.unavailable_ids:
            raise RemoteUnavailable("Ledger call getWill failed", details="read timed out")
        if record_id not in self.records:
            raise NotFound(f"Will {record_id} does not exist", details="ERC721: invalid token ID")
        return self.records[record_id]

    def chain_id(self):
        self.calls.append(("chain_id",))
        if self.fail_reads:
            raise RemoteUnavailable("Ledger call eth_chainId failed", details="connection refused")
        return self.chain

    def next_nonce(self, address):
        self.calls.append(("next_nonce", address))
        return self.nonce

    def estimate_fee(self):
        self.calls.append(("estimate_fee",))
        return self.fees

    def estimate_gas(self, call):
        self.calls.append(("estimate_gas", call))
        if isinstance(self.gas_estimate, Exception):
            raise self.gas_estimate
        return self.gas_estimate

    def encode_call(self, name, args):
        self.calls.append(("encode_call", name, args))
        return "0xdeadbeef"

    def broadcast(self, raw_transaction):
        self.calls.append(("broadcast", raw_transaction))
        if self.broadcast_error is not None:
            raise self.broadcast_error
        return self.receipt

    def decode_event_logs(self, receipt):
        self.calls.append(("decode_event_logs",))
        return list(self.events)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(gateway):
    """API client wired to the fake gateway."""
    app.dependency_overrides[deps.get_gateway] = lambda: gateway
    app.dependency_overrides[deps.get_scanner] = lambda: WillScanner(gateway, horizon_factor=10)
    app.dependency_overrides[deps.get_preparer] = lambda: TransactionPreparer(gateway)
    app.dependency_overrides[deps.get_submitter] = lambda: TransactionSubmitter(gateway)
    yield TestClient(app)
    app.dependency_overrides.clear()
