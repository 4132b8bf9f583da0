# vaultguard/gateway.py

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass

from eth_abi.exceptions import DecodingError
from requests.exceptions import RequestException
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from vaultguard.abis import event_signature_texts
from vaultguard.addresses import same_address
from vaultguard.config import LedgerConfig
from vaultguard.errors import NotFound, RemoteUnavailable

logger = logging.getLogger(__name__)

TRANSPORT_ERRORS = (Web3Exception, RequestException, ValueError, OSError)


@dataclass(frozen=True)
class FeeData:
    base_fee: int | None
    max_priority_fee: int | None
    max_fee: int | None


def _reason(exc):
    message = getattr(exc, "message", None)
    return str(message or exc)


def _hex(value):
    if isinstance(value, str):
        value = value.lower()
        return value if value.startswith("0x") else "0x" + value
    return Web3.to_hex(value)


class LedgerGateway:
    """Thin transport over the registry contract.

    No retries, no policy: reverts on reads become NotFound, everything
    else that goes wrong on the wire becomes RemoteUnavailable.
    """

    def __init__(self, config: LedgerConfig, web3: Web3 = None):
        self.config = config
        if web3 is None:
            web3 = Web3(Web3.HTTPProvider(
                config.rpc_url,
                request_kwargs={"timeout": config.rpc_timeout_seconds},
            ))
        self.web3: Web3 = web3
        self.address = Web3.to_checksum_address(config.registry_address)
        self.abi = re.sub(r'\n+', ' ', config.registry_abi).strip()
        self.contract = None
        self.event_signatures = {
            Web3.to_hex(Web3.keccak(text=text)): name
            for name, text in event_signature_texts.items()
        }

    def get_contract(self):
        if self.contract is None:
            self.contract = self.web3.eth.contract(address=self.address, abi=self.abi)
        return self.contract

    def is_connected(self):
        try:
            return self.web3.is_connected()
        except TRANSPORT_ERRORS:
            return False

    @contextmanager
    def _remote_call(self, operation, missing=None):
        try:
            yield
        except ContractLogicError as e:
            if missing is None:
                raise RemoteUnavailable(f"Ledger call {operation} reverted", details=_reason(e)) from e
            raise NotFound(missing, details=_reason(e)) from e
        except TRANSPORT_ERRORS as e:
            raise RemoteUnavailable(f"Ledger call {operation} failed", details=_reason(e)) from e

    # --- Reads ---

    def fetch_record(self, record_id):
        """Raw ``getWill`` tuple for ``record_id``."""
        with self._remote_call("getWill", missing=f"Will {record_id} does not exist"):
            return self.get_contract().functions.getWill(record_id).call()

    def fetch_owner(self, record_id):
        with self._remote_call("ownerOf", missing=f"Will {record_id} has no owner"):
            return self.get_contract().functions.ownerOf(record_id).call()

    def chain_id(self):
        with self._remote_call("eth_chainId"):
            return self.web3.eth.chain_id

    def next_nonce(self, address):
        with self._remote_call("eth_getTransactionCount"):
            return self.web3.eth.get_transaction_count(
                Web3.to_checksum_address(address), "pending")

    def estimate_fee(self):
        """Latest base fee plus the node's priority fee suggestion.

        ``max_fee`` is ``2 * base_fee + priority``; on chains without a base
        fee only the priority fee (or nothing) is known.
        """
        with self._remote_call("eth_getBlockByNumber"):
            block = self.web3.eth.get_block("latest")
            base_fee = block.get("baseFeePerGas")
            priority = self.web3.eth.max_priority_fee
        max_fee = base_fee * 2 + priority if base_fee is not None else None
        return FeeData(base_fee=base_fee, max_priority_fee=priority, max_fee=max_fee)

    def estimate_gas(self, call):
        with self._remote_call("eth_estimateGas"):
            return self.web3.eth.estimate_gas(call)

    def encode_call(self, name, args):
        with self._remote_call(f"encode {name}"):
            return self.get_contract().encode_abi(name, args=list(args))

    # --- Writes ---

    def broadcast(self, raw_transaction):
        """Send a signed transaction and block until it is mined."""
        with self._remote_call("eth_sendRawTransaction"):
            tx_hash = self.web3.eth.send_raw_transaction(raw_transaction)
        tx_hash_hex = _hex(tx_hash)
        logger.info("Transaction sent: %s", tx_hash_hex, extra={"tx_hash": tx_hash_hex})
        try:
            return self.web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.config.broadcast_timeout_seconds)
        except TimeExhausted as e:
            raise RemoteUnavailable(
                "Timed out waiting for transaction confirmation",
                details=_reason(e), tx_hash=tx_hash_hex) from e
        except TRANSPORT_ERRORS as e:
            raise RemoteUnavailable(
                "Failed while waiting for transaction confirmation",
                details=_reason(e), tx_hash=tx_hash_hex) from e

    def decode_event_logs(self, receipt):
        """Registry events in ``receipt`` as ``(name, args)``, in log order."""
        contract = self.get_contract()
        events = []
        for log_entry in receipt.get("logs") or []:
            if not log_entry.get("topics"):
                continue
            if not same_address(log_entry.get("address"), self.address):
                continue
            event_name = self.event_signatures.get(_hex(log_entry["topics"][0]))
            if not event_name:
                continue
            try:
                decoded = getattr(contract.events, event_name)().process_log(log_entry)
            except (Web3Exception, DecodingError) as e:
                logger.warning("Could not decode %s log: %s", event_name, e)
                continue
            events.append((event_name, dict(decoded["args"])))
        return events
