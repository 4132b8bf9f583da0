"""Transaction submitter: broadcasts a client-signed transaction and reports the minted will.

Invariants:
    - An empty or undecodable payload is rejected before the gateway is contacted
    - Broadcasts are never retried here; on timeout the transaction hash is reported
    - A confirmation without a creation event is a success with ``tokenId`` None
    - A mined but reverted transaction is a failure, never a 201
"""

import logging
from dataclasses import dataclass

from eth_account import Account
from hexbytes import HexBytes
from web3 import Web3

from vaultguard.abis import creation_events
from vaultguard.errors import (
    InsufficientFunds, InvalidArgument, InvalidNonce, RegistryError, RemoteUnavailable,
)

logger = logging.getLogger(__name__)

INSUFFICIENT_FUNDS_MARKERS = ("insufficient funds",)
NONCE_MARKERS = ("nonce too low", "nonce too high")


@dataclass(frozen=True)
class BroadcastResult:
    transaction_hash: str
    block_number: int
    token_id: int | None
    gas_used: int
    gas_price: int | None
    sender: str
    contract_address: str

    def to_response(self) -> dict:
        return {
            "transactionHash": self.transaction_hash,
            "blockNumber": self.block_number,
            "tokenId": self.token_id,
            "gasUsed": str(self.gas_used),
            "gasPrice": str(self.gas_price) if self.gas_price is not None else None,
            "from": self.sender,
            "contractAddress": self.contract_address,
        }


def classify_failure(error: RegistryError) -> RegistryError:
    """Turn a remote failure into a domain error when its message is recognised."""
    details = error.details or error.message
    text = details.lower()
    if any(marker in text for marker in INSUFFICIENT_FUNDS_MARKERS):
        return InsufficientFunds(details)
    if any(marker in text for marker in NONCE_MARKERS):
        return InvalidNonce(details)
    return RemoteUnavailable(
        "Failed to broadcast transaction to the blockchain",
        details=details,
        tx_hash=getattr(error, "tx_hash", None),
    )


def decode_signed(signed_transaction) -> tuple[bytes, str]:
    """Raw bytes and recovered sender of a signed transaction."""
    if not signed_transaction:
        raise InvalidArgument("Signed transaction is required")
    if not isinstance(signed_transaction, str):
        raise InvalidArgument("Signed transaction must be a hex string")
    try:
        raw = bytes(HexBytes(signed_transaction))
    except ValueError as e:
        raise InvalidArgument("Signed transaction is not valid hex", details=str(e)) from e
    try:
        sender = Account.recover_transaction(raw)
    except Exception as e:
        raise InvalidArgument(
            "Signed transaction could not be decoded", details=str(e)) from e
    return raw, Web3.to_checksum_address(sender)


def find_token_id(events) -> int | None:
    for event_name, args in events:
        if event_name in creation_events and "tokenId" in args:
            return int(args["tokenId"])
    return None


class TransactionSubmitter:
    def __init__(self, gateway):
        self.gateway = gateway

    def broadcast(self, signed_transaction) -> BroadcastResult:
        raw, sender = decode_signed(signed_transaction)
        logger.info("Broadcasting signed transaction from %s", sender, extra={"owner": sender})

        try:
            receipt = self.gateway.broadcast(raw)
        except RegistryError as e:
            classified = classify_failure(e)
            logger.warning("Broadcast failed (%s): %s", classified.code, classified.details,
                           extra={"error_code": classified.code})
            raise classified from e

        tx_hash = receipt.get("transactionHash") or Web3.keccak(raw)
        tx_hash = tx_hash if isinstance(tx_hash, str) else Web3.to_hex(tx_hash)
        if receipt.get("status", 1) == 0:
            logger.warning("Transaction %s reverted in block %s", tx_hash, receipt.get("blockNumber"),
                           extra={"tx_hash": tx_hash, "error_code": "REMOTE_UNAVAILABLE"})
            raise RemoteUnavailable(
                "Failed to broadcast transaction to the blockchain",
                details="transaction execution reverted",
                tx_hash=tx_hash,
            )
        token_id = find_token_id(self.gateway.decode_event_logs(receipt))
        logger.info("Transaction %s confirmed in block %s, token %s",
                    tx_hash, receipt.get("blockNumber"), token_id,
                    extra={"tx_hash": tx_hash, "token_id": token_id})

        gas_price = receipt.get("effectiveGasPrice")
        return BroadcastResult(
            transaction_hash=tx_hash,
            block_number=receipt.get("blockNumber"),
            token_id=token_id,
            gas_used=receipt.get("gasUsed", 0),
            gas_price=int(gas_price) if gas_price is not None else None,
            sender=sender,
            contract_address=self.gateway.address,
        )
