"""Transaction preparer: builds an unsigned createWill transaction for client-side signing.

Invariants:
    - All input validation happens before the first ledger call
    - No ledger state is mutated; nothing here ever signs
    - Gas limit is the configured default when estimation fails, and never
      below the raw estimate when it succeeds
"""

import logging
import time
from dataclasses import dataclass

from web3 import Web3

from vaultguard.addresses import is_address, require_address
from vaultguard.entities import render_timestamp
from vaultguard.errors import InvalidArgument, RegistryError, RemoteUnavailable

logger = logging.getLogger(__name__)

CREATE_FUNCTION = "createWill"
EIP1559_TX_TYPE = 2


def _as_str(value):
    return str(value) if value is not None else None


@dataclass(frozen=True)
class TransactionDescriptor:
    to: str
    data: str
    nonce: int
    gas_limit: int
    max_fee_per_gas: int | None
    max_priority_fee_per_gas: int | None
    chain_id: int
    deadline: int
    nominees: tuple[str, ...]
    encrypted_hash: str
    placeholder_hash: bool = False
    gas_estimated: bool = True
    tx_type: int = EIP1559_TX_TYPE
    function_name: str = CREATE_FUNCTION

    @property
    def estimated_cost_wei(self) -> int:
        return self.gas_limit * (self.max_fee_per_gas or 0)

    def transaction_data(self) -> dict:
        """Fields an external wallet needs to sign the transaction."""
        return {
            "to": self.to,
            "data": self.data,
            "nonce": self.nonce,
            "gasLimit": str(self.gas_limit),
            "maxFeePerGas": _as_str(self.max_fee_per_gas),
            "maxPriorityFeePerGas": _as_str(self.max_priority_fee_per_gas),
            "chainId": self.chain_id,
            "type": self.tx_type,
        }

    def to_response(self) -> dict:
        return {
            "transactionData": self.transaction_data(),
            "contractAddress": self.to,
            "functionName": self.function_name,
            "parameters": {
                "deadline": self.deadline,
                "nominees": list(self.nominees),
                "encryptedHash": self.encrypted_hash,
                "placeholderHash": self.placeholder_hash,
                "deadlineHuman": render_timestamp(self.deadline)[1],
            },
            "gasEstimate": {
                "gasLimit": str(self.gas_limit),
                "estimated": self.gas_estimated,
                "maxFeePerGas": _as_str(self.max_fee_per_gas),
                "maxPriorityFeePerGas": _as_str(self.max_priority_fee_per_gas),
                "estimatedCostWei": str(self.estimated_cost_wei),
                "estimatedCostEth": str(Web3.from_wei(self.estimated_cost_wei, "ether")),
            },
        }


def apply_gas_margin(raw_estimate: int, margin_percent: int) -> int:
    return max(raw_estimate, raw_estimate * (100 + margin_percent) // 100)


def content_hash(encrypted_data: str | None, now: float) -> tuple[str, bool]:
    """keccak256 of the payload, or of a time-based placeholder.

    The placeholder keeps demo flows working; it binds nothing and must not
    be relied on as a content identity.
    """
    if encrypted_data:
        return Web3.to_hex(Web3.keccak(text=encrypted_data)), False
    placeholder = f"default-encrypted-data-{int(now * 1000)}"
    return Web3.to_hex(Web3.keccak(text=placeholder)), True


class TransactionPreparer:
    def __init__(
        self,
        gateway,
        default_gas_limit: int = 300_000,
        gas_margin_percent: int = 20,
        default_deadline_seconds: int = 30 * 24 * 60 * 60,
        max_deadline_seconds: int | None = None,
    ):
        self.gateway = gateway
        self.default_gas_limit = default_gas_limit
        self.gas_margin_percent = gas_margin_percent
        self.default_deadline_seconds = default_deadline_seconds
        self.max_deadline_seconds = max_deadline_seconds

    def validate(self, owner_address, nominees, deadline_seconds):
        owner = require_address(owner_address, "Valid user address is required")
        if not isinstance(nominees, (list, tuple)) or not nominees:
            raise InvalidArgument(
                "Nominees array is required and must contain at least one address")
        for nominee in nominees:
            if not is_address(nominee):
                raise InvalidArgument(f"Invalid nominee address: {nominee}")
        if deadline_seconds is None:
            deadline_seconds = self.default_deadline_seconds
        if isinstance(deadline_seconds, bool) or not isinstance(deadline_seconds, int) \
                or deadline_seconds <= 0:
            raise InvalidArgument("Deadline offset must be a positive number of seconds")
        if self.max_deadline_seconds is not None and deadline_seconds > self.max_deadline_seconds:
            raise InvalidArgument(
                f"Deadline offset may not exceed {self.max_deadline_seconds} seconds")
        return owner, [Web3.to_checksum_address(n) for n in nominees], deadline_seconds

    def prepare(self, owner_address, nominees, deadline_seconds=None,
                encrypted_data=None, now=None) -> TransactionDescriptor:
        owner, nominees, deadline_seconds = self.validate(
            owner_address, nominees, deadline_seconds)
        if now is None:
            now = time.time()
        deadline = int(now) + deadline_seconds
        encrypted_hash, placeholder = content_hash(encrypted_data, now)
        if placeholder:
            logger.warning("No encrypted payload supplied for %s; using placeholder hash", owner,
                           extra={"owner": owner})

        try:
            chain_id = self.gateway.chain_id()
            nonce = self.gateway.next_nonce(owner)
            fees = self.gateway.estimate_fee()
            data = self.gateway.encode_call(CREATE_FUNCTION, [deadline, nominees, encrypted_hash])
        except RegistryError as e:
            raise RemoteUnavailable(
                "Failed to prepare transaction data", details=e.details or e.message) from e

        to = self.gateway.address
        gas_limit, estimated = self.gas_limit({"to": to, "data": data, "from": owner})

        return TransactionDescriptor(
            to=to,
            data=data,
            nonce=nonce,
            gas_limit=gas_limit,
            max_fee_per_gas=fees.max_fee,
            max_priority_fee_per_gas=fees.max_priority_fee,
            chain_id=chain_id,
            deadline=deadline,
            nominees=tuple(nominees),
            encrypted_hash=encrypted_hash,
            placeholder_hash=placeholder,
            gas_estimated=estimated,
        )

    def gas_limit(self, call) -> tuple[int, bool]:
        try:
            raw = self.gateway.estimate_gas(call)
        except RegistryError as e:
            logger.warning("Gas estimation failed, using default %d: %s",
                           self.default_gas_limit, e.details or e.message)
            return self.default_gas_limit, False
        return apply_gas_margin(int(raw), self.gas_margin_percent), True
