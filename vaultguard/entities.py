# vaultguard/entities.py
from datetime import datetime, timezone

from web3 import Web3

# Anything below this is an empty slot, not a will
MIN_VALID_DEADLINE = 1_000_000_000


def _as_int(value):
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def _as_hex(value):
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(value)
    if value is None:
        return "0x"
    return str(value)


def _as_owner(value):
    if isinstance(value, str) and Web3.is_address(value):
        return Web3.to_checksum_address(value)
    return str(value) if value else None


def _field(raw, index, default=None):
    try:
        return raw[index]
    except (IndexError, KeyError, TypeError):
        return default


def render_timestamp(timestamp):
    try:
        moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None, None
    return (
        moment.isoformat().replace("+00:00", "Z"),
        moment.strftime("%Y-%m-%d %H:%M:%S UTC"),
    )


class Will:
    def __init__(self, record_id, owner, deadline, triggered, nominees,
                 encrypted_hash, decrypted_hash, executed, now):
        self.record_id = record_id
        self.owner = owner
        self.deadline = deadline
        self.triggered = triggered
        self.nominees = nominees
        self.encrypted_hash = encrypted_hash
        self.decrypted_hash = decrypted_hash
        self.executed = executed
        self.is_active = not triggered and not executed
        self.deadline_passed = now > deadline

    def has_valid_deadline(self):
        return self.deadline >= MIN_VALID_DEADLINE

    def to_response(self):
        """Serializes the will to the JSON shape returned by the API."""
        date, human_readable = render_timestamp(self.deadline)
        return {
            'tokenId': self.record_id,
            'owner': self.owner,
            'deadline': {
                'timestamp': self.deadline,
                'date': date,
                'humanReadable': human_readable,
            },
            'triggered': self.triggered,
            'nominees': self.nominees,
            'encryptedHash': self.encrypted_hash,
            'decryptedHash': self.decrypted_hash,
            'executed': self.executed,
            'status': {
                'isActive': self.is_active,
                'isTriggered': self.triggered,
                'isExecuted': self.executed,
                'deadlinePassed': self.deadline_passed,
            },
        }



def format_will(raw, owner, record_id, now=None):
    """Map a raw ``getWill`` tuple onto a Will.

    Tuple layout: deadline, triggered, nominees, encryptedHash,
    decryptedHash, executed. Fields that fail numeric coercion become 0 so
    the scanner's deadline check rejects them.
    """
    if now is None:
        now = datetime.now(timezone.utc).timestamp()
    nominees = _field(raw, 2) or []
    return Will(
        record_id=_as_int(record_id),
        owner=_as_owner(owner),
        deadline=_as_int(_field(raw, 0)),
        triggered=bool(_field(raw, 1, False)),
        nominees=[str(n) for n in nominees] if isinstance(nominees, (list, tuple)) else [],
        encrypted_hash=_as_hex(_field(raw, 3)),
        decrypted_hash=_as_hex(_field(raw, 4)),
        executed=bool(_field(raw, 5, False)),
        now=now,
    )
