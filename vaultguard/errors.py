"""Error hierarchy: every failure the registry API can report.

Invariants:
    - Every error carries a stable user-facing message, a code and an HTTP status
    - ``details`` holds the underlying remote message, never a stack trace
    - Validation errors are raised before any ledger call is made
"""


class RegistryError(Exception):
    """Base exception for all registry errors."""

    def __init__(
        self,
        message: str,
        code: str,
        http_status: int = 500,
        details: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status
        self.details = details

    def to_response(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


# ─── Client errors (400-level) ──────────────────────────────────

class InvalidArgument(RegistryError):
    """Client input failed local validation."""
    def __init__(self, message: str, details: str | None = None):
        super().__init__(message, "INVALID_ARGUMENT", 400, details)


class NotFound(RegistryError):
    """The ledger confirms the record does not exist."""
    def __init__(self, message: str, details: str | None = None):
        super().__init__(message, "NOT_FOUND", 404, details)


class InsufficientFunds(RegistryError):
    """The sender cannot pay for gas."""
    def __init__(self, details: str | None = None):
        super().__init__(
            "Insufficient funds to pay for gas fees",
            "INSUFFICIENT_FUNDS", 400, details,
        )


class InvalidNonce(RegistryError):
    """The signed nonce conflicts with the sender's account state."""
    def __init__(self, details: str | None = None):
        super().__init__(
            "Invalid transaction nonce", "INVALID_NONCE", 400, details,
        )


# ─── Remote errors (500-level) ──────────────────────────────────

class RemoteUnavailable(RegistryError):
    """Timeout, connectivity problem or unclassified remote failure."""
    def __init__(
        self,
        message: str,
        details: str | None = None,
        tx_hash: str | None = None,
    ):
        super().__init__(message, "REMOTE_UNAVAILABLE", 500, details)
        self.tx_hash = tx_hash

    def to_response(self) -> dict:
        body = super().to_response()
        if self.tx_hash:
            body["transactionHash"] = self.tx_hash
        return body
