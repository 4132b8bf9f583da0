"""Request bodies. Field names follow the JSON wire format."""

from pydantic import BaseModel


class PrepareRequest(BaseModel):
    userAddress: str | None = None
    nominees: list[str] | None = None
    deadlineSeconds: int | None = None
    encryptedData: str | None = None


class BroadcastRequest(BaseModel):
    signedTransaction: str | None = None
