"""Write routes: prepare an unsigned createWill and broadcast the signed result.

The service never signs: ``prepare`` hands back a descriptor for the
client's wallet, ``broadcast`` accepts the wallet's signed bytes.
"""

from fastapi import APIRouter, Depends, status

from vaultguard.api.deps import get_preparer, get_submitter
from vaultguard.api.schemas import BroadcastRequest, PrepareRequest
from vaultguard.preparer import TransactionPreparer
from vaultguard.submitter import TransactionSubmitter

router = APIRouter(prefix="/api/will", tags=["transactions"])


@router.post("/prepare")
def prepare_will(
    body: PrepareRequest, preparer: TransactionPreparer = Depends(get_preparer),
):
    descriptor = preparer.prepare(
        body.userAddress,
        body.nominees,
        deadline_seconds=body.deadlineSeconds,
        encrypted_data=body.encryptedData,
    )
    return descriptor.to_response()


@router.post("/broadcast", status_code=status.HTTP_201_CREATED)
def broadcast_will(
    body: BroadcastRequest, submitter: TransactionSubmitter = Depends(get_submitter),
):
    return submitter.broadcast(body.signedTransaction).to_response()
