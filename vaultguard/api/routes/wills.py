"""Will read routes: single lookup by token id and the paged discovery scan."""

import logging

from fastapi import APIRouter, Depends

from vaultguard.api.deps import get_gateway, get_scanner
from vaultguard.config import Settings, get_settings
from vaultguard.errors import InvalidArgument, NotFound, RemoteUnavailable
from vaultguard.records import fetch_will
from vaultguard.scanner import WillScanner

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["wills"])


@router.get("/will/{token_id}")
def get_will(token_id: str, gateway=Depends(get_gateway)):
    """Details of one will, straight from the ledger."""
    if not (token_id.isascii() and token_id.isdigit()):
        raise InvalidArgument("Invalid token ID. Please provide a valid numeric token ID.")
    try:
        will = fetch_will(gateway, int(token_id))
    except NotFound as e:
        raise NotFound(
            "Will not found. The specified token ID does not exist.", details=e.details,
        ) from e
    except RemoteUnavailable as e:
        raise RemoteUnavailable(
            "Failed to fetch will details from the blockchain", details=e.details or e.message,
        ) from e
    return will.to_response()


@router.get("/wills")
def list_wills(
    owner: str | None = None,
    limit: int | None = None,
    offset: int = 0,
    scanner: WillScanner = Depends(get_scanner),
    settings: Settings = Depends(get_settings),
):
    """Scan ids from ``offset`` for up to ``limit`` wills, optionally by owner."""
    owner = owner or None
    if limit is None:
        limit = settings.default_page_size
    result = scanner.list(owner=owner, limit=limit, offset=offset)
    return {
        "wills": [will.to_response() for will in result.wills],
        "pagination": {
            "limit": limit,
            "offset": offset,
            "count": len(result.wills),
            "hasMore": result.has_more,
            "examined": result.count_examined,
        },
        "filters": {"owner": owner},
    }
