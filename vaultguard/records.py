"""Single-record lookup, shared by the will detail route."""

import logging

from vaultguard.entities import format_will
from vaultguard.errors import NotFound, RegistryError

logger = logging.getLogger(__name__)


def fetch_will(gateway, record_id, now=None):
    """Fetch and format one will.

    The owner lookup may fail on its own; the will is then reported with no
    owner. An empty slot is absent only when the ledger also denied the
    owner; if the owner lookup failed remotely, that failure is raised.
    """
    logger.info("Fetching will details for token ID: %s", record_id,
                extra={"token_id": record_id})
    owner_error = None
    try:
        owner = gateway.fetch_owner(record_id)
    except RegistryError as e:
        logger.info("Owner lookup for %s failed: %s", record_id, e.details or e.message)
        owner, owner_error = None, e

    raw = gateway.fetch_record(record_id)
    will = format_will(raw, owner, record_id, now=now)
    if owner_error is not None and not will.has_valid_deadline():
        if isinstance(owner_error, NotFound):
            raise NotFound("Will not found. The specified token ID does not exist.")
        raise owner_error
    return will
