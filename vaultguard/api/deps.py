"""Service wiring: one cached instance per process, overridable in tests."""

from functools import lru_cache

from vaultguard.config import get_settings
from vaultguard.gateway import LedgerGateway
from vaultguard.preparer import TransactionPreparer
from vaultguard.scanner import WillScanner
from vaultguard.submitter import TransactionSubmitter


@lru_cache(maxsize=1)
def get_gateway() -> LedgerGateway:
    return LedgerGateway(get_settings().ledger_config())


@lru_cache(maxsize=1)
def get_scanner() -> WillScanner:
    settings = get_settings()
    return WillScanner(
        get_gateway(),
        horizon_factor=settings.scan_horizon_factor,
        max_page_size=settings.max_page_size,
        concurrency=settings.scan_concurrency,
    )


@lru_cache(maxsize=1)
def get_preparer() -> TransactionPreparer:
    settings = get_settings()
    return TransactionPreparer(
        get_gateway(),
        default_gas_limit=settings.default_gas_limit,
        gas_margin_percent=settings.gas_margin_percent,
        default_deadline_seconds=settings.default_deadline_seconds,
        max_deadline_seconds=settings.max_deadline_seconds,
    )


@lru_cache(maxsize=1)
def get_submitter() -> TransactionSubmitter:
    return TransactionSubmitter(get_gateway())
