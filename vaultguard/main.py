"""VaultGuard API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly, one router per resource
    - Every error leaves as ``{error, details?}`` JSON
    - Node reachability is logged at startup, never fatal
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from vaultguard import __version__
from vaultguard.api.deps import get_gateway
from vaultguard.api.error_handlers import register_error_handlers
from vaultguard.api.routes import health, transactions, wills
from vaultguard.config import get_settings
from vaultguard.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    gateway = app.dependency_overrides.get(get_gateway, get_gateway)()
    if gateway.is_connected():
        logger.info("Node connected successfully to %s", settings.rpc_url)
    else:
        logger.warning("Node at %s is not reachable; ledger calls will fail", settings.rpc_url)
    logger.info("Registry contract: %s", gateway.address)
    yield
    logger.info("VaultGuard API shutting down")


app = FastAPI(title="VaultGuard API", version=__version__, lifespan=lifespan)

app.include_router(health.router)
app.include_router(wills.router)
app.include_router(transactions.router)

register_error_handlers(app)
