"""Application configuration: environment-driven settings via pydantic-settings.

Every value can be overridden with a ``VAULTGUARD_``-prefixed environment
variable or a ``.env`` file. ``get_settings()`` is cached, one instance per
process.
"""

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vaultguard.abis import registry_abi


@dataclass(frozen=True)
class LedgerConfig:
    """Everything the gateway needs to reach the registry contract."""
    rpc_url: str
    registry_address: str
    registry_abi: str
    rpc_timeout_seconds: float = 10
    broadcast_timeout_seconds: float = 120


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="VAULTGUARD_", case_sensitive=False,
    )

    # Ledger
    rpc_url: str = "https://ethereum-sepolia-rpc.publicnode.com"
    registry_address: str = "0x141fa614e6b3a24e8076777b56e22a447d156884"
    registry_abi_path: str | None = None
    rpc_timeout_seconds: float = 10
    broadcast_timeout_seconds: float = 120

    # Discovery
    scan_horizon_factor: int = 10
    scan_concurrency: int = 1
    max_page_size: int = 100
    default_page_size: int = 10

    # Transactions
    default_gas_limit: int = 300_000
    gas_margin_percent: int = 20
    default_deadline_seconds: int = 30 * 24 * 60 * 60
    max_deadline_seconds: int | None = None

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator(
        "scan_horizon_factor", "scan_concurrency", "max_page_size",
        "default_page_size", "default_gas_limit", "default_deadline_seconds",
    )
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("gas_margin_percent")
    @classmethod
    def margin_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    def load_registry_abi(self) -> str:
        """Bundled ABI unless a JSON ABI file is configured."""
        if not self.registry_abi_path:
            return registry_abi
        text = Path(self.registry_abi_path).read_text(encoding="utf-8")
        # Fail at startup, not on the first request.
        json.loads(text)
        return text

    def ledger_config(self) -> LedgerConfig:
        return LedgerConfig(
            rpc_url=self.rpc_url,
            registry_address=self.registry_address,
            registry_abi=self.load_registry_abi(),
            rpc_timeout_seconds=self.rpc_timeout_seconds,
            broadcast_timeout_seconds=self.broadcast_timeout_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
