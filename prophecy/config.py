"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

Configuration management for ONCHAIN PROPHECY.
"""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

UINT64_MAX = 2**64 - 1


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PROPHECY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+pysqlite:///:memory:"

    # Ledger identities
    owner_address: str = "0x0000000000000000000000000000000000000001"
    contract_address: str = "0x00000000000000000000000000000000000c0de5"

    # Policy bounds (stakes and prices are compared as 64-bit ciphertexts)
    stake_max: int = Field(UINT64_MAX, ge=1, le=UINT64_MAX)
    max_price: int = Field(UINT64_MAX, ge=0, le=UINT64_MAX)
    price_decimals: int = 8

    # Encryption capability
    protocol_id: int = 1
    input_secret: str = "dev-input-secret-change-in-production"

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
