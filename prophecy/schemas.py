"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

Shared types and pydantic views returned by ledger accessors.
"""

from enum import IntEnum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from prophecy.errors import InvalidAsset
from prophecy.fhe.types import ZERO_HANDLE

SECONDS_PER_DAY = 86_400
PRICE_DECIMALS = 8

DIRECTION_ABOVE = 1
DIRECTION_BELOW = 2


class Asset(IntEnum):
    """Tradeable assets. Used only as an index, never secret."""

    ETH = 0
    BTC = 1

    @classmethod
    def parse(cls, value: Union["Asset", int, str]) -> "Asset":
        """
        Coerce an index, enum member or case-insensitive name to an Asset.

        Raises:
            InvalidAsset: If the value names no asset
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise InvalidAsset(value) from None
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise InvalidAsset(value) from None
        raise InvalidAsset(value)


class PricePointView(BaseModel):
    """Clear price pair for a day. Pending days read as zeros with ``recorded=False``."""

    model_config = ConfigDict(from_attributes=True)

    day: int
    eth_price: int = 0
    btc_price: int = 0
    updated_at: int = 0
    recorded: bool = False

    @property
    def pending(self) -> bool:
        return not self.recorded

    def price_for(self, asset: Asset) -> int:
        return self.eth_price if asset == Asset.ETH else self.btc_price


class PredictionView(BaseModel):
    """Stored prediction with ciphertext handles. A missing record has ``exists=False``."""

    model_config = ConfigDict(from_attributes=True)

    user: str
    asset: Asset
    day: int
    enc_price: str = ZERO_HANDLE
    enc_direction: str = ZERO_HANDLE
    enc_outcome: str = ZERO_HANDLE
    stake: int = 0
    exists: bool = False
    resolved: bool = False

    @field_validator("enc_outcome", mode="before")
    @classmethod
    def _empty_outcome(cls, value: Optional[str]) -> str:
        return value or ZERO_HANDLE


class ProphecyEvent(BaseModel):
    """Event as read back from the event log."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    user: Optional[str] = None
    asset: Optional[int] = None
    day: Optional[int] = None
    payload: Dict[str, Any]
    created_at: int
