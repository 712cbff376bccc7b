from .app import Prophecy, create_prophecy
from .config import Settings
from .errors import (
    CannotResolveYet,
    DayAlreadyLocked,
    DecryptionNotAllowed,
    InvalidAsset,
    InvalidInputProof,
    NotAuthorized,
    PredictionAlreadyResolved,
    PredictionExists,
    PredictionMissing,
    PriceNotRecorded,
    PriceTooLarge,
    ProphecyError,
    ProtocolUnsupported,
    ReentrancyDetected,
    StakeRequired,
    StakeTooLarge,
)
from .schemas import (
    DIRECTION_ABOVE,
    DIRECTION_BELOW,
    PRICE_DECIMALS,
    Asset,
    PredictionView,
    PricePointView,
    ProphecyEvent,
)
from .services.clock import FrozenClock, SystemClock, current_day

__all__ = [
    "Prophecy",
    "create_prophecy",
    "Settings",
    "Asset",
    "DIRECTION_ABOVE",
    "DIRECTION_BELOW",
    "PRICE_DECIMALS",
    "PredictionView",
    "PricePointView",
    "ProphecyEvent",
    "FrozenClock",
    "SystemClock",
    "current_day",
    "ProphecyError",
    "CannotResolveYet",
    "DayAlreadyLocked",
    "DecryptionNotAllowed",
    "InvalidAsset",
    "InvalidInputProof",
    "NotAuthorized",
    "PredictionAlreadyResolved",
    "PredictionExists",
    "PredictionMissing",
    "PriceNotRecorded",
    "PriceTooLarge",
    "ProtocolUnsupported",
    "ReentrancyDetected",
    "StakeRequired",
    "StakeTooLarge",
]
