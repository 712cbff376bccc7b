"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

Failures surfaced at the ledger boundary.

Every error carries the clear data needed to build a precise diagnostic
(day, user, asset) and never any ciphertext content.
"""

from typing import Any


class ProphecyError(RuntimeError):
    """Base class for every rejected ledger call."""

    def __init__(self, message: str, **fields: Any):
        super().__init__(message)
        self.fields = fields
        for name, value in fields.items():
            setattr(self, name, value)


class NotAuthorized(ProphecyError):
    def __init__(self, caller: str):
        super().__init__(f"Caller {caller} is not authorized", caller=caller)


class InvalidAsset(ProphecyError):
    def __init__(self, value: Any):
        super().__init__(f"Unknown asset: {value!r}", value=value)


class DayAlreadyLocked(ProphecyError):
    def __init__(self, day: int):
        super().__init__(f"Prices already recorded for day {day}", day=day)


class CannotResolveYet(ProphecyError):
    def __init__(self, day: int):
        super().__init__(f"Day {day} has not ended yet", day=day)


class PriceNotRecorded(ProphecyError):
    def __init__(self, day: int):
        super().__init__(f"No price recorded for day {day}", day=day)


class PriceTooLarge(ProphecyError):
    def __init__(self, value: int):
        super().__init__(f"Price {value} exceeds the supported range", value=value)


class StakeRequired(ProphecyError):
    def __init__(self):
        super().__init__("A positive stake must be attached")


class StakeTooLarge(ProphecyError):
    def __init__(self, value: int):
        super().__init__(f"Stake {value} exceeds the supported range", value=value)


class _PredictionKeyError(ProphecyError):
    template = "Prediction {user}/{asset}/day {day}"

    def __init__(self, day: int, user: str, asset: int):
        super().__init__(
            self.template.format(day=day, user=user, asset=int(asset)),
            day=day,
            user=user,
            asset=int(asset),
        )


class PredictionExists(_PredictionKeyError):
    template = "Prediction already placed for {user} on asset {asset}, day {day}"


class PredictionMissing(_PredictionKeyError):
    template = "No prediction for {user} on asset {asset}, day {day}"


class PredictionAlreadyResolved(_PredictionKeyError):
    template = "Prediction for {user} on asset {asset}, day {day} is already resolved"


class ReentrancyDetected(ProphecyError):
    def __init__(self):
        super().__init__("Re-entrant call rejected")


class InvalidInputProof(ProphecyError):
    def __init__(self, reason: str):
        super().__init__(f"Input proof rejected: {reason}", reason=reason)


class ProtocolUnsupported(ProphecyError):
    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Encrypted computation protocol {actual} is not supported (expected {expected})",
            expected=expected,
            actual=actual,
        )


class DecryptionNotAllowed(ProphecyError):
    def __init__(self, handle: str, account: str):
        super().__init__(
            f"{account} is not allowed to decrypt handle {handle}",
            handle=handle,
            account=account,
        )


__all__ = [
    "ProphecyError",
    "NotAuthorized",
    "InvalidAsset",
    "DayAlreadyLocked",
    "CannotResolveYet",
    "PriceNotRecorded",
    "PriceTooLarge",
    "StakeRequired",
    "StakeTooLarge",
    "PredictionExists",
    "PredictionMissing",
    "PredictionAlreadyResolved",
    "ReentrancyDetected",
    "InvalidInputProof",
    "ProtocolUnsupported",
    "DecryptionNotAllowed",
]
