"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

Settlement: oblivious win/lose evaluation, points accrual, and stake refund.

Nothing in this module converts a ciphertext to a clear value. The outcome
and the award are derived with encrypted comparisons, boolean combination
and select, so control flow is identical for winning and losing
predictions.
"""

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Optional, Type

from sqlalchemy.orm import Session

from prophecy.errors import (
    CannotResolveYet,
    PredictionAlreadyResolved,
    PredictionMissing,
    PriceNotRecorded,
    ReentrancyDetected,
)
from prophecy.fhe import FHEBackend
from prophecy.schemas import DIRECTION_ABOVE, DIRECTION_BELOW, Asset
from prophecy.services import events, points
from prophecy.services.permissions import PermissionRegistrar, sealed_handle
from prophecy.services.predictions import get_prediction_record
from prophecy.services.prices import get_price_point
from prophecy.services.vault import Vault

logger = logging.getLogger(__name__)


class ReentrancyGuard:
    """Scoped guard: entering while already held raises ReentrancyDetected."""

    def __init__(self):
        self._entered = False

    @property
    def locked(self) -> bool:
        return self._entered

    def __enter__(self) -> "ReentrancyGuard":
        if self._entered:
            raise ReentrancyDetected()
        self._entered = True
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self._entered = False


@dataclass(frozen=True)
class SettlementResult:
    outcome: str
    award: str


def evaluate(
    fhe: FHEBackend,
    enc_price: str,
    enc_direction: str,
    clear_price: int,
    stake: int,
) -> SettlementResult:
    """
    Compute the encrypted outcome and award for one prediction.

    above   = (direction == 1) AND (threshold < clear_price)
    below   = (direction == 2) AND (threshold > clear_price)
    outcome = above OR below
    award   = select(outcome, stake, 0)

    A clear price equal to the threshold wins in neither direction.

    Args:
        fhe: Encryption capability
        enc_price: Handle of the encrypted threshold
        enc_direction: Handle of the encrypted direction code
        clear_price: Recorded price for the asset and day
        stake: Clear stake, lifted into the encrypted domain once

    Returns:
        SettlementResult with outcome (ebool) and award (euint64) handles
    """
    above_win = fhe.and_(
        fhe.eq(enc_direction, DIRECTION_ABOVE),
        fhe.lt(enc_price, clear_price),
    )
    below_win = fhe.and_(
        fhe.eq(enc_direction, DIRECTION_BELOW),
        fhe.gt(enc_price, clear_price),
    )
    outcome = fhe.or_(above_win, below_win)

    award = fhe.select(outcome, fhe.as_euint64(stake), fhe.as_euint64(0))
    return SettlementResult(outcome=outcome, award=award)


def confirm_prediction(
    db: Session,
    fhe: FHEBackend,
    registrar: PermissionRegistrar,
    vault: Vault,
    caller: str,
    day: int,
    asset: Asset,
    today: int,
    now: int,
) -> SettlementResult:
    """
    Settle the caller's prediction for a past day.

    State is written and flushed before the refund transfer; the refund is
    the last step of the call.

    Args:
        db: Database session
        fhe: Encryption capability
        registrar: Permission registrar for this call
        vault: Escrow vault
        caller: Normalized caller address
        day: Day the prediction was placed for
        asset: Asset predicted on
        today: Current day index
        now: Unix time of the call

    Returns:
        SettlementResult

    Raises:
        CannotResolveYet: If ``day`` has not ended
        PredictionMissing: If the caller has no prediction for the key
        PredictionAlreadyResolved: If it was already settled
        PriceNotRecorded: If no price was posted for ``day``
    """
    if day >= today:
        raise CannotResolveYet(day)

    record = get_prediction_record(db, caller, day, asset)
    if record is None:
        raise PredictionMissing(day, caller, asset)
    if record.resolved:
        raise PredictionAlreadyResolved(day, caller, asset)

    point = get_price_point(db, day)
    if point is None:
        raise PriceNotRecorded(day)

    clear_price = point.eth_price if asset == Asset.ETH else point.btc_price
    stake = record.stake

    result = evaluate(fhe, record.enc_price, record.enc_direction, clear_price, stake)
    points.accrue(db, fhe, registrar, caller, result.award, now)

    outcome = registrar.permit(result.outcome, caller)
    record.enc_outcome = sealed_handle(outcome, caller, registrar.contract)
    record.resolved = True
    record.resolved_at = now

    events.emit(
        db,
        events.PREDICTION_RESOLVED,
        now,
        user=caller,
        asset=asset,
        day=day,
        stake=stake,
    )
    db.flush()

    vault.transfer(db, caller, stake)
    logger.info(f"Prediction resolved for {caller} on {asset.name}, day {day}; refunded {stake}")
    return result
