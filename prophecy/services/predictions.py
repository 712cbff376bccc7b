"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

Prediction placement, duplicate prevention, and per-user history.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from prophecy.errors import (
    DayAlreadyLocked,
    PredictionExists,
    StakeRequired,
    StakeTooLarge,
)
from prophecy.fhe import FHEBackend, FheType
from prophecy.models import Prediction, PredictionDay
from prophecy.schemas import Asset, PredictionView
from prophecy.services import events
from prophecy.services.permissions import PermissionRegistrar, Permissioned, sealed_handle
from prophecy.services.prices import is_day_locked
from prophecy.services.vault import Vault

logger = logging.getLogger(__name__)


def get_prediction_record(
    db: Session,
    user: str,
    day: int,
    asset: Asset,
) -> Optional[Prediction]:
    """
    Get the stored prediction for a (user, asset, day) key.

    Args:
        db: Database session
        user: Normalized user address
        day: Day index
        asset: Asset

    Returns:
        Prediction or None
    """
    return db.get(Prediction, (user, int(asset), day))


def get_prediction(db: Session, user: str, day: int, asset: Asset) -> PredictionView:
    """
    Read a prediction. Missing records read as ``exists=False`` with empty handles.

    Args:
        db: Database session
        user: Normalized user address
        day: Day index
        asset: Asset

    Returns:
        PredictionView
    """
    record = get_prediction_record(db, user, day, asset)
    if record is None:
        return PredictionView(user=user, asset=asset, day=day)
    return PredictionView(
        user=record.user,
        asset=Asset(record.asset),
        day=record.day,
        enc_price=record.enc_price,
        enc_direction=record.enc_direction,
        enc_outcome=record.enc_outcome,
        stake=record.stake,
        exists=True,
        resolved=record.resolved,
    )


def get_user_prediction_days(db: Session, user: str, asset: Asset) -> List[int]:
    """
    List the days a user predicted on for an asset, in placement order.

    Args:
        db: Database session
        user: Normalized user address
        asset: Asset

    Returns:
        List of day indices
    """
    query = (
        select(PredictionDay.day)
        .where(PredictionDay.user == user, PredictionDay.asset == int(asset))
        .order_by(PredictionDay.seq)
    )
    return list(db.execute(query).scalars().all())


def store_prediction(
    db: Session,
    user: str,
    asset: Asset,
    day: int,
    enc_price: Permissioned,
    enc_direction: Permissioned,
    stake: int,
    now: int,
    contract: str,
) -> Prediction:
    """
    Persist a new prediction and append its day to the user's index.

    Ciphertexts must already carry grants for the user and the ledger.
    """
    record = Prediction(
        user=user,
        asset=int(asset),
        day=day,
        enc_price=sealed_handle(enc_price, user, contract),
        enc_direction=sealed_handle(enc_direction, user, contract),
        enc_outcome=None,
        stake=stake,
        resolved=False,
        placed_at=now,
    )
    db.add(record)
    db.add(PredictionDay(user=user, asset=int(asset), day=day))
    return record


def place_prediction(
    db: Session,
    fhe: FHEBackend,
    registrar: PermissionRegistrar,
    vault: Vault,
    caller: str,
    asset: Asset,
    encrypted_price: str,
    encrypted_direction: str,
    input_proof: bytes,
    stake: int,
    day: int,
    now: int,
    stake_max: int,
) -> int:
    """
    Place an encrypted prediction for today.

    Args:
        db: Database session
        fhe: Encryption capability
        registrar: Permission registrar for this call
        vault: Escrow vault
        caller: Normalized caller address
        asset: Asset predicted on
        encrypted_price: Client handle of the 64-bit price threshold
        encrypted_direction: Client handle of the 8-bit direction code
        input_proof: Proof binding both handles to (ledger, caller)
        stake: Native value attached to the call
        day: Current day index
        now: Unix time of the call
        stake_max: Largest accepted stake

    Returns:
        The day index the prediction was placed for

    Raises:
        InvalidInputProof: If either ciphertext fails verification
        StakeRequired: If no value is attached
        StakeTooLarge: If the stake exceeds ``stake_max``
        DayAlreadyLocked: If today's prices are already posted
        PredictionExists: If the caller already predicted this asset today
    """
    contract = registrar.contract
    enc_price = fhe.verify_input(
        encrypted_price, input_proof, contract, caller, FheType.EUINT64
    )
    enc_direction = fhe.verify_input(
        encrypted_direction, input_proof, contract, caller, FheType.EUINT8
    )

    if stake <= 0:
        raise StakeRequired()
    if stake > stake_max:
        raise StakeTooLarge(stake)

    if is_day_locked(db, day):
        raise DayAlreadyLocked(day)

    if get_prediction_record(db, caller, day, asset) is not None:
        raise PredictionExists(day, caller, asset)

    vault.deposit(db, caller, stake)
    store_prediction(
        db,
        user=caller,
        asset=asset,
        day=day,
        enc_price=registrar.permit(enc_price, caller),
        enc_direction=registrar.permit(enc_direction, caller),
        stake=stake,
        now=now,
        contract=contract,
    )
    events.emit(
        db,
        events.PREDICTION_PLACED,
        now,
        user=caller,
        asset=asset,
        day=day,
        stake=stake,
    )
    logger.info(f"Prediction placed by {caller} on {asset.name} for day {day} (stake={stake})")
    return day
