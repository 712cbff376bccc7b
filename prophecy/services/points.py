"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

Encrypted cumulative points per user. Only settlement mutates it, and only
by homomorphic addition.
"""

import logging

from sqlalchemy.orm import Session

from prophecy.fhe import ZERO_HANDLE, FHEBackend
from prophecy.models import PointsAccount
from prophecy.services import events
from prophecy.services.permissions import PermissionRegistrar, sealed_handle

logger = logging.getLogger(__name__)


def get_user_points(db: Session, user: str) -> str:
    """
    Get the handle of a user's encrypted points total.

    Args:
        db: Database session
        user: Normalized user address

    Returns:
        Ciphertext handle, or ZERO_HANDLE for an untouched account
    """
    account = db.get(PointsAccount, user)
    return account.total if account is not None else ZERO_HANDLE


def accrue(
    db: Session,
    fhe: FHEBackend,
    registrar: PermissionRegistrar,
    user: str,
    award: str,
    now: int,
) -> str:
    """
    Add an encrypted award to a user's total.

    Args:
        db: Database session
        fhe: Encryption capability
        registrar: Permission registrar for this call
        user: Normalized user address
        award: Handle of the encrypted amount to add (may encrypt zero)
        now: Unix time of the call

    Returns:
        Handle of the new total
    """
    account = db.get(PointsAccount, user)
    current = account.total if account is not None else fhe.as_euint64(0)

    total = registrar.permit(fhe.add(current, award), user)
    handle = sealed_handle(total, user, registrar.contract)
    if account is None:
        db.add(PointsAccount(user=user, total=handle))
    else:
        account.total = handle

    events.emit(db, events.POINTS_UPDATED, now, user=user, total_points=handle)
    logger.debug(f"Points total for {user} rotated to a new ciphertext")
    return handle
