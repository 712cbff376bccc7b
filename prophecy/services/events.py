"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

Event log. Events are written in the caller's transaction, so a rejected
call leaves no trace.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from prophecy.models import EventRecord

logger = logging.getLogger(__name__)

PRICES_UPDATED = "PricesUpdated"
PREDICTION_PLACED = "PredictionPlaced"
PREDICTION_RESOLVED = "PredictionResolved"
POINTS_UPDATED = "PointsUpdated"


def emit(
    db: Session,
    name: str,
    created_at: int,
    user: Optional[str] = None,
    asset: Optional[int] = None,
    day: Optional[int] = None,
    **payload: Any,
) -> EventRecord:
    """
    Append an event to the log.

    Args:
        db: Database session
        name: Event name
        created_at: Unix time of the call
        user: Indexed user address, if any
        asset: Indexed asset, if any
        day: Indexed day, if any
        **payload: Clear event fields

    Returns:
        The pending EventRecord
    """
    body = dict(payload)
    if user is not None:
        body["user"] = user
    if asset is not None:
        body["asset"] = int(asset)
    if day is not None:
        body["day"] = day

    record = EventRecord(
        name=name,
        user=user,
        asset=None if asset is None else int(asset),
        day=day,
        payload=body,
        created_at=created_at,
    )
    db.add(record)
    logger.debug(f"Event {name} queued: {body}")
    return record


def list_events(db: Session, name: Optional[str] = None) -> List[EventRecord]:
    """
    List events in emission order.

    Args:
        db: Database session
        name: Restrict to one event name

    Returns:
        List of event records
    """
    query = select(EventRecord).order_by(EventRecord.id)
    if name is not None:
        query = query.where(EventRecord.name == name)
    return list(db.execute(query).scalars().all())
