"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

Daily price ledger. Posting a day's prices also locks that day against new
predictions.
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from prophecy.errors import DayAlreadyLocked, PriceTooLarge
from prophecy.models import PricePoint
from prophecy.schemas import PricePointView
from prophecy.services import events

logger = logging.getLogger(__name__)


def get_price_point(db: Session, day: int) -> Optional[PricePoint]:
    """
    Get the stored price point for a day.

    Args:
        db: Database session
        day: Day index

    Returns:
        PricePoint or None if the day is still pending
    """
    return db.get(PricePoint, day)


def get_prices_for_day(db: Session, day: int) -> PricePointView:
    """
    Read a day's prices. Pending days read as zeros with ``recorded=False``.

    Args:
        db: Database session
        day: Day index

    Returns:
        PricePointView
    """
    point = get_price_point(db, day)
    if point is None:
        return PricePointView(day=day)
    return PricePointView(
        day=point.day,
        eth_price=point.eth_price,
        btc_price=point.btc_price,
        updated_at=point.updated_at,
        recorded=True,
    )


def is_day_locked(db: Session, day: int) -> bool:
    """Check whether prices for the day have been posted."""
    point = get_price_point(db, day)
    return point is not None


def last_recorded_day(db: Session) -> int:
    """Most recent day with posted prices (0 if none)."""
    return db.execute(select(func.max(PricePoint.day))).scalar() or 0


def record_prices(
    db: Session,
    day: int,
    eth_price: int,
    btc_price: int,
    now: int,
    max_price: int,
) -> PricePoint:
    """
    Write the price point for ``day`` and lock it.

    Args:
        db: Database session
        day: Current day index
        eth_price: ETH close, scaled by PRICE_DECIMALS
        btc_price: BTC close, scaled by PRICE_DECIMALS
        now: Unix time of the call
        max_price: Largest price comparable against an encrypted threshold

    Returns:
        The new PricePoint

    Raises:
        PriceTooLarge: If either price is out of range
        DayAlreadyLocked: If the day already has prices
    """
    for price in (eth_price, btc_price):
        if price < 0:
            raise ValueError(f"price must be non-negative, got {price}")
        if price > max_price:
            raise PriceTooLarge(price)

    if is_day_locked(db, day):
        raise DayAlreadyLocked(day)

    point = PricePoint(
        day=day,
        eth_price=eth_price,
        btc_price=btc_price,
        updated_at=now,
    )
    db.add(point)
    events.emit(
        db,
        events.PRICES_UPDATED,
        now,
        day=day,
        eth_price=eth_price,
        btc_price=btc_price,
        updated_at=now,
    )
    logger.info(f"Prices recorded for day {day}: eth={eth_price} btc={btc_price}")
    return point
