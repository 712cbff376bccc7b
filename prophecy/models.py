"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

SQLAlchemy models for the ledger's keyed stores.
"""

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    Index,
    Integer,
    String,
)

from prophecy.db import Base, Uint256

HANDLE_LENGTH = 66  # "0x" + 32 bytes hex


class PricePoint(Base):
    """One clear price pair per day. Write-once: a lock, not a cache."""

    __tablename__ = "price_points"

    day = Column(BigInteger, primary_key=True, autoincrement=False)
    eth_price = Column(Uint256, nullable=False)
    btc_price = Column(Uint256, nullable=False)
    updated_at = Column(BigInteger, nullable=False)


class Prediction(Base):
    """Encrypted prediction keyed by (user, asset, day)."""

    __tablename__ = "predictions"

    user = Column(String(42), primary_key=True)
    asset = Column(Integer, primary_key=True, autoincrement=False)
    day = Column(BigInteger, primary_key=True, autoincrement=False)
    enc_price = Column(String(HANDLE_LENGTH), nullable=False)
    enc_direction = Column(String(HANDLE_LENGTH), nullable=False)
    enc_outcome = Column(String(HANDLE_LENGTH), nullable=True)
    stake = Column(Uint256, nullable=False)
    resolved = Column(Boolean, nullable=False, default=False)
    placed_at = Column(BigInteger, nullable=False)
    resolved_at = Column(BigInteger, nullable=True)

    __table_args__ = (
        CheckConstraint("asset IN (0, 1)", name="predictions_asset_check"),
        Index("idx_predictions_user_asset", "user", "asset"),
    )


class PredictionDay(Base):
    """Append-only per-user, per-asset index of prediction days."""

    __tablename__ = "prediction_days"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    user = Column(String(42), nullable=False)
    asset = Column(Integer, nullable=False)
    day = Column(BigInteger, nullable=False)

    __table_args__ = (
        Index("idx_prediction_days_user_asset_seq", "user", "asset", "seq"),
    )


class PointsAccount(Base):
    """Encrypted cumulative score per user."""

    __tablename__ = "points_accounts"

    user = Column(String(42), primary_key=True)
    total = Column(String(HANDLE_LENGTH), nullable=False)


class NativeBalance(Base):
    """Clear native-value balances held by the escrow vault."""

    __tablename__ = "native_balances"

    account = Column(String(42), primary_key=True)
    amount = Column(Uint256, nullable=False, default=0)


class EventRecord(Base):
    """Events emitted by ledger calls. Clear payloads only."""

    __tablename__ = "event_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, index=True)
    user = Column(String(42), nullable=True, index=True)
    asset = Column(Integer, nullable=True)
    day = Column(BigInteger, nullable=True)
    payload = Column(JSON, nullable=False)
    created_at = Column(BigInteger, nullable=False)
