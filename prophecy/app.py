"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

Application context and ledger factory.

``Prophecy`` binds the keyed stores (a SQLAlchemy session factory), the
encryption capability, the clock and the escrow vault, and runs every
operation as one all-or-nothing call.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Union

from sqlalchemy.orm import Session, sessionmaker

from prophecy.config import Settings, settings as default_settings
from prophecy.db import create_db_engine, init_db, make_session_factory
from prophecy.errors import NotAuthorized, ProphecyError, ProtocolUnsupported
from prophecy.fhe import FHEBackend, MockFHEBackend
from prophecy.schemas import Asset, PredictionView, PricePointView, ProphecyEvent
from prophecy.services import events, points, predictions, prices, settlement
from prophecy.services.clock import SystemClock, current_day
from prophecy.services.permissions import PermissionRegistrar
from prophecy.services.settlement import ReentrancyGuard
from prophecy.services.vault import Vault
from prophecy.utils import normalize_address

logger = logging.getLogger(__name__)

AssetLike = Union[Asset, int, str]


class Prophecy:
    """Confidential daily price-prediction ledger."""

    def __init__(
        self,
        session_factory: sessionmaker,
        fhe: FHEBackend,
        clock: Optional[SystemClock] = None,
        config: Optional[Settings] = None,
    ):
        self.settings = config or default_settings
        if fhe.protocol_id != self.settings.protocol_id:
            raise ProtocolUnsupported(self.settings.protocol_id, fhe.protocol_id)

        self.owner = normalize_address(self.settings.owner_address)
        self.address = normalize_address(self.settings.contract_address)
        self.fhe = fhe
        self.clock = clock or SystemClock()
        self.vault = Vault(self.address)
        self.permissions = PermissionRegistrar(fhe, self.address)
        self._session_factory = session_factory
        self._guard = ReentrancyGuard()
        self._active: Optional[Session] = None

    @contextmanager
    def _call(self, name: str) -> Iterator[Session]:
        """One atomic ledger call: commit everything or nothing. Runs under the guard."""
        with self._guard:
            db = self._session_factory()
            self._active = db
            try:
                yield db
                db.commit()
                self.permissions.commit()
            except ProphecyError as e:
                db.rollback()
                self.permissions.discard()
                logger.warning(f"{name} rejected: {e}")
                raise
            except Exception:
                db.rollback()
                self.permissions.discard()
                logger.exception(f"{name} failed")
                raise
            finally:
                self._active = None
                self.fhe.end_transaction()
                db.close()

    @contextmanager
    def _read(self) -> Iterator[Session]:
        # Reads issued from inside a call (e.g. a receive hook) see that call's state
        if self._active is not None:
            yield self._active
            return
        db = self._session_factory()
        try:
            yield db
        finally:
            db.close()

    # state-changing operations

    def update_prices(self, caller: str, eth_price: int, btc_price: int) -> int:
        """
        Post today's clear prices and lock the day. Owner only.

        Returns:
            The day index that was recorded
        """
        with self._call("update_prices") as db:
            caller = normalize_address(caller)
            if caller != self.owner:
                raise NotAuthorized(caller)

            now = self.clock.now()
            day = current_day(now)
            prices.record_prices(
                db,
                day=day,
                eth_price=int(eth_price),
                btc_price=int(btc_price),
                now=now,
                max_price=self.settings.max_price,
            )
        return day

    def place_prediction(
        self,
        caller: str,
        asset: AssetLike,
        encrypted_price: str,
        encrypted_direction: str,
        input_proof: bytes,
        value: int,
    ) -> int:
        """
        Place an encrypted prediction for today with ``value`` attached as stake.

        Returns:
            The day index the prediction targets
        """
        with self._call("place_prediction") as db:
            now = self.clock.now()
            day = predictions.place_prediction(
                db,
                self.fhe,
                self.permissions,
                self.vault,
                caller=normalize_address(caller),
                asset=Asset.parse(asset),
                encrypted_price=encrypted_price,
                encrypted_direction=encrypted_direction,
                input_proof=input_proof,
                stake=int(value),
                day=current_day(now),
                now=now,
                stake_max=self.settings.stake_max,
            )
        return day

    def confirm_prediction(self, caller: str, day: int, asset: AssetLike) -> None:
        """Settle the caller's prediction for a day that has ended."""
        with self._call("confirm_prediction") as db:
            now = self.clock.now()
            settlement.confirm_prediction(
                db,
                self.fhe,
                self.permissions,
                self.vault,
                caller=normalize_address(caller),
                day=int(day),
                asset=Asset.parse(asset),
                today=current_day(now),
                now=now,
            )

    # read-only accessors

    def get_current_day(self) -> int:
        return current_day(self.clock.now())

    def get_price_decimals(self) -> int:
        return self.settings.price_decimals

    def confidential_protocol_id(self) -> int:
        return self.settings.protocol_id

    def get_prices_for_day(self, day: int) -> PricePointView:
        with self._read() as db:
            return prices.get_prices_for_day(db, int(day))

    def last_recorded_day(self) -> int:
        with self._read() as db:
            return prices.last_recorded_day(db)

    def get_prediction(self, user: str, day: int, asset: AssetLike) -> PredictionView:
        with self._read() as db:
            return predictions.get_prediction(
                db, normalize_address(user), int(day), Asset.parse(asset)
            )

    def get_user_prediction_days(self, user: str, asset: AssetLike) -> List[int]:
        with self._read() as db:
            return predictions.get_user_prediction_days(
                db, normalize_address(user), Asset.parse(asset)
            )

    def get_user_points(self, user: str) -> str:
        with self._read() as db:
            return points.get_user_points(db, normalize_address(user))

    def contract_balance(self) -> int:
        with self._read() as db:
            return self.vault.balance_of(db, self.address)

    def balance_of(self, account: str) -> int:
        with self._read() as db:
            return self.vault.balance_of(db, account)

    def get_events(self, name: Optional[str] = None) -> List[ProphecyEvent]:
        with self._read() as db:
            return [ProphecyEvent.model_validate(e) for e in events.list_events(db, name)]


def create_prophecy(
    config: Optional[Settings] = None,
    fhe: Optional[FHEBackend] = None,
    clock: Optional[SystemClock] = None,
) -> Prophecy:
    """
    Create a ledger with its database initialized.

    Args:
        config: Settings (defaults to the environment-loaded instance)
        fhe: Encryption capability (defaults to the in-process mock)
        clock: Clock (defaults to the system clock)

    Returns:
        Prophecy instance
    """
    config = config or default_settings
    engine = create_db_engine(config.database_url)
    init_db(engine)

    if fhe is None:
        fhe = MockFHEBackend(
            contract=config.contract_address,
            secret=config.input_secret,
            protocol_id=config.protocol_id,
        )

    logger.info(f"Prophecy ledger ready at {config.contract_address} (owner {config.owner_address})")
    return Prophecy(make_session_factory(engine), fhe, clock=clock, config=config)
