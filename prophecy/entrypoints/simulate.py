import argparse
import logging
import os
from typing import Dict, Optional

from prophecy.app import Prophecy, create_prophecy
from prophecy.config import Settings
from prophecy.errors import ProphecyError
from prophecy.fhe import MockFHEBackend
from prophecy.schemas import DIRECTION_ABOVE, DIRECTION_BELOW, SECONDS_PER_DAY, Asset
from prophecy.services.clock import FrozenClock
from prophecy.utils import format_day_label, format_scaled_value, to_scaled_value

DEFAULT_USER = "0x00000000000000000000000000000000000a11ce"


def run_cycle(
    prophecy: Prophecy,
    fhe: MockFHEBackend,
    clock: FrozenClock,
    user: str,
    asset: Asset,
    guess: int,
    direction: int,
    stake: int,
    close_price: int,
) -> Dict[str, object]:
    """Place, lock, advance one day, confirm, then reveal through the ACL."""
    encrypted = (
        fhe.create_encrypted_input(prophecy.address, user)
        .add64(guess)
        .add8(direction)
        .encrypt()
    )
    day = prophecy.place_prediction(
        user,
        asset,
        encrypted.handles[0],
        encrypted.handles[1],
        encrypted.input_proof,
        value=stake,
    )

    eth, btc = (close_price, 0) if asset == Asset.ETH else (0, close_price)
    prophecy.update_prices(prophecy.owner, eth, btc)

    clock.advance(SECONDS_PER_DAY + 1)
    prophecy.confirm_prediction(user, day, asset)

    prediction = prophecy.get_prediction(user, day, asset)
    return {
        "day": day,
        "won": bool(fhe.user_decrypt(prediction.enc_outcome, prophecy.address, user)),
        "points": fhe.user_decrypt(prophecy.get_user_points(user), prophecy.address, user),
        "refunded": prophecy.balance_of(user),
        "escrow": prophecy.contract_balance(),
    }


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Run one confidential prediction cycle against the in-process capability",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--asset", type=str, default="eth", choices=["eth", "btc"])
    parser.add_argument(
        "--guess", type=str, required=True, help="Price threshold, e.g. 3150.25"
    )
    parser.add_argument(
        "--direction", type=str, default="above", choices=["above", "below"]
    )
    parser.add_argument(
        "--close", type=str, required=True, help="Closing price posted by the operator"
    )
    parser.add_argument(
        "--stake", type=int, default=10**18, help="Stake in the native unit"
    )
    parser.add_argument(
        "--user", type=str, default=os.getenv("PROPHECY_USER", DEFAULT_USER)
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=os.getenv("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        dest="log_level",
        help="Logging level",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger = logging.getLogger(__name__)

    config = Settings(log_level=args.log_level)
    decimals = config.price_decimals
    clock = FrozenClock()
    fhe = MockFHEBackend(
        contract=config.contract_address,
        secret=config.input_secret,
        protocol_id=config.protocol_id,
    )
    prophecy = create_prophecy(config=config, fhe=fhe, clock=clock)

    asset = Asset.parse(args.asset)
    direction = DIRECTION_ABOVE if args.direction == "above" else DIRECTION_BELOW
    try:
        result = run_cycle(
            prophecy,
            fhe,
            clock,
            user=args.user,
            asset=asset,
            guess=to_scaled_value(args.guess, decimals),
            direction=direction,
            stake=args.stake,
            close_price=to_scaled_value(args.close, decimals),
        )
    except (ProphecyError, ValueError) as e:
        logger.error(f"Simulation failed: {e}")
        return 1

    logger.info(f"{format_day_label(result['day'])} {asset.name} {args.direction} {args.guess}")
    logger.info(f"  Close:    {format_scaled_value(to_scaled_value(args.close, decimals), decimals)}")
    logger.info(f"  Outcome:  {'win' if result['won'] else 'loss'}")
    logger.info(f"  Points:   {result['points']}")
    logger.info(f"  Refunded: {result['refunded']}")
    logger.info(f"  Escrow:   {result['escrow']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
