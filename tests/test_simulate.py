import pytest

from prophecy import Asset, DIRECTION_ABOVE, DIRECTION_BELOW
from prophecy.entrypoints.simulate import main, run_cycle

from conftest import ALICE, ONE_ETHER


class TestRunCycle:

    def test_winning_cycle(self, prophecy, fhe, clock):
        result = run_cycle(
            prophecy,
            fhe,
            clock,
            user=ALICE,
            asset=Asset.ETH,
            guess=10_000_000_000,
            direction=DIRECTION_ABOVE,
            stake=ONE_ETHER,
            close_price=12_000_000_000,
        )
        assert result["won"] is True
        assert result["points"] == ONE_ETHER
        assert result["refunded"] == ONE_ETHER
        assert result["escrow"] == 0

    def test_losing_cycle_still_refunds(self, prophecy, fhe, clock):
        result = run_cycle(
            prophecy,
            fhe,
            clock,
            user=ALICE,
            asset=Asset.BTC,
            guess=10_000_000_000,
            direction=DIRECTION_BELOW,
            stake=7,
            close_price=12_000_000_000,
        )
        assert result["won"] is False
        assert result["points"] == 0
        assert result["refunded"] == 7


@pytest.mark.parametrize(
    "argv, expected",
    [
        (["--guess", "100", "--close", "120"], 0),
        (["--guess", "100", "--close", "80", "--direction", "below", "--asset", "btc"], 0),
        (["--guess", "100", "--close", "120", "--stake", "0"], 1),
        (["--guess", "abc", "--close", "120"], 1),
    ],
)
def test_main_exit_codes(argv, expected):
    assert main(argv) == expected
