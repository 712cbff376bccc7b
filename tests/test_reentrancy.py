"""Tests for refund ordering and the re-entrancy guard."""
import pytest

from prophecy import DIRECTION_ABOVE, Asset, ReentrancyDetected, StakeRequired
from prophecy.fhe import ZERO_HANDLE
from prophecy.schemas import SECONDS_PER_DAY
from prophecy.services.settlement import ReentrancyGuard

from conftest import ALICE, ONE_ETHER, OWNER


@pytest.fixture
def settled_day(prophecy, clock, place):
    day = place(ALICE, Asset.ETH, 10_000_000_000, DIRECTION_ABOVE)
    prophecy.update_prices(OWNER, 12_000_000_000, 0)
    clock.advance(SECONDS_PER_DAY + 1)
    return day


class TestReentrancyGuard:

    def test_guard_rejects_nested_entry(self):
        guard = ReentrancyGuard()
        with guard:
            assert guard.locked
            with pytest.raises(ReentrancyDetected):
                with guard:
                    pass
        assert not guard.locked

    def test_guard_released_on_error(self):
        guard = ReentrancyGuard()
        with pytest.raises(RuntimeError):
            with guard:
                raise RuntimeError("boom")
        assert not guard.locked


class TestRefundReentrancy:

    def test_state_written_before_refund(self, prophecy, settled_day):
        seen = {}

        def on_receive(sender, amount):
            prediction = prophecy.get_prediction(ALICE, settled_day, Asset.ETH)
            seen["resolved"] = prediction.resolved
            seen["outcome"] = prediction.enc_outcome
            seen["points"] = prophecy.get_user_points(ALICE)
            seen["amount"] = amount
            seen["sender"] = sender

        prophecy.vault.register_receiver(ALICE, on_receive)
        prophecy.confirm_prediction(ALICE, settled_day, Asset.ETH)

        assert seen["resolved"] is True
        assert seen["outcome"] != ZERO_HANDLE
        assert seen["points"] != ZERO_HANDLE
        assert seen["amount"] == ONE_ETHER
        assert seen["sender"] == prophecy.address

    def test_reentrant_confirm_reverts_whole_call(self, prophecy, settled_day):
        def on_receive(sender, amount):
            prophecy.confirm_prediction(ALICE, settled_day, Asset.ETH)

        prophecy.vault.register_receiver(ALICE, on_receive)

        with pytest.raises(ReentrancyDetected):
            prophecy.confirm_prediction(ALICE, settled_day, Asset.ETH)

        prediction = prophecy.get_prediction(ALICE, settled_day, Asset.ETH)
        assert prediction.resolved is False
        assert prediction.enc_outcome == ZERO_HANDLE
        assert prophecy.get_user_points(ALICE) == ZERO_HANDLE
        assert prophecy.contract_balance() == ONE_ETHER
        assert prophecy.balance_of(ALICE) == 0
        assert prophecy.permissions.pending == ()

    def test_reentrant_attempt_is_fatal_only_to_offender(self, prophecy, settled_day, reveal):
        attempts = []

        def on_receive(sender, amount):
            try:
                prophecy.confirm_prediction(ALICE, settled_day, Asset.ETH)
            except ReentrancyDetected as e:
                attempts.append(e)

        prophecy.vault.register_receiver(ALICE, on_receive)
        prophecy.confirm_prediction(ALICE, settled_day, Asset.ETH)

        assert len(attempts) == 1
        assert prophecy.get_prediction(ALICE, settled_day, Asset.ETH).resolved is True
        assert reveal(prophecy.get_user_points(ALICE), ALICE) == ONE_ETHER
        assert prophecy.balance_of(ALICE) == ONE_ETHER
        assert prophecy.contract_balance() == 0

    def test_reentrant_placement_rejected(self, prophecy, settled_day, encrypt):
        bundle = encrypt(ALICE, 1, DIRECTION_ABOVE)

        def on_receive(sender, amount):
            prophecy.place_prediction(
                ALICE, Asset.BTC, bundle.handles[0], bundle.handles[1], bundle.input_proof, amount
            )

        prophecy.vault.register_receiver(ALICE, on_receive)
        with pytest.raises(ReentrancyDetected):
            prophecy.confirm_prediction(ALICE, settled_day, Asset.ETH)

        prophecy.vault.register_receiver(ALICE, None)
        prophecy.confirm_prediction(ALICE, settled_day, Asset.ETH)
        assert prophecy.get_prediction(ALICE, settled_day, Asset.ETH).resolved is True

    def test_guard_released_after_rejected_call(self, prophecy, place):
        with pytest.raises(StakeRequired):
            place(ALICE, Asset.ETH, 1, DIRECTION_ABOVE, stake=0)
        place(ALICE, Asset.ETH, 1, DIRECTION_ABOVE)
