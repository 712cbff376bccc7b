"""Tests for ledger wiring: capability checks and call atomicity."""
from unittest.mock import patch

import pytest

from prophecy import DIRECTION_ABOVE, Asset, ProtocolUnsupported, create_prophecy
from prophecy.fhe import MockFHEBackend

from conftest import ALICE, CONTRACT, OWNER


def test_unsupported_protocol_rejected(test_settings, clock):
    backend = MockFHEBackend(contract=CONTRACT, secret="x", protocol_id=99)
    with pytest.raises(ProtocolUnsupported) as exc_info:
        create_prophecy(config=test_settings, fhe=backend, clock=clock)
    assert (exc_info.value.expected, exc_info.value.actual) == (1, 99)


def test_identity_accessors(prophecy, test_settings):
    assert prophecy.owner == OWNER
    assert prophecy.address == CONTRACT
    assert prophecy.confidential_protocol_id() == test_settings.protocol_id


def test_default_capability_is_built_from_settings(test_settings, clock):
    ledger = create_prophecy(config=test_settings, clock=clock)
    assert isinstance(ledger.fhe, MockFHEBackend)
    assert ledger.fhe.contract == CONTRACT


def test_transient_access_ends_with_each_call(prophecy, fhe, place):
    day = place(ALICE, Asset.ETH, 1, DIRECTION_ABOVE)
    prediction = prophecy.get_prediction(ALICE, day, Asset.ETH)

    assert fhe._transient == set()
    assert fhe.is_allowed(prediction.enc_price, CONTRACT)


def test_unexpected_error_rolls_back(prophecy, encrypt):
    bundle = encrypt(ALICE, 1, DIRECTION_ABOVE)

    with patch(
        "prophecy.services.events.emit",
        side_effect=RuntimeError("event store unavailable"),
    ):
        with pytest.raises(RuntimeError):
            prophecy.place_prediction(
                ALICE, Asset.ETH, bundle.handles[0], bundle.handles[1], bundle.input_proof, 5
            )

    assert prophecy.contract_balance() == 0
    assert prophecy.get_prediction(ALICE, prophecy.get_current_day(), Asset.ETH).exists is False
    assert prophecy.permissions.pending == ()
