from typing import Callable

import pytest

from prophecy import FrozenClock, Prophecy, Settings, create_prophecy
from prophecy.fhe import EncryptedInputBundle, MockFHEBackend
from prophecy.schemas import SECONDS_PER_DAY

OWNER = "0x00000000000000000000000000000000000000aa"
CONTRACT = "0x00000000000000000000000000000000000c0de5"
ALICE = "0x00000000000000000000000000000000000a11ce"
BOB = "0x0000000000000000000000000000000000000b0b"

START_DAY = 20_000
START_TS = START_DAY * SECONDS_PER_DAY + 3_600

ONE_ETHER = 10**18


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite+pysqlite:///:memory:",
        owner_address=OWNER,
        contract_address=CONTRACT,
        input_secret="test-secret",
        protocol_id=1,
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(START_TS)


@pytest.fixture
def fhe(test_settings: Settings) -> MockFHEBackend:
    return MockFHEBackend(
        contract=test_settings.contract_address,
        secret=test_settings.input_secret,
        protocol_id=test_settings.protocol_id,
    )


@pytest.fixture
def prophecy(test_settings: Settings, fhe: MockFHEBackend, clock: FrozenClock) -> Prophecy:
    return create_prophecy(config=test_settings, fhe=fhe, clock=clock)


@pytest.fixture
def encrypt(fhe: MockFHEBackend) -> Callable[..., EncryptedInputBundle]:
    """Encrypt (price, direction) for a user the way a client would."""

    def _encrypt(user: str, price: int, direction: int) -> EncryptedInputBundle:
        return (
            fhe.create_encrypted_input(CONTRACT, user)
            .add64(price)
            .add8(direction)
            .encrypt()
        )

    return _encrypt


@pytest.fixture
def place(prophecy: Prophecy, encrypt) -> Callable[..., int]:
    """Place a prediction with a fresh encrypted input."""

    def _place(user: str, asset, price: int, direction: int, stake: int = ONE_ETHER) -> int:
        bundle = encrypt(user, price, direction)
        return prophecy.place_prediction(
            user,
            asset,
            bundle.handles[0],
            bundle.handles[1],
            bundle.input_proof,
            value=stake,
        )

    return _place


@pytest.fixture
def reveal(prophecy: Prophecy, fhe: MockFHEBackend) -> Callable[[str, str], int]:
    """User-side decryption through the ACL."""

    def _reveal(handle: str, user: str) -> int:
        return fhe.user_decrypt(handle, prophecy.address, user)

    return _reveal
