from __future__ import annotations

import re
from enum import IntEnum
from typing import List

from pydantic import BaseModel, Field

HANDLE_VERSION = 0
HANDLE_BYTES = 32
ZERO_HANDLE = "0x" + "00" * HANDLE_BYTES

_HANDLE_RE = re.compile(r"^0x[0-9a-f]{64}$")


class FheType(IntEnum):
    EBOOL = 0
    EUINT8 = 2
    EUINT64 = 5

    @property
    def bits(self) -> int:
        return {FheType.EBOOL: 1, FheType.EUINT8: 8, FheType.EUINT64: 64}[self]

    @property
    def modulus(self) -> int:
        return 1 << self.bits


def is_handle(value: object) -> bool:
    return isinstance(value, str) and bool(_HANDLE_RE.match(value))


def handle_type(handle: str) -> FheType:
    """Read the type tag embedded in the second-to-last byte of a handle."""
    if not is_handle(handle):
        raise ValueError(f"Malformed ciphertext handle: {handle!r}")
    return FheType(int(handle[-4:-2], 16))


class EncryptedInputBundle(BaseModel):
    """Client ciphertexts plus the proof binding them to (contract, user)."""

    handles: List[str] = Field(min_length=1)
    input_proof: bytes


__all__ = [
    "EncryptedInputBundle",
    "FheType",
    "HANDLE_BYTES",
    "HANDLE_VERSION",
    "ZERO_HANDLE",
    "handle_type",
    "is_handle",
]
