"""In-process stand-in for the encrypted-computation coprocessor.

Plaintexts never leave this module except through ``user_decrypt``, which
enforces the ACL the same way the external decryption service does.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Dict, List, Set, Tuple

import xxhash

from prophecy.errors import DecryptionNotAllowed, InvalidInputProof

from .backend import FHEBackend, Operand
from .types import (
    HANDLE_BYTES,
    HANDLE_VERSION,
    EncryptedInputBundle,
    FheType,
    handle_type,
    is_handle,
)

logger = logging.getLogger(__name__)

MOCK_PROTOCOL_ID = 1
_MAC_BYTES = 32


def _derive_handle(payload: bytes, fhe_type: FheType) -> str:
    body = xxhash.xxh3_128(payload).digest() + xxhash.xxh3_128(payload, seed=1).digest()
    body = body[: HANDLE_BYTES - 2] + bytes([int(fhe_type), HANDLE_VERSION])
    return "0x" + body.hex()


def _normalize(address: str) -> str:
    return address.lower()


class EncryptedInputBuilder:
    """Client-side builder mirroring ``createEncryptedInput(contract, user)``."""

    def __init__(self, backend: "MockFHEBackend", contract: str, user: str):
        self._backend = backend
        self._contract = contract
        self._user = user
        self._values: List[Tuple[FheType, int]] = []

    def add_bool(self, value: bool) -> "EncryptedInputBuilder":
        self._values.append((FheType.EBOOL, int(bool(value))))
        return self

    def add8(self, value: int) -> "EncryptedInputBuilder":
        self._values.append((FheType.EUINT8, _check_range(int(value), FheType.EUINT8)))
        return self

    def add64(self, value: int) -> "EncryptedInputBuilder":
        self._values.append((FheType.EUINT64, _check_range(int(value), FheType.EUINT64)))
        return self

    def encrypt(self) -> EncryptedInputBundle:
        if not self._values:
            raise ValueError("Encrypted input is empty")
        handles = [
            self._backend._register(fhe_type, value, "input")
            for fhe_type, value in self._values
        ]
        proof = self._backend._sign_input(handles, self._contract, self._user)
        return EncryptedInputBundle(handles=handles, input_proof=proof)


def _check_range(value: int, fhe_type: FheType) -> int:
    if value < 0 or value >= fhe_type.modulus:
        raise ValueError(f"{value} does not fit {fhe_type.name.lower()}")
    return value


class MockFHEBackend(FHEBackend):
    """
    Plaintext-backed capability for tests and local simulations.

    Every input and every intermediate result keeps an entry in
    ``_plaintexts`` for the lifetime of the instance; nothing is pruned, so
    memory grows with the number of operations performed. Use one instance
    per test or simulation run.
    """

    def __init__(
        self,
        contract: str,
        secret: str,
        protocol_id: int = MOCK_PROTOCOL_ID,
    ):
        self.contract = _normalize(contract)
        self.protocol_id = protocol_id
        self._secret = secret.encode("utf-8")
        self._plaintexts: Dict[str, int] = {}
        self._acl: Dict[str, Set[str]] = {}
        self._transient: Set[str] = set()
        self._nonce = 0

    # client side

    def create_encrypted_input(self, contract: str, user: str) -> EncryptedInputBuilder:
        return EncryptedInputBuilder(self, contract, user)

    def _register(self, fhe_type: FheType, value: int, op: str, *operands: Operand) -> str:
        self._nonce += 1
        payload = "|".join([op, str(self._nonce), *map(str, operands)]).encode("utf-8")
        handle = _derive_handle(payload, fhe_type)
        self._plaintexts[handle] = value % fhe_type.modulus
        return handle

    def _mac(self, handles: List[str], contract: str, user: str) -> bytes:
        message = "|".join([_normalize(contract), _normalize(user), *handles])
        return hmac.new(self._secret, message.encode("utf-8"), hashlib.sha256).digest()

    def _sign_input(self, handles: List[str], contract: str, user: str) -> bytes:
        encoded = b"".join(bytes.fromhex(h[2:]) for h in handles)
        return bytes([len(handles)]) + encoded + self._mac(handles, contract, user)

    # ledger side

    def verify_input(
        self,
        handle: str,
        input_proof: bytes,
        contract: str,
        user: str,
        expected_type: FheType,
    ) -> str:
        if not input_proof:
            raise InvalidInputProof("empty proof")
        count = input_proof[0]
        expected_len = 1 + count * HANDLE_BYTES + _MAC_BYTES
        if count == 0 or len(input_proof) != expected_len:
            raise InvalidInputProof("malformed proof")

        body = input_proof[1 : 1 + count * HANDLE_BYTES]
        handles = [
            "0x" + body[i : i + HANDLE_BYTES].hex()
            for i in range(0, len(body), HANDLE_BYTES)
        ]
        mac = input_proof[1 + count * HANDLE_BYTES :]
        if not hmac.compare_digest(mac, self._mac(handles, contract, user)):
            raise InvalidInputProof("signature mismatch for contract and user")
        if handle not in handles or handle not in self._plaintexts:
            raise InvalidInputProof("handle not covered by proof")
        if handle_type(handle) != expected_type:
            raise InvalidInputProof(
                f"expected {expected_type.name.lower()}, got {handle_type(handle).name.lower()}"
            )

        self._transient.add(handle)
        return handle

    def _require_usable(self, handle: str) -> FheType:
        if not is_handle(handle) or handle not in self._plaintexts:
            raise ValueError(f"Unknown ciphertext handle: {handle!r}")
        if handle not in self._transient and self.contract not in self._acl.get(handle, ()):
            raise PermissionError(f"Contract is not allowed to use handle {handle}")
        return handle_type(handle)

    def _scalar_or_value(self, operand: Operand, fhe_type: FheType) -> int:
        if isinstance(operand, int):
            return _check_range(operand, fhe_type)
        operand_type = self._require_usable(operand)
        if operand_type != fhe_type:
            raise TypeError(
                f"Operand type mismatch: {operand_type.name} vs {fhe_type.name}"
            )
        return self._plaintexts[operand]

    def _result(self, fhe_type: FheType, value: int, op: str, *operands: Operand) -> str:
        handle = self._register(fhe_type, value, op, *operands)
        self._transient.add(handle)
        return handle

    def as_euint64(self, value: int) -> str:
        return self._result(FheType.EUINT64, _check_range(value, FheType.EUINT64), "trivial")

    def _compare(self, op: str, lhs: str, rhs: Operand) -> str:
        lhs_type = self._require_usable(lhs)
        a = self._plaintexts[lhs]
        b = self._scalar_or_value(rhs, lhs_type)
        result = {"eq": a == b, "lt": a < b, "gt": a > b}[op]
        return self._result(FheType.EBOOL, int(result), op, lhs, rhs)

    def eq(self, lhs: str, rhs: Operand) -> str:
        return self._compare("eq", lhs, rhs)

    def lt(self, lhs: str, rhs: Operand) -> str:
        return self._compare("lt", lhs, rhs)

    def gt(self, lhs: str, rhs: Operand) -> str:
        return self._compare("gt", lhs, rhs)

    def _boolean(self, op: str, lhs: str, rhs: str) -> str:
        for operand in (lhs, rhs):
            if self._require_usable(operand) != FheType.EBOOL:
                raise TypeError(f"{op} expects ebool operands")
        a, b = self._plaintexts[lhs], self._plaintexts[rhs]
        result = a & b if op == "and" else a | b
        return self._result(FheType.EBOOL, result, op, lhs, rhs)

    def and_(self, lhs: str, rhs: str) -> str:
        return self._boolean("and", lhs, rhs)

    def or_(self, lhs: str, rhs: str) -> str:
        return self._boolean("or", lhs, rhs)

    def select(self, condition: str, if_true: str, if_false: str) -> str:
        if self._require_usable(condition) != FheType.EBOOL:
            raise TypeError("select expects an ebool condition")
        value_type = self._require_usable(if_true)
        if self._require_usable(if_false) != value_type:
            raise TypeError("select branches must share a type")
        chosen = if_true if self._plaintexts[condition] else if_false
        return self._result(
            value_type, self._plaintexts[chosen], "select", condition, if_true, if_false
        )

    def add(self, lhs: str, rhs: Operand) -> str:
        lhs_type = self._require_usable(lhs)
        total = self._plaintexts[lhs] + self._scalar_or_value(rhs, lhs_type)
        return self._result(lhs_type, total, "add", lhs, rhs)

    def allow(self, handle: str, account: str) -> None:
        if handle not in self._plaintexts:
            raise ValueError(f"Unknown ciphertext handle: {handle!r}")
        self._acl.setdefault(handle, set()).add(_normalize(account))

    def is_allowed(self, handle: str, account: str) -> bool:
        return _normalize(account) in self._acl.get(handle, ())

    def end_transaction(self) -> None:
        self._transient.clear()

    def user_decrypt(self, handle: str, contract: str, user: str) -> int:
        if not (self.is_allowed(handle, user) and self.is_allowed(handle, contract)):
            raise DecryptionNotAllowed(handle, user)
        logger.debug(f"User decryption served for {user}")
        return self._plaintexts[handle]


__all__ = ["EncryptedInputBuilder", "MockFHEBackend", "MOCK_PROTOCOL_ID"]
