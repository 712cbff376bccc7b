from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Union

from .types import FheType

Operand = Union[str, int]


class FHEBackend(ABC):
    """
    Opaque encrypted-computation capability.

    Handles are references to ciphertexts held by the capability. Every
    operation returns a new handle; nothing here ever yields a clear value
    except ``user_decrypt``, which is the out-of-band reveal protocol and
    must never be called by ledger code.
    """

    protocol_id: int = 0

    @abstractmethod
    def verify_input(
        self,
        handle: str,
        input_proof: bytes,
        contract: str,
        user: str,
        expected_type: FheType,
    ) -> str:
        """Validate a client-submitted ciphertext and return its usable handle."""
        raise NotImplementedError

    @abstractmethod
    def as_euint64(self, value: int) -> str:
        """Lift a clear value into the encrypted domain (trivial encryption)."""
        raise NotImplementedError

    @abstractmethod
    def eq(self, lhs: str, rhs: Operand) -> str:
        raise NotImplementedError

    @abstractmethod
    def lt(self, lhs: str, rhs: Operand) -> str:
        raise NotImplementedError

    @abstractmethod
    def gt(self, lhs: str, rhs: Operand) -> str:
        raise NotImplementedError

    @abstractmethod
    def and_(self, lhs: str, rhs: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def or_(self, lhs: str, rhs: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def select(self, condition: str, if_true: str, if_false: str) -> str:
        """Oblivious multiplexer over ciphertexts."""
        raise NotImplementedError

    @abstractmethod
    def add(self, lhs: str, rhs: Operand) -> str:
        raise NotImplementedError

    @abstractmethod
    def allow(self, handle: str, account: str) -> None:
        """Persistently authorize ``account`` to use or decrypt ``handle``."""
        raise NotImplementedError

    @abstractmethod
    def is_allowed(self, handle: str, account: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def end_transaction(self) -> None:
        """Drop transient allowances created during the current call."""
        raise NotImplementedError

    @abstractmethod
    def user_decrypt(self, handle: str, contract: str, user: str) -> int:
        raise NotImplementedError


__all__ = ["FHEBackend", "Operand"]
