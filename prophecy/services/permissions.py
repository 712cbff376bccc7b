"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

Decryption permission grants for every ciphertext the ledger persists.

Stores accept ciphertexts only as ``Permissioned`` values, which can only be
obtained from ``PermissionRegistrar.permit``. Grants are staged for the
duration of a call and handed to the capability's ACL on commit, so a
rolled-back call grants nothing.
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, List, Tuple

from prophecy.fhe import FHEBackend
from prophecy.utils import normalize_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Permissioned:
    """A ciphertext handle paired with the accounts allowed to decrypt it."""

    handle: str
    viewers: FrozenSet[str]


class PermissionRegistrar:
    """Stages ACL grants and flushes them when the surrounding call commits."""

    def __init__(self, backend: FHEBackend, contract: str):
        self._backend = backend
        self._contract = normalize_address(contract)
        self._pending: List[Tuple[str, str]] = []

    @property
    def contract(self) -> str:
        return self._contract

    @property
    def pending(self) -> Tuple[Tuple[str, str], ...]:
        return tuple(self._pending)

    def permit(self, handle: str, *viewers: str) -> Permissioned:
        """
        Grant decrypt permission on a handle to viewers and to the ledger itself.

        Args:
            handle: Ciphertext handle
            *viewers: Accounts that must be able to decrypt it later

        Returns:
            Permissioned wrapper accepted by the stores
        """
        accounts = {self._contract}
        accounts.update(normalize_address(viewer) for viewer in viewers)
        for account in sorted(accounts):
            self._pending.append((handle, account))
        return Permissioned(handle=handle, viewers=frozenset(accounts))

    def commit(self) -> int:
        """Apply staged grants to the ACL. Returns the number applied."""
        applied = 0
        for handle, account in self._pending:
            self._backend.allow(handle, account)
            applied += 1
        self._pending.clear()
        logger.debug(f"Applied {applied} permission grants")
        return applied

    def discard(self) -> None:
        """Drop staged grants after a rejected call."""
        if self._pending:
            logger.debug(f"Discarded {len(self._pending)} staged permission grants")
        self._pending.clear()


def sealed_handle(value: Permissioned, *required_viewers: str) -> str:
    """
    Unwrap a Permissioned value for storage.

    Args:
        value: Permissioned handle from the registrar
        *required_viewers: Accounts that must appear among its viewers

    Returns:
        The raw handle

    Raises:
        TypeError: If a bare handle is passed instead of a Permissioned value
        PermissionError: If a required viewer has no grant
    """
    if not isinstance(value, Permissioned):
        raise TypeError("ciphertexts must be permissioned before they are stored")
    missing = {normalize_address(v) for v in required_viewers} - value.viewers
    if missing:
        raise PermissionError(f"missing decrypt grant for {sorted(missing)}")
    return value.handle
