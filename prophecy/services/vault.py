"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

Native-value escrow. Stakes are held on the ledger's own account and paid
back out through ``transfer``, which is the only external interaction a call
performs.
"""

import logging
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from prophecy.models import NativeBalance
from prophecy.utils import normalize_address

logger = logging.getLogger(__name__)

ReceiveHook = Callable[[str, int], None]


class Vault:
    """Clear balances plus optional receive hooks for recipient accounts."""

    def __init__(self, contract: str):
        self.contract = normalize_address(contract)
        self._receive_hooks: Dict[str, ReceiveHook] = {}

    def register_receiver(self, account: str, hook: Optional[ReceiveHook]) -> None:
        """
        Install code that runs when ``account`` receives value.

        The hook is called with (sender, amount) after the recipient is
        credited and may call back into the ledger.
        """
        account = normalize_address(account)
        if hook is None:
            self._receive_hooks.pop(account, None)
        else:
            self._receive_hooks[account] = hook

    def balance_of(self, db: Session, account: str) -> int:
        row = db.get(NativeBalance, normalize_address(account))
        return row.amount if row is not None else 0

    def _credit(self, db: Session, account: str, amount: int) -> None:
        row = db.get(NativeBalance, account)
        if row is None:
            db.add(NativeBalance(account=account, amount=amount))
        else:
            row.amount = row.amount + amount

    def deposit(self, db: Session, sender: str, amount: int) -> None:
        """
        Escrow value attached to a call.

        Args:
            db: Database session
            sender: Account that attached the value
            amount: Amount in the native unit
        """
        if amount < 0:
            raise ValueError(f"amount must be non-negative, got {amount}")
        self._credit(db, self.contract, amount)
        logger.debug(f"Escrowed {amount} from {sender}")

    def transfer(self, db: Session, recipient: str, amount: int) -> None:
        """
        Pay value out of escrow.

        Pending state is flushed before the recipient's hook runs, so any
        re-entrant read observes the post-call state.

        Args:
            db: Database session
            recipient: Receiving account
            amount: Amount in the native unit

        Raises:
            ValueError: If escrow holds less than ``amount``
        """
        recipient = normalize_address(recipient)
        held = self.balance_of(db, self.contract)
        if amount > held:
            raise ValueError(f"escrow holds {held}, cannot pay {amount}")

        db.get(NativeBalance, self.contract).amount = held - amount
        self._credit(db, recipient, amount)
        db.flush()

        hook = self._receive_hooks.get(recipient)
        if hook is not None:
            hook(self.contract, amount)
        logger.debug(f"Transferred {amount} to {recipient}")
