# tokenmint/treasury.py
"""
Fee balance and fee setting.

The balance grows with every paid mint and is emptied in one go by the
admin. Moving the withdrawn value to the admin is the settlement layer's
job; the treasury reports the amount paid out.
"""

import logging
from typing import Any, Dict

from .access import AccessControl
from .errors import NoFunds
from .events import EmitFn, Event

logger = logging.getLogger(__name__)


class Treasury:
    """
    Collected balance and current mint fee.

    Attributes:
        fee: Value required from non-exempt, non-admin minters
        balance: Accumulated value not yet withdrawn
        registry_address: Principal of the registry, reported on withdrawal
    """

    def __init__(self, access: AccessControl, fee: int, registry_address: str, emit: EmitFn):
        if fee < 0:
            raise ValueError(f"Fee cannot be negative: {fee}")
        self.access = access
        self.fee = fee
        self.balance = 0
        self.registry_address = registry_address
        self._emit = emit

    def credit(self, amount: int) -> None:
        """Add collected value to the balance."""
        if amount < 0:
            raise ValueError(f"Cannot credit a negative amount: {amount}")
        self.balance += amount

    def withdraw_all(self, caller: str) -> int:
        """
        Pay the whole balance out to the admin.

        Returns:
            The amount withdrawn

        Raises:
            AccessDenied: caller is not the admin
            NoFunds: balance is zero
        """
        self.access.require_admin(caller)
        if self.balance == 0:
            raise NoFunds("no funds to withdraw")
        amount = self.balance
        self.balance = 0
        logger.debug(f"Withdrew {amount} to {caller}")
        self._emit(Event.withdrawn(caller, self.registry_address, amount))
        return amount

    def update_fee(self, caller: str, new_fee: int) -> None:
        """Set the fee for subsequent mints, admin only."""
        self.access.require_admin(caller)
        if new_fee < 0:
            raise ValueError(f"Fee cannot be negative: {new_fee}")
        old = self.fee
        self.fee = new_fee
        self._emit(Event.fee_updated(old, new_fee))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fee": self.fee,
            "balance": self.balance,
            "registry_address": self.registry_address,
        }

    def load_dict(self, data: Dict[str, Any]) -> None:
        self.fee = data["fee"]
        self.balance = data.get("balance", 0)
        self.registry_address = data.get("registry_address", self.registry_address)
