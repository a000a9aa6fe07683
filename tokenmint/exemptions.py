# tokenmint/exemptions.py
"""
Fee exemption list.

Membership is a set of principals; absence means not exempt. Toggling
processes the input in order and flips each entry on its own, so a
principal listed twice ends where it started with one add and one
remove notification.
"""

import logging
from typing import Any, Dict, Iterable, List, Set

from .access import AccessControl
from .events import EmitFn, Event

logger = logging.getLogger(__name__)


class ExemptionRegistry:
    """Set of principals allowed to mint without paying the fee."""

    def __init__(self, access: AccessControl, emit: EmitFn):
        self.access = access
        self._emit = emit
        self._exempt: Set[str] = set()

    def is_exempt(self, principal: str) -> bool:
        return principal in self._exempt

    def toggle(self, caller: str, principals: Iterable[str]) -> None:
        """
        Flip exemption for each principal, admin only.

        Args:
            caller: Principal invoking the toggle
            principals: Principals to flip, processed in order, duplicates kept
        """
        self.access.require_admin(caller)
        if isinstance(principals, str):
            raise TypeError("principals must be a list of principals, not a single string")
        for principal in principals:
            if principal in self._exempt:
                self._exempt.discard(principal)
                logger.debug(f"Exemption removed: {principal}")
                self._emit(Event.exemption_removed(principal))
            else:
                self._exempt.add(principal)
                logger.debug(f"Exemption added: {principal}")
                self._emit(Event.exemption_added(principal))

    def exempt_principals(self) -> List[str]:
        """List exempt principals, sorted."""
        return sorted(self._exempt)

    def to_dict(self) -> Dict[str, Any]:
        return {"exempt": sorted(self._exempt)}

    def load_dict(self, data: Dict[str, Any]) -> None:
        self._exempt = set(data.get("exempt", []))

    def __contains__(self, principal: str) -> bool:
        return principal in self._exempt

    def __len__(self) -> int:
        return len(self._exempt)
