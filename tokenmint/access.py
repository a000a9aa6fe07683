# tokenmint/access.py
"""
Single-admin access control.

The admin is one principal. It can hand the role to another principal or
relinquish it; once relinquished the admin is None and every admin-gated
operation is unreachable for good.
"""

import logging
from typing import Any, Dict, Optional

from .errors import AccessDenied
from .events import EmitFn, Event

logger = logging.getLogger(__name__)


class AccessControl:
    """Holds the admin principal and guards admin-only operations."""

    def __init__(self, admin: Optional[str], emit: EmitFn):
        self.admin = admin
        self._emit = emit

    def is_admin(self, caller: str) -> bool:
        return self.admin is not None and caller == self.admin

    def require_admin(self, caller: str) -> None:
        """Raise AccessDenied unless caller is the current admin."""
        if not self.is_admin(caller):
            raise AccessDenied("caller is not the admin")

    def transfer_admin(self, caller: str, new_admin: str) -> None:
        """Hand the admin role to new_admin."""
        self.require_admin(caller)
        if new_admin is None:
            raise ValueError("Use relinquish_admin() to remove the admin")
        old = self.admin
        self.admin = new_admin
        logger.debug(f"Admin transferred: {old} -> {new_admin}")
        self._emit(Event.admin_changed(old, new_admin))

    def relinquish_admin(self, caller: str) -> None:
        """Remove the admin permanently."""
        self.require_admin(caller)
        old = self.admin
        self.admin = None
        logger.debug(f"Admin relinquished by {old}")
        self._emit(Event.admin_changed(old, None))

    def to_dict(self) -> Dict[str, Any]:
        return {"admin": self.admin}

    def load_dict(self, data: Dict[str, Any]) -> None:
        self.admin = data.get("admin")
