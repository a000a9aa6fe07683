# tests/test_access.py
"""Tests for admin access control."""

import pytest

from tokenmint.access import AccessControl
from tokenmint.errors import AccessDenied
from tokenmint.events import ADMIN_CHANGED

ADMIN = "0x" + "a" * 40
OTHER = "0x" + "b" * 40


@pytest.fixture
def emitted():
    return []


@pytest.fixture
def access(emitted):
    return AccessControl(ADMIN, emitted.append)


class TestAccessControl:
    """Test AccessControl."""

    def test_require_admin_passes_for_admin(self, access):
        access.require_admin(ADMIN)

    def test_require_admin_rejects_others(self, access):
        with pytest.raises(AccessDenied):
            access.require_admin(OTHER)

    def test_transfer_admin(self, access, emitted):
        access.transfer_admin(ADMIN, OTHER)

        assert access.admin == OTHER
        assert len(emitted) == 1
        assert emitted[0].event_type == ADMIN_CHANGED
        assert emitted[0].values == (ADMIN, OTHER)

    def test_old_admin_loses_rights(self, access):
        access.transfer_admin(ADMIN, OTHER)
        with pytest.raises(AccessDenied):
            access.require_admin(ADMIN)
        access.require_admin(OTHER)

    def test_transfer_by_non_admin(self, access, emitted):
        with pytest.raises(AccessDenied):
            access.transfer_admin(OTHER, OTHER)
        assert access.admin == ADMIN
        assert emitted == []

    def test_transfer_to_none_rejected(self, access):
        with pytest.raises(ValueError):
            access.transfer_admin(ADMIN, None)
        assert access.admin == ADMIN

    def test_relinquish(self, access, emitted):
        access.relinquish_admin(ADMIN)

        assert access.admin is None
        assert emitted[0].values == (ADMIN, None)

    def test_relinquish_is_terminal(self, access):
        """After relinquishing nobody passes the admin guard."""
        access.relinquish_admin(ADMIN)
        for caller in (ADMIN, OTHER, None):
            with pytest.raises(AccessDenied):
                access.require_admin(caller)
        with pytest.raises(AccessDenied):
            access.transfer_admin(ADMIN, ADMIN)

    def test_relinquish_by_non_admin(self, access):
        with pytest.raises(AccessDenied):
            access.relinquish_admin(OTHER)
        assert access.admin == ADMIN
