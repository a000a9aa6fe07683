# tests/test_dispatch.py
"""Tests for the signed call dispatcher."""

import tempfile
from pathlib import Path

import pytest

from tokenmint import TokenRegistry
from tokenmint.dispatch import CallDispatcher, list_operations
from tokenmint.errors import AccessDenied, InvalidFee, InvalidSignature
from tokenmint.identity import AccountStore, Call, sign_call
from tokenmint.metadata import decode
from tokenmint.store import StateStore


@pytest.fixture(scope="module")
def accounts():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = AccountStore(Path(tmpdir))
        store.create("alice")
        store.create("bob")
        store.create("mallory")
        yield store


@pytest.fixture
def alice(accounts):
    return accounts.get("alice")


@pytest.fixture
def bob(accounts):
    return accounts.get("bob")


@pytest.fixture
def registry(alice):
    return TokenRegistry.initialize(alice.address, "Yoink", "YNK", 10, "u1")


@pytest.fixture
def dispatcher(registry, accounts):
    return CallDispatcher(registry, accounts)


def _call(account, operation, params=None, value=0):
    return sign_call(Call(operation, params or {}, account.address, value=value), account)


class TestCallDispatcher:
    """Test CallDispatcher."""

    def test_operations(self):
        assert list_operations() == [
            "mint",
            "relinquish_admin",
            "toggle_exemptions",
            "transfer_admin",
            "update_descriptor",
            "update_fee",
            "withdraw_all",
        ]

    def test_mint(self, dispatcher, registry, bob):
        token_id = dispatcher.submit(_call(bob, "mint", {"descriptor": "u2"}, value=10))
        assert token_id == 2
        assert registry.owner_of(2) == bob.address
        assert registry.balance == 10

    def test_mint_structured(self, dispatcher, registry, alice):
        metadata = {"description": "d", "image": "i", "name": "n",
                    "attributes": [{"trait_type": "t", "value": "v"}]}
        dispatcher.submit(_call(alice, "mint", {"descriptor": metadata}))
        assert decode(registry.uri_of(2)).to_dict() == metadata

    def test_mint_fee_enforced(self, dispatcher, bob):
        with pytest.raises(InvalidFee):
            dispatcher.submit(_call(bob, "mint", {"descriptor": "u2"}, value=9))

    def test_admin_operations(self, dispatcher, registry, alice, bob):
        dispatcher.submit(_call(alice, "toggle_exemptions", {"principals": [bob.address]}))
        dispatcher.submit(_call(alice, "update_fee", {"fee": 50}))
        dispatcher.submit(_call(alice, "mint", {"descriptor": "u2"}, value=7))
        assert dispatcher.submit(_call(alice, "withdraw_all")) == 7

        assert registry.is_exempt(bob.address)
        assert registry.fee == 50
        assert registry.balance == 0

    def test_update_descriptor(self, dispatcher, registry, alice):
        dispatcher.submit(_call(alice, "update_descriptor", {"token_id": 1, "descriptor": "u9"}))
        assert registry.uri_of(1) == "u9"

    def test_transfer_and_relinquish(self, dispatcher, registry, alice, bob):
        dispatcher.submit(_call(alice, "transfer_admin", {"new_admin": bob.address}))
        assert registry.admin == bob.address
        dispatcher.submit(_call(bob, "relinquish_admin"))
        assert registry.admin is None

    def test_caller_is_verified_address(self, dispatcher, bob):
        with pytest.raises(AccessDenied):
            dispatcher.submit(_call(bob, "update_fee", {"fee": 0}))

    def test_forged_caller(self, dispatcher, registry, alice, accounts):
        """A call claiming alice's address but signed by mallory is rejected."""
        mallory = accounts.get("mallory")
        call = _call(mallory, "update_fee", {"fee": 0})
        call.caller = alice.address
        with pytest.raises(InvalidSignature):
            dispatcher.submit(call)
        assert registry.fee == 10

    def test_unknown_caller(self, dispatcher):
        call = Call("withdraw_all", {}, "0x" + "0" * 40, signature="AAAA")
        with pytest.raises(InvalidSignature):
            dispatcher.submit(call)

    def test_replay(self, dispatcher, registry, alice):
        call = _call(alice, "mint", {"descriptor": "u2"})
        dispatcher.submit(call)
        with pytest.raises(InvalidSignature):
            dispatcher.submit(call)
        assert registry.next_id == 3

    def test_unknown_operation(self, dispatcher, alice):
        with pytest.raises(ValueError):
            dispatcher.submit(_call(alice, "burn"))

    def test_value_on_non_payable(self, dispatcher, alice):
        with pytest.raises(ValueError):
            dispatcher.submit(_call(alice, "update_fee", {"fee": 1}, value=5))

    def test_string_principals_rejected(self, dispatcher, registry, alice, bob):
        with pytest.raises(TypeError):
            dispatcher.submit(_call(alice, "toggle_exemptions", {"principals": bob.address}))
        assert not registry.is_exempt(bob.address)
        assert len(registry.exemptions) == 0


class TestStoredNonces:
    """Replay protection for registries bound to a StateStore."""

    @pytest.fixture
    def store(self, alice):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = StateStore(Path(tmpdir) / "registry")
            store.initialize(alice.address, "Yoink", "YNK", 10, "u1")
            yield store

    def test_replay_rejected_by_new_dispatcher(self, store, accounts, alice):
        call = _call(alice, "mint", {"descriptor": "u2"})
        CallDispatcher(store.open(), accounts).submit(call)

        registry = store.open()
        with pytest.raises(InvalidSignature):
            CallDispatcher(registry, accounts).submit(call)
        assert registry.next_id == 3

    def test_nonces_saved(self, store, accounts, alice):
        call = _call(alice, "update_fee", {"fee": 5})
        CallDispatcher(store.open(), accounts).submit(call)
        assert call.nonce in store.load_nonces()
